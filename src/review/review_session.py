import logging
from dataclasses import dataclass
from typing import Dict, List, Any, Iterable, Optional, Set

from config import settings
from src.attribution.confidence import ConfidenceTier, is_preselected
from src.attribution.name_canonicalizer import CharacterRegistry, CharacterRecord, salience_key


@dataclass(frozen=True)
class ConfirmedCharacter:
    """One entry of the confirmed roster handed to continuity tooling."""
    primary_name: str
    aliases: frozenset
    scene_appearances: tuple
    dialogue_count: int
    first_scene_index: int
    confidence: ConfidenceTier

    @classmethod
    def from_record(cls, record: CharacterRecord) -> "ConfirmedCharacter":
        return cls(
            primary_name=record.primary_name,
            aliases=frozenset(record.aliases),
            scene_appearances=tuple(record.scene_appearances),
            dialogue_count=record.dialogue_count,
            first_scene_index=record.first_scene_index,
            confidence=record.confidence
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryName": self.primary_name,
            "aliases": sorted(self.aliases),
            "sceneAppearances": list(self.scene_appearances),
            "dialogueCount": self.dialogue_count,
            "firstSceneIndex": self.first_scene_index,
            "confidence": self.confidence.label
        }


class ReviewSession:
    """Operator-facing correction surface over one detection registry.

    Selection (toggle, select all, deselect all) is presentation state kept
    beside the registry. Rename, merge and confirm mutate the registry and are
    expected to be called serially. Confirm is terminal for the session, and no
    new session can be opened over a registry that already has confirmed
    identities.
    """

    def __init__(self, registry: CharacterRegistry,
                 preselect_threshold: int = settings.PRESELECT_THRESHOLD,
                 min_name_length: int = settings.CUE_MIN_LENGTH,
                 max_name_length: int = settings.CUE_MAX_LENGTH):
        if any(record.confirmed for record in registry.records()):
            raise ValueError("Characters in this registry have already been confirmed")
        self.logger = logging.getLogger(__name__)
        self.registry = registry
        self.min_name_length = min_name_length
        self.max_name_length = max_name_length
        self.closed = False
        self._roster: List[ConfirmedCharacter] = []
        self._selected: Set[int] = {
            record.identity_id for record in registry.records()
            if is_preselected(record.dialogue_count, preselect_threshold)
        }

    def characters(self) -> List[CharacterRecord]:
        """Identities by dialogue count descending, then first scene ascending."""
        return self.registry.sorted_records()

    # Selection

    @property
    def selected_ids(self) -> List[int]:
        return [record.identity_id for record in self.characters() if record.identity_id in self._selected]

    def is_selected(self, identity_id: int) -> bool:
        return identity_id in self._selected

    def toggle(self, identity_id: int) -> bool:
        self.registry.require(identity_id)
        if identity_id in self._selected:
            self._selected.discard(identity_id)
        else:
            self._selected.add(identity_id)
        return identity_id in self._selected

    def select_all(self) -> None:
        self._selected = {record.identity_id for record in self.registry.records()}

    def deselect_all(self) -> None:
        self._selected = set()

    # Mutations

    def rename(self, identity_id: int, new_name: str) -> CharacterRecord:
        self._ensure_open()
        name = self._validate_name(new_name)
        record = self.registry.require(identity_id)

        previous = record.primary_name
        record.primary_name = name
        self.registry.add_alias(record, name)
        self.logger.info(f"Renamed '{previous}' to '{name}'")
        return record

    def merge(self, identity_ids: Iterable[int], primary_name: Optional[str] = None) -> CharacterRecord:
        """Collapse two or more identities into one new identity named ``primary_name``.

        When no name is given the most salient source's primary name is used.
        """
        self._ensure_open()
        ids = list(dict.fromkeys(identity_ids))
        if len(ids) < 2:
            raise ValueError("Select at least 2 characters to merge")
        sources = [self.registry.require(identity_id) for identity_id in ids]

        if primary_name is None or not primary_name.strip():
            name = min(sources, key=salience_key).primary_name
        else:
            name = self._validate_name(primary_name)

        aliases = set()
        scenes = set()
        for source in sources:
            aliases |= source.aliases
            scenes.update(source.scene_appearances)

        was_selected = any(source.identity_id in self._selected for source in sources)
        merged = self.registry.replace(
            source_ids=ids,
            primary_name=name,
            aliases=aliases,
            first_scene_index=min(source.first_scene_index for source in sources),
            scene_appearances=sorted(scenes),
            dialogue_count=sum(source.dialogue_count for source in sources)
        )

        self._selected -= set(ids)
        if was_selected:
            self._selected.add(merged.identity_id)

        self.logger.info(
            f"Merged {len(sources)} characters into '{name}': "
            f"{merged.dialogue_count} dialogue lines across {len(merged.scene_appearances)} scenes"
        )
        return merged

    def confirm(self, identity_ids: Optional[Iterable[int]] = None) -> List[ConfirmedCharacter]:
        """Mark the chosen identities (default: the current selection) as the official cast.

        Returns the roster ordered by salience. No further mutation is allowed
        on this session afterwards.
        """
        self._ensure_open()
        ids = list(dict.fromkeys(identity_ids)) if identity_ids is not None else self.selected_ids
        records = [self.registry.require(identity_id) for identity_id in ids]

        for record in records:
            record.confirmed = True
        self.closed = True

        self._roster = [ConfirmedCharacter.from_record(record) for record in sorted(records, key=salience_key)]
        self.logger.info(f"Confirmed {len(self._roster)} of {len(self.registry)} detected characters")
        return list(self._roster)

    @property
    def roster(self) -> List[ConfirmedCharacter]:
        return list(self._roster)

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError("Review session has already been confirmed")

    def _validate_name(self, name: str) -> str:
        cleaned = ' '.join((name or '').split())
        if not cleaned:
            raise ValueError("Character name cannot be empty")
        if len(cleaned) < self.min_name_length or len(cleaned) > self.max_name_length:
            raise ValueError(
                f"Character name must be {self.min_name_length}-{self.max_name_length} characters: '{cleaned}'"
            )
        return cleaned
