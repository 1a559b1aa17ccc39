import re
import bisect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set, Any, Iterable, Optional, Tuple

from config import settings
from src.attribution.confidence import ConfidenceTier, score_confidence

# Screenplay delivery extensions such as (V.O.), (O.S.), (CONT'D), or any other parenthetical
_PARENTHETICAL_PATTERN = re.compile(r"\s*\((?:V\.O\.|O\.S\.|O\.C\.|CONT'D|CONT’D|PRE-LAP|FILTERED|[^)]*)\)\s*")


def title_case(name: str) -> str:
    return ' '.join(word[:1].upper() + word[1:].lower() for word in name.split(' '))


def clean_name(raw_name: str) -> str:
    """Strip parentheticals, collapse whitespace and title-case a raw cue.

    Returns an empty string when nothing is left.
    """
    if not raw_name:
        return ''
    cleaned = _PARENTHETICAL_PATTERN.sub(' ', raw_name)
    cleaned = ' '.join(cleaned.split())
    return title_case(cleaned)


def name_tokens(name: str) -> List[str]:
    return name.casefold().split()


@dataclass
class CharacterRecord:
    identity_id: int
    primary_name: str
    aliases: Set[str]
    first_scene_index: int
    scene_appearances: List[int] = field(default_factory=list)
    dialogue_count: int = 0
    confirmed: bool = False

    def add_scene(self, scene_index: int) -> None:
        position = bisect.bisect_left(self.scene_appearances, scene_index)
        if position == len(self.scene_appearances) or self.scene_appearances[position] != scene_index:
            self.scene_appearances.insert(position, scene_index)

    @property
    def confidence(self) -> ConfidenceTier:
        return score_confidence(self.dialogue_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryName": self.primary_name,
            "aliases": sorted(self.aliases),
            "firstSceneIndex": self.first_scene_index,
            "sceneAppearances": list(self.scene_appearances),
            "dialogueCount": self.dialogue_count,
            "confirmed": self.confirmed,
            "confidence": self.confidence.label
        }


def salience_key(record: CharacterRecord) -> Tuple[int, int, int]:
    """Most dialogue first, then earliest first appearance."""
    return (-record.dialogue_count, record.first_scene_index, record.identity_id)


class AliasIndex:
    """Case-folded alias to identity id mapping.

    Every mutation builds a complete new mapping and swaps it in, so a reader
    never observes a half re-pointed index. ``version`` counts the swaps.
    """

    def __init__(self):
        self._mapping: Dict[str, int] = {}
        self.version = 0

    @staticmethod
    def normalize(alias: str) -> str:
        return ' '.join(alias.split()).casefold()

    def get(self, alias: str) -> Optional[int]:
        return self._mapping.get(self.normalize(alias))

    def __contains__(self, alias: str) -> bool:
        return self.normalize(alias) in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def items(self) -> List[Tuple[str, int]]:
        return list(self._mapping.items())

    def copy(self) -> "AliasIndex":
        clone = AliasIndex()
        clone._mapping = dict(self._mapping)
        clone.version = self.version
        return clone

    def repoint(self, aliases: Iterable[str], identity_id: int,
                replaced_ids: Iterable[int] = (), overwrite: bool = True) -> None:
        """Point ``aliases`` (and every key owned by ``replaced_ids``) at ``identity_id``.

        With ``overwrite=False`` keys already owned by another identity keep
        their owner.
        """
        replaced = set(replaced_ids)
        mapping = {
            key: (identity_id if owner in replaced else owner)
            for key, owner in self._mapping.items()
        }
        for alias in aliases:
            key = self.normalize(alias)
            if not key:
                continue
            if not overwrite and mapping.get(key, identity_id) != identity_id:
                continue
            mapping[key] = identity_id
        self._mapping = mapping
        self.version += 1


class CharacterRegistry:
    """Identity store keyed by id plus its alias index, scoped to one parse session."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._records: Dict[int, CharacterRecord] = {}
        self.alias_index = AliasIndex()
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records.values()))

    def records(self) -> List[CharacterRecord]:
        """Identities in insertion order."""
        return list(self._records.values())

    def sorted_records(self) -> List[CharacterRecord]:
        return sorted(self._records.values(), key=salience_key)

    def get(self, identity_id: int) -> Optional[CharacterRecord]:
        return self._records.get(identity_id)

    def require(self, identity_id: int) -> CharacterRecord:
        record = self._records.get(identity_id)
        if record is None:
            raise ValueError(f"Unknown character identity: {identity_id}")
        return record

    def lookup(self, alias: str) -> Optional[CharacterRecord]:
        identity_id = self.alias_index.get(alias)
        return self._records.get(identity_id) if identity_id is not None else None

    def create(self, primary_name: str, aliases: Iterable[str], first_scene_index: int,
               scene_appearances: Iterable[int] = (), dialogue_count: int = 0) -> CharacterRecord:
        record = self._build(primary_name, aliases, first_scene_index, scene_appearances, dialogue_count)
        self._records[record.identity_id] = record
        self.alias_index.repoint(record.aliases, record.identity_id, overwrite=False)
        return record

    def add_alias(self, record: CharacterRecord, alias: str) -> None:
        if alias in record.aliases and self.alias_index.get(alias) == record.identity_id:
            return
        record.aliases.add(alias)
        self.alias_index.repoint([alias], record.identity_id, overwrite=False)

    def reindex(self, record: CharacterRecord) -> None:
        """Index every alias of ``record`` that no other identity owns, in one swap."""
        self.alias_index.repoint(record.aliases, record.identity_id, overwrite=False)

    def replace(self, source_ids: List[int], primary_name: str, aliases: Iterable[str],
                first_scene_index: int, scene_appearances: Iterable[int],
                dialogue_count: int) -> CharacterRecord:
        """Collapse ``source_ids`` into one new identity.

        Keys the sources owned move to the new identity; keys owned by any
        surviving identity keep their owner. The new record store and the new
        alias mapping are both built before either is swapped in.
        """
        for identity_id in source_ids:
            self.require(identity_id)

        merged = self._build(primary_name, aliases, first_scene_index, scene_appearances, dialogue_count)
        records = {identity_id: record for identity_id, record in self._records.items() if identity_id not in source_ids}
        records[merged.identity_id] = merged

        index = self.alias_index.copy()
        index.repoint(merged.aliases, merged.identity_id, replaced_ids=source_ids, overwrite=False)

        self._records = records
        self.alias_index = index
        return merged

    def _build(self, primary_name, aliases, first_scene_index, scene_appearances, dialogue_count) -> CharacterRecord:
        record = CharacterRecord(
            identity_id=next(self._ids),
            primary_name=primary_name,
            aliases=set(aliases) | {primary_name},
            first_scene_index=first_scene_index,
            dialogue_count=dialogue_count
        )
        for scene_index in scene_appearances:
            record.add_scene(scene_index)
        return record


class NameCanonicalizer:
    """Resolves cleaned cue names to canonical identities.

    Resolution order for a cleaned candidate ``C``:
        1. Exact alias hit in the alias index.
        2. Structural match against each identity's primary name, in insertion
           order: ``C``'s tokens a strict subset of the primary's, a strict
           superset, or both multi-word with the same first token.
        3. Otherwise a new identity.

    A structural match with a longer spelling promotes it to primary name and
    re-points every alias of that identity in a single index swap.

    Note:
        The shared-first-token rule merges two different characters who share
        a first name ("John Smith", "John Doe"). Operators undo this with a
        manual merge or rename in the Review Session.
    """

    def __init__(self, registry: Optional[CharacterRegistry] = None,
                 min_length: int = settings.CUE_MIN_LENGTH,
                 max_length: int = settings.CUE_MAX_LENGTH):
        self.logger = logging.getLogger(__name__)
        self.registry = registry if registry is not None else CharacterRegistry()
        self.min_length = min_length
        self.max_length = max_length
        self.resolved_count = 0

    def resolve(self, raw_text: str, scene_index: int) -> Optional[CharacterRecord]:
        cleaned = clean_name(raw_text)
        if not cleaned:
            self.logger.debug(f"Dropped cue '{raw_text}': empty after cleaning")
            return None
        if len(cleaned) < self.min_length or len(cleaned) > self.max_length:
            self.logger.debug(f"Dropped cue '{raw_text}': name length {len(cleaned)} outside {self.min_length}-{self.max_length}")
            return None

        record = self.registry.lookup(cleaned)
        if record is not None:
            record.dialogue_count += 1
            record.add_scene(scene_index)
            self.resolved_count += 1
            return record

        candidate_tokens = name_tokens(cleaned)
        record = self.find_structural_match(candidate_tokens)
        if record is None:
            record = self.registry.create(
                primary_name=cleaned,
                aliases=[cleaned, raw_text],
                first_scene_index=scene_index,
                scene_appearances=[scene_index],
                dialogue_count=1
            )
            self.logger.debug(f"New identity #{record.identity_id} '{cleaned}' in scene {scene_index}")
            self.resolved_count += 1
            return record

        if len(cleaned) > len(record.primary_name):
            previous = record.primary_name
            record.aliases.add(previous)
            record.aliases.add(cleaned)
            record.primary_name = cleaned
            self.registry.reindex(record)
            self.logger.debug(f"Promoted identity #{record.identity_id} from '{previous}' to '{cleaned}'")
        else:
            self.registry.add_alias(record, cleaned)
            self.logger.debug(f"Matched '{cleaned}' to identity #{record.identity_id} '{record.primary_name}'")

        record.dialogue_count += 1
        record.add_scene(scene_index)
        self.resolved_count += 1
        return record

    def find_structural_match(self, candidate_tokens: List[str]) -> Optional[CharacterRecord]:
        for record in self.registry.records():
            primary_tokens = name_tokens(record.primary_name)
            if self._is_structural_match(candidate_tokens, primary_tokens):
                return record
        return None

    @staticmethod
    def _is_structural_match(candidate_tokens: List[str], primary_tokens: List[str]) -> bool:
        if not candidate_tokens or not primary_tokens:
            return False
        if len(candidate_tokens) < len(primary_tokens) and all(token in primary_tokens for token in candidate_tokens):
            return True
        if len(primary_tokens) < len(candidate_tokens) and all(token in candidate_tokens for token in primary_tokens):
            return True
        return (len(candidate_tokens) > 1 and len(primary_tokens) > 1
                and candidate_tokens[0] == primary_tokens[0])

    def characters(self) -> List[CharacterRecord]:
        """Identities sorted by salience."""
        return self.registry.sorted_records()
