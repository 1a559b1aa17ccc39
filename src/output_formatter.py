import os
import json
import logging
from typing import List, Dict, Any

from src.attribution.name_canonicalizer import CharacterRecord
from src.review.merge_suggester import MergeSuggestion
from src.review.review_session import ConfirmedCharacter


class OutputFormatter:
    """
    Formats detection results for the console and writes the confirmed roster.

    Handles:
    - Ranked character tables with confidence tiers
    - Merge suggestion listings
    - Confirmed roster serialization to UTF-8 JSON
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def roster_to_dicts(self, roster: List[ConfirmedCharacter]) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in roster]

    def write_roster(self, roster: List[ConfirmedCharacter], path: str) -> str:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({"characters": self.roster_to_dicts(roster)}, f, indent=2, ensure_ascii=False)
        self.logger.info(f"Wrote {len(roster)} confirmed characters to {path}")
        return path

    def format_characters(self, characters: List[CharacterRecord], selected_ids: List[int] = ()) -> str:
        if not characters:
            return "No character cues detected."

        selected = set(selected_ids)
        width = max(len(record.primary_name) for record in characters)
        lines = []
        for record in characters:
            mark = 'x' if record.identity_id in selected else ' '
            scenes = len(record.scene_appearances)
            lines.append(
                f"[{mark}] {record.primary_name:<{width}}  "
                f"{record.dialogue_count:>3} dialogue{'s' if record.dialogue_count != 1 else ' '}  "
                f"{scenes:>3} scene{'s' if scenes != 1 else ' '}  {record.confidence.label}"
            )
        return '\n'.join(lines)

    def format_suggestions(self, suggestions: List[MergeSuggestion]) -> str:
        if not suggestions:
            return "No merge suggestions."
        return '\n'.join(
            f"{suggestion.primary.primary_name} <- " + ', '.join(record.primary_name for record in suggestion.similar)
            for suggestion in suggestions
        )
