"""Unit tests for console formatting and roster export."""

import json

import pytest

from src.attribution.name_canonicalizer import CharacterRegistry
from src.output_formatter import OutputFormatter
from src.review.merge_suggester import MergeSuggestion
from src.review.review_session import ReviewSession


@pytest.fixture
def formatter():
    return OutputFormatter()


@pytest.fixture
def registry():
    registry = CharacterRegistry()
    registry.create("Gwen Lawson", ["Gwen Lawson", "GWEN LAWSON", "Gwen"], 1, [1, 3], 5)
    registry.create("Peter Lawson", ["Peter Lawson"], 2, [2], 1)
    return registry


class TestConsoleFormatting:

    def test_character_table(self, formatter, registry):
        gwen, peter = registry.records()
        table = formatter.format_characters(registry.sorted_records(), [gwen.identity_id])
        lines = table.split('\n')

        assert len(lines) == 2
        assert lines[0].startswith("[x] Gwen Lawson")
        assert "5 dialogues" in lines[0]
        assert lines[0].endswith("High")
        assert lines[1].startswith("[ ] Peter Lawson")
        assert "1 dialogue " in lines[1]
        assert lines[1].endswith("Low")

    def test_empty_table(self, formatter):
        assert formatter.format_characters([]) == "No character cues detected."

    def test_suggestions(self, formatter, registry):
        gwen, peter = registry.records()
        text = formatter.format_suggestions([MergeSuggestion(primary=gwen, similar=[peter])])
        assert text == "Gwen Lawson <- Peter Lawson"
        assert formatter.format_suggestions([]) == "No merge suggestions."


class TestRosterExport:

    def test_write_roster_creates_directories(self, formatter, registry, tmp_path):
        roster = ReviewSession(registry).confirm()
        path = tmp_path / "nested" / "cast.json"

        formatter.write_roster(roster, str(path))

        data = json.loads(path.read_text(encoding='utf-8'))
        assert data == {"characters": [{
            "primaryName": "Gwen Lawson",
            "aliases": ["GWEN LAWSON", "Gwen", "Gwen Lawson"],
            "sceneAppearances": [1, 3],
            "dialogueCount": 5,
            "firstSceneIndex": 1,
            "confidence": "High"
        }]}

    def test_non_ascii_names_written_verbatim(self, formatter, tmp_path):
        registry = CharacterRegistry()
        registry.create("Élodie", ["Élodie"], 1, [1], 4)
        path = tmp_path / "cast.json"

        formatter.write_roster(ReviewSession(registry).confirm(), str(path))

        assert "Élodie" in path.read_text(encoding='utf-8')
