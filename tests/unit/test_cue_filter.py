"""Unit tests for cue filtering."""

import pytest

from src.attribution.cue_filter import (
    CueFilter, is_invalid_pattern, invalid_pattern_reason, is_generic_role, is_location
)
from src.text_processing.cue_scanner import RawCue


class TestInvalidPatterns:

    @pytest.mark.parametrize("text", [
        "42", "12. ", "CONTINUED", "MORE", "THE END",
        "TITLE", "SUPER", "MONTAGE", "SERIES OF SHOTS", "INTERCUT", "INSERT",
        "FLASHBACK", "FLASH FORWARD", "BACK AT DAWN", "NIGHT", "MORNING",
        "AGENT 007", "WHAT?!", "WAIT...", "NOTE: NONE", "---", "MOMENTS LATER",
    ])
    def test_rejected(self, text):
        assert is_invalid_pattern(text)

    @pytest.mark.parametrize("text", ["GWEN", "HALLIDAY", "SUPERMAN", "MRS. O'BRIEN", "SLATER", "AGENT 7"])
    def test_accepted(self, text):
        assert not is_invalid_pattern(text)

    def test_reason_is_reported(self):
        assert invalid_pattern_reason("EVENING") == "time of day"
        assert invalid_pattern_reason("GWEN") is None


class TestVocabularies:

    @pytest.mark.parametrize("text", ["WAITER", "waiter", "TAXI DRIVER", "CROWD", "VOICE", " MAN "])
    def test_generic_roles(self, text):
        assert is_generic_role(text)

    def test_generic_role_is_exact_match(self):
        assert not is_generic_role("HEAD WAITER")

    @pytest.mark.parametrize("text", ["FERRY", "KITCHEN", "THE OLD HOUSE", "TAXI RANK", "OSCAR"])
    def test_location_words_match_as_substrings(self, text):
        assert is_location(text)

    def test_plain_name_is_not_a_location(self):
        assert not is_location("GWEN LAWSON")


class TestCueFilter:

    def test_filter_keeps_valid_cues_in_order(self, cue_filter):
        cues = [
            RawCue("GWEN", 1), RawCue("WAITER", 1), RawCue("INT", 1),
            RawCue("PETER", 2), RawCue("KITCHEN", 2), RawCue("NIGHT", 3),
        ]
        kept = list(cue_filter.filter(cues))
        assert [cue.text for cue in kept] == ["GWEN", "INT", "PETER"]
        assert cue_filter.rejected_count == 3

    def test_rejection_reasons(self, cue_filter):
        assert cue_filter.rejection_reason("WAITER") == "generic role"
        assert cue_filter.rejection_reason("FERRY") == "location"
        assert cue_filter.rejection_reason("DAY") == "time of day"
        assert cue_filter.rejection_reason("GWEN") is None

    def test_custom_vocabularies(self):
        cue_filter = CueFilter(generic_roles={"butler"}, location_words=["manor"])
        assert not cue_filter.accepts("BUTLER")
        assert not cue_filter.accepts("MANOR GATE")
        assert cue_filter.accepts("WAITER")
