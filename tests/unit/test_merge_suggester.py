"""Unit tests for merge suggestions."""

import pytest

from src.attribution.name_canonicalizer import CharacterRegistry
from src.review.merge_suggester import MergeSuggester


@pytest.fixture
def suggester():
    return MergeSuggester()


class TestIsSimilar:

    @pytest.mark.parametrize("first,second", [
        ("Gwen", "Gwendolyn"),
        ("Dr. Anna Kim", "Anna Kim"),
        ("John Smith", "John Doe"),
        ("Jon Snow", "John Snow"),
        ("Peter Lawson", "Pete Lawson"),
    ])
    def test_similar(self, suggester, first, second):
        assert suggester.is_similar(first, second)
        assert suggester.is_similar(second, first)

    @pytest.mark.parametrize("first,second", [
        ("Gwen", "Peter"),
        ("Ed Harris", "Ed Norton"),
    ])
    def test_not_similar(self, suggester, first, second):
        assert not suggester.is_similar(first, second)


class TestSuggest:

    def test_groups_follow_salience_and_never_overlap(self, suggester):
        registry = CharacterRegistry()
        registry.create("Pete Lawson", ["Pete Lawson"], 6, [6], 1)
        registry.create("Gwen", ["Gwen"], 1, [1], 5)
        registry.create("Gwendolyn", ["Gwendolyn"], 2, [2], 2)
        registry.create("Peter Lawson", ["Peter Lawson"], 3, [3], 3)

        suggestions = suggester.suggest(registry.records())

        assert [(s.primary.primary_name, [r.primary_name for r in s.similar]) for s in suggestions] == [
            ("Gwen", ["Gwendolyn"]),
            ("Peter Lawson", ["Pete Lawson"]),
        ]
        all_ids = [identity_id for s in suggestions for identity_id in s.identity_ids]
        assert len(all_ids) == len(set(all_ids)) == 4

    def test_no_suggestions_for_distinct_names(self, suggester):
        registry = CharacterRegistry()
        registry.create("Marcus", ["Marcus"], 1, [1], 2)
        registry.create("Ellie", ["Ellie"], 1, [1], 2)
        assert suggester.suggest(registry.records()) == []

    def test_suggestions_leave_registry_untouched(self, suggester):
        registry = CharacterRegistry()
        registry.create("Gwen", ["Gwen"], 1, [1], 5)
        registry.create("Gwendolyn", ["Gwendolyn"], 2, [2], 2)
        version = registry.alias_index.version

        suggester.suggest(registry.records())

        assert len(registry) == 2
        assert registry.alias_index.version == version
