import logging
from dataclasses import dataclass, field
from typing import List

from fuzzywuzzy import fuzz

from config import settings
from src.attribution.name_canonicalizer import CharacterRecord, name_tokens, salience_key


@dataclass
class MergeSuggestion:
    primary: CharacterRecord
    similar: List[CharacterRecord] = field(default_factory=list)

    @property
    def identity_ids(self) -> List[int]:
        return [self.primary.identity_id] + [record.identity_id for record in self.similar]


class MergeSuggester:
    """Proposes identities the operator may want to merge by hand.

    Two primary names are similar when one contains the other, when they share
    a first name of at least ``min_first_token`` letters, or when their
    fuzzywuzzy token-set ratio reaches ``threshold``. Suggestions never touch
    the registry.
    """

    def __init__(self, threshold: int = settings.MERGE_SUGGESTION_THRESHOLD,
                 min_first_token: int = settings.MERGE_SUGGESTION_MIN_FIRST_TOKEN):
        self.logger = logging.getLogger(__name__)
        self.threshold = threshold
        self.min_first_token = min_first_token

    def is_similar(self, first: str, second: str) -> bool:
        a, b = first.casefold(), second.casefold()
        if a in b or b in a:
            return True
        first_tokens, second_tokens = name_tokens(a), name_tokens(b)
        if (first_tokens and second_tokens and first_tokens[0] == second_tokens[0]
                and len(first_tokens[0]) >= self.min_first_token):
            return True
        return fuzz.token_set_ratio(a, b) >= self.threshold

    def suggest(self, records: List[CharacterRecord]) -> List[MergeSuggestion]:
        ordered = sorted(records, key=salience_key)
        claimed = set()
        suggestions = []

        for record in ordered:
            if record.identity_id in claimed:
                continue
            claimed.add(record.identity_id)

            similar = [
                other for other in ordered
                if other.identity_id not in claimed and self.is_similar(record.primary_name, other.primary_name)
            ]
            if similar:
                claimed.update(other.identity_id for other in similar)
                suggestions.append(MergeSuggestion(primary=record, similar=similar))

        self.logger.debug(f"{len(suggestions)} merge suggestion(s) for {len(records)} characters")
        return suggestions

