from enum import Enum
from functools import total_ordering

from config import settings


@total_ordering
class ConfidenceTier(Enum):
    """Discrete confidence in a detected identity, ordered low < medium < high."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def __lt__(self, other):
        if not isinstance(other, ConfidenceTier):
            return NotImplemented
        return self.value < other.value


def score_confidence(dialogue_count: int,
                     high_threshold: int = settings.CONFIDENCE_HIGH_THRESHOLD,
                     medium_threshold: int = settings.CONFIDENCE_MEDIUM_THRESHOLD) -> ConfidenceTier:
    if dialogue_count >= high_threshold:
        return ConfidenceTier.HIGH
    if dialogue_count >= medium_threshold:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW


def is_preselected(dialogue_count: int, threshold: int = settings.PRESELECT_THRESHOLD) -> bool:
    """Whether the Review Session checks this identity by default."""
    return dialogue_count >= threshold
