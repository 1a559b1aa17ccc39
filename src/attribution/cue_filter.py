import re
import logging
from typing import Iterable, Iterator, List, Optional, Set

from config import settings
from src.text_processing.cue_scanner import RawCue

# (reason, pattern) pairs; the reason is only used for debug logging
INVALID_CUE_PATTERNS = [
    ('scene number', re.compile(r'^\d+$')),
    ('scene number', re.compile(r'^\d+\s*\.')),
    ('continuation marker', re.compile(r'CONTINUED', re.IGNORECASE)),
    ('continuation marker', re.compile(r'^MORE$', re.IGNORECASE)),
    ('time transition', re.compile(r'\b(?:LATER|MEANWHILE|MOMENTS)\b', re.IGNORECASE)),
    ('punctuation only', re.compile(r'^[*\.\-\s]+$')),
    ('colon', re.compile(r':')),
    ('time of day', re.compile(r'\b(?:DAY|NIGHT|MORNING|EVENING|DUSK|DAWN)\b', re.IGNORECASE)),
    ('numeral', re.compile(r'\d{2,}')),
    ('repeated punctuation', re.compile(r'[!?\.]{2,}')),
    ('end marker', re.compile(r'^THE END$', re.IGNORECASE)),
    ('editorial marker', re.compile(
        r'^(?:TITLE|SUPER|MONTAGE|SERIES OF SHOTS|INTERCUT|INSERT|FLASHBACK|FLASH FORWARD)\b',
        re.IGNORECASE
    )),
]


def invalid_pattern_reason(text: str) -> Optional[str]:
    for reason, pattern in INVALID_CUE_PATTERNS:
        if pattern.search(text):
            return reason
    return None


def is_invalid_pattern(text: str) -> bool:
    return invalid_pattern_reason(text) is not None


def is_generic_role(text: str, generic_roles: Set[str] = settings.GENERIC_ROLES) -> bool:
    return text.strip().upper() in generic_roles


def is_location(text: str, location_words: List[str] = settings.LOCATION_WORDS) -> bool:
    upper = text.upper()
    return any(word in upper for word in location_words)


class CueFilter:
    """Discards raw cues that are structural screenplay text, background roles, or places.

    Rejection is silent from the caller's point of view; each rejection is
    logged at DEBUG with its reason.
    """

    def __init__(self, generic_roles: Optional[Set[str]] = None, location_words: Optional[List[str]] = None):
        self.logger = logging.getLogger(__name__)
        self.generic_roles = {role.upper() for role in (generic_roles if generic_roles is not None else settings.GENERIC_ROLES)}
        self.location_words = [word.upper() for word in (location_words if location_words is not None else settings.LOCATION_WORDS)]
        self.rejected_count = 0

    def rejection_reason(self, text: str) -> Optional[str]:
        reason = invalid_pattern_reason(text)
        if reason:
            return reason
        if is_generic_role(text, self.generic_roles):
            return 'generic role'
        if is_location(text, self.location_words):
            return 'location'
        return None

    def accepts(self, text: str) -> bool:
        return self.rejection_reason(text) is None

    def filter(self, cues: Iterable[RawCue]) -> Iterator[RawCue]:
        for cue in cues:
            reason = self.rejection_reason(cue.text)
            if reason:
                self.rejected_count += 1
                self.logger.debug(f"Rejected cue '{cue.text}' in scene {cue.scene_index}: {reason}")
                continue
            yield cue
