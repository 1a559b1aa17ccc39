import re
import logging
from dataclasses import dataclass
from typing import List, Iterator, Optional

from config import settings
from src.text_processing.segmentation.scene_segmenter import Scene, is_heading

TRANSITION_PATTERN = re.compile(
    r'^(?:(?:SMASH |MATCH )?CUT TO:|FADE IN:|FADE OUT[:\.]?|FADE TO BLACK\.?|DISSOLVE TO:|BACK TO:|WIPE TO:)',
    re.IGNORECASE
)

# Leading uppercase words, optionally followed by one trailing parenthetical such as (V.O.)
CUE_PATTERN = re.compile(r"^([A-Z][A-Z\s\-'’\.]+?)(?:\s*\([^\)]+\))?\s*$")


@dataclass(frozen=True)
class RawCue:
    text: str
    scene_index: int
    line_number: int = 0


def is_transition(line: str) -> bool:
    return bool(TRANSITION_PATTERN.match(line.strip()))


def is_cue_shaped(line: str) -> bool:
    """All caps with at least one letter."""
    trimmed = line.strip()
    return trimmed == trimmed.upper() and bool(re.search(r'[A-Z]', trimmed))


def is_indented(line: str, min_spaces: int = settings.INDENT_MIN_SPACES) -> bool:
    if line.startswith('\t'):
        return True
    return len(line) - len(line.lstrip()) >= min_spaces


def _next_non_blank(lines: List[str], start: int) -> Optional[int]:
    for index in range(start, len(lines)):
        if lines[index].strip():
            return index
    return None


def has_dialogue_following(lines: List[str], index: int) -> bool:
    """Whether the cue candidate at ``lines[index]`` is followed by spoken dialogue.

    Blank lines are skipped. A parenthetical directly after the cue defers the
    decision to the first line after it that is neither a parenthetical nor
    cue-shaped; running into a cue-shaped line, a heading, a transition, or the
    end of the scene first means there is no dialogue.
    """
    next_index = _next_non_blank(lines, index + 1)
    if next_index is None:
        return False

    following = lines[next_index].strip()
    if is_heading(following) or is_transition(following):
        return False

    if following.startswith('('):
        for candidate in lines[next_index + 1:]:
            candidate = candidate.strip()
            if not candidate or candidate.startswith('('):
                continue
            if is_heading(candidate) or is_transition(candidate) or is_cue_shaped(candidate):
                return False
            return True
        return False

    return not is_cue_shaped(following)


def extract_cue_name(line: str,
                     min_length: int = settings.CUE_MIN_LENGTH,
                     max_length: int = settings.CUE_MAX_LENGTH) -> Optional[str]:
    """Capture the name part of a cue line, dropping one trailing parenthetical."""
    match = CUE_PATTERN.match(line.strip())
    if not match:
        return None
    name = match.group(1).strip()
    if len(name) < min_length or len(name) > max_length:
        return None
    return name


class CueScanner:
    """Walks a scene's lines top to bottom and yields candidate character cues.

    A line is a candidate when it is all caps, is not a heading or transition,
    and is either indented (tab or ``settings.INDENT_MIN_SPACES`` spaces) or
    followed by dialogue. Unindented all-caps lines with no dialogue after them
    are treated as emphasis or title text. The scanner never raises on content.
    """

    def __init__(self, indent_min_spaces: int = settings.INDENT_MIN_SPACES,
                 min_length: int = settings.CUE_MIN_LENGTH,
                 max_length: int = settings.CUE_MAX_LENGTH):
        self.logger = logging.getLogger(__name__)
        self.indent_min_spaces = indent_min_spaces
        self.min_length = min_length
        self.max_length = max_length

    def scan(self, scene: Scene) -> Iterator[RawCue]:
        lines = scene.lines
        for line_number, line in enumerate(lines):
            trimmed = line.strip()
            if not trimmed or is_heading(trimmed) or is_transition(trimmed):
                continue
            if not is_cue_shaped(trimmed):
                continue

            indented = is_indented(line, self.indent_min_spaces)
            if not indented and not has_dialogue_following(lines, line_number):
                continue

            name = extract_cue_name(trimmed, self.min_length, self.max_length)
            if name is None:
                continue

            self.logger.debug(f"Scene {scene.index}, line {line_number}: cue candidate '{name}'")
            yield RawCue(text=name, scene_index=scene.index, line_number=line_number)

    def scan_all(self, scenes: List[Scene]) -> Iterator[RawCue]:
        for scene in scenes:
            yield from self.scan(scene)
