import re
import logging
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Iterable

# Optional scene number, then INT./EXT./INT./EXT./I/E. or a bare INT/EXT token followed by a dash
HEADING_PATTERN = re.compile(
    r'^\s*(?:\d+[A-Z]?\s+)?(?:INT\.?\s*/\s*EXT\.?|EXT\.?\s*/\s*INT\.?|INT\.|EXT\.|I/E\.|(?:INT|EXT)\s*[-–—])',
    re.IGNORECASE
)

_SCENE_NUMBER_PATTERN = re.compile(r'^(\d+[A-Z]?)\s+', re.IGNORECASE)
_TRAILING_SCENE_NUMBER_PATTERN = re.compile(r'\s+(\d+[A-Z]?)\s*$', re.IGNORECASE)
_INT_EXT_PATTERN = re.compile(r'^(INT\.?\s*/\s*EXT\.?|EXT\.?\s*/\s*INT\.?|I/E\.?|INT\.?|EXT\.?)\s*', re.IGNORECASE)
_TIME_OF_DAY_PATTERN = re.compile(
    r'(?:\s*[-–—\.]+\s*|\s+)'
    r'(DAY|NIGHT|MORNING|EVENING|AFTERNOON|DAWN|DUSK|SUNSET|SUNRISE|CONTINUOUS|CONT|LATER|SAME TIME|SAME|'
    r'MOMENTS LATER|SIMULTANEOUS|MAGIC HOUR|GOLDEN HOUR)'
    r'(?:\s*[-–—]?\s*(?:FLASHBACK|PRESENT|CONT(?:\'D)?))?$',
    re.IGNORECASE
)


def is_heading(line: str) -> bool:
    """True when the line opens a new scene."""
    return bool(HEADING_PATTERN.match(line))


@dataclass(frozen=True)
class SceneHeading:
    """Parsed slugline fields of a scene heading."""
    scene_number: Optional[str]
    int_ext: str
    location: str
    time_of_day: str


@dataclass(frozen=True)
class Scene:
    index: int
    heading: str
    content: str
    line_offset: int
    parsed_heading: Optional[SceneHeading] = None

    @property
    def lines(self) -> List[str]:
        return self.content.split('\n')


def parse_heading(heading: str) -> SceneHeading:
    """Split a heading line into scene number, INT/EXT, location and time of day.

    Headings that match the scene pattern but carry no location still parse;
    their location is the empty string.
    """
    working = re.sub(r'\s*\*+\s*$', '', heading.strip())

    scene_number = None
    leading = _SCENE_NUMBER_PATTERN.match(working)
    if leading:
        scene_number = leading.group(1).upper()
        working = working[leading.end():].strip()

    trailing = _TRAILING_SCENE_NUMBER_PATTERN.search(working)
    if trailing:
        if scene_number is None:
            scene_number = trailing.group(1).upper()
        working = re.sub(r'[\s\-–—]+$', '', working[:trailing.start()])

    int_ext = 'INT'
    int_ext_match = _INT_EXT_PATTERN.match(working)
    if int_ext_match:
        raw = re.sub(r'[\s\.]', '', int_ext_match.group(1).upper())
        if '/' in raw:
            int_ext = 'INT/EXT'
        elif raw.startswith('EXT'):
            int_ext = 'EXT'
        working = working[int_ext_match.end():].strip()

    working = re.sub(r'^[\.\-–—]\s*', '', working).strip()

    time_of_day = 'DAY'
    location = working
    time_match = _TIME_OF_DAY_PATTERN.search(working)
    if time_match:
        time_of_day = time_match.group(1).upper()
        if time_of_day == 'CONT':
            time_of_day = 'CONTINUOUS'
        location = working[:time_match.start()]
    location = re.sub(r'[\s\-–—\.,]+$', '', location).strip()

    return SceneHeading(scene_number=scene_number, int_ext=int_ext, location=location, time_of_day=time_of_day)


class SceneSegmenter:
    """Splits raw screenplay text into ordered, contiguous scenes.

    A scene starts at a heading line and runs up to, but excluding, the next
    heading line (or the end of the text). Text before the first heading is
    not part of any scene. Zero headings yields zero scenes.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def segment(self, text: str) -> List[Scene]:
        if not text:
            return []

        lines = text.replace('\r\n', '\n').replace('\r', '\n').split('\n')
        heading_offsets = [i for i, line in enumerate(lines) if is_heading(line)]

        scenes = []
        for ordinal, start in enumerate(heading_offsets, start=1):
            end = heading_offsets[ordinal] if ordinal < len(heading_offsets) else len(lines)
            heading = lines[start].strip()
            scenes.append(Scene(
                index=ordinal,
                heading=heading,
                content='\n'.join(lines[start:end]),
                line_offset=start,
                parsed_heading=parse_heading(heading)
            ))

        if heading_offsets and heading_offsets[0] > 0:
            self.logger.debug(f"Discarded {heading_offsets[0]} line(s) before the first scene heading")
        self.logger.info(f"Segmented {len(lines)} lines into {len(scenes)} scenes")
        return scenes

    def from_records(self, records: Iterable[Dict[str, Any]]) -> List[Scene]:
        """Coerce an importer's pre-segmented scene list into Scene values."""
        scenes = []
        for position, record in enumerate(records, start=1):
            if isinstance(record, Scene):
                scenes.append(record)
                continue
            if 'content' not in record:
                raise ValueError(f"Scene record {position} has no 'content'")

            content = record['content'] or ''
            heading = record.get('heading')
            if heading is None:
                first_line = content.split('\n', 1)[0]
                heading = first_line.strip() if is_heading(first_line) else ''

            scenes.append(Scene(
                index=int(record.get('index', position)),
                heading=heading,
                content=content,
                line_offset=int(record.get('lineOffset', record.get('line_offset', 0))),
                parsed_heading=parse_heading(heading) if heading else None
            ))

        scenes.sort(key=lambda scene: scene.index)
        return scenes
