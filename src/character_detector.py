import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Any, Iterable, Optional

from tqdm import tqdm

from config import settings
from src.attribution.cue_filter import CueFilter
from src.attribution.fallback_sources import CastListSource, NamedEntitySource, load_spacy_model
from src.attribution.name_canonicalizer import NameCanonicalizer, CharacterRecord
from src.review.merge_suggester import MergeSuggester, MergeSuggestion
from src.review.review_session import ReviewSession
from src.text_processing.cue_scanner import CueScanner, RawCue
from src.text_processing.segmentation.scene_segmenter import SceneSegmenter, Scene


@dataclass
class DetectionStats:
    scenes: int = 0
    lines: int = 0
    raw_cues: int = 0
    accepted_cues: int = 0
    rejected_cues: int = 0
    fallback_cues: int = 0
    identities: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class DetectionResult:
    """One parse session: the scenes, the identity registry built from them, and stats.

    Zero identities is a normal outcome (``no_cues_detected``); callers can
    feed an alternate candidate source through ``ingest`` or
    ``ingest_cast_lists`` before opening the review.
    """

    def __init__(self, scenes: List[Scene], canonicalizer: NameCanonicalizer, stats: DetectionStats):
        self.logger = logging.getLogger(__name__)
        self.scenes = scenes
        self.canonicalizer = canonicalizer
        self.registry = canonicalizer.registry
        self.stats = stats
        self._session: Optional[ReviewSession] = None

    @property
    def characters(self) -> List[CharacterRecord]:
        return self.registry.sorted_records()

    @property
    def no_cues_detected(self) -> bool:
        return len(self.registry) == 0

    def ingest(self, cues: Iterable[RawCue], cue_filter: Optional[CueFilter] = None) -> int:
        """Resolve cues from an external source against this session's registry."""
        resolved = 0
        if cue_filter is not None:
            cues = cue_filter.filter(cues)
        for cue in cues:
            if self.canonicalizer.resolve(cue.text, cue.scene_index) is not None:
                resolved += 1
        self.stats.fallback_cues += resolved
        self.stats.identities = len(self.registry)
        self.logger.info(f"Ingested {resolved} fallback cue(s); {len(self.registry)} characters in session")
        return resolved

    def ingest_cast_lists(self, cast_lists: Dict[int, List[str]]) -> int:
        return self.ingest(CastListSource(cast_lists).cues())

    def suggest_merges(self, suggester: Optional[MergeSuggester] = None) -> List[MergeSuggestion]:
        return (suggester or MergeSuggester()).suggest(self.registry.records())

    def review(self, **kwargs) -> ReviewSession:
        """The review session for this result, opened on first call.

        Later calls return the same session. Passing options reopens it, which
        is only allowed while nothing has been confirmed.
        """
        if self._session is None or kwargs:
            self._session = ReviewSession(self.registry, **kwargs)
        return self._session


class CharacterDetector:
    """Screenplay text to deduplicated character identities.

    Pipeline:
        raw text -> SceneSegmenter -> CueScanner (per scene, top to bottom)
        -> CueFilter -> NameCanonicalizer (one registry per call)

    Each ``detect_*`` call starts a fresh registry and returns it inside a
    ``DetectionResult``; nothing is shared between calls. Scenes are scanned
    strictly in index order because structural matching depends on the order
    in which spellings are first seen.

    Examples:
        >>> detector = CharacterDetector(show_progress=False)
        >>> result = detector.detect_text(screenplay)
        >>> [c.primary_name for c in result.characters]
        ['Gwen Lawson', 'Peter Lawson']
        >>> session = result.review()
        >>> roster = session.confirm()
    """

    def __init__(self, segmenter: Optional[SceneSegmenter] = None,
                 scanner: Optional[CueScanner] = None,
                 cue_filter: Optional[CueFilter] = None,
                 show_progress: bool = settings.SHOW_PROGRESS,
                 use_fallback: bool = settings.NER_FALLBACK_ENABLED,
                 nlp_model=None):
        self.logger = logging.getLogger(__name__)
        self.segmenter = segmenter or SceneSegmenter()
        self.scanner = scanner or CueScanner()
        self.cue_filter = cue_filter or CueFilter()
        self.show_progress = show_progress
        self.use_fallback = use_fallback
        self.nlp_model = nlp_model

    def detect_text(self, text: str) -> DetectionResult:
        scenes = self.segmenter.segment(text or '')
        return self._detect(scenes)

    def detect_scenes(self, scenes: Iterable[Any]) -> DetectionResult:
        """Detect from a pre-segmented scene list (Scene values or importer dicts)."""
        return self._detect(self.segmenter.from_records(scenes))

    def _detect(self, scenes: List[Scene]) -> DetectionResult:
        canonicalizer = NameCanonicalizer()
        stats = DetectionStats(scenes=len(scenes))
        rejected_before = self.cue_filter.rejected_count

        for scene in tqdm(scenes, desc="Scanning scenes", disable=not self.show_progress):
            stats.lines += len(scene.lines)
            raw_cues = list(self.scanner.scan(scene))
            stats.raw_cues += len(raw_cues)
            for cue in self.cue_filter.filter(raw_cues):
                if canonicalizer.resolve(cue.text, cue.scene_index) is not None:
                    stats.accepted_cues += 1

        stats.rejected_cues = self.cue_filter.rejected_count - rejected_before
        stats.identities = len(canonicalizer.registry)
        result = DetectionResult(scenes, canonicalizer, stats)

        if result.no_cues_detected and self.use_fallback and scenes:
            self._apply_ner_fallback(result)

        if result.no_cues_detected:
            self.logger.warning(f"No character cues detected in {len(scenes)} scenes")
        else:
            self.logger.info(
                f"Detected {stats.identities} characters from {stats.accepted_cues} cues "
                f"({stats.raw_cues} candidates, {stats.rejected_cues} rejected) across {stats.scenes} scenes"
            )
        return result

    def _apply_ner_fallback(self, result: DetectionResult) -> None:
        if self.nlp_model is None:
            self.nlp_model = load_spacy_model()
        source = NamedEntitySource(self.nlp_model, self.cue_filter)
        if not source.available:
            return
        self.logger.info("No screenplay cues found; falling back to named entities")
        result.ingest(source.cues(result.scenes))
