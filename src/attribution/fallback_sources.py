import logging
from typing import Dict, List, Iterator, Optional, Any

import spacy

from config import settings
from src.attribution.cue_filter import CueFilter
from src.text_processing.cue_scanner import RawCue
from src.text_processing.segmentation.scene_segmenter import Scene

logger = logging.getLogger(__name__)


def load_spacy_model(model_name: str = settings.SPACY_MODEL) -> Optional[Any]:
    nlp_model = None
    try:
        nlp_model = spacy.load(model_name)
        logger.info(f"spaCy model '{model_name}' loaded successfully.")
    except OSError:
        logger.warning(
            f"spaCy model '{model_name}' not found; named-entity fallback disabled. "
            f"Install it with: python -m spacy download {model_name}"
        )
    return nlp_model


class CastListSource:
    """Turns per-scene cast lists (scene index -> names) into cues.

    These names were chosen by a person or an external service, so the cue
    filter is not applied; blank names are skipped.
    """

    def __init__(self, cast_lists: Dict[int, List[str]]):
        self.cast_lists = cast_lists

    def cues(self) -> Iterator[RawCue]:
        for scene_index in sorted(self.cast_lists, key=int):
            for name in self.cast_lists[scene_index] or []:
                if name and name.strip():
                    yield RawCue(text=name.strip(), scene_index=int(scene_index))


class NamedEntitySource:
    """PERSON entities found by spaCy in each scene, passed through the cue filter."""

    def __init__(self, nlp_model=None, cue_filter: Optional[CueFilter] = None,
                 min_length: int = settings.CUE_MIN_LENGTH,
                 max_length: int = settings.CUE_MAX_LENGTH):
        self.logger = logging.getLogger(__name__)
        self.nlp = nlp_model
        self.cue_filter = cue_filter or CueFilter()
        self.min_length = min_length
        self.max_length = max_length

    @property
    def available(self) -> bool:
        return self.nlp is not None

    def cues(self, scenes: List[Scene]) -> Iterator[RawCue]:
        if not self.available:
            return
        for scene in scenes:
            doc = self.nlp(scene.content)
            for ent in doc.ents:
                if ent.label_ != 'PERSON':
                    continue
                text = ' '.join(ent.text.split())
                if len(text) < self.min_length or len(text) > self.max_length:
                    continue
                if not self.cue_filter.accepts(text):
                    self.logger.debug(f"Rejected entity '{text}' in scene {scene.index}")
                    continue
                yield RawCue(text=text, scene_index=scene.index)
