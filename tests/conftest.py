"""
Pytest configuration and shared fixtures for the screenplay cast bootstrap test suite.

Provides sample screenplays in the common layouts (indented cues, flush-left
cues, numbered headings) and ready-made detection components.
"""

import logging
import textwrap

import pytest

from src.attribution.cue_filter import CueFilter
from src.attribution.name_canonicalizer import NameCanonicalizer
from src.character_detector import CharacterDetector
from src.text_processing.cue_scanner import CueScanner
from src.text_processing.segmentation.scene_segmenter import SceneSegmenter, Scene

logging.basicConfig(level=logging.INFO)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test path."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ============================================================================
# Sample Screenplays
# ============================================================================

SCENARIO_A_SCRIPT = textwrap.dedent("""\
    THE LAWSONS
    Written by Nobody

    1 INT. FERRY - DAY

    Gwen stands at the rail, watching the harbour shrink.

    GWEN LAWSON
    I told you we'd make it.

    2 EXT. HARBOUR - NIGHT

    PETER LAWSON
    You always say that.

    3 INT. FARMHOUSE KITCHEN - MORNING

    GWEN
    And I'm always right.
    """)

INDENTED_SCRIPT = (
    "INT. APARTMENT - NIGHT\n"
    "\n"
    "Rain hammers the window. MARCUS paces.\n"
    "\n"
    "                    MARCUS (V.O.)\n"
    "          She isn't coming back.\n"
    "\n"
    "                    ELLIE\n"
    "               (quietly)\n"
    "          You don't know that.\n"
    "\n"
    "                    MARCUS (CONT'D)\n"
    "          I know her.\n"
    "\n"
    "CUT TO:\n"
    "\n"
    "EXT. STREET - CONTINUOUS\n"
    "\n"
    "                    WAITER\n"
    "          Table for two?\n"
    "\n"
    "                    ELLIE PARKER\n"
    "          Just one.\n"
)


@pytest.fixture
def scenario_a_script():
    return SCENARIO_A_SCRIPT


@pytest.fixture
def indented_script():
    return INDENTED_SCRIPT


@pytest.fixture
def make_scene():
    """Build a Scene from content lines."""
    def _make(lines, index=1, heading="INT. ROOM - DAY"):
        content = '\n'.join([heading] + list(lines))
        return Scene(index=index, heading=heading, content=content, line_offset=0)
    return _make


# ============================================================================
# Components
# ============================================================================

@pytest.fixture
def segmenter():
    return SceneSegmenter()


@pytest.fixture
def scanner():
    return CueScanner()


@pytest.fixture
def cue_filter():
    return CueFilter()


@pytest.fixture
def canonicalizer():
    return NameCanonicalizer()


@pytest.fixture
def detector():
    return CharacterDetector(show_progress=False, use_fallback=False)
