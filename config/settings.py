# config/settings.py
import os

# Cue Detection Configuration
CUE_MIN_LENGTH = 2  # Shortest accepted character cue (characters)
CUE_MAX_LENGTH = 30  # Longest accepted character cue (characters)
INDENT_MIN_SPACES = 5  # Leading spaces that count as an indented cue line

# Confidence Tiers (derived from dialogue count)
CONFIDENCE_HIGH_THRESHOLD = 5
CONFIDENCE_MEDIUM_THRESHOLD = 3
PRESELECT_THRESHOLD = 3  # Review Session pre-checks identities at or above this count

# Background roles that never become cast identities
GENERIC_ROLES = {
    'WAITER', 'WAITRESS', 'BARTENDER', 'DRIVER', 'TAXI DRIVER',
    'CREW MEMBER', 'PASSENGER', 'AGENT', 'RECEPTIONIST',
    'NURSE', 'DOCTOR', 'OFFICER', 'GUARD',
    'MAN', 'WOMAN', 'BOY', 'GIRL', 'PERSON',
    'VOICE', 'CROWD', 'ALL', 'EVERYONE', 'MORE'
}

# Location nouns; any cue containing one of these is treated as a set, not a character
LOCATION_WORDS = [
    'HOUSE', 'ROOM', 'STREET', 'ROAD', 'FERRY', 'TAXI',
    'FARMHOUSE', 'AIRPORT', 'KITCHEN', 'BEDROOM', 'BATHROOM',
    'HALLWAY', 'OFFICE', 'CAR', 'BUILDING', 'LOBBY'
]

# Merge Suggestion Configuration
MERGE_SUGGESTION_THRESHOLD = 90  # fuzzywuzzy token_set_ratio score (0-100)
MERGE_SUGGESTION_MIN_FIRST_TOKEN = 3  # Shared first names shorter than this are ignored

# Fallback Candidate Sources
NER_FALLBACK_ENABLED = False  # Use spaCy PERSON entities when no cues are detected
SPACY_MODEL = "en_core_web_sm"

# Progress Reporting
SHOW_PROGRESS = True  # tqdm progress bar while scanning scenes

# Output Paths
OUTPUT_DIR = "output"
LOG_DIR = os.getenv("CAST_BOOTSTRAP_LOG_DIR", "logs")

# Logging Configuration
CONSOLE_LOG_LEVEL = "INFO"  # Level for console output
FILE_LOG_LEVEL = "DEBUG"    # Level for file output (more detailed)
