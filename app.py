"""Screenplay Cast Bootstrap - detect the speaking cast of a screenplay.

Reads a plain-text screenplay, splits it into scenes, detects character cues,
collapses spelling variants ("GWEN", "GWEN LAWSON (V.O.)") into one identity
per character, and confirms every identity with enough dialogue as the
production's cast.

Examples:
    Rank detected characters:
    $ python app.py scripts/pilot.txt

    Confirm characters with at least 2 cues and save the roster:
    $ python app.py scripts/pilot.txt --confirm-threshold 2 --output output/pilot_cast.json

    Show merge suggestions and fall back to named entities when no cues are found:
    $ python app.py scripts/pilot.txt --suggest-merges --fallback-ner
"""

import argparse
import os
import sys
import logging
from typing import List, Optional

from config import settings
from src.character_detector import CharacterDetector
from src.output_formatter import OutputFormatter


def setup_logging(debug: bool = False) -> None:
    """Setup logging with separate levels for console and file."""
    log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    logging.getLogger().handlers.clear()

    file_log_level = getattr(logging, getattr(settings, 'FILE_LOG_LEVEL', 'DEBUG').upper(), logging.DEBUG)
    console_log_level = getattr(logging, getattr(settings, 'CONSOLE_LOG_LEVEL', 'INFO').upper(), logging.INFO)
    if debug:
        console_log_level = logging.DEBUG

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    simple_formatter = logging.Formatter(
        '%(levelname)s - %(name)s - %(message)s'
    )

    file_handler = logging.FileHandler(os.path.join(log_dir, 'cast_bootstrap.log'), encoding='utf-8')
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(detailed_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_log_level)
    console_handler.setFormatter(simple_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers filter
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect and confirm the speaking cast of a screenplay.")
    parser.add_argument("input_file", help="Path to a plain-text (UTF-8) screenplay.")
    parser.add_argument("--confirm-threshold", type=int, default=settings.PRESELECT_THRESHOLD,
                        help="Confirm every character with at least this many dialogue cues.")
    parser.add_argument("--output", help="Write the confirmed roster as JSON to this path.")
    parser.add_argument("--suggest-merges", action="store_true", help="List characters that may be the same person.")
    parser.add_argument("--fallback-ner", action="store_true",
                        help=f"Use spaCy ({settings.SPACY_MODEL}) person entities when no cues are detected.")
    parser.add_argument("--no-progress", action="store_true", help="Hide the scene progress bar.")
    parser.add_argument("--debug", action="store_true", help="Log every cue decision to the console.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    input_path = os.path.abspath(args.input_file)
    if not os.path.exists(input_path):
        print(f"Error: Input file not found at {input_path}")
        return 1

    with open(input_path, 'r', encoding='utf-8') as f:
        raw_text = f.read()

    detector = CharacterDetector(
        show_progress=settings.SHOW_PROGRESS and not args.no_progress,
        use_fallback=args.fallback_ner or settings.NER_FALLBACK_ENABLED
    )
    result = detector.detect_text(raw_text)
    formatter = OutputFormatter()

    print(f"\n{result.stats.scenes} scenes, {len(result.characters)} characters detected")
    session = result.review(preselect_threshold=args.confirm_threshold)
    print(formatter.format_characters(session.characters(), session.selected_ids))

    if result.no_cues_detected:
        logger.info("Nothing to confirm")
        return 0

    if args.suggest_merges:
        print("\n--- Merge Suggestions ---")
        print(formatter.format_suggestions(result.suggest_merges()))

    roster = session.confirm()
    print(f"\nConfirmed {len(roster)} characters: {', '.join(entry.primary_name for entry in roster)}")

    if args.output:
        output_path = args.output if os.path.dirname(args.output) else os.path.join(settings.OUTPUT_DIR, args.output)
        formatter.write_roster(roster, output_path)
        print(f"Roster saved to {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
