"""
Character Card Extractor

Reads the character card embedded in a PNG file and writes it out as JSON.
Usage: chara-extract <card.png> [-o OUTPUT] [--summary]
Example: chara-extract cards/nova.png -o nova.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from chara_inspector.services.character_cards import CardParseError, read_character_card

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a SillyTavern character card from a PNG image"
    )
    parser.add_argument("image", type=Path, help="PNG file containing a character card")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Where to write the card JSON (default: <character name>.json next to the image)",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a short summary instead of writing the JSON file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        png_data = args.image.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {args.image}: {e}", file=sys.stderr)
        return 1

    try:
        record = read_character_card(png_data)
    except CardParseError as e:
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.summary:
        summary = record.summarize()
        print(json.dumps(summary.model_dump(), indent=2, ensure_ascii=False))
        return 0

    output = args.output or args.image.parent / record.suggested_filename()
    output.write_text(record.to_json(), encoding="utf-8")
    print(f"Saved {record.format_label} card to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
