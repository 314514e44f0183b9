"""
MDView command-line converter.

Usage:
    python main.py data.json                 # TOON to stdout
    python main.py data.json --to json       # pretty-printed JSON
    python main.py - --to stats < data.json  # token comparison from stdin
"""

import argparse
import json
import sys

from logger import get_logger, setup_logging
from services.conversion_service import ConversionService

logger = get_logger(__name__)

TARGETS = ["toon", "json", "tree", "stats"]


def convert(content: str, target: str) -> str:
    """Convert JSON text to the requested target representation."""
    service = ConversionService()
    if target == "json":
        return service.format_json(content)
    if target == "tree":
        return service.tree(content).model_dump_json(indent=2, exclude_none=True)
    if target == "stats":
        stats = service.token_stats(content)
        return (
            f"JSON tokens:  {stats.json_tokens}\n"
            f"TOON tokens:  {stats.toon_tokens}\n"
            f"Saved:        {stats.saved_tokens} ({stats.savings_percent}%)"
        )
    return service.to_toon(content)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="JSON to TOON converter")
    parser.add_argument("file", help="Input JSON file path, or - for stdin")
    parser.add_argument("--to", choices=TARGETS, default="toon", help="Output representation")
    parser.add_argument("-o", "--output", help="Write to this file instead of stdout")

    args = parser.parse_args(argv)
    setup_logging()

    try:
        if args.file == "-":
            content = sys.stdin.read()
        else:
            with open(args.file, encoding="utf-8-sig") as f:
                content = f.read()
    except FileNotFoundError:
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        result = convert(content, args.to)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON: {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result + "\n")
        logger.info(f"Output saved to: {args.output}")
    else:
        print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
