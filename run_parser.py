"""
Command-line entry point for the task-title parser.

Reads:
  - the text given as argument, or stdin when none is given

Produces:
  - validated parse output as JSON on stdout
  - with --debug, per-parser diagnostics instead

Examples:
  python run_parser.py "Pick up John's dog from school tomorrow p2"
  echo "Lunch with mom at noon" | python run_parser.py --now 2026-10-19T09:00
"""
import argparse
import json
import logging
import sys
from datetime import datetime

from taskparse.config import settings
from taskparse.engine.output_builder import build_parse_output
from taskparse.engine.smart_parser import build_default_parser
from taskparse.engine.validation import validate_parse_output

# ---------------------------------------------------------------------------
# Setup logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("run_parser")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse a task title into structured tags.")
    parser.add_argument("text", nargs="?", help="Task title (read from stdin if omitted)")
    parser.add_argument("--debug", action="store_true", help="Print per-parser diagnostics")
    parser.add_argument("--now", help="Reference time in ISO format, e.g. 2026-10-19T09:00")
    parser.add_argument("--no-ner", action="store_true", help="Disable spaCy NER")
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    text = args.text if args.text is not None else sys.stdin.read()
    text = text.rstrip("\n")

    clock = None
    if args.now:
        try:
            now = datetime.fromisoformat(args.now)
        except ValueError:
            logger.error("Invalid --now value: %s", args.now)
            return 2
        clock = lambda: now  # noqa: E731

    smart_parser = build_default_parser(
        clock=clock,
        ner_enabled=False if args.no_ner else None,
    )

    if args.debug:
        print(json.dumps(smart_parser.test_parse(text), indent=2, ensure_ascii=False))
        return 0

    result = smart_parser.parse(text)
    output = build_parse_output(result, text)

    validation = validate_parse_output(output)
    for warning in validation.warnings:
        logger.warning(warning)
    if not validation.valid:
        logger.error("Output validation failed: %s", validation.errors)
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
