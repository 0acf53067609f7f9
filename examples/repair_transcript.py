#!/usr/bin/env python3
"""
Repair a stored session transcript before sending it to a provider.

Usage:
    uv run python examples/repair_transcript.py session.json --provider anthropic
    uv run python examples/repair_transcript.py session.json --provider mistral --model mistral-large-latest
    uv run python examples/repair_transcript.py session.json --provider openrouter --policy transcript_policy.yaml
    uv run python examples/repair_transcript.py session.json --provider google --output repaired.json

The input file is a JSON list of stored messages ({"role": ..., "content": ...}).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from transcript_guard import dump_transcript, parse_transcript, prepare_transcript
from transcript_guard.config import load_policy_overrides


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure logging."""
    log_level = level.upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Repair tool-call/result pairing in a session transcript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run python examples/repair_transcript.py session.json --provider anthropic
  uv run python examples/repair_transcript.py session.json --provider mistral --output fixed.json
        """,
    )
    parser.add_argument("transcript", type=Path, help="JSON transcript file")
    parser.add_argument("--provider", required=True, help="Provider of the next request")
    parser.add_argument("--model", default=None, help="Model id of the next request")
    parser.add_argument(
        "--policy", type=Path, default=None, help="Policy override YAML file"
    )
    parser.add_argument("--output", type=Path, default=None, help="Write repaired transcript here")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    logger = setup_logging(args.log_level)

    overrides = load_policy_overrides(args.policy) if args.policy else None
    raw = json.loads(args.transcript.read_text())
    messages = parse_transcript(raw)

    report = prepare_transcript(messages, args.provider, args.model, overrides)

    logger.info(f"Repair summary: {json.dumps(report.summary())}")
    if not report.changed:
        logger.info("Transcript already valid, nothing to write")
        return 0

    if args.output:
        args.output.write_text(json.dumps(dump_transcript(report.messages), indent=2))
        logger.info(f"Wrote {len(report.messages)} message(s) to {args.output}")
    else:
        json.dump(dump_transcript(report.messages), sys.stdout, indent=2)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
