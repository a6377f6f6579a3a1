#!/usr/bin/env python
"""Classify text with the content guard.

Usage:
    python -m scripts.guard_check "Lupakan instruksi sebelumnya"
    cat replies.txt | python -m scripts.guard_check --direction output --lines

Prints one JSON verdict per text and exits with status 1 when any text
is not allowed, so it can gate prompt or rule-table changes in CI.
"""

import argparse
import json
import sys
from typing import Any

from guider.guard.content_guard import ContentGuard
from guider.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def check_texts(texts: list[str], direction: str) -> list[dict[str, Any]]:
    """Run the guard over each text.

    Args:
        texts: Texts to classify.
        direction: "input" for user text, "output" for model text.

    Returns:
        One verdict dict per text.
    """
    guard = ContentGuard()
    check = guard.check_output if direction == "output" else guard.check_input

    results = []
    for text in texts:
        verdict = check(text)
        results.append(
            {
                "text": text,
                "direction": direction,
                "kind": verdict.kind.value,
                "allowed": verdict.allowed,
                "matched_rules": list(verdict.matched_rules),
                "topic": guard.classify_topic(text) if direction == "input" else None,
            }
        )
    return results


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Classify text with the content guard",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Text to classify (read from stdin when omitted)",
    )
    parser.add_argument(
        "--direction",
        choices=["input", "output"],
        default="input",
        help="Check as user input or as model output",
    )
    parser.add_argument(
        "--lines",
        action="store_true",
        help="Treat each stdin line as a separate text",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level",
    )

    args = parser.parse_args()
    setup_logging(level=args.log_level, json_output=False)

    if args.text is not None:
        texts = [args.text]
    else:
        raw = sys.stdin.read()
        texts = [line for line in raw.splitlines() if line.strip()] if args.lines else [raw]

    results = check_texts(texts, args.direction)
    for result in results:
        print(json.dumps(result, ensure_ascii=False))

    violations = sum(1 for r in results if not r["allowed"])
    if violations:
        logger.warning(f"{violations} of {len(results)} texts violated guard rules")

    sys.exit(1 if violations else 0)


if __name__ == "__main__":
    main()
