"""Command-line entry point: analyze Russian text with mystem.

    python src/main.py "Связался с лучшим - подохни как все."
    echo "кошка" | python src/main.py --lemmas
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before importing modules that read env vars (MYSTEM_*)
load_dotenv()

# Add src to path when run as a script
_src_path = Path(__file__).parent
sys.path.insert(0, str(_src_path))

from domain.model.errors import MorphError
from port.stream import ResponseFormat
from services.morph_service import MorphService
from utils.analysis_decoder import DEFAULT_MALFORMED_POLICY, MalformedPolicy
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Morphological analysis of Russian text via mystem")
    parser.add_argument("text", nargs="*", help="Text to analyze (read from stdin when omitted)")
    parser.add_argument(
        "--format", choices=[f.value for f in ResponseFormat], default=ResponseFormat.TEXT.value,
        help="Output notation to request from mystem",
    )
    parser.add_argument(
        "--policy", choices=[p.value for p in MalformedPolicy], default=DEFAULT_MALFORMED_POLICY.value,
        help="Skip malformed analysis entries or fail the word",
    )
    parser.add_argument("--lemmas", action="store_true", help="Print only the best lemma of each word")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_structured_logging(logging.DEBUG if args.verbose else logging.WARNING)

    text = " ".join(args.text) if args.text else sys.stdin.read()

    try:
        with MorphService(
            policy=MalformedPolicy(args.policy),
            response_format=ResponseFormat(args.format),
        ) as morph:
            batch = morph.analyze(text)
    except MorphError as e:
        logger.error("Analysis failed", extra={"error": str(e), "error_type": type(e).__name__})
        if e.partial is not None:
            _print_batch(e.partial, lemmas_only=args.lemmas)
        return 1

    _print_batch(batch, lemmas_only=args.lemmas)
    return 0


def _print_batch(batch, *, lemmas_only: bool) -> None:
    for word in batch:
        if lemmas_only:
            print(f"{word.text}\t{word.best.lex}")
        else:
            print(json.dumps(word.to_dict(), ensure_ascii=False))


if __name__ == "__main__":
    sys.exit(main())
