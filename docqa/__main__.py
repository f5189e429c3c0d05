"""Command-line entry point for docqa.

Usage:
    python -m docqa report.pdf -q "Tóm tắt phần mở đầu"
    python -m docqa notes.txt            # interactive questions
"""

import argparse
import logging
import sys
from typing import List, Optional

from docqa.config import get_settings
from docqa.exceptions import DocQAError
from docqa.services.manager import RAGManager
from docqa.utils.formatters import format_ask_result, format_ingest_result, format_stats
from docqa.utils.logger import configure_logging
from docqa.utils.validators import validate_similarity_threshold, validate_top_k

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docqa",
        description="Ask questions about a PDF or text document",
    )
    parser.add_argument("file", help="PDF or .txt/.md document to index")
    parser.add_argument(
        "-q", "--question", action="append", default=[],
        help="Question to ask (repeatable); interactive mode if omitted",
    )
    parser.add_argument(
        "--format", choices=("markdown", "plain", "json"), default="markdown",
        help="Output format",
    )
    parser.add_argument("--top-k", type=int, default=None, help="Chunks passed to the model")
    parser.add_argument("--threshold", type=float, default=None, help="Similarity threshold")
    parser.add_argument("--stats", action="store_true", help="Print index statistics")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser


def _interactive_questions():
    while True:
        try:
            question = input("? ").strip()
        except EOFError:
            return
        if question.lower() in ("", "exit", "quit"):
            return
        yield question


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(level=args.log_level or settings.LOG_LEVEL)

    try:
        top_k = validate_top_k(args.top_k) if args.top_k is not None else None
        threshold = (
            validate_similarity_threshold(args.threshold) if args.threshold is not None else None
        )
    except DocQAError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    with RAGManager(top_k=top_k, similarity_threshold=threshold) as manager:
        return _run(manager, args)


def _run(manager: RAGManager, args: argparse.Namespace) -> int:
    try:
        result = manager.ingest_file(args.file)
    except DocQAError as e:
        logger.error(f"Cannot index {args.file}: {e!r}")
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    print(format_ingest_result(result, format=args.format))
    if args.stats:
        print(format_stats(manager.get_stats(), format=args.format))

    questions = args.question or _interactive_questions()
    exit_code = 0
    for question in questions:
        try:
            answer = manager.ask(question)
        except DocQAError as e:
            logger.error(f"Question failed: {e!r}")
            print(f"❌ {e.message}", file=sys.stderr)
            exit_code = 1
            continue
        print(format_ask_result(answer, format=args.format))

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
