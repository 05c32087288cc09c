"""Command-line front end: submit a PR or diff and print the review."""

import argparse
import asyncio
import logging
import sys

from analyzer import build_analyzer
from config import DEFAULT_MODEL, USE_MOCK
from controller import SubmissionController
from models import SubmissionStatus
from notifications import ConsoleNotifier
from presenter import VIEWS, FindingPresenter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Automated code review for a GitHub PR or a raw diff.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="GitHub PR URL, owner/repo#N, or diff text ('-' reads stdin)",
    )
    parser.add_argument("--file", "-f", help="Read the PR reference or diff from a file")
    parser.add_argument(
        "--view",
        choices=[view.value for view in VIEWS],
        default="all",
        help="Category view to print (default: all)",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        default=USE_MOCK,
        help="Use the built-in mock analyzer (no API calls)",
    )
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Gemini model name")
    return parser


def read_input(args: argparse.Namespace) -> str:
    """Resolve the submission text from --file, the positional arg or stdin."""
    if args.file:
        with open(args.file, encoding="utf-8") as f:
            return f.read()
    if args.input == "-" or (args.input is None and not sys.stdin.isatty()):
        return sys.stdin.read()
    return args.input or ""


async def run(args: argparse.Namespace) -> int:
    controller = SubmissionController(
        analyzer=build_analyzer(use_mock=args.mock, model=args.model),
        notifier=ConsoleNotifier(),
    )
    presenter = FindingPresenter()
    presenter.select_view(args.view)

    try:
        controller.update_input(read_input(args))
    except OSError as e:
        logger.error("Could not read input: %s", e)
        return 1

    before = controller.get_snapshot()
    submission = await controller.submit()
    if submission is before:
        # Rejected by validation; the notifier already reported it
        return 1

    print()
    print(presenter.render(submission))
    return 0 if submission.status is SubmissionStatus.COMPLETED else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logger.info("Starting code analysis...")
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
