"""
Command-line interface for gitsmart.

This module is responsible for argument parsing and delegating to the
report orchestration in the reports module.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .config import Config
from .errors import GitSmartError
from .logging_utils import configure_logging
from .reports import COMMANDS, TARGET_COMMANDS, run_command

COMMAND_HELP = {
    "analysis": "Show comprehensive repository analysis (default)",
    "branches": "Show branch analysis and cleanup suggestions",
    "hotfiles": "Show most frequently changed files",
    "cleanup": "Show cleanup suggestions",
    "suggest": "Suggest commit messages for staged changes",
    "review": "Generate a code review checklist for the last commit",
    "security": "Run a security audit on the last commit",
    "blame": "Show blame with commit context for FILE",
    "impact": "Analyze change impact for a file or component",
    "resolve": "Guide merge conflict resolution",
    "performance": "Detect potential performance regressions",
    "docs": "Find documentation gaps",
    "workflow": "Analyze git workflow patterns",
    "help": "Show this help message",
}


def _command_epilog() -> str:
    lines = ["commands:"]
    for name, text in COMMAND_HELP.items():
        lines.append(f"  {name:<12} {text}")
    return "\n".join(lines)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitsmart",
        description="Heuristic analysis of a git repository's history and recent changes.",
        epilog=_command_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        nargs="?",
        default="analysis",
        choices=[*COMMANDS, "help"],
        metavar="COMMAND",
        help="Report to produce (default: analysis).",
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="File path for blame, or file/component for impact.",
    )
    parser.add_argument(
        "-C",
        "--repo",
        dest="repo_path",
        help="Run as if gitsmart was started in this directory.",
    )
    parser.add_argument(
        "--max-commits",
        type=_positive_int,
        default=1000,
        help="Maximum number of commits to load (default: 1000).",
    )
    parser.add_argument(
        "--top",
        type=_positive_int,
        default=10,
        help="Number of hot files to show (default: 10).",
    )
    parser.add_argument(
        "--blame-lines",
        type=_positive_int,
        default=10,
        help="Number of blame lines to show (default: 10).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits with 2 on usage errors; gitsmart reports 1.
        return 0 if exc.code in (0, None) else 1

    if args.command == "help":
        parser.print_help()
        return 0

    if args.target and args.command not in TARGET_COMMANDS:
        print(f"gitsmart: error: {args.command} does not take an argument", file=sys.stderr)
        return 1

    config = Config(
        command=args.command,
        target=args.target,
        repo_path=args.repo_path,
        verbosity=args.verbose,
        max_commits=args.max_commits,
        hot_file_limit=args.top,
        blame_line_limit=args.blame_lines,
    )

    configure_logging(verbosity=config.verbosity)

    try:
        run_command(config)
    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        return 130
    except GitSmartError as exc:
        print(f"gitsmart: error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
