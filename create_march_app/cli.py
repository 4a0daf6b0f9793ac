"""
create-march-app
================

Scaffold a TypeScript monorepo from a few answers.

Usage:
    create-march-app
    create-march-app --answers answers.yaml
    create-march-app --answers answers.yaml --name my-app --conflict remove --no-cleanup
    create-march-app --directory ~/projects --verbose --log-file setup.log
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from . import __version__
from .answers import load_answers_file
from .config import get_settings
from .conflict import ConflictAction
from .core.exceptions import InvalidAnswersError
from .core.logging import configure_logging
from .display import show_error, show_welcome
from .orchestrator import SetupOrchestrator
from .prompts import prompt_answers

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-march-app",
        description="Scaffold a production-ready TypeScript monorepo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--answers",
        type=Path,
        help="YAML or JSON answers file (skips the interactive questions)",
    )
    parser.add_argument("--name", help="Project name (overrides the answers file)")
    parser.add_argument(
        "--directory",
        type=Path,
        default=Path.cwd(),
        help="Parent directory for the project (default: current directory)",
    )
    parser.add_argument(
        "--conflict",
        choices=[action.value for action in ConflictAction],
        help="What to do when the project directory already exists (default: ask)",
    )
    cleanup = parser.add_mutually_exclusive_group()
    cleanup.add_argument(
        "--yes-cleanup",
        dest="cleanup",
        action="store_const",
        const=True,
        help="Remove the partial project on failure without asking",
    )
    cleanup.add_argument(
        "--no-cleanup",
        dest="cleanup",
        action="store_const",
        const=False,
        help="Keep the partial project on failure without asking",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Write structured JSON logs to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    get_settings.cache_clear()
    settings = get_settings()

    configure_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        structured=settings.structured_logs,
        log_file=args.log_file or settings.log_file,
    )

    console = Console()
    defaults = {"package_manager": settings.default_package_manager.value}
    try:
        if args.answers:
            answers = load_answers_file(args.answers, {"project_name": args.name}, defaults)
        else:
            show_welcome(console)
            answers = prompt_answers(console, project_name=args.name, defaults=defaults)
    except InvalidAnswersError as e:
        show_error(console, str(e))
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        return 0

    orchestrator = SetupOrchestrator(
        answers,
        settings,
        target_dir=args.directory,
        console=console,
        conflict_action=ConflictAction(args.conflict) if args.conflict else None,
        cleanup=args.cleanup,
    )
    try:
        return asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
