"""CLI entrypoints for ctosooa commands."""

from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path

from . import __version__
from .config import BACKENDS, ConfigError
from .llm import AssistantError
from .logging import configure_logging
from .orchestrator import AnalysisOutcome, Orchestrator
from .scaffold import ScaffoldError, SymfonyScaffolder

USAGE = "Usage: ctosooa echo <something>"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("--verbose", **kwargs)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctosooa",
        description="Small command dispatcher with codebase analysis and scaffolding helpers.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=__version__,
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command")

    echo_parser = subparsers.add_parser("echo", help="Print the given words.")
    echo_parser.add_argument("words", nargs="*", help="Words to print.")

    hello_parser = subparsers.add_parser("hello", help="Greet a name or a number.")
    hello_parser.add_argument(
        "names", nargs="*", help="Name or number to greet; extra words are ignored."
    )

    analyse_parser = subparsers.add_parser(
        "analyse",
        help="Send the most relevant files of a directory to the AI assistant.",
    )
    _add_verbose_option(analyse_parser, suppress_default=True)
    analyse_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to analyse (defaults to current directory).",
    )
    analyse_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Maximum number of files to send (defaults to the configured limit).",
    )
    analyse_parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=None,
        help="How to reach the assistant: HTTPS API, local CLI, or CLI in a new terminal.",
    )
    analyse_parser.add_argument("--model", default=None, help="Model name for the API backend.")
    analyse_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be sent without contacting the assistant.",
    )

    symfony_parser = subparsers.add_parser(
        "symfony",
        help="Create a Symfony API project with Doctrine and MySQL pre-configured.",
    )
    _add_verbose_option(symfony_parser, suppress_default=True)
    symfony_parser.add_argument(
        "project_name",
        nargs="+",
        help="Name of the project directory to create; extra words are ignored.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for ctosooa commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.exit(1, f"{USAGE}\n")

    configure_logging(verbose=bool(args.verbose))

    if args.command == "echo":
        print(" ".join(args.words))
    elif args.command == "hello":
        _run_hello(args.names[0] if args.names else None)
    elif args.command == "analyse":
        _run_analyse(parser, args)
    elif args.command == "symfony":
        _run_symfony(parser, args.project_name[0])
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, f"Unknown command: {args.command}\n")


def _run_hello(name: str | None) -> None:
    if not name:
        print("Hello! Please provide a name or number.")
        print("Usage: ctosooa hello <name|number>")
        return

    print(f"Hello {name}! Welcome to ctosooa.")
    number = _parse_number(name)
    if number is not None:
        print(f"You passed the number: {name}")
        print(f"Double of {name} is: {_format_number(number * 2)}")


def _parse_number(value: str) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


def _run_analyse(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    orchestrator = Orchestrator()
    print(f"Analyzing directory: {args.path}")
    try:
        outcome = orchestrator.run_analyse(
            args.path,
            limit=args.limit,
            backend=args.backend,
            model=args.model,
            dry_run=bool(args.dry_run),
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"Error: {exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Error: {exc}\n")
    except AssistantError as exc:
        parser.exit(1, f"Error calling assistant: {exc}\n")

    _print_outcome(outcome)


def _print_outcome(outcome: AnalysisOutcome) -> None:
    if not outcome.selected:
        print("No files found to analyze.")
        return

    if outcome.dry_run:
        print(f"Would send {len(outcome.selected)} files (dry-run):")
        for entry in outcome.selected:
            print(f"  {entry.score:>5}  {entry.candidate.path}")
        return

    print("=== Analysis Result ===")
    print("")
    print(outcome.response)


def _run_symfony(parser: argparse.ArgumentParser, project_name: str) -> None:
    scaffolder = SymfonyScaffolder()
    print(f"Creating Symfony API project: {project_name}")
    print("This may take a few minutes...")
    try:
        result = scaffolder.create(project_name)
    except FileExistsError as exc:
        parser.exit(1, f"Error: {exc}\n")
    except ScaffoldError as exc:
        parser.exit(
            1,
            f"Error during project creation: {exc}\n"
            "The project may be partially created. Check the directory and complete setup manually.\n",
        )

    print("")
    print("Symfony API project created successfully!")
    print(f"Project location: {_relativize(result.path)}")
    print("")
    print("Start now:")
    print(f"   cd {project_name}")
    print("   symfony server:start")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
