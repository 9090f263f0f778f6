import argparse
import sys
from collections.abc import Sequence

from condex.canonical import canonical_form
from condex.config import FORMATS, LOG_LEVELS, Settings, configure_logging
from condex.errors import IllegalModelError
from condex.extractor import extract_conditions
from condex.formula import to_text
from condex.grammar import parse_predicate
from condex.load import load_machine
from condex.report import print_conditions, render_markdown
from condex.result import Err, Ok
from condex.serialization import dumps_conditions
from condex.splitter import split


def handle_extract(path: str, *, output_format: str) -> int:
    """Load a machine, extract its conditions and print them."""
    match load_machine(path):
        case Err(e):
            print(f"Error loading machine: {e}", file=sys.stderr)
            return 1
        case Ok(machine):
            pass

    try:
        conditions = extract_conditions(machine)
    except IllegalModelError as e:
        print(str(e), file=sys.stderr)
        return 1

    match output_format:
        case "markdown":
            sys.stdout.write(render_markdown(conditions))
        case "json":
            print(dumps_conditions(conditions))
        case _:
            print_conditions(conditions, sys.stdout)
    return 0


def split_formula(source: str) -> int:
    """Print the conditions of one predicate with their canonical forms."""
    match parse_predicate(source):
        case Err(e):
            print(str(e), file=sys.stderr)
            return 1
        case Ok(predicate):
            pass

    for index, condition in enumerate(split(predicate), start=1):
        print(f"{index}. {to_text(condition)}    [{canonical_form(condition)}]")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="condex",
        description="Extract the elementary conditions of Event-B machine guards",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: extract
    extract_parser = subparsers.add_parser(
        "extract",
        help="Load a .json or Rodin .bcm machine and print the conditions of every event.",
    )
    extract_parser.add_argument("file", metavar="FILE", help="Machine file (.json or .bcm).")
    extract_parser.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: CONDEX_FORMAT, else text).",
    )
    extract_parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Logging level (default: CONDEX_LOG_LEVEL, else WARNING).",
    )

    # Command: split
    split_parser = subparsers.add_parser(
        "split",
        help="Split one predicate and show each condition with its canonical form.",
    )
    split_parser.add_argument("predicate", metavar="PREDICATE", help="Predicate source text.")

    args = parser.parse_args(argv)

    match Settings.from_env():
        case Ok(settings):
            pass
        case Err(e):
            print(f"Invalid settings: {e}", file=sys.stderr)
            return 1

    try:
        match args.command:
            case "extract":
                configure_logging(args.log_level or settings.log_level)
                return handle_extract(args.file, output_format=args.format or settings.output_format)
            case "split":
                configure_logging(settings.log_level)
                return split_formula(args.predicate)
            case None:
                parser.print_help()
                return 1
            case _:
                print(f"Unknown command: {args.command}", file=sys.stderr)
                parser.print_help()
                return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
