"""
Thing Command-Line Interface.

Provides debugging commands for the Thing parser.

Usage:
    thing tokens input.thing        # One token per line
    thing tree input.thing          # Indented parse tree
    thing tree --json input.thing   # Parse tree as JSON
    thing check input.thing         # Report syntax errors
    thing check -e "1 + (2"         # Parse source given on the command line
    cat input.thing | thing check - # Read from standard input
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from thing import __version__
from thing.compiler import parse_source
from thing.compiler.lexer import Lexer
from thing.config import LOG_LEVELS, ThingConfig, load_config
from thing.utils.errors import SourceReadError, ThingError

logger = logging.getLogger(__name__)


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    _CODES = {
        "RED": "\033[91m",
        "GREEN": "\033[92m",
        "BOLD": "\033[1m",
        "RESET": "\033[0m",
    }

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        for name in cls._CODES:
            setattr(cls, name, "")

    @classmethod
    def enable(cls) -> None:
        for name, code in cls._CODES.items():
            setattr(cls, name, code)


def _init_colors(color: Optional[bool]) -> bool:
    """Set up colors from the configured preference and the terminal."""
    if color is None:
        color = sys.stdout.isatty() and not os.environ.get("NO_COLOR")
    if color:
        Colors.enable()
    else:
        Colors.disable()
    return color


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Input file, or '-' for standard input",
    )
    parser.add_argument(
        "-e",
        "--expr",
        dest="source",
        default=None,
        metavar="SOURCE",
        help="Parse SOURCE instead of reading a file",
    )
    parser.add_argument(
        "--expression",
        action="store_true",
        help="Parse the input as a single expression instead of a statement sequence",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="thing",
        description="Thing - a Pratt parser for a small C-like expression language",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: thing.toml or [tool.thing] in pyproject.toml)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tokens command
    tokens_parser = subparsers.add_parser(
        "tokens",
        help="Print the token stream (debug)",
    )
    _add_input_arguments(tokens_parser)

    # Tree command
    tree_parser = subparsers.add_parser(
        "tree",
        help="Print the parse tree (debug)",
    )
    _add_input_arguments(tree_parser)
    tree_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the tree as JSON",
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check for syntax errors",
    )
    _add_input_arguments(check_parser)
    check_parser.add_argument(
        "--max-errors",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="Report at most N errors (0 means no limit)",
    )

    return parser


def _read_input(args: argparse.Namespace) -> tuple[str, str]:
    """Return ``(source, filename)`` for the command's input."""
    if args.source is not None:
        return args.source, "<expr>"
    if args.input is None:
        raise SourceReadError("no input: give a file, '-' or -e SOURCE")
    if args.input == "-":
        return sys.stdin.read(), "<stdin>"

    path = Path(args.input)
    try:
        return path.read_text(encoding="utf-8"), str(path)
    except FileNotFoundError as e:
        raise SourceReadError(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"cannot read {path}: {e}") from e


def cmd_tokens(args: argparse.Namespace, config: ThingConfig) -> int:
    """Handle the tokens command (debug)."""
    source, filename = _read_input(args)
    for token in Lexer(source, filename):
        print(token)
    return 0


def cmd_tree(args: argparse.Namespace, config: ThingConfig) -> int:
    """Handle the tree command (debug)."""
    source, filename = _read_input(args)
    result = parse_source(source, filename, program=config.program)

    if args.json:
        try:
            text = json.dumps(result.tree.to_dict(), indent=2)
        except RecursionError as e:
            raise ThingError(
                "parse tree is too deep for JSON output; use `thing tree` without --json"
            ) from e
        print(text)
    else:
        print(result.tree.dump())
    return 0


def cmd_check(args: argparse.Namespace, config: ThingConfig) -> int:
    """Handle the check command."""
    source, filename = _read_input(args)
    result = parse_source(
        source, filename, program=config.program, max_errors=config.max_errors
    )

    if result.ok:
        print(f"{Colors.GREEN}OK:{Colors.RESET} {filename} (no syntax errors)")
        return 0

    use_color = bool(Colors.RESET)
    for diagnostic in result.diagnostics:
        print(diagnostic.render(use_color=use_color), file=sys.stderr)
        print(file=sys.stderr)

    count = len(result.diagnostics)
    plural = "s" if count != 1 else ""
    print(
        f"{Colors.RED}{Colors.BOLD}error{Colors.RESET}: "
        f"{filename}: {count} syntax error{plural}",
        file=sys.stderr,
    )
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except ThingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = config.merged(
        color=False if args.no_color else None,
        max_errors=getattr(args, "max_errors", None),
        program=False if args.expression else None,
        log_level=args.log_level,
    )

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    _init_colors(config.color)

    command_handlers = {
        "tokens": cmd_tokens,
        "tree": cmd_tree,
        "check": cmd_check,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, config)
    except ThingError as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
