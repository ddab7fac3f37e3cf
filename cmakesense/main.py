"""Main CLI entry point for cmakesense.

Provides commands: complete, signature, symbols
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from cmakesense.cli.complete import complete_command
from cmakesense.cli.signature import signature_command
from cmakesense.cli.symbols import symbols_command

logger = logging.getLogger("cmakesense.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def _add_caret_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="CMake file (CMakeLists.txt or *.cmake)")
    parser.add_argument("line", type=int, help="1-based line of the caret")
    parser.add_argument(
        "column",
        type=int,
        help="1-based column of the character right after the caret",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of rich output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmakesense",
        description="cmakesense - completion and call tips for CMake scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional engine configuration. Can be a path to a TOML/JSON "
            "file (e.g. cmakesense.toml) or an inline TOML/JSON string. "
            "When omitted, built-in defaults are used."
        ),
    )
    parser.add_argument(
        "--modules-dir",
        help=(
            "CMake modules directory used to resolve include()/find_package() "
            "and to list packages. Overrides the configuration and discovery "
            "from the cmake executable."
        ),
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    complete_parser = subparsers.add_parser(
        "complete",
        help="List completion candidates at a caret position",
    )
    _add_caret_arguments(complete_parser)

    signature_parser = subparsers.add_parser(
        "signature",
        help="Show the call tip of the command around a caret position",
    )
    _add_caret_arguments(signature_parser)

    symbols_parser = subparsers.add_parser(
        "symbols",
        help="Summarize the symbols of a file and the files it includes",
    )
    symbols_parser.add_argument("file", help="CMake file (CMakeLists.txt or *.cmake)")
    symbols_parser.add_argument("--json", action="store_true", help="Print JSON instead of rich output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == "complete":
        return complete_command(args)
    elif args.command == "signature":
        return signature_command(args)
    elif args.command == "symbols":
        return symbols_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
