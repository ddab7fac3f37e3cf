"""CLI command printing the completion candidates at a caret position."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from cmakesense.cli.session import (
    EXIT_NO_RESULT,
    EXIT_OK,
    EXIT_UNREADABLE,
    caret_from_args,
    load_config,
    open_session,
)
from cmakesense.completion.service import ParseReason, ParseRequest

logger = logging.getLogger("cmakesense.cli.complete")


def complete_command(args) -> int:
    """Execute the complete command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 when candidates were found).
    """
    try:
        config = load_config(args)
        line, column = caret_from_args(args)
    except (ValidationError, ValueError, TypeError) as exc:
        logger.error("Invalid arguments: %s", exc)
        return EXIT_NO_RESULT

    try:
        session = open_session(args, config)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return EXIT_UNREADABLE

    request = ParseRequest(session.file_path, line, column, ParseReason.MEMBER_SELECT)
    result = session.parse_source(request)
    if result is None or len(result) == 0:
        logger.info("No completion applies at %s:%d:%d", args.file, args.line, args.column)
        return EXIT_NO_RESULT

    if getattr(args, "json", False):
        print(json.dumps(result.to_list(), indent=2))
        return EXIT_OK

    table = Table(title=f"{args.file}:{args.line}:{args.column}")
    table.add_column("Candidate")
    table.add_column("Kind", style="dim")
    for item in result:
        table.add_row(item.text, item.kind.value)
    Console().print(table)
    return EXIT_OK
