"""CLI command printing the call tip of the command around a caret."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from cmakesense.cli.session import (
    EXIT_NO_RESULT,
    EXIT_OK,
    EXIT_UNREADABLE,
    caret_from_args,
    load_config,
    open_session,
)
from cmakesense.completion.service import ParseReason, ParseRequest

logger = logging.getLogger("cmakesense.cli.signature")


def signature_command(args) -> int:
    """Execute the signature command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 when a signature is known).
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

    request = ParseRequest(session.file_path, line, column, ParseReason.PARAMETER_INFO)
    signature = session.parse_source(request)
    if signature is None:
        logger.info("No signature at %s:%d:%d", args.file, args.line, args.column)
        return EXIT_NO_RESULT

    if getattr(args, "json", False):
        print(json.dumps(signature.to_dict(), indent=2))
        return EXIT_OK

    # Highlight the parameter the caret is in.
    text = Text(signature.command_name + signature.open_bracket)
    active = min(signature.current_parameter, len(signature.parameters) - 1)
    for index, name in enumerate(signature.parameters):
        if index:
            text.append(signature.delimiter)
        text.append(name, style="bold cyan" if index == active else "")
    text.append(signature.close_bracket)
    Console().print(text)
    return EXIT_OK
