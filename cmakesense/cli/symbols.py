"""CLI command summarizing the symbols visible from a CMake file.

Lists the declarations of the file itself and of every file reached through
its include() and find_package() references, and reports include cycles.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from cmakesense.cli.session import EXIT_NO_RESULT, EXIT_OK, EXIT_UNREADABLE, load_config, open_session
from cmakesense.completion.service import BufferSession
from cmakesense.parsers.cmake.parsing import (
    parse_for_cache_variables,
    parse_for_functions,
    parse_for_includes,
    parse_for_macros,
    parse_for_target_names,
    parse_for_variables,
)

logger = logging.getLogger("cmakesense.cli.symbols")


def collect_symbols(session: BufferSession) -> Dict[str, Any]:
    """Gather the symbols of a buffer and its include cache."""
    text = session.text
    cache = session.refresh_includes()
    return {
        "file": str(session.file_path),
        "variables": parse_for_variables(text),
        "cache_variables": parse_for_cache_variables(text),
        "functions": parse_for_functions(text),
        "macros": parse_for_macros(text),
        "targets": parse_for_target_names(session.lines),
        "tests": parse_for_target_names(session.lines, tests=True),
        "includes": [
            {"command": ref.command, "name": ref.name}
            for ref in parse_for_includes(session.lines)
        ],
        "included_files": [
            {
                "path": str(entry.path),
                "variables": list(entry.variables),
                "env_variables": list(entry.env_variables),
                "cache_variables": list(entry.cache_variables),
                "functions": list(entry.functions),
                "macros": list(entry.macros),
            }
            for entry in cache.entries.values()
        ],
        "include_cycles": [[str(p) for p in cycle] for cycle in cache.include_cycles()],
    }


def _render(console: Console, summary: Dict[str, Any]) -> None:
    body = Text()
    for key in ("variables", "cache_variables", "functions", "macros", "targets", "tests"):
        values = summary[key]
        body.append(f"{key}: ", style="bold")
        body.append(", ".join(values) if values else "-")
        body.append("\n")
    console.print(Panel(body, title=summary["file"]))

    for entry in summary["included_files"]:
        body = Text()
        for key in ("variables", "cache_variables", "functions", "macros"):
            if entry[key]:
                body.append(f"{key}: ", style="bold")
                body.append(", ".join(entry[key]) + "\n")
        console.print(Panel(body or Text("no symbols", style="dim"), title=entry["path"]))

    for cycle in summary["include_cycles"]:
        console.print(Text("Include cycle: " + " -> ".join(cycle + cycle[:1]), style="yellow"))


def symbols_command(args) -> int:
    """Execute the symbols command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        config = load_config(args)
    except (ValidationError, ValueError, TypeError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_NO_RESULT

    try:
        session = open_session(args, config)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.file, exc)
        return EXIT_UNREADABLE

    summary = collect_symbols(session)
    if summary["include_cycles"]:
        logger.warning("Detected %d include cycle(s)", len(summary["include_cycles"]))

    if getattr(args, "json", False):
        print(json.dumps(summary, indent=2))
    else:
        _render(Console(), summary)
    return EXIT_OK
