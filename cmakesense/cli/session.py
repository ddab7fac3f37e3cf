"""Shared helpers of the CLI commands: configuration and buffer loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from cmakesense.completion.service import BufferSession
from cmakesense.config.schema import EngineConfig
from cmakesense.runtime.config_loader import load_engine_config

logger = logging.getLogger("cmakesense.cli.session")

EXIT_OK = 0
EXIT_NO_RESULT = 1
EXIT_UNREADABLE = 2


def load_config(args) -> EngineConfig:
    """Build the engine configuration from ``--config`` and ``--modules-dir``."""
    config = load_engine_config(getattr(args, "config", None))
    modules_dir = getattr(args, "modules_dir", None)
    if modules_dir:
        config = config.model_copy(update={"modules_dir": Path(modules_dir).expanduser()})
    return config


def open_session(args, config: EngineConfig) -> BufferSession:
    """Read the file named on the command line into a session.

    Raises:
        OSError: If the file cannot be read.
    """
    path = Path(args.file).expanduser()
    text = path.read_text(encoding="utf-8", errors="ignore")
    logger.debug("Loaded %s (%d characters)", path, len(text))
    return BufferSession(path, text=text, config=config)


def caret_from_args(args) -> Tuple[int, int]:
    """Convert the 1-based LINE/COLUMN arguments into a 0-based caret.

    COLUMN is the column of the character right after the caret, so
    ``add_executable(|`` is column 16.

    Raises:
        ValueError: If LINE or COLUMN is smaller than 1.
    """
    if args.line < 1 or args.column < 1:
        raise ValueError("LINE and COLUMN are 1-based")
    return args.line - 1, args.column - 1
