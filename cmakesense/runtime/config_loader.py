"""Helpers for loading engine configuration from TOML/JSON sources.

This module provides a single entry point `load_engine_config`
that accepts various configuration sources:

* None -> default EngineConfig
* dict -> EngineConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
import re
import tomllib

from cmakesense.config.schema import EngineConfig

logger = logging.getLogger("cmakesense.runtime.config_loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]

_TOML_TABLE_RE = re.compile(r"\[\[?[\w.\-\"' ]+\]\]?\s*($|#)", re.MULTILINE)


def _looks_like_path(text: str) -> bool:
    if "\n" in text or len(text) > 4096:
        return False
    return Path(text).exists()


def _guess_format(text: str) -> str:
    stripped = text.lstrip()
    if stripped.startswith("{"):
        return "json"
    # "[engine]" opens a TOML table, "[1, 2]" is a JSON array.
    if stripped.startswith("[") and not _TOML_TABLE_RE.match(stripped):
        return "json"
    return "toml"


def load_engine_config(source: ConfigSource) -> EngineConfig:
    """Load EngineConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns EngineConfig.default()
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        EngineConfig instance.

    Raises:
        ValueError: If the document is not a mapping.
        TypeError: If the source type is unsupported.
        ValidationError: If the configuration values are invalid.
    """
    if source is None:
        logger.debug("No config source provided; using default EngineConfig")
        return EngineConfig.default()

    if isinstance(source, dict):
        logger.debug("Loading EngineConfig from provided dict")
        return EngineConfig.from_dict(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        text: Optional[str] = None
        fmt: Optional[str] = None

        if isinstance(source, Path) or _looks_like_path(source):
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = _guess_format(text)
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = _guess_format(text)
            logger.info("Loading configuration from inline %s string", fmt)

        if fmt == "json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)

        if not isinstance(data, dict):
            raise ValueError("Top-level configuration must be a mapping/dict")

        # Allow the settings to live under an [engine] table.
        if isinstance(data.get("engine"), dict):
            data = data["engine"]

        return EngineConfig.from_dict(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


__all__ = ["load_engine_config"]
