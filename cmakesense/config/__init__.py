"""Configuration schema and validation for cmakesense."""

from .schema import (
    DEFAULT_LANGUAGES,
    DEFAULT_SOURCE_EXTENSIONS,
    EngineConfig,
    SubdirectorySetting,
)

__all__ = [
    "DEFAULT_LANGUAGES",
    "DEFAULT_SOURCE_EXTENSIONS",
    "EngineConfig",
    "SubdirectorySetting",
]
