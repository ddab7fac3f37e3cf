"""Cross-file symbol cache for included CMake files."""

from .include_cache import IncludeCache, IncludeCacheEntry

__all__ = ["IncludeCache", "IncludeCacheEntry"]
