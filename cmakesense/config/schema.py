"""Configuration schema definitions using Pydantic for validation.

The engine never reads global state; every setting a completion strategy
needs (which subdirectories to list, where the CMake modules live, which
files count as sources) travels in an :class:`EngineConfig`.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from cmakesense.utils.path_utils import find_cmake_modules_dir

DEFAULT_SOURCE_EXTENSIONS = [
    ".c",
    ".cc",
    ".cpp",
    ".cxx",
    ".c++",
    ".h",
    ".hh",
    ".hpp",
    ".hxx",
    ".inl",
    ".ipp",
    ".m",
    ".mm",
    ".f",
    ".f90",
    ".cu",
    ".asm",
    ".s",
    ".rc",
    ".def",
    ".qrc",
    ".ui",
    ".java",
    ".cs",
    ".swift",
]

DEFAULT_LANGUAGES = ["C", "CXX", "CSharp", "CUDA", "Fortran", "Java", "RC", "Swift", "ASM"]


class SubdirectorySetting(str, Enum):
    """Which subdirectories ``add_subdirectory()`` completion offers."""

    ALL = "all"
    CMAKELISTS_ONLY = "cmakelists_only"


class EngineConfig(BaseModel):
    """Settings of the completion engine.

    Attributes:
        modules_dir: Directory holding CMake's bundled modules (Find*.cmake
            and friends). Discovered from the cmake executable when unset.
        discover_modules: Whether to look for the modules directory when
            modules_dir is unset.
        subdirectories: Subdirectories listed after ``add_subdirectory(``.
        source_extensions: File extensions listed as source files (empty
            list = every file).
        languages: Languages offered after ``enable_language(`` and used
            for the CMAKE_<LANG>_* variables.
        follow_nested_includes: Whether include() inside included files is
            followed when rebuilding the include cache.
        max_include_depth: Maximum include nesting followed.
        max_file_size: Maximum size of an included file to read
            (bytes, 0 = unlimited).
    """

    modules_dir: Optional[Path] = None
    discover_modules: bool = True
    subdirectories: SubdirectorySetting = SubdirectorySetting.ALL
    source_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS)
    )
    languages: List[str] = Field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    follow_nested_includes: bool = True
    max_include_depth: int = Field(default=8, ge=1, le=64)
    max_file_size: int = Field(default=0, ge=0)

    model_config = {"extra": "allow"}

    @field_validator("source_extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        """Lowercase extensions and make sure each starts with a dot."""
        result = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                raise ValueError("source_extensions must not contain empty entries")
            if not ext.startswith("."):
                ext = "." + ext
            result.append(ext)
        return result

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        """Validate that languages are non-empty identifiers."""
        for language in v:
            if not language or not language.replace("_", "").isalnum():
                raise ValueError(f"Invalid language name: {language!r}")
        return v

    @property
    def require_cmakelists(self) -> bool:
        return self.subdirectories is SubdirectorySetting.CMAKELISTS_ONLY

    def resolve_modules_dir(self) -> Optional[Path]:
        """Return the CMake modules directory to search, if any.

        Returns:
            modules_dir when configured, otherwise the directory discovered
            next to the cmake executable (if discovery is enabled).
        """
        if self.modules_dir is not None:
            return self.modules_dir
        if self.discover_modules:
            return find_cmake_modules_dir()
        return None

    @classmethod
    def default(cls) -> "EngineConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            EngineConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Configuration as dictionary.
        """
        return self.model_dump()
