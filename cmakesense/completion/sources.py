"""File-system backed candidate providers.

Each provider lists names relative to the directory of the file being
edited (and, where it applies, the CMake modules directory). Listing
failures yield no names.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional

from cmakesense.utils.path_utils import has_cmakelists, is_source_file

logger = logging.getLogger("cmakesense.completion.sources")

GENERATED_INCLUDE_FILES = frozenset({"cmake_install.cmake"})

_FIND_MODULE_RE = re.compile(r"Find(.+)\.cmake\Z")
_LANGUAGE_MODULE_RE = re.compile(r"CMakeDetermine(\w+?)Compiler\.cmake\Z")


def _list_dir(directory: Optional[Path]) -> List[os.DirEntry]:
    if directory is None:
        return []
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as exc:
        logger.debug("Cannot list %s: %s", directory, exc)
        return []


def _file_names(directory: Optional[Path]) -> List[str]:
    names = []
    for entry in _list_dir(directory):
        try:
            if entry.is_file():
                names.append(entry.name)
        except OSError:
            continue
    return names


def source_directory(file_path: Path | str) -> Path:
    return Path(file_path).parent


def list_include_files(file_path: Path | str, modules_dir: Optional[Path] = None) -> List[str]:
    """List candidates for ``include(``.

    Returns the ``*.cmake`` files next to ``file_path`` (except files CMake
    generates during configuration) and, when ``modules_dir`` is given, the
    names of its modules that are not package finders.
    """
    names = [
        name
        for name in _file_names(source_directory(file_path))
        if name.endswith(".cmake") and name not in GENERATED_INCLUDE_FILES
    ]
    for name in _file_names(modules_dir):
        if name.endswith(".cmake") and not _FIND_MODULE_RE.match(name):
            names.append(name[: -len(".cmake")])
    return names


def list_packages(file_path: Path | str, modules_dir: Optional[Path] = None) -> List[str]:
    """List candidates for ``find_package(`` from ``Find<Name>.cmake`` modules."""
    packages = []
    for directory in (source_directory(file_path), modules_dir):
        for name in _file_names(directory):
            match = _FIND_MODULE_RE.match(name)
            if match:
                packages.append(match.group(1))
    return packages


def list_subdirectories(file_path: Path | str, require_cmakelists: bool = False) -> List[str]:
    """List candidates for ``add_subdirectory(``.

    Args:
        file_path: File being edited.
        require_cmakelists: Only list directories containing a CMakeLists.txt.
    """
    names = []
    for entry in _list_dir(source_directory(file_path)):
        if entry.name.startswith("."):
            continue
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        if require_cmakelists and not has_cmakelists(entry.path):
            continue
        names.append(entry.name)
    return names


def list_source_files(file_path: Path | str, extensions: Iterable[str] = ()) -> List[str]:
    """List the source files next to ``file_path``."""
    extensions = list(extensions)
    return [
        name
        for name in _file_names(source_directory(file_path))
        if is_source_file(name, extensions)
    ]


def list_languages(modules_dir: Optional[Path], fallback: Iterable[str] = ()) -> List[str]:
    """List language names.

    Languages come from the ``CMakeDetermine<LANG>Compiler.cmake`` modules
    when the modules directory is known, otherwise from ``fallback``.
    """
    languages = []
    for name in _file_names(modules_dir):
        match = _LANGUAGE_MODULE_RE.match(name)
        if match:
            languages.append(match.group(1))
    if not languages:
        languages = list(fallback)
    return languages


__all__ = [
    "GENERATED_INCLUDE_FILES",
    "list_include_files",
    "list_languages",
    "list_packages",
    "list_source_files",
    "list_subdirectories",
    "source_directory",
]
