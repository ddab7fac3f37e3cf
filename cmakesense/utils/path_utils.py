"""Path helpers: CMake modules directory discovery and file classification."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional, Union

logger = logging.getLogger("cmakesense.utils.path_utils")

CMAKELISTS_NAME = "CMakeLists.txt"


def find_cmake_modules_dir(cmake_executable: Optional[str] = None) -> Optional[Path]:
    """
    Locate the Modules directory of the CMake installation on PATH.

    CMake installs its modules under ``<prefix>/share/cmake-X.Y/Modules``
    with the executable in ``<prefix>/bin``. Older or relocated layouts use
    ``<prefix>/share/cmake/Modules``.

    Args:
        cmake_executable: Explicit path of the cmake executable. Looked up
            on PATH when omitted.

    Returns:
        Path of the Modules directory, or None if it cannot be found
    """
    exe = cmake_executable or shutil.which("cmake")
    if not exe:
        logger.debug("cmake executable not found on PATH")
        return None

    prefix = Path(exe).resolve().parent.parent
    share = prefix / "share"
    if not share.is_dir():
        logger.debug("No share directory under %s", prefix)
        return None

    candidates = sorted(share.glob("cmake*/Modules"), reverse=True)
    for candidate in candidates:
        if candidate.is_dir():
            logger.debug("Using CMake modules directory %s", candidate)
            return candidate
    logger.debug("No CMake modules directory under %s", share)
    return None


def is_cmake_file(path: Union[Path, str]) -> bool:
    """Check whether ``path`` names a CMake script (CMakeLists.txt or *.cmake)."""
    path = Path(path)
    if path.suffix.lower() == ".cmake":
        return True
    return path.name.lower() == CMAKELISTS_NAME.lower()


def is_source_file(name: str, extensions: Iterable[str]) -> bool:
    """
    Check whether a file name has one of the given extensions.

    An empty extension list accepts every file except CMake scripts.
    """
    if is_cmake_file(name):
        return False
    extensions = list(extensions)
    if not extensions:
        return True
    return Path(name).suffix.lower() in extensions


def has_cmakelists(directory: Union[Path, str]) -> bool:
    """Check whether ``directory`` contains a CMakeLists.txt."""
    return (Path(directory) / CMAKELISTS_NAME).is_file()
