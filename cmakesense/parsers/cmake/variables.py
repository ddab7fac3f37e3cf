"""Standard CMake variables and directory-variable expansion.

Provides the catalogs used to filter user-defined variables out of the
standard ones, the variable lists offered after ``${`` and ``$ENV{``, and a
small resolver that expands the directory variables commonly used inside
``include()`` paths.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from cmakesense.parsers.cmake.tokens import CMAKE_VAR_PATTERN

logger = logging.getLogger("cmakesense.parsers.cmake.variables")

STANDARD_VARIABLES: Tuple[str, ...] = (
    "APPLE",
    "BORLAND",
    "BUILD_SHARED_LIBS",
    "CMAKE_AR",
    "CMAKE_ARCHIVE_OUTPUT_DIRECTORY",
    "CMAKE_ARGC",
    "CMAKE_ARGV0",
    "CMAKE_AUTOMOC",
    "CMAKE_AUTOMOC_MOC_OPTIONS",
    "CMAKE_AUTOMOC_RELAXED_MODE",
    "CMAKE_BACKWARDS_COMPATIBILITY",
    "CMAKE_BINARY_DIR",
    "CMAKE_BUILD_TOOL",
    "CMAKE_BUILD_TYPE",
    "CMAKE_BUILD_WITH_INSTALL_RPATH",
    "CMAKE_CACHEFILE_DIR",
    "CMAKE_CACHE_MAJOR_VERSION",
    "CMAKE_CACHE_MINOR_VERSION",
    "CMAKE_CACHE_PATCH_VERSION",
    "CMAKE_CFG_INTDIR",
    "CMAKE_CL_64",
    "CMAKE_COLOR_MAKEFILE",
    "CMAKE_COMMAND",
    "CMAKE_COMPILER_2005",
    "CMAKE_CONFIGURATION_TYPES",
    "CMAKE_CROSSCOMPILING",
    "CMAKE_CTEST_COMMAND",
    "CMAKE_CURRENT_BINARY_DIR",
    "CMAKE_CURRENT_LIST_DIR",
    "CMAKE_CURRENT_LIST_FILE",
    "CMAKE_CURRENT_LIST_LINE",
    "CMAKE_CURRENT_SOURCE_DIR",
    "CMAKE_DEBUG_POSTFIX",
    "CMAKE_DL_LIBS",
    "CMAKE_EDIT_COMMAND",
    "CMAKE_EXECUTABLE_SUFFIX",
    "CMAKE_EXE_LINKER_FLAGS",
    "CMAKE_EXTRA_GENERATOR",
    "CMAKE_EXTRA_SHARED_LIBRARY_SUFFIXES",
    "CMAKE_FIND_LIBRARY_PREFIXES",
    "CMAKE_FIND_LIBRARY_SUFFIXES",
    "CMAKE_FIND_PACKAGE_WARN_NO_MODULE",
    "CMAKE_GENERATOR",
    "CMAKE_HOME_DIRECTORY",
    "CMAKE_HOST_APPLE",
    "CMAKE_HOST_SYSTEM",
    "CMAKE_HOST_SYSTEM_NAME",
    "CMAKE_HOST_SYSTEM_PROCESSOR",
    "CMAKE_HOST_SYSTEM_VERSION",
    "CMAKE_HOST_UNIX",
    "CMAKE_HOST_WIN32",
    "CMAKE_IGNORE_PATH",
    "CMAKE_IMPORT_LIBRARY_PREFIX",
    "CMAKE_IMPORT_LIBRARY_SUFFIX",
    "CMAKE_INCLUDE_CURRENT_DIR",
    "CMAKE_INCLUDE_PATH",
    "CMAKE_INSTALL_DEFAULT_COMPONENT_NAME",
    "CMAKE_INSTALL_NAME_DIR",
    "CMAKE_INSTALL_PREFIX",
    "CMAKE_INSTALL_RPATH",
    "CMAKE_INSTALL_RPATH_USE_LINK_PATH",
    "CMAKE_INTERNAL_PLATFORM_ABI",
    "CMAKE_LIBRARY_ARCHITECTURE",
    "CMAKE_LIBRARY_ARCHITECTURE_REGEX",
    "CMAKE_LIBRARY_OUTPUT_DIRECTORY",
    "CMAKE_LIBRARY_PATH",
    "CMAKE_LIBRARY_PATH_FLAG",
    "CMAKE_LINK_DEF_FILE_FLAG",
    "CMAKE_LINK_INTERFACE_LIBRARIES",
    "CMAKE_LINK_LIBRARY_FILE_FLAG",
    "CMAKE_LINK_LIBRARY_FLAG",
    "CMAKE_LINK_LIBRARY_SUFFIX",
    "CMAKE_MACOSX_BUNDLE",
    "CMAKE_MAJOR_VERSION",
    "CMAKE_MAKE_PROGRAM",
    "CMAKE_MFC_FLAG",
    "CMAKE_MINOR_VERSION",
    "CMAKE_MODULE_PATH",
    "CMAKE_NOT_USING_CONFIG_FLAGS",
    "CMAKE_NO_BUILTIN_CHRPATH",
    "CMAKE_OBJECT_PATH_MAX",
    "CMAKE_PARENT_LIST_FILE",
    "CMAKE_PATCH_VERSION",
    "CMAKE_PDB_OUTPUT_DIRECTORY",
    "CMAKE_POSITION_INDEPENDENT_CODE",
    "CMAKE_PREFIX_PATH",
    "CMAKE_PROGRAM_PATH",
    "CMAKE_PROJECT_NAME",
    "CMAKE_RANLIB",
    "CMAKE_ROOT",
    "CMAKE_RUNTIME_OUTPUT_DIRECTORY",
    "CMAKE_SCRIPT_MODE_FILE",
    "CMAKE_SHARED_LIBRARY_PREFIX",
    "CMAKE_SHARED_LIBRARY_SUFFIX",
    "CMAKE_SHARED_MODULE_PREFIX",
    "CMAKE_SHARED_MODULE_SUFFIX",
    "CMAKE_SIZEOF_VOID_P",
    "CMAKE_SKIP_BUILD_RPATH",
    "CMAKE_SKIP_INSTALL_ALL_DEPENDENCY",
    "CMAKE_SKIP_RPATH",
    "CMAKE_SOURCE_DIR",
    "CMAKE_STANDARD_LIBRARIES",
    "CMAKE_STATIC_LIBRARY_PREFIX",
    "CMAKE_STATIC_LIBRARY_SUFFIX",
    "CMAKE_SYSTEM",
    "CMAKE_SYSTEM_IGNORE_PATH",
    "CMAKE_SYSTEM_INCLUDE_PATH",
    "CMAKE_SYSTEM_LIBRARY_PATH",
    "CMAKE_SYSTEM_NAME",
    "CMAKE_SYSTEM_PREFIX_PATH",
    "CMAKE_SYSTEM_PROCESSOR",
    "CMAKE_SYSTEM_PROGRAM_PATH",
    "CMAKE_SYSTEM_VERSION",
    "CMAKE_TRY_COMPILE_CONFIGURATION",
    "CMAKE_TWEAK_VERSION",
    "CMAKE_USER_MAKE_RULES_OVERRIDE",
    "CMAKE_USE_RELATIVE_PATHS",
    "CMAKE_USING_VC_FREE_TOOLS",
    "CMAKE_VERBOSE_MAKEFILE",
    "CMAKE_VERSION",
    "CMAKE_VS_PLATFORM_TOOLSET",
    "CMAKE_WIN32_EXECUTABLE",
    "CYGWIN",
    "EXECUTABLE_OUTPUT_PATH",
    "LIBRARY_OUTPUT_PATH",
    "MSVC",
    "MSVC10",
    "MSVC11",
    "MSVC60",
    "MSVC70",
    "MSVC71",
    "MSVC80",
    "MSVC90",
    "MSVC_IDE",
    "MSVC_VERSION",
    "PROJECT_BINARY_DIR",
    "PROJECT_NAME",
    "PROJECT_SOURCE_DIR",
    "UNIX",
    "WIN32",
    "XCODE_VERSION",
)

# Per-language templates; "{0}" is replaced by a language name such as CXX.
STANDARD_LANGUAGE_VARIABLES: Tuple[str, ...] = (
    "CMAKE_{0}_ARCHIVE_APPEND",
    "CMAKE_{0}_ARCHIVE_CREATE",
    "CMAKE_{0}_ARCHIVE_FINISH",
    "CMAKE_{0}_COMPILER",
    "CMAKE_{0}_COMPILER_ABI",
    "CMAKE_{0}_COMPILER_ID",
    "CMAKE_{0}_COMPILER_LOADED",
    "CMAKE_{0}_COMPILER_VERSION",
    "CMAKE_{0}_COMPILE_OBJECT",
    "CMAKE_{0}_CREATE_SHARED_LIBRARY",
    "CMAKE_{0}_CREATE_SHARED_MODULE",
    "CMAKE_{0}_CREATE_STATIC_LIBRARY",
    "CMAKE_{0}_FLAGS",
    "CMAKE_{0}_FLAGS_DEBUG",
    "CMAKE_{0}_FLAGS_MINSIZEREL",
    "CMAKE_{0}_FLAGS_RELEASE",
    "CMAKE_{0}_FLAGS_RELWITHDEBINFO",
    "CMAKE_{0}_IGNORE_EXTENSIONS",
    "CMAKE_{0}_IMPLICIT_INCLUDE_DIRECTORIES",
    "CMAKE_{0}_IMPLICIT_LINK_DIRECTORIES",
    "CMAKE_{0}_IMPLICIT_LINK_LIBRARIES",
    "CMAKE_{0}_LIBRARY_ARCHITECTURE",
    "CMAKE_{0}_LINKER_PREFERENCE",
    "CMAKE_{0}_LINKER_PREFERENCE_PROPAGATES",
    "CMAKE_{0}_LINK_EXECUTABLE",
    "CMAKE_{0}_OUTPUT_EXTENSION",
    "CMAKE_{0}_PLATFORM_ID",
    "CMAKE_{0}_SIZEOF_DATA_PTR",
    "CMAKE_{0}_SOURCE_FILE_EXTENSIONS",
    "CMAKE_USER_MAKE_RULES_OVERRIDE_{0}",
)

# Common environment variables of Windows and POSIX hosts.
STANDARD_ENV_VARIABLES: Tuple[str, ...] = (
    "ALLUSERSPROFILE",
    "APPDATA",
    "COMMONPROGRAMFILES",
    "COMPUTERNAME",
    "COMSPEC",
    "HOME",
    "HOMEDRIVE",
    "HOMEPATH",
    "LANG",
    "LOCALAPPDATA",
    "LOGONSERVER",
    "PATH",
    "PATHEXT",
    "PROGRAMDATA",
    "PROGRAMFILES",
    "PROMPT",
    "PSMODULEPATH",
    "PUBLIC",
    "SHELL",
    "SYSTEMDRIVE",
    "SYSTEMROOT",
    "TEMP",
    "TMP",
    "TMPDIR",
    "USER",
    "USERDATA",
    "USERDOMAIN",
    "USERNAME",
    "USERPROFILE",
    "WINDIR",
)

_STANDARD_SET: FrozenSet[str] = frozenset(STANDARD_VARIABLES)
_STANDARD_ENV_SET: FrozenSet[str] = frozenset(STANDARD_ENV_VARIABLES)


def is_standard_variable(name: str, use_env: bool = False) -> bool:
    """Check whether ``name`` is a standard CMake (or environment) variable.

    The comparison ignores letter case.
    """
    if not name:
        return False
    catalog = _STANDARD_ENV_SET if use_env else _STANDARD_SET
    return name.upper() in catalog


def get_language_variables(languages: Iterable[str]) -> List[str]:
    """Expand the per-language templates for each language."""
    result: List[str] = []
    for language in languages:
        result.extend(template.format(language) for template in STANDARD_LANGUAGE_VARIABLES)
    return result


def get_standard_variables(
    languages: Optional[Iterable[str]] = None, use_env: bool = False
) -> List[str]:
    """Return the standard variables offered for completion.

    Args:
        languages: Languages whose CMAKE_<LANG>_* variables are included.
            Ignored for environment variables.
        use_env: Return environment variables instead of CMake variables.

    Returns:
        Unsorted list of variable names.
    """
    if use_env:
        return list(STANDARD_ENV_VARIABLES)
    variables = list(STANDARD_VARIABLES)
    if languages:
        variables.extend(get_language_variables(languages))
    return variables


def directory_variables(cmake_dir: Path) -> Dict[str, str]:
    """Variables that name the directory of the list file being processed."""
    cmake_dir_str = str(cmake_dir)
    return {
        "CMAKE_CURRENT_LIST_DIR": cmake_dir_str,
        "CMAKE_CURRENT_SOURCE_DIR": cmake_dir_str,
        "CMAKE_SOURCE_DIR": cmake_dir_str,
        "PROJECT_SOURCE_DIR": cmake_dir_str,
    }


def expand_directory_variables(expr: str, cmake_dir: Path) -> str:
    """Expand ``${VAR}`` references to directory variables in ``expr``.

    Unknown variables fall back to the process environment and are left
    untouched when neither knows them.

    Args:
        expr: Argument text such as ``${CMAKE_CURRENT_LIST_DIR}/util.cmake``.
        cmake_dir: Directory of the list file containing the argument.

    Returns:
        The expanded text.
    """
    known = directory_variables(cmake_dir)
    result = expr
    for match in CMAKE_VAR_PATTERN.finditer(expr):
        var_full = match.group(0)
        var_name = match.group(1)
        replacement = known.get(var_name)
        if replacement is None:
            replacement = os.environ.get(var_name)
        if replacement is None:
            logger.debug("Cannot expand %s in %s", var_full, expr)
            continue
        result = result.replace(var_full, replacement)
    return result


__all__ = [
    "STANDARD_ENV_VARIABLES",
    "STANDARD_LANGUAGE_VARIABLES",
    "STANDARD_VARIABLES",
    "directory_variables",
    "expand_directory_variables",
    "get_language_variables",
    "get_standard_variables",
    "is_standard_variable",
]
