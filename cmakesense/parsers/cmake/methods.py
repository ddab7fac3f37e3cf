"""Parameter signatures of CMake commands and their subcommands.

Every table in this module is built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from cmakesense.parsers.cmake.keywords import CommandId, get_command_name


@dataclass(frozen=True)
class ParameterSlot:
    """One named parameter position of a command signature.

    Attributes:
        name: Base name of the parameter.
        optional: Whether the parameter may be omitted.
        variadic: Whether the parameter accepts one or more values.
    """

    name: str
    optional: bool = False
    variadic: bool = False

    @property
    def display(self) -> str:
        """Render the slot the way the CMake documentation writes it."""
        text = f"{self.name}1 {self.name}2 ..." if self.variadic else self.name
        return f"[{text}]" if self.optional else text


ParameterDescriptor = Tuple[ParameterSlot, ...]


def _p(name: str) -> ParameterSlot:
    return ParameterSlot(name)


def _opt(name: str) -> ParameterSlot:
    return ParameterSlot(name, optional=True)


def _many(name: str) -> ParameterSlot:
    return ParameterSlot(name, variadic=True)


def _opt_many(name: str) -> ParameterSlot:
    return ParameterSlot(name, optional=True, variadic=True)


_NO_PARAMS: ParameterDescriptor = ()
_EXPRESSION: ParameterDescriptor = (_p("expression"),)
_OPTIONAL_EXPRESSION: ParameterDescriptor = (_opt("expression"),)
_VARIABLE: ParameterDescriptor = (_p("variable"),)

_ADD_EXECUTABLE: ParameterDescriptor = (_p("name"), _many("source"))
_END_FUNCTION: ParameterDescriptor = (_opt("name"),)
_FIND_FILE: ParameterDescriptor = (_p("variable"), _p("name"), _opt_many("path"))
_FUNCTION: ParameterDescriptor = (_p("name"), _many("arg"))
_GET_CMAKE_PROPERTY: ParameterDescriptor = (_p("variable"), _p("property"))
_INCLUDE_DIRECTORIES: ParameterDescriptor = (_many("directory"),)
_TARGET_USAGE: ParameterDescriptor = (_p("target"), _many("item"))

_PARAMETERS: Mapping[CommandId, ParameterDescriptor] = MappingProxyType({
    CommandId.ADD_DEPENDENCIES: (_p("target_name"), _many("depend_target")),
    CommandId.ADD_EXECUTABLE: _ADD_EXECUTABLE,
    CommandId.ADD_LIBRARY: _ADD_EXECUTABLE,
    CommandId.ADD_SUBDIRECTORY: (_p("source_dir"), _opt("binary_dir")),
    CommandId.ADD_TEST: (_p("test_name"), _p("exe_name"), _many("arg")),
    CommandId.AUX_SOURCE_DIRECTORY: (_p("dir"), _p("variable")),
    CommandId.BREAK: _NO_PARAMS,
    CommandId.BUILD_COMMAND: _VARIABLE,
    CommandId.CONFIGURE_FILE: (_p("input"), _p("output")),
    CommandId.ELSE: _OPTIONAL_EXPRESSION,
    CommandId.ELSEIF: _EXPRESSION,
    CommandId.ENABLE_LANGUAGE: (_p("language_name"),),
    CommandId.ENABLE_TESTING: _NO_PARAMS,
    CommandId.ENDFOREACH: _OPTIONAL_EXPRESSION,
    CommandId.ENDFUNCTION: _END_FUNCTION,
    CommandId.ENDIF: _OPTIONAL_EXPRESSION,
    CommandId.ENDMACRO: _END_FUNCTION,
    CommandId.ENDWHILE: _OPTIONAL_EXPRESSION,
    CommandId.FIND_FILE: _FIND_FILE,
    CommandId.FIND_PATH: _FIND_FILE,
    CommandId.FIND_PROGRAM: _FIND_FILE,
    CommandId.FLTK_WRAP_UI: (_p("resulting_library_name"), _many("source")),
    CommandId.FOREACH: (_p("loop_variable"), _many("arg")),
    CommandId.FUNCTION: _FUNCTION,
    CommandId.GET_CMAKE_PROPERTY: _GET_CMAKE_PROPERTY,
    CommandId.GET_DIRECTORY_PROPERTY: _GET_CMAKE_PROPERTY,
    CommandId.GET_FILENAME_COMPONENT: (_p("variable"), _p("filename"), _p("component")),
    CommandId.GET_SOURCE_FILE_PROPERTY: (_p("variable"), _p("filename"), _p("property")),
    CommandId.GET_TARGET_PROPERTY: (_p("variable"), _p("target"), _p("property")),
    CommandId.GET_TEST_PROPERTY: (_p("test"), _p("property"), _p("variable")),
    CommandId.IF: _EXPRESSION,
    CommandId.INCLUDE_DIRECTORIES: _INCLUDE_DIRECTORIES,
    CommandId.INCLUDE_EXTERNAL_MSPROJECT: (
        _p("project_name"),
        _p("location"),
        _many("dependency"),
    ),
    CommandId.INCLUDE_REGULAR_EXPRESSION: (_p("regex_match"), _opt("regex_complain")),
    CommandId.LINK_DIRECTORIES: _INCLUDE_DIRECTORIES,
    CommandId.MACRO: _FUNCTION,
    CommandId.OPTION: (_p("variable"), _p("help_string"), _opt("initial_value")),
    CommandId.PROJECT: (_p("project_name"), _opt_many("language")),
    CommandId.RETURN: _NO_PARAMS,
    CommandId.SET: (_p("variable"), _p("value")),
    CommandId.SITE_NAME: _VARIABLE,
    CommandId.SOURCE_GROUP: (_p("name"),),
    CommandId.TARGET_COMPILE_DEFINITIONS: _TARGET_USAGE,
    CommandId.TARGET_COMPILE_OPTIONS: _TARGET_USAGE,
    CommandId.TARGET_INCLUDE_DIRECTORIES: _TARGET_USAGE,
    CommandId.TARGET_LINK_LIBRARIES: _TARGET_USAGE,
    CommandId.TARGET_SOURCES: _TARGET_USAGE,
    CommandId.UNSET: _VARIABLE,
    CommandId.VARIABLE_WATCH: (_p("variable"), _opt("command")),
    CommandId.WHILE: _EXPRESSION,
})


# Subcommand tables.  A value of None marks a structurally open subcommand
# whose arguments have no fixed shape.
_FILE_READ: ParameterDescriptor = (_p("filename"), _p("variable"))
_FILE_WRITE: ParameterDescriptor = (_p("filename"), _p("message"))
_FILE_GLOB: ParameterDescriptor = (_p("variable"), _many("glob"))
_FILE_REMOVE: ParameterDescriptor = (_many("filename"),)
_FILE_TO_PATH: ParameterDescriptor = (_p("path"), _p("variable"))

_LIST_ONLY: ParameterDescriptor = (_p("list"),)

_STRING_IN_OUT: ParameterDescriptor = (_p("string"), _p("output_variable"))
_STRING_HASH: ParameterDescriptor = (_p("output_variable"), _p("input"))

SubcommandCatalog = Mapping[str, Optional[ParameterDescriptor]]

_SUBCOMMANDS: Mapping[CommandId, SubcommandCatalog] = MappingProxyType({
    CommandId.CMAKE_POLICY: MappingProxyType({
        "GET": (_p("policy_number"), _p("output_variable")),
        "POP": _NO_PARAMS,
        "PUSH": _NO_PARAMS,
        "SET": (_p("policy_number"), _p("behavior")),
        "VERSION": (_p("version_number"),),
    }),
    CommandId.DEFINE_PROPERTY: MappingProxyType({
        "CACHED_VARIABLE": None,
        "DIRECTORY": None,
        "GLOBAL": None,
        "SOURCE": None,
        "TARGET": None,
        "TEST": None,
        "VARIABLE": None,
    }),
    CommandId.EXPORT: MappingProxyType({
        "PACKAGE": (_p("name"),),
        "TARGETS": None,
    }),
    CommandId.FILE: MappingProxyType({
        "APPEND": _FILE_WRITE,
        "DOWNLOAD": (_p("url"), _p("filename")),
        "GLOB": _FILE_GLOB,
        "GLOB_RECURSE": _FILE_GLOB,
        "MAKE_DIRECTORY": (_many("directory"),),
        "MD5": _FILE_READ,
        "READ": _FILE_READ,
        "RELATIVE_PATH": (_p("variable"), _p("directory"), _p("filename")),
        "REMOVE": _FILE_REMOVE,
        "REMOVE_RECURSE": _FILE_REMOVE,
        "RENAME": (_p("old_name"), _p("new_name")),
        "SHA1": _FILE_READ,
        "SHA224": _FILE_READ,
        "SHA256": _FILE_READ,
        "SHA384": _FILE_READ,
        "SHA512": _FILE_READ,
        "STRINGS": _FILE_READ,
        "TO_CMAKE_PATH": _FILE_TO_PATH,
        "TO_NATIVE_PATH": _FILE_TO_PATH,
        "UPLOAD": (_p("filename"), _p("url")),
        "WRITE": _FILE_WRITE,
    }),
    CommandId.INSTALL: MappingProxyType({
        "CODE": None,
        "DIRECTORY": None,
        "EXPORT": None,
        "FILES": None,
        "PROGRAMS": None,
        "SCRIPT": None,
        "TARGETS": None,
    }),
    CommandId.LIST: MappingProxyType({
        "APPEND": (_p("list"), _many("element")),
        "FIND": (_p("list"), _p("value"), _p("output_variable")),
        "GET": (_p("list"), _p("index"), _p("output_variable")),
        "INSERT": (_p("list"), _p("index"), _many("element")),
        "LENGTH": (_p("list"), _p("output_variable")),
        "REMOVE_AT": (_p("list"), _many("index")),
        "REMOVE_DUPLICATES": _LIST_ONLY,
        "REMOVE_ITEM": (_p("list"), _many("value")),
        "REVERSE": _LIST_ONLY,
        "SORT": _LIST_ONLY,
    }),
    CommandId.SET_PROPERTY: MappingProxyType({
        "CACHE": None,
        "DIRECTORY": None,
        "GLOBAL": None,
        "SOURCE": None,
        "TARGET": None,
        "TEST": None,
    }),
    CommandId.STRING: MappingProxyType({
        "ASCII": (_p("number"), _p("output_variable")),
        "CONFIGURE": _STRING_IN_OUT,
        "FIND": (_p("string"), _p("substring"), _p("output_variable")),
        "LENGTH": _STRING_IN_OUT,
        "MD5": _STRING_HASH,
        "RANDOM": (_p("output_variable"),),
        "REGEX": None,
        "REPLACE": (
            _p("match_string"),
            _p("replace_string"),
            _p("output_variable"),
            _many("input"),
        ),
        "SHA1": _STRING_HASH,
        "SHA224": _STRING_HASH,
        "SHA256": _STRING_HASH,
        "SHA384": _STRING_HASH,
        "SHA512": _STRING_HASH,
        "STRIP": _STRING_IN_OUT,
        "SUBSTRING": (
            _p("string"),
            _p("begin_index"),
            _p("length"),
            _p("output_variable"),
        ),
        "TOLOWER": _STRING_IN_OUT,
        "TOUPPER": _STRING_IN_OUT,
    }),
})


def get_command_parameters(command_id: CommandId) -> Optional[ParameterDescriptor]:
    """Return the parameter descriptor of a command, or None if unknown."""
    return _PARAMETERS.get(command_id)


def get_parameter_count(command_id: CommandId) -> int:
    """Return the number of parameter slots a command declares."""
    params = _PARAMETERS.get(command_id)
    return len(params) if params is not None else 0


def get_command_quick_info(command_id: CommandId) -> Optional[str]:
    """Build a one-line tooltip such as ``set(variable value)``."""
    params = _PARAMETERS.get(command_id)
    if params is None:
        return None
    return f"{get_command_name(command_id)}({format_parameters(params)})"


def format_parameters(params: Iterable[ParameterSlot]) -> str:
    """Join parameter slots with the CMake argument delimiter."""
    return " ".join(slot.display for slot in params)


def has_subcommands(command_id: CommandId) -> bool:
    """Check whether a command selects its shape through a subcommand."""
    return command_id in _SUBCOMMANDS


def get_subcommands(command_id: CommandId) -> Optional[List[str]]:
    """Return the subcommand keywords of a command, or None if it has none."""
    catalog = _SUBCOMMANDS.get(command_id)
    if catalog is None:
        return None
    return list(catalog.keys())


def get_subcommand_catalog(command_id: CommandId) -> Optional[SubcommandCatalog]:
    return _SUBCOMMANDS.get(command_id)


def get_subcommand_parameters(
    command_id: CommandId, subcommand: str
) -> Optional[ParameterDescriptor]:
    """Return the parameters of ``command(SUBCOMMAND ...)``.

    Args:
        command_id: Command owning the subcommand.
        subcommand: Subcommand keyword (matched case-insensitively).

    Returns:
        The descriptor, or None when the command or subcommand is unknown or
        the subcommand has no fixed shape.
    """
    catalog = _SUBCOMMANDS.get(command_id)
    if catalog is None or not subcommand:
        return None
    return catalog.get(subcommand.upper())


def subcommand_commands() -> List[CommandId]:
    """Return every command that has a subcommand catalog."""
    return list(_SUBCOMMANDS.keys())


__all__ = [
    "ParameterDescriptor",
    "ParameterSlot",
    "SubcommandCatalog",
    "format_parameters",
    "get_command_parameters",
    "get_command_quick_info",
    "get_parameter_count",
    "get_subcommand_catalog",
    "get_subcommand_parameters",
    "get_subcommands",
    "has_subcommands",
    "subcommand_commands",
]
