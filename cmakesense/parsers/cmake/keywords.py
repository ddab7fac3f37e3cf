"""Catalog of CMake commands known to the engine.

Command names map to :class:`CommandId` members and back. Lookups by name
are case-insensitive because CMake itself treats command names that way.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List


class CommandId(IntEnum):
    """Identifiers of recognised CMake commands.

    Values must stay below 256; the scanner packs them into one byte of its
    state.
    """

    UNSPECIFIED = 0
    ADD_CUSTOM_COMMAND = 1
    ADD_CUSTOM_TARGET = 2
    ADD_DEFINITIONS = 3
    ADD_DEPENDENCIES = 4
    ADD_EXECUTABLE = 5
    ADD_LIBRARY = 6
    ADD_SUBDIRECTORY = 7
    ADD_TEST = 8
    AUX_SOURCE_DIRECTORY = 9
    BREAK = 10
    BUILD_COMMAND = 11
    CMAKE_MINIMUM_REQUIRED = 12
    CMAKE_POLICY = 13
    CONFIGURE_FILE = 14
    CREATE_TEST_SOURCELIST = 15
    DEFINE_PROPERTY = 16
    ELSE = 17
    ELSEIF = 18
    ENABLE_LANGUAGE = 19
    ENABLE_TESTING = 20
    ENDFOREACH = 21
    ENDFUNCTION = 22
    ENDIF = 23
    ENDMACRO = 24
    ENDWHILE = 25
    EXECUTE_PROCESS = 26
    EXPORT = 27
    FILE = 28
    FIND_FILE = 29
    FIND_LIBRARY = 30
    FIND_PACKAGE = 31
    FIND_PATH = 32
    FIND_PROGRAM = 33
    FLTK_WRAP_UI = 34
    FOREACH = 35
    FUNCTION = 36
    GET_CMAKE_PROPERTY = 37
    GET_DIRECTORY_PROPERTY = 38
    GET_FILENAME_COMPONENT = 39
    GET_PROPERTY = 40
    GET_SOURCE_FILE_PROPERTY = 41
    GET_TARGET_PROPERTY = 42
    GET_TEST_PROPERTY = 43
    IF = 44
    INCLUDE = 45
    INCLUDE_DIRECTORIES = 46
    INCLUDE_EXTERNAL_MSPROJECT = 47
    INCLUDE_REGULAR_EXPRESSION = 48
    INSTALL = 49
    LINK_DIRECTORIES = 50
    LIST = 51
    LOAD_CACHE = 52
    LOAD_COMMAND = 53
    MACRO = 54
    MARK_AS_ADVANCED = 55
    MATH = 56
    MESSAGE = 57
    OPTION = 58
    PROJECT = 59
    QT_WRAP_CPP = 60
    QT_WRAP_UI = 61
    REMOVE_DEFINITIONS = 62
    RETURN = 63
    SEPARATE_ARGUMENTS = 64
    SET = 65
    SET_DIRECTORY_PROPERTIES = 66
    SET_PROPERTY = 67
    SET_SOURCE_FILES_PROPERTIES = 68
    SET_TARGET_PROPERTIES = 69
    SET_TESTS_PROPERTIES = 70
    SITE_NAME = 71
    SOURCE_GROUP = 72
    STRING = 73
    TARGET_COMPILE_DEFINITIONS = 74
    TARGET_COMPILE_OPTIONS = 75
    TARGET_INCLUDE_DIRECTORIES = 76
    TARGET_LINK_LIBRARIES = 77
    TARGET_SOURCES = 78
    TRY_COMPILE = 79
    TRY_RUN = 80
    UNSET = 81
    VARIABLE_WATCH = 82
    WHILE = 83


_NAME_TO_ID: Dict[str, CommandId] = {
    member.name.lower(): member
    for member in CommandId
    if member is not CommandId.UNSPECIFIED
}


def get_command_id(name: str) -> CommandId:
    """Look up the identifier of a command.

    Args:
        name: Command name in any letter case.

    Returns:
        The matching CommandId, or CommandId.UNSPECIFIED when unknown.
    """
    if not name:
        return CommandId.UNSPECIFIED
    return _NAME_TO_ID.get(name.lower(), CommandId.UNSPECIFIED)


def get_command_name(command_id: CommandId) -> str | None:
    """Return the lowercase command name for an identifier, or None."""
    if command_id is CommandId.UNSPECIFIED:
        return None
    try:
        return CommandId(command_id).name.lower()
    except ValueError:
        return None


def is_command(name: str) -> bool:
    """Check whether ``name`` is a recognised CMake command."""
    return get_command_id(name) is not CommandId.UNSPECIFIED


def all_command_names() -> List[str]:
    """Return all recognised command names in alphabetical order."""
    return sorted(_NAME_TO_ID)


__all__ = [
    "CommandId",
    "all_command_names",
    "get_command_id",
    "get_command_name",
    "is_command",
]
