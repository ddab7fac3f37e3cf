"""CMake property catalogs and the per-command shape of property commands.

The GET_*/SET_*_PROPERTIES family is irregular: each command names a
different kind of object at a different argument position, and the
property name appears either at a fixed position or after a marker
keyword.  :data:`PROPERTY_COMMANDS` spells that out command by command.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from cmakesense.parsers.cmake.keywords import CommandId


class PropertyType(Enum):
    """Kinds of objects that carry properties."""

    DIRECTORY = "DIRECTORY"
    SOURCE = "SOURCE"
    TARGET = "TARGET"
    TEST = "TEST"
    CACHE = "CACHE"
    GLOBAL = "GLOBAL"
    VARIABLE = "VARIABLE"


@dataclass(frozen=True)
class PropertyDescriptor:
    """A property name and the object kinds it applies to."""

    name: str
    applies_to: FrozenSet[PropertyType]


@dataclass(frozen=True)
class PropertyCommandInfo:
    """Argument layout of one property command.

    Attributes:
        property_type: Kind of object the command reads or writes, or None
            when the kind is given by a keyword argument.
        object_index: Argument position naming the object, or -1 if the
            object is implicit.
        property_index: Argument position naming the property, or -1 if the
            property follows ``marker`` instead.
        marker: Keyword that introduces property names, if any.
    """

    property_type: Optional[PropertyType]
    object_index: int = -1
    property_index: int = -1
    marker: Optional[str] = None


_DIRECTORY_PROPERTIES: Tuple[str, ...] = (
    "ADDITIONAL_MAKE_CLEAN_FILES",
    "CACHE_VARIABLES",
    "CLEAN_NO_CUSTOM",
    "COMPILE_DEFINITIONS",
    "DEFINITIONS",
    "EXCLUDE_FROM_ALL",
    "IMPLICIT_DEPENDS_INCLUDE_TRANSFORM",
    "INCLUDE_DIRECTORIES",
    "INCLUDE_REGULAR_EXPRESSION",
    "INTERPROCEDURAL_OPTIMIZATION",
    "LINK_DIRECTORIES",
    "LISTFILE_STACK",
    "MACROS",
    "PARENT_DIRECTORY",
    "RULE_LAUNCH_COMPILE",
    "RULE_LAUNCH_CUSTOM",
    "RULE_LAUNCH_LINK",
    "TEST_INCLUDE_FILE",
    "VARIABLES",
)

_SOURCE_PROPERTIES: Tuple[str, ...] = (
    "ABSTRACT",
    "COMPILE_DEFINITIONS",
    "COMPILE_FLAGS",
    "EXTERNAL_OBJECT",
    "Fortran_FORMAT",
    "GENERATED",
    "HEADER_FILE_ONLY",
    "KEEP_EXTENSION",
    "LABELS",
    "LANGUAGE",
    "LOCATION",
    "MACOSX_PACKAGE_LOCATION",
    "OBJECT_DEPENDS",
    "OBJECT_OUTPUTS",
    "SYMBOLIC",
    "WRAP_EXCLUDE",
)

_TARGET_PROPERTIES: Tuple[str, ...] = (
    "ARCHIVE_OUTPUT_DIRECTORY",
    "ARCHIVE_OUTPUT_NAME",
    "AUTOMOC",
    "AUTOMOC_MOC_OPTIONS",
    "BUILD_WITH_INSTALL_RPATH",
    "BUNDLE",
    "BUNDLE_EXTENSION",
    "COMPILE_DEFINITIONS",
    "COMPILE_FLAGS",
    "DEBUG_POSTFIX",
    "DEFINE_SYMBOL",
    "ENABLE_EXPORTS",
    "EXCLUDE_FROM_ALL",
    "EXCLUDE_FROM_DEFAULT_BUILD",
    "FOLDER",
    "FRAMEWORK",
    "Fortran_FORMAT",
    "Fortran_MODULE_DIRECTORY",
    "GNUtoMS",
    "HAS_CXX",
    "IMPLICIT_DEPENDS_INCLUDE_TRANSFORM",
    "IMPORTED",
    "IMPORTED_CONFIGURATIONS",
    "IMPORTED_IMPLIB",
    "IMPORTED_LINK_DEPENDENT_LIBRARIES",
    "IMPORTED_LINK_INTERFACE_LANGUAGES",
    "IMPORTED_LINK_INTERFACE_LIBRARIES",
    "IMPORTED_LINK_INTERFACE_MULTIPLICITY",
    "IMPORTED_LOCATION",
    "IMPORTED_NO_SONAME",
    "IMPORTED_SONAME",
    "IMPORT_PREFIX",
    "IMPORT_SUFFIX",
    "INCLUDE_DIRECTORIES",
    "INSTALL_NAME_DIR",
    "INSTALL_RPATH",
    "INSTALL_RPATH_USE_LINK_PATH",
    "INTERPROCEDURAL_OPTIMIZATION",
    "LABELS",
    "LIBRARY_OUTPUT_DIRECTORY",
    "LIBRARY_OUTPUT_NAME",
    "LINKER_LANGUAGE",
    "LINK_DEPENDS",
    "LINK_FLAGS",
    "LINK_INTERFACE_LIBRARIES",
    "LINK_INTERFACE_MULTIPLICITY",
    "LINK_SEARCH_END_STATIC",
    "LINK_SEARCH_START_STATIC",
    "LOCATION",
    "MACOSX_BUNDLE",
    "MACOSX_BUNDLE_INFO_PLIST",
    "MACOSX_FRAMEWORK_INFO_PLIST",
    "OSX_ARCHITECTURES",
    "OUTPUT_NAME",
    "PDB_NAME",
    "PDB_OUTPUT_DIRECTORY",
    "POSITION_INDEPENDENT_CODE",
    "POST_INSTALL_SCRIPT",
    "PREFIX",
    "PRE_INSTALL_SCRIPT",
    "PRIVATE_HEADER",
    "PROJECT_LABEL",
    "PUBLIC_HEADER",
    "RESOURCE",
    "RULE_LAUNCH_COMPILE",
    "RULE_LAUNCH_CUSTOM",
    "RULE_LAUNCH_LINK",
    "RUNTIME_OUTPUT_DIRECTORY",
    "RUNTIME_OUTPUT_NAME",
    "SKIP_BUILD_RPATH",
    "SOURCES",
    "SOVERSION",
    "STATIC_LIBRARY_FLAGS",
    "SUFFIX",
    "TYPE",
    "VERSION",
    "VS_DOTNET_REFERENCES",
    "VS_GLOBAL_KEYWORD",
    "VS_GLOBAL_PROJECT_TYPES",
    "VS_KEYWORD",
    "VS_SCC_AUXPATH",
    "VS_SCC_LOCALPATH",
    "VS_SCC_PROJECTNAME",
    "VS_SCC_PROVIDER",
    "VS_WINRT_EXTENSIONS",
    "VS_WINRT_REFERENCES",
    "WIN32_EXECUTABLE",
)

_TEST_PROPERTIES: Tuple[str, ...] = (
    "ATTACHED_FILES",
    "ATTACHED_FILES_ON_FAIL",
    "COST",
    "DEPENDS",
    "ENVIRONMENT",
    "FAIL_REGULAR_EXPRESSION",
    "LABELS",
    "MEASUREMENT",
    "PASS_REGULAR_EXPRESSION",
    "PROCESSORS",
    "REQUIRED_FILES",
    "RESOURCE_LOCK",
    "RUN_SERIAL",
    "TIMEOUT",
    "WILL_FAIL",
    "WORKING_DIRECTORY",
)

_CACHE_PROPERTIES: Tuple[str, ...] = (
    "ADVANCED",
    "HELPSTRING",
    "MODIFIED",
    "STRINGS",
    "TYPE",
    "VALUE",
)

_GLOBAL_PROPERTIES: Tuple[str, ...] = (
    "ALLOW_DUPLICATE_CUSTOM_TARGETS",
    "DEBUG_CONFIGURATIONS",
    "DISABLED_FEATURES",
    "ENABLED_FEATURES",
    "ENABLED_LANGUAGES",
    "FIND_LIBRARY_USE_LIB64_PATHS",
    "FIND_LIBRARY_USE_OPENBSD_VERSIONING",
    "GLOBAL_DEPENDS_DEBUG_MODE",
    "GLOBAL_DEPENDS_NO_CYCLES",
    "IN_TRY_COMPILE",
    "PACKAGES_FOUND",
    "PACKAGES_NOT_FOUND",
    "PREDEFINED_TARGETS_FOLDER",
    "REPORT_UNDEFINED_PROPERTIES",
    "RULE_LAUNCH_COMPILE",
    "RULE_LAUNCH_CUSTOM",
    "RULE_LAUNCH_LINK",
    "RULE_MESSAGES",
    "TARGET_ARCHIVES_MAY_BE_SHARED_LIBS",
    "TARGET_SUPPORTS_SHARED_LIBS",
    "USE_FOLDERS",
)

_PROPERTIES_BY_TYPE: Mapping[PropertyType, Tuple[str, ...]] = MappingProxyType({
    PropertyType.DIRECTORY: _DIRECTORY_PROPERTIES,
    PropertyType.SOURCE: _SOURCE_PROPERTIES,
    PropertyType.TARGET: _TARGET_PROPERTIES,
    PropertyType.TEST: _TEST_PROPERTIES,
    PropertyType.CACHE: _CACHE_PROPERTIES,
    PropertyType.GLOBAL: _GLOBAL_PROPERTIES,
    PropertyType.VARIABLE: (),
})


def _build_descriptors() -> Dict[str, PropertyDescriptor]:
    kinds: Dict[str, set] = {}
    for prop_type, names in _PROPERTIES_BY_TYPE.items():
        for name in names:
            kinds.setdefault(name, set()).add(prop_type)
    return {
        name: PropertyDescriptor(name, frozenset(types))
        for name, types in sorted(kinds.items())
    }


PROPERTY_DESCRIPTORS: Mapping[str, PropertyDescriptor] = MappingProxyType(
    _build_descriptors()
)

# Keywords used by get_property()/set_property() to name the object kind.
_TYPE_KEYWORDS: Tuple[str, ...] = (
    "CACHE",
    "DIRECTORY",
    "GLOBAL",
    "SOURCE",
    "TARGET",
    "TEST",
    "VARIABLE",
)

# Kinds that must be followed by the name of a specific object.
_OBJECT_REQUIRED: FrozenSet[PropertyType] = frozenset({
    PropertyType.CACHE,
    PropertyType.SOURCE,
    PropertyType.TARGET,
    PropertyType.TEST,
})

PROPERTY_COMMANDS: Mapping[CommandId, PropertyCommandInfo] = MappingProxyType({
    # get_cmake_property(VAR property)
    CommandId.GET_CMAKE_PROPERTY: PropertyCommandInfo(
        PropertyType.GLOBAL, object_index=-1, property_index=1
    ),
    # get_directory_property(VAR [DIRECTORY dir] property)
    CommandId.GET_DIRECTORY_PROPERTY: PropertyCommandInfo(
        PropertyType.DIRECTORY, object_index=-1, property_index=1
    ),
    # get_source_file_property(VAR file property)
    CommandId.GET_SOURCE_FILE_PROPERTY: PropertyCommandInfo(
        PropertyType.SOURCE, object_index=1, property_index=2
    ),
    # get_target_property(VAR target property)
    CommandId.GET_TARGET_PROPERTY: PropertyCommandInfo(
        PropertyType.TARGET, object_index=1, property_index=2
    ),
    # get_test_property(test property VAR)
    CommandId.GET_TEST_PROPERTY: PropertyCommandInfo(
        PropertyType.TEST, object_index=0, property_index=1
    ),
    # get_property(VAR <KIND> [object] PROPERTY name)
    CommandId.GET_PROPERTY: PropertyCommandInfo(
        None, object_index=2, marker="PROPERTY"
    ),
    # set_property(<KIND> [objects...] PROPERTY name values...)
    CommandId.SET_PROPERTY: PropertyCommandInfo(
        None, object_index=1, marker="PROPERTY"
    ),
    # define_property(<KIND> PROPERTY name ...)
    CommandId.DEFINE_PROPERTY: PropertyCommandInfo(None, marker="PROPERTY"),
    # set_directory_properties(PROPERTIES p v ...)
    CommandId.SET_DIRECTORY_PROPERTIES: PropertyCommandInfo(
        PropertyType.DIRECTORY, marker="PROPERTIES"
    ),
    # set_source_files_properties(files... PROPERTIES p v ...)
    CommandId.SET_SOURCE_FILES_PROPERTIES: PropertyCommandInfo(
        PropertyType.SOURCE, object_index=0, marker="PROPERTIES"
    ),
    # set_target_properties(targets... PROPERTIES p v ...)
    CommandId.SET_TARGET_PROPERTIES: PropertyCommandInfo(
        PropertyType.TARGET, object_index=0, marker="PROPERTIES"
    ),
    # set_tests_properties(tests... PROPERTIES p v ...)
    CommandId.SET_TESTS_PROPERTIES: PropertyCommandInfo(
        PropertyType.TEST, object_index=0, marker="PROPERTIES"
    ),
})


def get_properties_of_type(prop_type: Optional[PropertyType]) -> List[str]:
    """Return the property names legal on one kind of object, sorted."""
    if prop_type is None:
        return []
    return sorted(_PROPERTIES_BY_TYPE.get(prop_type, ()), key=str.upper)


def get_property_type_keywords() -> List[str]:
    """Return the keywords that name an object kind in get/set_property."""
    return list(_TYPE_KEYWORDS)


def get_property_type_from_keyword(keyword: str) -> Optional[PropertyType]:
    """Map a kind keyword such as ``TARGET`` to its PropertyType."""
    if not keyword:
        return None
    try:
        return PropertyType(keyword.upper())
    except ValueError:
        return None


def is_object_required(prop_type: Optional[PropertyType]) -> bool:
    """Check whether a kind keyword must be followed by an object name."""
    return prop_type in _OBJECT_REQUIRED


def get_property_command_info(command_id: CommandId) -> Optional[PropertyCommandInfo]:
    return PROPERTY_COMMANDS.get(command_id)


def get_property_type_from_command(command_id: CommandId) -> Optional[PropertyType]:
    """Return the object kind a property command operates on, if fixed."""
    info = PROPERTY_COMMANDS.get(command_id)
    return info.property_type if info else None


def get_property_parameter_index(command_id: CommandId) -> int:
    """Return the argument position of the property name, or -1."""
    info = PROPERTY_COMMANDS.get(command_id)
    return info.property_index if info else -1


def get_object_parameter_index(command_id: CommandId) -> int:
    """Return the argument position of the object name, or -1."""
    info = PROPERTY_COMMANDS.get(command_id)
    return info.object_index if info else -1


def get_properties_for_command(command_id: CommandId) -> Optional[List[str]]:
    """Return the properties legal for a fixed-kind property command."""
    prop_type = get_property_type_from_command(command_id)
    if prop_type is None:
        return None
    return get_properties_of_type(prop_type)


__all__ = [
    "PROPERTY_COMMANDS",
    "PROPERTY_DESCRIPTORS",
    "PropertyCommandInfo",
    "PropertyDescriptor",
    "PropertyType",
    "get_object_parameter_index",
    "get_properties_for_command",
    "get_properties_of_type",
    "get_property_command_info",
    "get_property_parameter_index",
    "get_property_type_from_command",
    "get_property_type_from_keyword",
    "get_property_type_keywords",
    "is_object_required",
]
