"""Tests for the static command, signature, property and variable catalogs."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmakesense.parsers.cmake.keywords import (
    CommandId,
    all_command_names,
    get_command_id,
    get_command_name,
    is_command,
)
from cmakesense.parsers.cmake.methods import (
    ParameterSlot,
    get_command_quick_info,
    get_command_parameters,
    get_subcommand_catalog,
    get_subcommand_parameters,
    get_subcommands,
    has_subcommands,
    subcommand_commands,
)
from cmakesense.parsers.cmake.properties import (
    PROPERTY_DESCRIPTORS,
    PropertyType,
    get_object_parameter_index,
    get_properties_for_command,
    get_properties_of_type,
    get_property_parameter_index,
    get_property_type_from_keyword,
    get_property_type_keywords,
    is_object_required,
)
from cmakesense.parsers.cmake.variables import (
    expand_directory_variables,
    get_standard_variables,
    is_standard_variable,
)


def test_command_lookup_ignores_case() -> None:
    """Command names map to identifiers regardless of letter case."""

    assert get_command_id("ADD_LIBRARY") is CommandId.ADD_LIBRARY
    assert get_command_id("add_library") is CommandId.ADD_LIBRARY
    assert get_command_id("not_a_command") is CommandId.UNSPECIFIED
    assert get_command_id("") is CommandId.UNSPECIFIED
    assert get_command_name(CommandId.SET) == "set"
    assert get_command_name(CommandId.UNSPECIFIED) is None
    assert is_command("Target_Link_Libraries")


def test_command_ids_fit_in_scanner_state() -> None:
    """Identifiers must fit the byte the scanner reserves for them."""

    assert max(CommandId) < 256
    names = all_command_names()
    assert names == sorted(names)
    assert "unspecified" not in names
    assert len(names) == len(CommandId) - 1


def test_parameter_slot_display() -> None:
    """Optional and variadic slots render like the CMake documentation."""

    assert ParameterSlot("name").display == "name"
    assert ParameterSlot("binary_dir", optional=True).display == "[binary_dir]"
    assert ParameterSlot("source", variadic=True).display == "source1 source2 ..."
    assert (
        ParameterSlot("path", optional=True, variadic=True).display == "[path1 path2 ...]"
    )


def test_command_parameters() -> None:
    """Known commands expose their signature; unknown ones do not."""

    params = get_command_parameters(CommandId.ADD_EXECUTABLE)
    assert [slot.display for slot in params] == ["name", "source1 source2 ..."]
    assert get_command_parameters(CommandId.ENABLE_TESTING) == ()
    assert get_command_parameters(CommandId.UNSPECIFIED) is None
    assert get_command_quick_info(CommandId.SET) == "set(variable value)"
    assert get_command_quick_info(CommandId.UNSPECIFIED) is None


def test_subcommand_catalog() -> None:
    """Commands with subcommands list them and their signatures."""

    assert has_subcommands(CommandId.FILE)
    subcommands = get_subcommands(CommandId.FILE)
    assert {"GLOB", "GLOB_RECURSE", "READ", "WRITE", "MD5"} <= set(subcommands)
    assert get_subcommands(CommandId.SET) is None

    glob = get_subcommand_parameters(CommandId.FILE, "glob")
    assert [slot.display for slot in glob] == ["variable", "glob1 glob2 ..."]
    assert get_subcommand_parameters(CommandId.FILE, "NOPE") is None
    # Structurally open subcommands have no fixed shape.
    assert get_subcommand_parameters(CommandId.INSTALL, "TARGETS") is None

    commands = subcommand_commands()
    assert CommandId.FILE in commands
    assert CommandId.LIST in commands
    assert CommandId.STRING in commands


def test_property_type_keywords() -> None:
    """Kind keywords map to property types in any letter case."""

    assert get_property_type_keywords() == [
        "CACHE",
        "DIRECTORY",
        "GLOBAL",
        "SOURCE",
        "TARGET",
        "TEST",
        "VARIABLE",
    ]
    assert get_property_type_from_keyword("target") is PropertyType.TARGET
    assert get_property_type_from_keyword("FOO") is None
    assert get_property_type_from_keyword("") is None


@pytest.mark.parametrize(
    ("prop_type", "required"),
    [
        (PropertyType.TARGET, True),
        (PropertyType.SOURCE, True),
        (PropertyType.TEST, True),
        (PropertyType.CACHE, True),
        (PropertyType.GLOBAL, False),
        (PropertyType.DIRECTORY, False),
        (None, False),
    ],
)
def test_object_required(prop_type, required: bool) -> None:
    """Only object-bound kinds must be followed by an object name."""

    assert is_object_required(prop_type) is required


def test_property_command_layout() -> None:
    """Property commands report where the object and property names go."""

    assert get_property_parameter_index(CommandId.GET_TARGET_PROPERTY) == 2
    assert get_object_parameter_index(CommandId.GET_TARGET_PROPERTY) == 1
    assert get_property_parameter_index(CommandId.GET_TEST_PROPERTY) == 1
    assert get_object_parameter_index(CommandId.GET_TEST_PROPERTY) == 0
    assert get_property_parameter_index(CommandId.SET) == -1
    assert get_properties_for_command(CommandId.SET_TARGET_PROPERTIES) == get_properties_of_type(
        PropertyType.TARGET
    )
    assert get_properties_for_command(CommandId.GET_PROPERTY) is None


def test_properties_sorted_and_shared() -> None:
    """Property lists are sorted and descriptors record every applicable kind."""

    target_props = get_properties_of_type(PropertyType.TARGET)
    assert target_props == sorted(target_props, key=str.upper)
    assert "OUTPUT_NAME" in target_props
    assert get_properties_of_type(None) == []

    descriptor = PROPERTY_DESCRIPTORS["COMPILE_DEFINITIONS"]
    assert {PropertyType.DIRECTORY, PropertyType.SOURCE, PropertyType.TARGET} <= descriptor.applies_to
    assert PROPERTY_DESCRIPTORS["WILL_FAIL"].applies_to == frozenset({PropertyType.TEST})


def test_standard_variables() -> None:
    """Standard variables are recognised ignoring case and expand per language."""

    assert is_standard_variable("CMAKE_BUILD_TYPE")
    assert is_standard_variable("cmake_build_type")
    assert not is_standard_variable("MY_OWN_VARIABLE")
    assert not is_standard_variable("")
    assert is_standard_variable("HOME", use_env=True)
    assert not is_standard_variable("CMAKE_BUILD_TYPE", use_env=True)

    variables = get_standard_variables(["CXX"])
    assert "CMAKE_CXX_COMPILER" in variables
    assert "PROJECT_NAME" in variables
    assert "CMAKE_CXX_COMPILER" not in get_standard_variables()
    assert "HOME" in get_standard_variables(use_env=True)


def test_expand_directory_variables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Directory variables expand to the list file's directory."""

    monkeypatch.setenv("CMAKESENSE_TEST_DIR", "/opt/extra")
    monkeypatch.delenv("CMAKESENSE_UNKNOWN", raising=False)

    expanded = expand_directory_variables("${CMAKE_CURRENT_LIST_DIR}/util.cmake", tmp_path)
    assert expanded == f"{tmp_path}/util.cmake"
    assert expand_directory_variables("${CMAKESENSE_TEST_DIR}/x", tmp_path) == "/opt/extra/x"
    assert expand_directory_variables("${CMAKESENSE_UNKNOWN}/x", tmp_path) == "${CMAKESENSE_UNKNOWN}/x"


def test_subcommand_catalog_mapping() -> None:
    """The catalog maps keywords to a shape, or None for open forms."""

    catalog = get_subcommand_catalog(CommandId.FILE)
    assert catalog is not None
    assert catalog["GLOB"] == get_subcommand_parameters(CommandId.FILE, "glob")
    assert list(catalog) == get_subcommands(CommandId.FILE)

    install = get_subcommand_catalog(CommandId.INSTALL)
    assert install["TARGETS"] is None
    assert get_subcommand_catalog(CommandId.SET) is None
    with pytest.raises(TypeError):
        catalog["NEW"] = ()  # type: ignore[index]
