"""Tests for the per-command completion strategies."""

from __future__ import annotations

import typing
from pathlib import Path

import pytest

from cmakesense.completion.declarations import ItemDeclarations, ItemType
from cmakesense.completion.strategies import (
    OPEN_PAREN_STRATEGIES,
    WHITESPACE_STRATEGIES,
    StrategyContext,
    command_declarations,
    create_declarations,
    variable_declarations,
)
from cmakesense.config.schema import EngineConfig, SubdirectorySetting
from cmakesense.parsers.cmake.keywords import CommandId
from cmakesense.parsers.cmake.methods import get_subcommands
from cmakesense.parsers.cmake.properties import PropertyType, get_properties_of_type

TARGETS = [
    "add_executable(app main.cpp)",
    "add_library(lib1 a.cpp)",
    "add_library(lib2 b.cpp)",
    "add_test(NAME unit COMMAND app)",
]


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _context(tmp_path: Path, lines=None, **config) -> StrategyContext:
    config.setdefault("discover_modules", False)
    return StrategyContext(
        file_path=tmp_path / "CMakeLists.txt",
        lines=list(lines if lines is not None else TARGETS),
        config=EngineConfig(**config),
    )


def test_source_files_keep_target_name(tmp_path: Path) -> None:
    """Only arguments after the target name are excluded from the file list."""

    for name in ("main.cpp", "util.cpp", "app", "CMakeLists.txt"):
        _touch(tmp_path / name)
    ctx = _context(tmp_path, source_extensions=[])

    result = create_declarations(CommandId.ADD_EXECUTABLE, ctx, ["app", "main.cpp"])

    assert result.names == ["app", "EXCLUDE_FROM_ALL", "MACOSX_BUNDLE", "util.cpp", "WIN32"]
    assert result.of_kind(ItemType.FILE) == ["app", "util.cpp"]


def test_source_files_filtered_by_extension(tmp_path: Path) -> None:
    """Default extensions keep sources and drop other files."""

    for name in ("main.cpp", "notes.txt", "helpers.cmake"):
        _touch(tmp_path / name)
    ctx = _context(tmp_path)

    result = create_declarations(CommandId.ADD_LIBRARY, ctx, ["lib"])

    assert result.of_kind(ItemType.FILE) == ["main.cpp"]
    assert set(result.of_kind(ItemType.COMMAND)) == {
        "EXCLUDE_FROM_ALL",
        "MODULE",
        "OBJECT",
        "SHARED",
        "STATIC",
    }


def test_link_targets_exclude_typed_ones(tmp_path: Path) -> None:
    """Targets already typed are not offered again; order is declaration order."""

    ctx = _context(tmp_path)

    assert create_declarations(CommandId.TARGET_LINK_LIBRARIES, ctx).names == ["app", "lib1", "lib2"]
    assert create_declarations(CommandId.TARGET_LINK_LIBRARIES, ctx, ["app", "lib1"]).names == ["lib2"]
    assert create_declarations(CommandId.ADD_DEPENDENCIES, ctx, ["lib2"]).of_kind(ItemType.TARGET) == [
        "app",
        "lib1",
    ]


def test_set_target_properties(tmp_path: Path) -> None:
    """Objects first, then PROPERTIES, then alternating names and values."""

    ctx = _context(tmp_path)
    command = CommandId.SET_TARGET_PROPERTIES

    assert create_declarations(command, ctx).names == ["app", "lib1", "lib2"]
    assert create_declarations(command, ctx, ["app"]).names == ["lib1", "lib2", "PROPERTIES"]

    target_properties = get_properties_of_type(PropertyType.TARGET)
    after_keyword = create_declarations(command, ctx, ["app", "PROPERTIES"])
    assert after_keyword.names == target_properties
    assert set(after_keyword.of_kind(ItemType.PROPERTY)) == set(target_properties)
    assert create_declarations(command, ctx, ["app", "PROPERTIES", "OUTPUT_NAME"]) is None
    assert (
        create_declarations(command, ctx, ["app", "PROPERTIES", "OUTPUT_NAME", "tool"]).names
        == target_properties
    )


def test_set_properties_with_implicit_objects(tmp_path: Path) -> None:
    """PROPERTIES is offered right away where objects are optional or absent."""

    _touch(tmp_path / "main.cpp")
    _touch(tmp_path / "src" / "CMakeLists.txt")
    ctx = _context(tmp_path)

    sources = create_declarations(CommandId.SET_SOURCE_FILES_PROPERTIES, ctx)
    assert sources.names == ["main.cpp", "PROPERTIES"]

    directory = create_declarations(CommandId.SET_DIRECTORY_PROPERTIES, ctx)
    assert directory.names == ["PROPERTIES"]

    tests = create_declarations(CommandId.SET_TESTS_PROPERTIES, ctx, ["unit"])
    assert tests.names == ["PROPERTIES"]


def test_subcommands_listed_on_open_paren(tmp_path: Path) -> None:
    """Commands with subcommands list exactly their subcommands."""

    ctx = _context(tmp_path)
    result = create_declarations(CommandId.FILE, ctx)

    assert result.names == sorted(get_subcommands(CommandId.FILE))
    assert result.of_kind(ItemType.COMMAND) == result.names
    assert CommandId.STRING in OPEN_PAREN_STRATEGIES


def test_get_property_positions(tmp_path: Path) -> None:
    """get_property() completes kinds, objects, PROPERTY and names in turn."""

    _touch(tmp_path / "src" / "CMakeLists.txt")
    ctx = _context(tmp_path)
    command = CommandId.GET_PROPERTY

    kinds = create_declarations(command, ctx, ["var"])
    assert kinds.names == ["CACHE", "DIRECTORY", "GLOBAL", "SOURCE", "TARGET", "TEST", "VARIABLE"]

    assert create_declarations(command, ctx, ["var", "TARGET"]).names == ["app", "lib1", "lib2"]
    assert create_declarations(command, ctx, ["var", "GLOBAL"]).names == ["PROPERTY"]
    assert create_declarations(command, ctx, ["var", "DIRECTORY"]).names == ["PROPERTY", "src"]
    assert create_declarations(command, ctx, ["var", "TARGET", "app"]).names == ["PROPERTY"]
    assert create_declarations(command, ctx, ["var", "TARGET", "app", "PROPERTY"]).names == (
        get_properties_of_type(PropertyType.TARGET)
    )
    assert create_declarations(command, ctx, ["var", "GLOBAL", "PROPERTY"]).names == (
        get_properties_of_type(PropertyType.GLOBAL)
    )
    assert create_declarations(command, ctx, ["var", "TARGET", "app", "PROPERTY", "X"]) is None


def test_get_x_property_positions(tmp_path: Path) -> None:
    """Fixed-kind getters offer objects and properties at their positions."""

    _touch(tmp_path / "src" / "CMakeLists.txt")
    ctx = _context(tmp_path)

    assert create_declarations(CommandId.GET_TARGET_PROPERTY, ctx, ["var"]).names == [
        "app",
        "lib1",
        "lib2",
    ]
    assert create_declarations(CommandId.GET_TARGET_PROPERTY, ctx, ["var", "app"]).names == (
        get_properties_of_type(PropertyType.TARGET)
    )
    assert create_declarations(CommandId.GET_TARGET_PROPERTY, ctx, ["var", "app", "X"]) is None
    assert create_declarations(CommandId.GET_TEST_PROPERTY, ctx).names == ["unit"]

    directory = create_declarations(CommandId.GET_DIRECTORY_PROPERTY, ctx, ["var"])
    assert "DIRECTORY" in directory.of_kind(ItemType.COMMAND)
    assert set(get_properties_of_type(PropertyType.DIRECTORY)) <= set(directory.names)
    assert create_declarations(
        CommandId.GET_DIRECTORY_PROPERTY, ctx, ["var", "DIRECTORY"]
    ).names == ["src"]
    assert create_declarations(
        CommandId.GET_DIRECTORY_PROPERTY, ctx, ["var", "DIRECTORY", "src"]
    ).names == get_properties_of_type(PropertyType.DIRECTORY)


def test_set_property_positions(tmp_path: Path) -> None:
    """set_property() offers kinds, objects and modifiers, then names."""

    ctx = _context(tmp_path)
    command = CommandId.SET_PROPERTY

    assert create_declarations(command, ctx).names == [
        "CACHE",
        "DIRECTORY",
        "GLOBAL",
        "SOURCE",
        "TARGET",
        "TEST",
    ]
    assert create_declarations(command, ctx, ["TARGET", "app"]).names == [
        "lib1",
        "lib2",
        "APPEND",
        "APPEND_STRING",
        "PROPERTY",
    ]
    assert create_declarations(command, ctx, ["TARGET", "app", "PROPERTY"]).names == (
        get_properties_of_type(PropertyType.TARGET)
    )
    assert create_declarations(command, ctx, ["TARGET", "app", "PROPERTY", "X"]) is None


def test_cache_objects_list_cache_variables(tmp_path: Path) -> None:
    """CACHE objects are the cache entries declared in the buffer."""

    lines = ['set(OPT_A ON CACHE BOOL "doc")', 'option(WITH_TESTS "tests" ON)']
    ctx = _context(tmp_path, lines)

    result = create_declarations(CommandId.GET_PROPERTY, ctx, ["var", "CACHE"])
    assert result.names == ["OPT_A", "WITH_TESTS"]


def test_include_and_package_files(tmp_path: Path) -> None:
    """include() lists local scripts and modules; find_package() lists finders."""

    project = tmp_path / "project"
    modules = tmp_path / "modules"
    _touch(project / "utils.cmake")
    _touch(project / "cmake_install.cmake")
    _touch(project / "FindBar.cmake")
    _touch(modules / "CTest.cmake")
    _touch(modules / "FindFoo.cmake")
    ctx = _context(project, [], modules_dir=modules)

    includes = create_declarations(CommandId.INCLUDE, ctx)
    assert includes.names == ["CTest", "FindBar.cmake", "utils.cmake"]
    assert includes.of_kind(ItemType.FILE) == includes.names

    packages = create_declarations(CommandId.FIND_PACKAGE, ctx)
    assert packages.names == ["Bar", "Foo"]


@pytest.mark.parametrize(
    ("setting", "expected"),
    [
        (SubdirectorySetting.ALL, ["docs", "src"]),
        (SubdirectorySetting.CMAKELISTS_ONLY, ["src"]),
    ],
)
def test_subdirectories(tmp_path: Path, setting: SubdirectorySetting, expected: list[str]) -> None:
    """Subdirectories are listed, optionally only those with a CMakeLists.txt."""

    _touch(tmp_path / "src" / "CMakeLists.txt")
    (tmp_path / "docs").mkdir()
    (tmp_path / ".git").mkdir()
    ctx = _context(tmp_path, [], subdirectories=setting)

    assert create_declarations(CommandId.ADD_SUBDIRECTORY, ctx).names == expected


def test_languages_from_modules_dir(tmp_path: Path) -> None:
    """Languages come from the compiler detection modules when available."""

    modules = tmp_path / "modules"
    _touch(modules / "CMakeDetermineCXXCompiler.cmake")
    _touch(modules / "CMakeDetermineFortranCompiler.cmake")

    with_modules = _context(tmp_path, [], modules_dir=modules)
    assert create_declarations(CommandId.ENABLE_LANGUAGE, with_modules).names == ["CXX", "Fortran"]

    fallback = _context(tmp_path, [], languages=["CXX", "C"])
    assert create_declarations(CommandId.ENABLE_LANGUAGE, fallback).names == ["C", "CXX"]


def test_no_strategy(tmp_path: Path) -> None:
    """Commands without a strategy produce no list."""

    ctx = _context(tmp_path)
    assert create_declarations(CommandId.MESSAGE, ctx) is None
    assert create_declarations(CommandId.SET, ctx, ["x"]) is None
    assert create_declarations(CommandId.UNSPECIFIED, ctx) is None


def test_variable_declarations(tmp_path: Path) -> None:
    """Variables include standard, per-language and buffer variables."""

    lines = ["set(MY_VAR 1)", 'option(MY_OPT "x" ON)', "set(ENV{MY_ENV} 1)"]
    ctx = _context(tmp_path, lines, languages=["CXX"])

    variables = variable_declarations(ctx)
    for name in ("MY_VAR", "MY_OPT", "CMAKE_BUILD_TYPE", "CMAKE_CXX_COMPILER"):
        assert name in variables
    assert "MY_ENV" not in variables
    assert variables.of_kind(ItemType.VARIABLE) == variables.names

    env = variable_declarations(ctx, use_env=True)
    assert "MY_ENV" in env
    assert "HOME" in env
    assert "CMAKE_BUILD_TYPE" not in env


def test_command_declarations(tmp_path: Path) -> None:
    """Commands include the built-ins and the buffer's functions and macros."""

    lines = ["function(my_helper arg)", "endfunction()", "macro(my_macro)", "endmacro()"]
    ctx = _context(tmp_path, lines)

    commands = command_declarations(ctx)
    for name in ("add_executable", "target_link_libraries", "my_helper", "my_macro"):
        assert name in commands
    assert commands.of_kind(ItemType.COMMAND) == commands.names


def test_registered_strategies_share_one_signature() -> None:
    """Every strategy in the dispatch tables is annotated the same way."""

    strategies = set(OPEN_PAREN_STRATEGIES.values()) | set(WHITESPACE_STRATEGIES.values())
    for strategy in strategies:
        hints = typing.get_type_hints(strategy)
        assert hints == {
            "command_id": CommandId,
            "ctx": StrategyContext,
            "prior": typing.List[str],
            "return": typing.Optional[ItemDeclarations],
        }, strategy.__name__
