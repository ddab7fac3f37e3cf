"""Per-command completion strategies and their dispatch tables.

Two tables map a :class:`CommandId` to a strategy: one used when the opening
parenthesis of the command is typed (no arguments yet) and one used on the
whitespace separating arguments (the already-typed arguments are known).
A strategy returns an :class:`ItemDeclarations` builder, or None when no
contextual list applies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from cmakesense.cache.include_cache import IncludeCache
from cmakesense.completion import sources
from cmakesense.completion.declarations import DeclarationSet, ItemDeclarations, ItemType
from cmakesense.config.schema import EngineConfig
from cmakesense.parsers.cmake.keywords import CommandId, all_command_names
from cmakesense.parsers.cmake.methods import get_subcommands, subcommand_commands
from cmakesense.parsers.cmake.parsing import (
    parse_for_cache_variables,
    parse_for_env_variables,
    parse_for_functions,
    parse_for_macros,
    parse_for_target_names,
    parse_for_variables,
)
from cmakesense.parsers.cmake.properties import (
    PropertyType,
    get_object_parameter_index,
    get_properties_for_command,
    get_properties_of_type,
    get_property_parameter_index,
    get_property_type_from_command,
    get_property_type_from_keyword,
    get_property_type_keywords,
    is_object_required,
)
from cmakesense.parsers.cmake.variables import get_standard_variables

logger = logging.getLogger("cmakesense.completion.strategies")


@dataclass(frozen=True)
class StrategyContext:
    """What a strategy may consult besides the command and its arguments.

    Attributes:
        file_path: Path of the buffer being edited.
        lines: Lines of the buffer.
        config: Engine configuration.
        cache: Include cache of the buffer, if one was built.
    """

    file_path: Path
    lines: Sequence[str]
    config: EngineConfig
    cache: Optional[IncludeCache] = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def modules_dir(self) -> Optional[Path]:
        if self.cache is not None:
            return self.cache.modules_dir
        return self.config.resolve_modules_dir()


Strategy = Callable[[CommandId, StrategyContext, List[str]], Optional[ItemDeclarations]]


ADD_EXECUTABLE_KEYWORDS = ("EXCLUDE_FROM_ALL", "MACOSX_BUNDLE", "WIN32")
ADD_LIBRARY_KEYWORDS = ("EXCLUDE_FROM_ALL", "MODULE", "OBJECT", "SHARED", "STATIC")

_COMMAND_KEYWORDS: Mapping[CommandId, Sequence[str]] = MappingProxyType(
    {
        CommandId.ADD_EXECUTABLE: ADD_EXECUTABLE_KEYWORDS,
        CommandId.ADD_LIBRARY: ADD_LIBRARY_KEYWORDS,
    }
)

# Commands whose first argument is the name of the target being created.
_TARGET_CREATORS = frozenset({CommandId.ADD_EXECUTABLE, CommandId.ADD_LIBRARY})

# SET_*_PROPERTIES commands that accept PROPERTIES without a preceding object.
_IMPLICIT_OBJECT_COMMANDS = frozenset(
    {CommandId.SET_SOURCE_FILES_PROPERTIES, CommandId.SET_DIRECTORY_PROPERTIES}
)


def include_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Local .cmake files plus the modules of the modules directory."""
    decls = ItemDeclarations()
    decls.add_items(sources.list_include_files(ctx.file_path, ctx.modules_dir), ItemType.FILE)
    return decls


def package_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Package names taken from the Find<Name>.cmake modules."""
    decls = ItemDeclarations()
    decls.add_items(sources.list_packages(ctx.file_path, ctx.modules_dir), ItemType.FILE)
    return decls


def subdirectory_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Subdirectories of the buffer, honouring the CMakeLists-only setting."""
    decls = ItemDeclarations()
    decls.add_items(
        sources.list_subdirectories(ctx.file_path, ctx.config.require_cmakelists),
        ItemType.FILE,
    )
    return decls


def language_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    decls = ItemDeclarations()
    decls.add_items(
        sources.list_languages(ctx.modules_dir, ctx.config.languages), ItemType.COMMAND
    )
    return decls


def target_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Targets declared in the buffer, minus those already typed."""
    decls = ItemDeclarations(sort=False)
    decls.add_items(parse_for_target_names(ctx.lines), ItemType.TARGET)
    decls.exclude_items(prior)
    return decls


def declared_test_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Tests declared in the buffer, minus those already typed."""
    decls = ItemDeclarations(sort=False)
    decls.add_items(parse_for_target_names(ctx.lines, tests=True), ItemType.TARGET)
    decls.exclude_items(prior)
    return decls


def source_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Source files next to the buffer plus the command's keyword flags.

    For add_executable() and add_library() the first argument names the
    target, so only the later arguments are excluded from the file list.
    """
    decls = ItemDeclarations()
    decls.add_items(
        sources.list_source_files(ctx.file_path, ctx.config.source_extensions), ItemType.FILE
    )
    keywords = _COMMAND_KEYWORDS.get(command_id)
    if keywords:
        decls.add_items(keywords, ItemType.COMMAND)
    if command_id in _TARGET_CREATORS:
        decls.exclude_items(prior[1:])
    return decls


def cache_variable_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Cache entries of the buffer and its includes."""
    decls = ItemDeclarations()
    decls.add_items(parse_for_cache_variables(ctx.text), ItemType.VARIABLE)
    if ctx.cache is not None:
        decls.add_items(ctx.cache.all_cache_variables(), ItemType.VARIABLE)
    return decls


def subcommand_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    subcommands = get_subcommands(command_id)
    if subcommands is None:
        return None
    decls = ItemDeclarations()
    decls.add_items(subcommands, ItemType.COMMAND)
    return decls


# Strategies listing the objects that properties can be attached to.
_OBJECT_STRATEGIES: Mapping[PropertyType, Strategy] = MappingProxyType(
    {
        PropertyType.DIRECTORY: subdirectory_strategy,
        PropertyType.SOURCE: source_strategy,
        PropertyType.TARGET: target_strategy,
        PropertyType.TEST: declared_test_strategy,
        PropertyType.CACHE: cache_variable_strategy,
    }
)


def _object_declarations(
    prop_type: Optional[PropertyType],
    command_id: CommandId,
    ctx: StrategyContext,
    prior: List[str],
) -> ItemDeclarations:
    strategy = _OBJECT_STRATEGIES.get(prop_type)
    if strategy is None:
        return ItemDeclarations()
    return strategy(command_id, ctx, prior) or ItemDeclarations()


def _property_declarations(names: Optional[Sequence[str]]) -> Optional[ItemDeclarations]:
    if names is None:
        return None
    decls = ItemDeclarations()
    decls.add_items(names, ItemType.PROPERTY)
    return decls


def get_x_property_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Position-sensitive strategy of the GET_*_PROPERTY commands."""
    count = len(prior)
    if count == get_property_parameter_index(command_id):
        decls = _property_declarations(get_properties_for_command(command_id))
        if decls is not None and command_id is CommandId.GET_DIRECTORY_PROPERTY:
            # get_directory_property(var DIRECTORY dir prop) names another directory.
            decls.add_item("DIRECTORY", ItemType.COMMAND)
        return decls
    if count == get_object_parameter_index(command_id):
        prop_type = get_property_type_from_command(command_id)
        if prop_type in _OBJECT_STRATEGIES:
            return _object_declarations(prop_type, command_id, ctx, prior)
        return None
    if command_id is CommandId.GET_DIRECTORY_PROPERTY and count >= 2 and prior[1] == "DIRECTORY":
        if count == 2:
            return subdirectory_strategy(command_id, ctx, prior)
        if count == 3:
            return _property_declarations(get_properties_for_command(command_id))
    return None


def set_x_property_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Strategy of the SET_*_PROPERTIES commands.

    After PROPERTIES the arguments alternate between property names and
    values; before it, the objects are listed together with the PROPERTIES
    keyword.
    """
    if "PROPERTIES" in prior:
        index = prior.index("PROPERTIES")
        if (len(prior) - index) % 2 == 1:
            return _property_declarations(get_properties_for_command(command_id))
        return None

    if get_object_parameter_index(command_id) < 0:
        decls = ItemDeclarations()
    else:
        prop_type = get_property_type_from_command(command_id)
        decls = _object_declarations(prop_type, command_id, ctx, prior)
    if prior or command_id in _IMPLICIT_OBJECT_COMMANDS:
        decls.add_item("PROPERTIES", ItemType.COMMAND)
    return decls


def get_property_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Strategy of get_property(var <kind> [object] PROPERTY name)."""
    count = len(prior)
    if count == 1:
        decls = ItemDeclarations()
        decls.add_items(get_property_type_keywords(), ItemType.COMMAND)
        return decls
    if count > 2 and prior[-1] == "PROPERTY":
        prop_type = get_property_type_from_keyword(prior[1])
        decls = ItemDeclarations()
        decls.add_items(get_properties_of_type(prop_type), ItemType.PROPERTY)
        return decls
    if count == 2:
        prop_type = get_property_type_from_keyword(prior[1])
        decls = _object_declarations(prop_type, command_id, ctx, prior)
        if not is_object_required(prop_type):
            decls.add_item("PROPERTY", ItemType.COMMAND)
        return decls
    if count == 3:
        decls = ItemDeclarations()
        decls.add_item("PROPERTY", ItemType.COMMAND)
        return decls
    return None


def set_property_strategy(
    command_id: CommandId, ctx: StrategyContext, prior: List[str]
) -> Optional[ItemDeclarations]:
    """Strategy of set_property(<kind> [objects...] [APPEND] PROPERTY name values...)."""
    if not prior:
        decls = ItemDeclarations()
        decls.add_items(get_property_type_keywords(), ItemType.COMMAND)
        return decls
    prop_type = get_property_type_from_keyword(prior[0])
    if "PROPERTY" in prior:
        if prior[-1] == "PROPERTY":
            decls = ItemDeclarations()
            decls.add_items(get_properties_of_type(prop_type), ItemType.PROPERTY)
            return decls
        return None
    decls = _object_declarations(prop_type, command_id, ctx, prior)
    decls.add_items(("APPEND", "APPEND_STRING", "PROPERTY"), ItemType.COMMAND)
    decls.exclude_items(prior)
    return decls


def _build_open_paren_table() -> Mapping[CommandId, Strategy]:
    table: Dict[CommandId, Strategy] = {
        CommandId.INCLUDE: include_strategy,
        CommandId.FIND_PACKAGE: package_strategy,
        CommandId.ADD_SUBDIRECTORY: subdirectory_strategy,
        CommandId.ENABLE_LANGUAGE: language_strategy,
        CommandId.ADD_DEPENDENCIES: target_strategy,
        CommandId.TARGET_LINK_LIBRARIES: target_strategy,
        CommandId.TARGET_INCLUDE_DIRECTORIES: target_strategy,
        CommandId.TARGET_COMPILE_DEFINITIONS: target_strategy,
        CommandId.TARGET_COMPILE_OPTIONS: target_strategy,
        CommandId.TARGET_SOURCES: target_strategy,
        CommandId.SET_TARGET_PROPERTIES: set_x_property_strategy,
        CommandId.SET_SOURCE_FILES_PROPERTIES: set_x_property_strategy,
        CommandId.SET_TESTS_PROPERTIES: set_x_property_strategy,
        CommandId.SET_DIRECTORY_PROPERTIES: set_x_property_strategy,
        CommandId.GET_TEST_PROPERTY: get_x_property_strategy,
    }
    for command_id in subcommand_commands():
        table[command_id] = subcommand_strategy
    return MappingProxyType(table)


OPEN_PAREN_STRATEGIES: Mapping[CommandId, Strategy] = _build_open_paren_table()

WHITESPACE_STRATEGIES: Mapping[CommandId, Strategy] = MappingProxyType(
    {
        CommandId.ADD_EXECUTABLE: source_strategy,
        CommandId.ADD_LIBRARY: source_strategy,
        CommandId.ADD_DEPENDENCIES: target_strategy,
        CommandId.TARGET_LINK_LIBRARIES: target_strategy,
        CommandId.GET_TARGET_PROPERTY: get_x_property_strategy,
        CommandId.GET_SOURCE_FILE_PROPERTY: get_x_property_strategy,
        CommandId.GET_TEST_PROPERTY: get_x_property_strategy,
        CommandId.GET_DIRECTORY_PROPERTY: get_x_property_strategy,
        CommandId.GET_CMAKE_PROPERTY: get_x_property_strategy,
        CommandId.SET_TARGET_PROPERTIES: set_x_property_strategy,
        CommandId.SET_SOURCE_FILES_PROPERTIES: set_x_property_strategy,
        CommandId.SET_TESTS_PROPERTIES: set_x_property_strategy,
        CommandId.SET_DIRECTORY_PROPERTIES: set_x_property_strategy,
        CommandId.GET_PROPERTY: get_property_strategy,
        CommandId.SET_PROPERTY: set_property_strategy,
    }
)


def create_declarations(
    command_id: CommandId,
    ctx: StrategyContext,
    prior_parameters: Optional[Sequence[str]] = None,
) -> Optional[DeclarationSet]:
    """Run the strategy registered for a command.

    Args:
        command_id: Command whose arguments are being completed.
        ctx: Buffer, configuration and include cache.
        prior_parameters: Already-typed arguments when triggered by
            whitespace, or None when triggered by the opening parenthesis.

    Returns:
        The candidates, or None when no strategy applies.
    """
    table = OPEN_PAREN_STRATEGIES if prior_parameters is None else WHITESPACE_STRATEGIES
    strategy = table.get(command_id)
    if strategy is None:
        logger.debug("No strategy for %s", command_id)
        return None
    decls = strategy(command_id, ctx, list(prior_parameters or ()))
    if decls is None:
        logger.debug("%s declined %s with %d prior arguments",
                     strategy.__name__, command_id.name, len(prior_parameters or ()))
        return None
    return decls.build()


def variable_declarations(ctx: StrategyContext, use_env: bool = False) -> DeclarationSet:
    """Variables offered after ``${`` (or ``$ENV{`` when ``use_env``)."""
    decls = ItemDeclarations()
    if use_env:
        decls.add_items(get_standard_variables(use_env=True), ItemType.VARIABLE)
        decls.add_items(parse_for_env_variables(ctx.text), ItemType.VARIABLE)
        if ctx.cache is not None:
            decls.add_items(ctx.cache.all_env_variables(), ItemType.VARIABLE)
        return decls.build()

    languages = sources.list_languages(ctx.modules_dir, ctx.config.languages)
    decls.add_items(get_standard_variables(languages), ItemType.VARIABLE)
    text = ctx.text
    decls.add_items(parse_for_variables(text), ItemType.VARIABLE)
    decls.add_items(parse_for_cache_variables(text), ItemType.VARIABLE)
    if ctx.cache is not None:
        decls.add_items(ctx.cache.all_variables(), ItemType.VARIABLE)
        decls.add_items(ctx.cache.all_cache_variables(), ItemType.VARIABLE)
    return decls.build()


def command_declarations(ctx: StrategyContext) -> DeclarationSet:
    """Commands plus the functions and macros of the buffer and its includes."""
    decls = ItemDeclarations()
    decls.add_items(all_command_names(), ItemType.COMMAND)
    text = ctx.text
    decls.add_items(parse_for_functions(text), ItemType.COMMAND)
    decls.add_items(parse_for_macros(text), ItemType.COMMAND)
    if ctx.cache is not None:
        decls.add_items(ctx.cache.all_functions(), ItemType.COMMAND)
        decls.add_items(ctx.cache.all_macros(), ItemType.COMMAND)
    return decls.build()


__all__ = [
    "ADD_EXECUTABLE_KEYWORDS",
    "ADD_LIBRARY_KEYWORDS",
    "OPEN_PAREN_STRATEGIES",
    "StrategyContext",
    "WHITESPACE_STRATEGIES",
    "command_declarations",
    "create_declarations",
    "variable_declarations",
]
