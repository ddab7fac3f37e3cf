"""Context recovery over scanned CMake code.

Everything here is built on :func:`scan_lines`: the functions re-tokenize a
buffer (or a snippet of it) and recover either declarations made in it
(variables, functions, targets, include references) or the command context
around a cursor position.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from cmakesense.parsers.cmake.keywords import CommandId, get_command_id
from cmakesense.parsers.cmake.methods import get_subcommands
from cmakesense.parsers.cmake.scanner import (
    ScannedToken,
    get_last_command,
    in_continuation,
    paren_depth,
    scan_lines,
    split_lines,
)
from cmakesense.parsers.cmake.tokens import TokenKind, TokenTriggers, clean_token
from cmakesense.parsers.cmake.variables import is_standard_variable

logger = logging.getLogger("cmakesense.parsers.cmake.parsing")

_ENV_ARGUMENT_RE = re.compile(r"ENV\{([A-Za-z_][A-Za-z0-9_]*)\}\Z")

_TARGET_COMMANDS = frozenset({"add_executable", "add_library", "add_custom_target"})
_INCLUDE_COMMANDS = frozenset({"include", "find_package"})


@dataclass(frozen=True)
class TextSpan:
    """A range of text; the end index is exclusive."""

    start_line: int
    start_index: int
    end_line: int
    end_index: int


@dataclass(frozen=True)
class CommandCall:
    """A complete command invocation recovered from code."""

    name: str
    command_id: CommandId
    arguments: Tuple[str, ...]
    line: int


@dataclass(frozen=True)
class IncludeReference:
    """An ``include()`` or ``find_package()`` reference."""

    command: str
    name: str


@dataclass(frozen=True)
class CommandContext:
    """Command enclosing a whitespace trigger and its already-typed arguments."""

    command_id: CommandId
    command_name: str
    prior_parameters: List[str]


@dataclass(frozen=True)
class ParameterInfoContext:
    """Information needed to show a call tip for the enclosing command.

    Attributes:
        command_name: Lowercase name of the command.
        subcommand: Uppercase subcommand keyword when the command has
            subcommands and a known one was typed as its first argument.
        name_span: Span of the command name.
        start_span: Span of the opening parenthesis.
        next_spans: Spans of the whitespace separating arguments.
        end_span: Span of the closing parenthesis, if it is on a scanned line.
        current_parameter: Index of the argument the cursor is in.
    """

    command_name: str
    subcommand: Optional[str]
    name_span: TextSpan
    start_span: TextSpan
    next_spans: List[TextSpan]
    end_span: Optional[TextSpan]
    current_parameter: int = 0

    @property
    def command_id(self) -> CommandId:
        return get_command_id(self.command_name)


@dataclass
class _Frame:
    name: Optional[str]
    line: int
    name_span: Optional[TextSpan]
    start_span: TextSpan
    arguments: List[str] = field(default_factory=list)
    next_spans: List[TextSpan] = field(default_factory=list)
    end_span: Optional[TextSpan] = None


def _span(item: ScannedToken) -> TextSpan:
    return TextSpan(item.line, item.token.start, item.line, item.token.end)


class _CommandWalker:
    """Follows command invocations through a stream of scanned tokens.

    Arguments are joined from adjacent tokens, so ``${A}_b`` or ``main.cpp``
    count as one argument. Whitespace at depth 1 and line breaks separate
    arguments; nested parentheses stay part of the current argument.
    Comments are dropped.
    """

    def __init__(self) -> None:
        self.frame: Optional[_Frame] = None
        self._state = 0
        self._line = 0
        self._parts: List[str] = []
        self._candidate: Optional[ScannedToken] = None

    @property
    def is_open(self) -> bool:
        return self.frame is not None

    def typed_arguments(self) -> List[str]:
        """Complete arguments plus the one being typed, if any."""
        if self.frame is None:
            return []
        arguments = list(self.frame.arguments)
        if self._parts:
            arguments.append(clean_token("".join(self._parts)))
        return arguments

    def argument_index(self, line: int) -> int:
        """Index of the argument a cursor on ``line`` is in."""
        if self.frame is None:
            return 0
        index = len(self.frame.arguments)
        if self._parts and line != self._line and not in_continuation(self._state):
            index += 1
        return index

    def flush(self) -> None:
        if self._parts and self.frame is not None:
            self.frame.arguments.append(clean_token("".join(self._parts)))
        self._parts = []

    def feed(self, item: ScannedToken) -> Optional[_Frame]:
        """Consume one token; return the frame it closed, if any."""
        prev_state = self._state
        self._state = item.state
        token = item.token

        if item.line != self._line:
            if in_continuation(prev_state) and self._parts:
                self._parts.append("\n")
            else:
                self.flush()
            self._line = item.line

        if paren_depth(prev_state) == 0:
            self._feed_top_level(item)
            return None

        if token.kind is TokenKind.COMMENT:
            return None
        if token.kind is TokenKind.WHITESPACE:
            if paren_depth(prev_state) == 1:
                self.flush()
                if self.frame is not None and token.triggers & TokenTriggers.PARAMETER_NEXT:
                    self.frame.next_spans.append(_span(item))
            else:
                self._parts.append(" ")
            return None
        if token.kind is TokenKind.CLOSE_PAREN and paren_depth(item.state) == 0:
            return self._close(item)
        self._parts.append(item.text)
        return None

    def _feed_top_level(self, item: ScannedToken) -> None:
        kind = item.token.kind
        if kind in (TokenKind.KEYWORD, TokenKind.IDENTIFIER):
            self._candidate = item
        elif kind is TokenKind.OPEN_PAREN:
            candidate = self._candidate
            self._candidate = None
            self._parts = []
            self.frame = _Frame(
                name=candidate.text.lower() if candidate else None,
                line=candidate.line if candidate else item.line,
                name_span=_span(candidate) if candidate else None,
                start_span=_span(item),
            )
        elif kind not in (TokenKind.WHITESPACE, TokenKind.COMMENT):
            self._candidate = None

    def _close(self, item: ScannedToken) -> _Frame:
        self.flush()
        frame = self.frame
        self.frame = None
        if frame is None:
            frame = _Frame(None, item.line, None, _span(item))
        frame.end_span = _span(item)
        return frame


def _as_lines(code: str | Sequence[str]) -> Sequence[str]:
    if isinstance(code, str):
        return split_lines(code)
    return code


def iter_command_calls(code: str | Sequence[str]) -> Iterator[CommandCall]:
    """Yield every complete command invocation in ``code``.

    Args:
        code: Source text or a sequence of lines.

    Yields:
        CommandCall values in source order. Invocations whose argument list
        is never closed are not reported.
    """
    walker = _CommandWalker()
    for item in scan_lines(_as_lines(code)):
        frame = walker.feed(item)
        if frame is not None and frame.name:
            yield CommandCall(
                frame.name, get_command_id(frame.name), tuple(frame.arguments), frame.line
            )


def _add_unique(names: List[str], seen: set, name: str) -> None:
    key = name.upper()
    if key not in seen:
        seen.add(key)
        names.append(name)


def parse_for_variables(code: str) -> List[str]:
    """Find the variables defined with ``set()`` in ``code``.

    A small state machine: ``set`` moves to state 1, an opening parenthesis
    in state 1 moves to state 2 and an identifier in state 2 names a
    variable and returns to state 0. Any other token, whitespace included,
    returns to state 0.

    Args:
        code: CMake source text.

    Returns:
        Variable names in order of first definition, deduplicated ignoring
        letter case, standard variables excluded.
    """
    variables: List[str] = []
    seen: set = set()
    state = 0
    for item in scan_lines(split_lines(code)):
        kind = item.token.kind
        if kind is TokenKind.KEYWORD and item.text.lower() == "set":
            state = 1
        elif state == 1 and kind is TokenKind.OPEN_PAREN:
            state = 2
        elif state == 2 and kind is TokenKind.IDENTIFIER:
            # set(ENV{NAME} ...) assigns an environment variable.
            if item.text != "ENV" and not is_standard_variable(item.text):
                _add_unique(variables, seen, item.text)
            state = 0
        else:
            state = 0
    return variables


def parse_for_env_variables(code: str) -> List[str]:
    """Find environment variables assigned with ``set(ENV{NAME} ...)``."""
    names: List[str] = []
    seen: set = set()
    for call in iter_command_calls(code):
        if call.command_id is not CommandId.SET or not call.arguments:
            continue
        match = _ENV_ARGUMENT_RE.match(call.arguments[0])
        if match and not is_standard_variable(match.group(1), use_env=True):
            _add_unique(names, seen, match.group(1))
    return names


def parse_for_cache_variables(code: str) -> List[str]:
    """Find cache entries from ``set(NAME ... CACHE ...)`` and ``option(NAME ...)``."""
    names: List[str] = []
    seen: set = set()
    for call in iter_command_calls(code):
        if not call.arguments:
            continue
        name = call.arguments[0]
        if call.command_id is CommandId.SET:
            if "CACHE" not in call.arguments[1:]:
                continue
        elif call.command_id is not CommandId.OPTION:
            continue
        if name and not is_standard_variable(name):
            _add_unique(names, seen, name)
    return names


def _parse_for_definitions(code: str, command_id: CommandId) -> List[str]:
    names: List[str] = []
    seen: set = set()
    for call in iter_command_calls(code):
        if call.command_id is command_id and call.arguments and call.arguments[0]:
            _add_unique(names, seen, call.arguments[0])
    return names


def parse_for_functions(code: str) -> List[str]:
    """Find the names of functions defined with ``function()``."""
    return _parse_for_definitions(code, CommandId.FUNCTION)


def parse_for_macros(code: str) -> List[str]:
    """Find the names of macros defined with ``macro()``."""
    return _parse_for_definitions(code, CommandId.MACRO)


def parse_for_function_parameters(code: str, name: str) -> Optional[List[str]]:
    """Return the declared parameters of function or macro ``name``.

    Returns None when ``code`` does not define it.
    """
    wanted = name.lower()
    for call in iter_command_calls(code):
        if call.command_id not in (CommandId.FUNCTION, CommandId.MACRO):
            continue
        if call.arguments and call.arguments[0].lower() == wanted:
            return list(call.arguments[1:])
    return None


def parse_for_target_names(lines: Iterable[str], tests: bool = False) -> List[str]:
    """Collect target (or test) names declared in ``lines``.

    Args:
        lines: Lines of the buffer.
        tests: Collect test names from ``add_test()`` instead of targets.

    Returns:
        Names in declaration order without duplicates.
    """
    names: List[str] = []
    for call in iter_command_calls(list(lines)):
        if not call.arguments:
            continue
        if tests:
            if call.command_id is not CommandId.ADD_TEST:
                continue
            name = call.arguments[0]
            if name == "NAME":
                if len(call.arguments) < 2:
                    continue
                name = call.arguments[1]
        elif call.name in _TARGET_COMMANDS:
            name = call.arguments[0]
        else:
            continue
        if name and name not in names:
            names.append(name)
    return names


def parse_for_includes(lines: Iterable[str]) -> List[IncludeReference]:
    """Collect ``include()`` and ``find_package()`` references."""
    refs: List[IncludeReference] = []
    for call in iter_command_calls(list(lines)):
        if call.name in _INCLUDE_COMMANDS and call.arguments and call.arguments[0]:
            ref = IncludeReference(call.name, call.arguments[0])
            if ref not in refs:
                refs.append(ref)
    return refs


def _before(item: ScannedToken, line: int, column: int) -> bool:
    return item.line < line or (item.line == line and item.token.start < column)


def parse_for_trigger_command(lines: Sequence[str], line: int, column: int) -> CommandId:
    """Return the command recorded in the scanner state at a token.

    Args:
        lines: Lines of the buffer.
        line: Line of the triggering token.
        column: Start index of the triggering token on ``line``.

    Returns:
        The last command seen when the token at ``(line, column)`` was
        scanned, or CommandId.UNSPECIFIED when no token starts there.
    """
    for item in scan_lines(lines[: line + 1]):
        if item.line == line and item.token.start == column:
            return get_last_command(item.state)
    return CommandId.UNSPECIFIED


def parse_for_parameters(
    lines: Sequence[str], line: int, column: int
) -> Optional[CommandContext]:
    """Recover the command and prior arguments for a whitespace trigger.

    Args:
        lines: Lines of the buffer.
        line: Line of the triggering token.
        column: Start index of the triggering token on ``line``.

    Returns:
        CommandContext for the command whose argument list encloses the
        trigger, or None when the trigger is outside any command.
    """
    walker = _CommandWalker()
    for item in scan_lines(lines[: line + 1]):
        if not _before(item, line, column):
            break
        walker.feed(item)
    frame = walker.frame
    if frame is None or not frame.name:
        return None
    return CommandContext(
        get_command_id(frame.name), frame.name, walker.typed_arguments()
    )


def parse_for_parameter_info(
    lines: Sequence[str], line: int, column: int
) -> Optional[ParameterInfoContext]:
    """Recover call-tip information for the command around the cursor.

    Scanning starts at the top of the buffer so commands spanning several
    lines are handled. After the cursor, the rest of the cursor's line is
    scanned to find the closing parenthesis.

    Args:
        lines: Lines of the buffer.
        line: Cursor line.
        column: Caret index on ``line``.

    Returns:
        ParameterInfoContext, or None when the cursor is not inside the
        argument list of a named command.
    """
    walker = _CommandWalker()
    frame: Optional[_Frame] = None
    typed: List[str] = []
    current = 0
    for item in scan_lines(lines[: line + 1]):
        if frame is None and not _before(item, line, column):
            frame = walker.frame
            if frame is None:
                return None
            typed = walker.typed_arguments()
            current = walker.argument_index(line)
        if walker.feed(item) is frame and frame is not None:
            break
    if frame is None:
        frame = walker.frame
        if frame is None:
            return None
        typed = walker.typed_arguments()
        current = walker.argument_index(line)
    if not frame.name or frame.name_span is None:
        return None

    subcommand = None
    subcommands = get_subcommands(get_command_id(frame.name))
    if subcommands and typed and typed[0].upper() in subcommands:
        subcommand = typed[0].upper()

    logger.debug("Parameter info for %s at %d:%d", frame.name, line, column)
    return ParameterInfoContext(
        command_name=frame.name,
        subcommand=subcommand,
        name_span=frame.name_span,
        start_span=frame.start_span,
        next_spans=list(frame.next_spans),
        end_span=frame.end_span,
        current_parameter=current,
    )


__all__ = [
    "CommandCall",
    "CommandContext",
    "IncludeReference",
    "ParameterInfoContext",
    "TextSpan",
    "iter_command_calls",
    "parse_for_cache_variables",
    "parse_for_env_variables",
    "parse_for_function_parameters",
    "parse_for_functions",
    "parse_for_includes",
    "parse_for_macros",
    "parse_for_parameter_info",
    "parse_for_parameters",
    "parse_for_target_names",
    "parse_for_trigger_command",
    "parse_for_variables",
]
