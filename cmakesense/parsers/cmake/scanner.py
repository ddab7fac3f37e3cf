"""Line-oriented CMake token scanner.

The scanner is a pure function of ``(line text, input state)``. Everything it
needs to remember between lines (open parentheses, the command whose
argument list is open, unterminated strings and bracket comments) is packed
into a single integer that the caller threads from the end of one line into
the start of the next.

State layout::

    bits  0-7   parenthesis depth (saturates at 255)
    bits  8-15  CommandId of the most recent command word at depth 0
    bits 16-17  continuation mode (none, quoted string, bracket comment,
                bracket argument)
    bits 18-22  bracket level, the number of '=' in "[==["
    bit  23     an argument token is pending at depth >= 1
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, NamedTuple, Tuple

from cmakesense.parsers.cmake.keywords import CommandId, get_command_id
from cmakesense.parsers.cmake.tokens import (
    Token,
    TokenKind,
    TokenTriggers,
    is_identifier,
)

MODE_NONE = 0
MODE_STRING = 1
MODE_BRACKET_COMMENT = 2
MODE_BRACKET_ARGUMENT = 3

_DEPTH_MASK = 0xFF
_COMMAND_SHIFT = 8
_COMMAND_MASK = 0xFF
_MODE_SHIFT = 16
_MODE_MASK = 0x3
_LEVEL_SHIFT = 18
_LEVEL_MASK = 0x1F
_PENDING_BIT = 1 << 23

_MAX_DEPTH = _DEPTH_MASK
_MAX_LEVEL = _LEVEL_MASK

_WHITESPACE_RE = re.compile(r"[ \t]+")
_WORD_RE = re.compile(r'[^\s()"#$\\{}]+')
_BRACKET_OPEN_RE = re.compile(r"\[(=*)\[")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class ScanResult(NamedTuple):
    """Tokens of one line plus the state to carry into the next line."""

    tokens: Tuple[Token, ...]
    state: int


class ScannedToken(NamedTuple):
    """A token produced while scanning several lines."""

    line: int
    token: Token
    text: str
    state: int


def paren_depth(state: int) -> int:
    """Return the parenthesis depth encoded in ``state``."""
    return state & _DEPTH_MASK


def inside_parens(state: int) -> bool:
    """Check whether ``state`` is inside a command's argument list."""
    return paren_depth(state) > 0


def get_last_command(state: int) -> CommandId:
    """Return the most recently seen command encoded in ``state``."""
    value = (state >> _COMMAND_SHIFT) & _COMMAND_MASK
    try:
        return CommandId(value)
    except ValueError:
        return CommandId.UNSPECIFIED


def continuation_mode(state: int) -> int:
    """Return the continuation mode (one of the ``MODE_*`` constants)."""
    return (state >> _MODE_SHIFT) & _MODE_MASK


def in_continuation(state: int) -> bool:
    """Check whether a string or bracket construct continues past the line."""
    return continuation_mode(state) != MODE_NONE


def make_state(
    depth: int = 0,
    command: int = 0,
    mode: int = MODE_NONE,
    level: int = 0,
    pending: bool = False,
) -> int:
    """Pack scanner fields into a state integer."""
    state = min(max(depth, 0), _MAX_DEPTH)
    state |= (int(command) & _COMMAND_MASK) << _COMMAND_SHIFT
    state |= (mode & _MODE_MASK) << _MODE_SHIFT
    state |= (min(level, _MAX_LEVEL) & _LEVEL_MASK) << _LEVEL_SHIFT
    if pending:
        state |= _PENDING_BIT
    return state


class _LineScanner:
    """Cursor over a single line; only lives for the duration of one scan."""

    def __init__(self, line: str, state: int) -> None:
        self.line = line
        self.pos = 0
        self.depth = paren_depth(state)
        self.command = (state >> _COMMAND_SHIFT) & _COMMAND_MASK
        self.mode = continuation_mode(state)
        self.level = (state >> _LEVEL_SHIFT) & _LEVEL_MASK
        # A line break always ends the argument that was being typed.
        self.pending = False

    @property
    def state(self) -> int:
        return make_state(self.depth, self.command, self.mode, self.level, self.pending)

    def __iter__(self) -> Iterator[Token]:
        while self.pos < len(self.line):
            yield self._next_token()

    def _emit(
        self,
        kind: TokenKind,
        start: int,
        end: int,
        triggers: TokenTriggers = TokenTriggers.NONE,
    ) -> Token:
        end = min(max(end, start + 1), len(self.line))
        self.pos = end
        return Token(kind, start, end, triggers)

    def _mark_argument(self) -> None:
        if self.depth > 0:
            self.pending = True

    def _next_token(self) -> Token:
        line = self.line
        pos = self.pos

        if self.mode == MODE_STRING:
            self._mark_argument()
            return self._finish_string(pos, pos)
        if self.mode in (MODE_BRACKET_COMMENT, MODE_BRACKET_ARGUMENT):
            return self._finish_bracket(pos, pos)

        ch = line[pos]

        if ch in " \t":
            end = _WHITESPACE_RE.match(line, pos).end()
            triggers = TokenTriggers.NONE
            if self.depth == 1 and self.pending:
                triggers = TokenTriggers.MEMBER_SELECT | TokenTriggers.PARAMETER_NEXT
                self.pending = False
            return self._emit(TokenKind.WHITESPACE, pos, end, triggers)

        if ch == "#":
            match = _BRACKET_OPEN_RE.match(line, pos + 1)
            if match:
                self.mode = MODE_BRACKET_COMMENT
                self.level = min(len(match.group(1)), _MAX_LEVEL)
                return self._finish_bracket(pos, match.end())
            return self._emit(TokenKind.COMMENT, pos, len(line))

        if ch == '"':
            self.mode = MODE_STRING
            self._mark_argument()
            return self._finish_string(pos, pos + 1)

        if ch == "[" and self.depth > 0:
            match = _BRACKET_OPEN_RE.match(line, pos)
            if match:
                self.mode = MODE_BRACKET_ARGUMENT
                self.level = min(len(match.group(1)), _MAX_LEVEL)
                self._mark_argument()
                return self._finish_bracket(pos, match.end())

        if ch == "(":
            triggers = TokenTriggers.MATCH_BRACES
            if self.depth == 0:
                triggers |= TokenTriggers.MEMBER_SELECT | TokenTriggers.PARAMETER_START
                self.pending = False
            else:
                self._mark_argument()
            self.depth = min(self.depth + 1, _MAX_DEPTH)
            return self._emit(TokenKind.OPEN_PAREN, pos, pos + 1, triggers)

        if ch == ")":
            triggers = TokenTriggers.MATCH_BRACES
            if self.depth > 0:
                self.depth -= 1
                if self.depth == 0:
                    triggers |= TokenTriggers.PARAMETER_END
                    self.pending = False
                else:
                    self._mark_argument()
            return self._emit(TokenKind.CLOSE_PAREN, pos, pos + 1, triggers)

        if ch == "$":
            if line.startswith("${", pos):
                self._mark_argument()
                return self._emit(
                    TokenKind.VARIABLE_START, pos, pos + 2, TokenTriggers.MEMBER_SELECT
                )
            if line.startswith("$ENV{", pos):
                self._mark_argument()
                return self._emit(
                    TokenKind.VARIABLE_START_ENV, pos, pos + 5, TokenTriggers.MEMBER_SELECT
                )

        match = _WORD_RE.match(line, pos)
        if match:
            word = match.group(0)
            kind = TokenKind.OTHER
            if is_identifier(word):
                kind = TokenKind.IDENTIFIER
                if self.depth == 0:
                    command_id = get_command_id(word)
                    self.command = int(command_id)
                    if command_id is not CommandId.UNSPECIFIED:
                        kind = TokenKind.KEYWORD
            elif self.depth == 0:
                self.command = int(CommandId.UNSPECIFIED)
            self._mark_argument()
            return self._emit(kind, pos, match.end())

        self._mark_argument()
        end = pos + 2 if ch == "\\" else pos + 1
        return self._emit(TokenKind.OTHER, pos, end)

    def _finish_string(self, start: int, pos: int) -> Token:
        line = self.line
        i = pos
        while i < len(line):
            ch = line[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                self.mode = MODE_NONE
                return self._emit(TokenKind.STRING_LITERAL, start, i + 1)
            i += 1
        return self._emit(TokenKind.STRING_LITERAL, start, len(line))

    def _finish_bracket(self, start: int, pos: int) -> Token:
        kind = TokenKind.COMMENT
        if self.mode == MODE_BRACKET_ARGUMENT:
            kind = TokenKind.STRING_LITERAL
            self._mark_argument()
        closing = "]" + "=" * self.level + "]"
        index = self.line.find(closing, pos)
        if index < 0:
            return self._emit(kind, start, len(self.line))
        self.mode = MODE_NONE
        self.level = 0
        return self._emit(kind, start, index + len(closing))


def scan(line: str, state: int = 0) -> ScanResult:
    """Scan one line of CMake code.

    Args:
        line: Text of the line without its line terminator.
        state: State returned by the scan of the previous line (0 at the
            start of a file).

    Returns:
        ScanResult with every token of the line and the outgoing state.
    """
    scanner = _LineScanner(line, state)
    tokens = tuple(scanner)
    return ScanResult(tokens, scanner.state)


def scan_lines(lines: Iterable[str], state: int = 0) -> Iterator[ScannedToken]:
    """Scan consecutive lines, threading the state from line to line.

    Yields:
        ScannedToken for each token, carrying the state right after it.
    """
    for line_number, line in enumerate(lines):
        scanner = _LineScanner(line, state)
        for token in scanner:
            yield ScannedToken(line_number, token, token.text(line), scanner.state)
        state = scanner.state


def split_lines(code: str) -> List[str]:
    """Split source text into lines at CR, LF and CRLF only.

    Form feeds and other Unicode line separators stay inside their line so
    line numbers agree with the editor.
    """
    return _LINE_BREAK_RE.split(code)


__all__ = [
    "MODE_BRACKET_ARGUMENT",
    "MODE_BRACKET_COMMENT",
    "MODE_NONE",
    "MODE_STRING",
    "ScanResult",
    "ScannedToken",
    "continuation_mode",
    "get_last_command",
    "in_continuation",
    "inside_parens",
    "make_state",
    "paren_depth",
    "scan",
    "scan_lines",
    "split_lines",
]
