"""Completion and call-tip entry points for one CMake buffer.

A :class:`BufferSession` owns the text of a buffer and the include cache
built for it. Requests are answered synchronously; the include cache is
rebuilt lazily whenever the buffer's include references change.
"""

# Completion must never take the host down on a bad buffer.
# pylint: disable=broad-exception-caught

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from cmakesense.cache.include_cache import IncludeCache
from cmakesense.completion import strategies
from cmakesense.completion.declarations import DeclarationSet
from cmakesense.completion.signatures import Signature
from cmakesense.config.schema import EngineConfig
from cmakesense.parsers.cmake.keywords import CommandId
from cmakesense.parsers.cmake.methods import (
    get_command_parameters,
    get_subcommand_parameters,
)
from cmakesense.parsers.cmake.parsing import (
    ParameterInfoContext,
    parse_for_function_parameters,
    parse_for_includes,
    parse_for_parameter_info,
    parse_for_parameters,
    parse_for_trigger_command,
)
from cmakesense.parsers.cmake.scanner import ScannedToken, paren_depth, scan_lines, split_lines
from cmakesense.parsers.cmake.tokens import TokenKind, TokenTriggers

logger = logging.getLogger("cmakesense.completion.service")


class ParseReason(Enum):
    """Why the host asked for a parse."""

    MEMBER_SELECT = "member_select"
    PARAMETER_INFO = "parameter_info"


@dataclass(frozen=True)
class ParseRequest:
    """A completion or call-tip request.

    Attributes:
        file_path: Path of the buffer.
        line: 0-based line of the caret.
        column: 0-based caret index; the triggering token is the one
            containing the character just before it.
        reason: What the host wants.
        token_kind: Kind of the triggering token as the host saw it. When
            given and different from the scanned token, no result is produced.
    """

    file_path: Union[str, Path]
    line: int
    column: int
    reason: ParseReason = ParseReason.MEMBER_SELECT
    token_kind: Optional[TokenKind] = None


ParseResult = Union[DeclarationSet, Signature, None]


def locate_token(lines: List[str], line: int, column: int) -> Optional[ScannedToken]:
    """Return the token containing the character before the caret."""
    if column <= 0 or line < 0 or line >= len(lines):
        return None
    index = column - 1
    for item in scan_lines(lines[: line + 1]):
        if item.line == line and item.token.start <= index < item.token.end:
            return item
    return None


class BufferSession:
    """Completion state of one buffer.

    Args:
        file_path: Path of the buffer; its directory anchors file listings
            and include resolution.
        text: Buffer text. Read from ``file_path`` when omitted.
        config: Engine configuration.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        text: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.file_path = Path(file_path)
        self.config = config or EngineConfig.default()
        self.cache = IncludeCache(self.config)
        if text is None:
            text = self.file_path.read_text(encoding="utf-8", errors="ignore")
        self._lines: List[str] = split_lines(text)

    @property
    def lines(self) -> List[str]:
        return self._lines

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def update_text(self, text: str) -> None:
        """Replace the buffer text; the include cache follows on next request."""
        self._lines = split_lines(text)

    def refresh_includes(self) -> IncludeCache:
        """Rebuild the include cache if the buffer's include references changed."""
        refs = parse_for_includes(self._lines)
        if self.cache.needs_rebuild(refs, self.file_path):
            logger.debug("Rebuilding include cache of %s (%d references)", self.file_path, len(refs))
            self.cache.rebuild(refs, self.file_path)
        return self.cache

    def _context(self) -> strategies.StrategyContext:
        return strategies.StrategyContext(
            file_path=self.file_path,
            lines=self._lines,
            config=self.config,
            cache=self.refresh_includes(),
        )

    def complete(
        self, line: int, column: int, token_kind: Optional[TokenKind] = None
    ) -> Optional[DeclarationSet]:
        """Return member-selection candidates for the caret position."""
        item = locate_token(self._lines, line, column)
        if item is None:
            return None
        token = item.token
        if token_kind is not None and token.kind is not token_kind:
            logger.debug("Token kind mismatch: expected %s, found %s", token_kind, token.kind)
            return None

        if token.kind is TokenKind.OPEN_PAREN:
            if not token.triggers & TokenTriggers.PARAMETER_START:
                return None
            command_id = parse_for_trigger_command(self._lines, item.line, token.start)
            return strategies.create_declarations(command_id, self._context())

        if token.kind is TokenKind.WHITESPACE:
            if not token.is_argument_boundary:
                return None
            context = parse_for_parameters(self._lines, item.line, token.start)
            if context is None:
                return None
            return strategies.create_declarations(
                context.command_id, self._context(), context.prior_parameters
            )

        if token.kind is TokenKind.VARIABLE_START:
            return strategies.variable_declarations(self._context())
        if token.kind is TokenKind.VARIABLE_START_ENV:
            return strategies.variable_declarations(self._context(), use_env=True)

        if token.kind in (TokenKind.KEYWORD, TokenKind.IDENTIFIER) and paren_depth(item.state) == 0:
            return strategies.command_declarations(self._context())
        return None

    def _user_parameters(self, name: str) -> Optional[List[str]]:
        params = parse_for_function_parameters(self.text, name)
        if params is None:
            params = self.refresh_includes().get_function_parameters(name)
        return params

    def _signature(self, context: ParameterInfoContext) -> Optional[Signature]:
        command_id = context.command_id
        if context.subcommand:
            params = get_subcommand_parameters(command_id, context.subcommand)
            if params is not None:
                return Signature.from_context(
                    context,
                    params,
                    command_name=f"{context.command_name}({context.subcommand}",
                    open_bracket=" ",
                    leading_arguments=1,
                )

        params = get_command_parameters(command_id)
        if params is not None:
            return Signature.from_context(context, params)

        if command_id is CommandId.UNSPECIFIED:
            user_params = self._user_parameters(context.command_name)
            if user_params is not None:
                return Signature.from_context(context, user_params)
        logger.debug("No signature known for %s", context.command_name)
        return None

    def signature(
        self, line: int, column: int, token_kind: Optional[TokenKind] = None
    ) -> Optional[Signature]:
        """Return the call tip of the command enclosing the caret."""
        if token_kind is not None:
            item = locate_token(self._lines, line, column)
            if item is None or item.token.kind is not token_kind:
                return None
        context = parse_for_parameter_info(self._lines, line, column)
        if context is None:
            return None
        return self._signature(context)

    def parse_source(self, request: ParseRequest) -> ParseResult:
        """Answer a request; failures are logged and yield None."""
        try:
            if request.reason is ParseReason.PARAMETER_INFO:
                return self.signature(request.line, request.column, request.token_kind)
            return self.complete(request.line, request.column, request.token_kind)
        except Exception:
            logger.exception(
                "Failed to answer %s request for %s:%d:%d",
                request.reason.value,
                request.file_path,
                request.line,
                request.column,
            )
            return None


def parse_source(
    request: ParseRequest,
    text: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> ParseResult:
    """Answer a single request with a throw-away session.

    Unlike :meth:`BufferSession.parse_source`, an unreadable ``file_path``
    (when ``text`` is omitted) also yields None.
    """
    try:
        session = BufferSession(request.file_path, text=text, config=config)
    except (OSError, UnicodeError) as exc:
        logger.warning("Cannot read %s: %s", request.file_path, exc)
        return None
    return session.parse_source(request)


__all__ = [
    "BufferSession",
    "ParseReason",
    "ParseRequest",
    "ParseResult",
    "locate_token",
    "parse_source",
]
