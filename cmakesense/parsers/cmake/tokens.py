"""Token types and small token-text helpers for the CMake scanner.

The scanner produces :class:`Token` values one line at a time. Tokens only
carry offsets into the line they were scanned from; callers slice the line
text themselves when they need the token's characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntFlag


class TokenKind(Enum):
    """Lexical classes recognised by the scanner."""

    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    OPEN_PAREN = "open_paren"
    CLOSE_PAREN = "close_paren"
    WHITESPACE = "whitespace"
    VARIABLE_START = "variable_start"
    VARIABLE_START_ENV = "variable_start_env"
    STRING_LITERAL = "string_literal"
    COMMENT = "comment"
    OTHER = "other"


class TokenTriggers(IntFlag):
    """Editor triggers attached to a token."""

    NONE = 0
    MEMBER_SELECT = 1
    PARAMETER_START = 2
    PARAMETER_NEXT = 4
    PARAMETER_END = 8
    MATCH_BRACES = 16

    # Whitespace separating two sibling arguments of a command.
    ARGUMENT_BOUNDARY = PARAMETER_NEXT


@dataclass(frozen=True)
class Token:
    """A single scanned token.

    Attributes:
        kind: Lexical class of the token.
        start: Index of the first character in the scanned line.
        end: Index one past the last character (``line[start:end]``).
        triggers: Editor triggers fired by this token.
    """

    kind: TokenKind
    start: int
    end: int
    triggers: TokenTriggers = TokenTriggers.NONE

    def text(self, line: str) -> str:
        """Return the characters of this token within ``line``."""
        return line[self.start:self.end]

    @property
    def is_argument_boundary(self) -> bool:
        return bool(self.triggers & TokenTriggers.ARGUMENT_BOUNDARY)


CMAKE_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")


def clean_token(token: str) -> str:
    """Normalize a CMake token by removing quotes and trimming whitespace.

    Args:
        token: Raw token string extracted from arguments.

    Returns:
        Cleaned token string without surrounding quotes and extra whitespace.
    """
    if not token:
        return token
    token = token.strip()
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        token = token[1:-1]
    return token.strip()


def is_identifier(text: str) -> bool:
    """Check whether ``text`` is a plain CMake identifier."""
    return bool(IDENTIFIER_RE.match(text))


__all__ = [
    "CMAKE_VAR_PATTERN",
    "Token",
    "TokenKind",
    "TokenTriggers",
    "clean_token",
    "is_identifier",
]
