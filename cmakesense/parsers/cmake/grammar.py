"""CMake parser using tree-sitter-cmake.

Used to re-parse a single included file when looking up the declared
parameters of a function or macro. Tree-sitter recovers from syntax errors,
so by default a partial tree is still searched; strict mode turns errors into
:class:`CMakeParseError`.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

import tree_sitter_cmake
from tree_sitter import Language, Node, Parser, Tree

from cmakesense.parsers.cmake.tokens import clean_token

logger = logging.getLogger("cmakesense.parsers.cmake.grammar")

DEFINITION_NODE_TYPES = ("function_command", "macro_command")


class CMakeParseError(Exception):
    """Raised in strict mode when the source does not parse cleanly."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column


class ParseTreeWrapper:
    """Wrapper around tree-sitter Tree for convenient API access."""

    def __init__(self, tree: Tree, source_bytes: bytes):
        self.tree = tree
        self.source_bytes = source_bytes

    @property
    def has_error(self) -> bool:
        return self.tree.root_node.has_error

    def find_data(self, data_name: str) -> Iterator[ParseNodeWrapper]:
        """Find all nodes with the given type name.

        Args:
            data_name: Node type to search for (e.g., "function_command")

        Yields:
            ParseNodeWrapper objects for each matching node
        """
        def traverse(node: Node) -> Iterator[Node]:
            if node.type == data_name:
                yield node
            for child in node.children:
                yield from traverse(child)

        for node in traverse(self.tree.root_node):
            yield ParseNodeWrapper(node, self.source_bytes)


class ParseNodeWrapper:
    """Wrapper around tree-sitter Node exposing its text and arguments."""

    def __init__(self, node: Node, source_bytes: bytes):
        self.node = node
        self.source_bytes = source_bytes

    def _text(self, node: Node) -> str:
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf8", errors="ignore")

    @property
    def line(self) -> int:
        """0-based line of the node start."""
        return self.node.start_point[0]

    def arguments(self) -> List[str]:
        """Return the text of each ``argument`` descendant, quotes stripped."""
        result: List[str] = []

        def collect(node: Node) -> None:
            for child in node.children:
                if child.type == "argument":
                    result.append(clean_token(self._text(child)))
                else:
                    collect(child)

        collect(self.node)
        return result

    def __str__(self) -> str:
        return self._text(self.node)


def _find_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        error = _find_error(child)
        if error:
            return error
    return None


class CMakeParser:
    """Tree-sitter based CMake parser."""

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.parser = Parser()
        self.parser.language = Language(tree_sitter_cmake.language())

    def parse(self, text: str) -> ParseTreeWrapper:
        """Parse CMake source code.

        Args:
            text: CMake source code as string

        Returns:
            ParseTreeWrapper around the (possibly error-recovered) tree

        Raises:
            CMakeParseError: In strict mode, if the source has syntax errors
        """
        source_bytes = text.encode("utf8")
        tree = self.parser.parse(source_bytes)

        if tree.root_node.has_error and self.strict:
            error_node = _find_error(tree.root_node)
            if error_node:
                line = source_bytes[:error_node.start_byte].count(b"\n") + 1
                col = error_node.start_byte - source_bytes.rfind(b"\n", 0, error_node.start_byte)
                raise CMakeParseError(f"Parse error at line {line}, column {col}", line, col)
            raise CMakeParseError("Parse error in CMake file")

        return ParseTreeWrapper(tree, source_bytes)

    def find_definition(self, text: str, name: str) -> Optional[List[str]]:
        """Return the declared parameters of function or macro ``name``.

        Args:
            text: CMake source code.
            name: Function or macro name, compared ignoring letter case.

        Returns:
            Parameter names after the definition name, or None when ``text``
            defines no such function or macro.
        """
        tree = self.parse(text)
        wanted = name.lower()
        for node_type in DEFINITION_NODE_TYPES:
            for node in tree.find_data(node_type):
                args = node.arguments()
                if args and args[0].lower() == wanted:
                    logger.debug("Found %s at line %d", name, node.line + 1)
                    return args[1:]
        return None


# Expose a single shared parser instance
CMAKE_PARSER = CMakeParser()


def find_definition(text: str, name: str) -> Optional[List[str]]:
    """Look up a function or macro definition with the shared parser."""
    return CMAKE_PARSER.find_definition(text, name)


__all__ = [
    "CMAKE_PARSER",
    "CMakeParseError",
    "CMakeParser",
    "ParseNodeWrapper",
    "ParseTreeWrapper",
    "find_definition",
]
