"""Cross-file symbol cache.

Snapshot of the symbols (variables, cache entries, functions, macros)
contributed by the files a buffer pulls in with ``include()`` and
``find_package()``. The cache is rebuilt from source text; a rebuild replaces
the whole snapshot.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Deque, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from cmakesense.config.schema import EngineConfig
from cmakesense.parsers.cmake.grammar import CMakeParseError, find_definition
from cmakesense.parsers.cmake.parsing import (
    IncludeReference,
    parse_for_cache_variables,
    parse_for_env_variables,
    parse_for_function_parameters,
    parse_for_functions,
    parse_for_includes,
    parse_for_macros,
    parse_for_variables,
)
from cmakesense.parsers.cmake.scanner import split_lines
from cmakesense.parsers.cmake.variables import expand_directory_variables

logger = logging.getLogger("cmakesense.cache.include_cache")


@dataclass(frozen=True)
class IncludeCacheEntry:
    """Symbols recovered from one included file."""

    path: Path
    variables: Tuple[str, ...] = ()
    env_variables: Tuple[str, ...] = ()
    cache_variables: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    macros: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, path: Path, text: str) -> "IncludeCacheEntry":
        return cls(
            path=path,
            variables=tuple(parse_for_variables(text)),
            env_variables=tuple(parse_for_env_variables(text)),
            cache_variables=tuple(parse_for_cache_variables(text)),
            functions=tuple(parse_for_functions(text)),
            macros=tuple(parse_for_macros(text)),
        )

    def defines(self, name: str) -> bool:
        """Check whether this file defines function or macro ``name``."""
        wanted = name.lower()
        return any(n.lower() == wanted for n in self.functions + self.macros)


def _merge(groups: Iterable[Sequence[str]]) -> List[str]:
    result: List[str] = []
    seen = set()
    for group in groups:
        for name in group:
            key = name.upper()
            if key not in seen:
                seen.add(key)
                result.append(name)
    return result


class IncludeCache:
    """Symbols of the files included by one buffer.

    Args:
        config: Engine configuration (modules directory, nesting limits,
            file size limit).
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.default()
        self._modules_dir = self.config.resolve_modules_dir()
        self._entries: Mapping[Path, IncludeCacheEntry] = MappingProxyType({})
        self._graph: nx.DiGraph = nx.DiGraph()
        self._key: Optional[Tuple[Path, Tuple[IncludeReference, ...]]] = None

    @property
    def modules_dir(self) -> Optional[Path]:
        return self._modules_dir

    @property
    def entries(self) -> Mapping[Path, IncludeCacheEntry]:
        """Read-only mapping of resolved file path to its symbols."""
        return self._entries

    @property
    def include_graph(self) -> nx.DiGraph:
        """Include graph of the last rebuild; edges point from includer to included."""
        return self._graph

    def resolve(self, ref: IncludeReference, directory: Path) -> Optional[Path]:
        """Resolve an include reference to a file.

        Args:
            ref: The reference to resolve.
            directory: Directory of the file containing the reference.

        Returns:
            Absolute path of the referenced file, or None when it cannot be
            found in ``directory`` or the modules directory.
        """
        name = expand_directory_variables(ref.name, directory)
        if "${" in name or "$ENV{" in name:
            logger.debug("Skipping unexpanded include reference %s", ref.name)
            return None

        if ref.command == "find_package":
            file_name = f"Find{name}.cmake"
        elif Path(name).suffix:
            file_name = name
        else:
            file_name = f"{name}.cmake"

        candidate = Path(file_name)
        if candidate.is_absolute():
            bases = [None]
        else:
            bases = [base for base in (directory, self._modules_dir) if base is not None]
        for base in bases:
            path = candidate if base is None else base / candidate
            try:
                if path.is_file():
                    return path.resolve()
            except OSError as exc:
                logger.debug("Cannot check include candidate %s: %s", path, exc)
                return None
        return None

    def _read(self, path: Path) -> Optional[str]:
        try:
            if self.config.max_file_size and path.stat().st_size > self.config.max_file_size:
                logger.warning("Skipping %s: larger than %d bytes", path, self.config.max_file_size)
                return None
            return path.read_text(encoding="utf-8", errors="ignore")
        except (OSError, UnicodeError) as exc:
            logger.warning("Cannot read included file %s: %s", path, exc)
            return None

    def needs_rebuild(self, refs: Iterable[IncludeReference], current_file: Path | str) -> bool:
        """Check whether ``refs`` differ from those of the last rebuild."""
        return self._key != (Path(current_file), tuple(refs))

    def rebuild(self, refs: Iterable[IncludeReference], current_file: Path | str) -> None:
        """Rebuild the cache from the include references of ``current_file``.

        Unresolvable references are skipped. A file that cannot be read
        contributes no symbols; the other files are still processed.
        Nested includes are followed up to ``max_include_depth`` levels when
        ``follow_nested_includes`` is set.
        """
        refs = tuple(refs)
        current_file = Path(current_file)
        root = current_file.resolve()
        entries: Dict[Path, IncludeCacheEntry] = {}
        graph = nx.DiGraph()
        graph.add_node(root, root=True)

        queue: Deque[Tuple[IncludeReference, Path, Path, int]] = deque(
            (ref, current_file.parent, root, 1) for ref in refs
        )
        while queue:
            ref, directory, parent, depth = queue.popleft()
            path = self.resolve(ref, directory)
            if path is None:
                logger.debug("Unresolved %s(%s) from %s", ref.command, ref.name, parent)
                continue
            known = path in graph
            graph.add_edge(parent, path, command=ref.command)
            if known:
                continue

            text = self._read(path)
            if text is None:
                continue
            entries[path] = IncludeCacheEntry.from_text(path, text)
            logger.debug("Cached %s (depth %d)", path, depth)

            if self.config.follow_nested_includes and depth < self.config.max_include_depth:
                for nested in parse_for_includes(split_lines(text)):
                    queue.append((nested, path.parent, path, depth + 1))

        self._entries = MappingProxyType(entries)
        self._graph = graph
        self._key = (current_file, refs)

    def include_cycles(self) -> List[List[Path]]:
        """Return the include cycles found by the last rebuild."""
        return [list(cycle) for cycle in nx.simple_cycles(self._graph)]

    def all_variables(self) -> List[str]:
        return _merge(entry.variables for entry in self._entries.values())

    def all_env_variables(self) -> List[str]:
        return _merge(entry.env_variables for entry in self._entries.values())

    def all_cache_variables(self) -> List[str]:
        return _merge(entry.cache_variables for entry in self._entries.values())

    def all_functions(self) -> List[str]:
        return _merge(entry.functions for entry in self._entries.values())

    def all_macros(self) -> List[str]:
        return _merge(entry.macros for entry in self._entries.values())

    def find_owner(self, name: str) -> Optional[IncludeCacheEntry]:
        """Return the entry of the file defining function or macro ``name``."""
        for entry in self._entries.values():
            if entry.defines(name):
                return entry
        return None

    def get_function_parameters(self, name: str) -> Optional[List[str]]:
        """Return the declared parameters of a cached function or macro.

        The owning file is re-read and parsed with tree-sitter-cmake; the
        scanner-based recovery is used when the grammar finds nothing.
        """
        entry = self.find_owner(name)
        if entry is None:
            return None
        text = self._read(entry.path)
        if text is None:
            return None
        try:
            params = find_definition(text, name)
        except CMakeParseError as exc:
            logger.debug("Grammar failed on %s: %s", entry.path, exc)
            params = None
        if params is None:
            params = parse_for_function_parameters(text, name)
        return params


__all__ = ["IncludeCache", "IncludeCacheEntry"]
