"""Completion candidate lists.

Strategies collect candidates in an :class:`ItemDeclarations` builder and
hand out the immutable :class:`DeclarationSet` it builds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Tuple


class ItemType(Enum):
    """Kind of a completion candidate, used by hosts to pick an icon."""

    COMMAND = "command"
    PROPERTY = "property"
    TARGET = "target"
    VARIABLE = "variable"
    FILE = "file"


@dataclass(frozen=True)
class Declaration:
    """A single completion candidate."""

    text: str
    kind: ItemType

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "kind": self.kind.value}


class DeclarationSet:
    """Immutable ordered sequence of completion candidates."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Declaration] = ()) -> None:
        self._items: Tuple[Declaration, ...] = tuple(items)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Declaration:
        return self._items[index]

    def __contains__(self, text: object) -> bool:
        if isinstance(text, Declaration):
            return text in self._items
        return any(item.text == text for item in self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DeclarationSet):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"DeclarationSet({[item.text for item in self._items]!r})"

    @property
    def names(self) -> List[str]:
        """Candidate texts in order."""
        return [item.text for item in self._items]

    def of_kind(self, kind: ItemType) -> List[str]:
        return [item.text for item in self._items if item.kind is kind]

    def to_list(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self._items]


class ItemDeclarations:
    """Mutable builder for a :class:`DeclarationSet`.

    Args:
        sort: Sort the built set by name ignoring letter case. Target lists
            are built unsorted so they keep declaration order.
    """

    def __init__(self, sort: bool = True) -> None:
        self.sort = sort
        self._items: List[Declaration] = []
        self._excluded: set = set()

    def __len__(self) -> int:
        return len(self._items)

    def add_items(self, items: Iterable[str], kind: ItemType) -> "ItemDeclarations":
        for text in items:
            self.add_item(text, kind)
        return self

    def add_item(self, text: str, kind: ItemType) -> "ItemDeclarations":
        if text:
            self._items.append(Declaration(text, kind))
        return self

    def exclude_items(self, items: Iterable[str]) -> "ItemDeclarations":
        """Drop candidates whose text equals one of ``items``."""
        self._excluded.update(items)
        return self

    def build(self) -> DeclarationSet:
        seen = set()
        result: List[Declaration] = []
        for item in self._items:
            if item.text in self._excluded or item.text in seen:
                continue
            seen.add(item.text)
            result.append(item)
        if self.sort:
            result.sort(key=lambda item: (item.text.upper(), item.text))
        return DeclarationSet(result)
