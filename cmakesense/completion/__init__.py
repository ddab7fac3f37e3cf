"""Completion candidates and call tips for CMake buffers."""

from .declarations import Declaration, DeclarationSet, ItemDeclarations, ItemType
from .service import BufferSession, ParseReason, ParseRequest, parse_source
from .signatures import Signature

__all__ = [
    "BufferSession",
    "Declaration",
    "DeclarationSet",
    "ItemDeclarations",
    "ItemType",
    "ParseReason",
    "ParseRequest",
    "Signature",
    "parse_source",
]
