"""Array rules.

Items() and Ordered() take schemas, annotated classes or literal values.
Lists and tuples are accepted; the output is always a list.
"""
from __future__ import annotations

from typing import Any

from declval.schema import SchemaKind, SchemaNode, array_schema

from .base import Compose, Establish, Refine


def _limit(name: str, limit: int) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        node._require_kind(f"array.{name}", SchemaKind.ARRAY)
        return getattr(node, name)(limit)

    return Refine(f"array.{name}", transform, (limit,))


def ArraySchema() -> Establish:
    return Establish("array", lambda registry: array_schema())


def Items(*items: Any) -> Compose:
    """Every element must match one of ``items``."""
    return Compose("array.items", lambda node, *schemas: node.items(*schemas), items)


def Ordered(*items: Any) -> Compose:
    """Elements must match ``items`` position by position."""
    return Compose("array.ordered", lambda node, *schemas: node.ordered(*schemas), items)


def Length(limit: int) -> Refine:
    return _limit("length", limit)


def Max(limit: int) -> Refine:
    return _limit("max", limit)


def Min(limit: int) -> Refine:
    return _limit("min", limit)


def Unique() -> Refine:
    return Refine("array.unique", lambda node: node.rule(SchemaKind.ARRAY, "unique"))


def Single(enabled: bool = True) -> Refine:
    """Accept a lone value in place of a one-element array."""
    return Refine("array.single", lambda node: node.rule(SchemaKind.ARRAY, "single", enabled), (enabled,))
