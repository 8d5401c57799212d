"""Number rules.

Numbers accept ints and floats (and numeric strings while converting), never
booleans. Integer inputs keep their int type in the output.
"""
from __future__ import annotations

from declval.errors import ConstraintDefinitionError
from declval.schema import SchemaKind, SchemaNode, number_schema

from .base import Establish, Refine

Number = int | float


def _rule(name: str, *args) -> Refine:
    return Refine(f"number.{name}", lambda node: node.rule(SchemaKind.NUMBER, name, *args), args)


def _limit(name: str, limit: Number) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        node._require_kind(f"number.{name}", SchemaKind.NUMBER)
        return getattr(node, name)(limit)

    return Refine(f"number.{name}", transform, (limit,))


def NumberSchema() -> Establish:
    return Establish("number", lambda registry: number_schema())


def Greater(limit: Number) -> Refine:
    return _rule("greater", limit)


def Less(limit: Number) -> Refine:
    return _rule("less", limit)


def Max(limit: Number) -> Refine:
    return _limit("max", limit)


def Min(limit: Number) -> Refine:
    return _limit("min", limit)


def Integer() -> Refine:
    return _rule("integer")


def Multiple(base: Number) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        if isinstance(base, bool) or not isinstance(base, (int, float)) or base <= 0:
            raise ConstraintDefinitionError("number.multiple base must be a positive number")
        return node.rule(SchemaKind.NUMBER, "multiple", base)

    return Refine("number.multiple", transform, (base,))


def Negative() -> Refine:
    return _rule("negative")


def Positive() -> Refine:
    return _rule("positive")


def Precision(limit: int) -> Refine:
    """Maximum number of decimal places; values are rounded while converting."""
    return _rule("precision", limit)


def Port() -> Refine:
    """Integer between 0 and 65535."""
    return _rule("port")
