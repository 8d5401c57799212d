"""Schema Algebra

Immutable schema values, their compilation to pydantic-core and the
evaluate() primitive the validator forwards to.

Usage:
    from declval.schema import number_schema, object_schema, evaluate

    node = object_schema({"port": number_schema().rule(SchemaKind.NUMBER, "port").required()})
    result = evaluate({"port": 8080}, node)
    assert result.ok
"""
from .node import (
    MISSING,
    Condition,
    Presence,
    Rule,
    SchemaKind,
    SchemaNode,
    any_schema,
    boolean_schema,
    number_schema,
    string_schema,
    date_schema,
    object_schema,
    array_schema,
    alternatives_schema,
    literal_schema,
)
from .engine import EngineOptions, EngineResult, evaluate, matches, resolve_conditions

__all__ = [
    "MISSING",
    "Condition",
    "Presence",
    "Rule",
    "SchemaKind",
    "SchemaNode",
    "any_schema",
    "boolean_schema",
    "number_schema",
    "string_schema",
    "date_schema",
    "object_schema",
    "array_schema",
    "alternatives_schema",
    "literal_schema",
    "EngineOptions",
    "EngineResult",
    "evaluate",
    "matches",
    "resolve_conditions",
]
