"""Date rules.

Dates accept datetime objects and, while converting, ISO 8601 strings and
unix timestamps. Limits may be datetimes, ISO strings or "now".
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from declval.errors import ConstraintDefinitionError
from declval.schema import SchemaKind, SchemaNode, date_schema

from .base import Establish, Refine

_TIMESTAMP_UNITS = ("javascript", "unix")


def _as_limit(limit: Any) -> datetime | str:
    if limit == "now" or isinstance(limit, datetime):
        return limit
    if isinstance(limit, date):
        return datetime.combine(limit, time.min)
    if isinstance(limit, str):
        try:
            return datetime.fromisoformat(limit.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ConstraintDefinitionError(f"Invalid date limit {limit!r}") from exc
    raise ConstraintDefinitionError(f"Invalid date limit {limit!r}")


def _limit(name: str, limit: Any) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        return node.rule(SchemaKind.DATE, name, _as_limit(limit))

    return Refine(f"date.{name}", transform, (limit,))


def DateSchema() -> Establish:
    return Establish("date", lambda registry: date_schema())


def Iso() -> Refine:
    """Only ISO 8601 strings (or datetime objects) are accepted."""
    return Refine("date.iso", lambda node: node.rule(SchemaKind.DATE, "iso"))


def Max(limit: Any) -> Refine:
    return _limit("max", limit)


def Min(limit: Any) -> Refine:
    return _limit("min", limit)


def Timestamp(unit: str = "javascript") -> Refine:
    """Accept numeric timestamps in milliseconds ("javascript") or seconds ("unix")."""
    def transform(node: SchemaNode) -> SchemaNode:
        if unit not in _TIMESTAMP_UNITS:
            raise ConstraintDefinitionError(f"date.timestamp unit must be one of {', '.join(_TIMESTAMP_UNITS)}")
        return node.rule(SchemaKind.DATE, "timestamp", unit)

    return Refine("date.timestamp", transform, (unit,))
