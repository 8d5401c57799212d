"""Boolean rules.

Without Truthy/Falsy only real booleans and the strings "true"/"false" are
accepted. Matching of string truthy/falsy values ignores case unless
Insensitive(False) is applied.
"""
from __future__ import annotations

from typing import Any

from declval.schema import SchemaKind, boolean_schema

from .base import Establish, Refine


def BooleanSchema() -> Establish:
    return Establish("boolean", lambda registry: boolean_schema())


def Truthy(*values: Any) -> Refine:
    """Additional values converted to True."""
    return Refine("boolean.truthy", lambda node: node.rule(SchemaKind.BOOLEAN, "truthy", *values), values)


def Falsy(*values: Any) -> Refine:
    """Additional values converted to False."""
    return Refine("boolean.falsy", lambda node: node.rule(SchemaKind.BOOLEAN, "falsy", *values), values)


def Insensitive(enabled: bool = True) -> Refine:
    return Refine("boolean.insensitive", lambda node: node.rule(SchemaKind.BOOLEAN, "insensitive", enabled), (enabled,))
