"""String rules.

Empty strings are rejected unless allowed explicitly (Allow("")). Trim,
Lowercase and Uppercase convert while converting and only check in strict
mode. Format rules (Email, Hex, Uri...) check the value after conversion.
"""
from __future__ import annotations

import re
from typing import Any

from declval.errors import ConstraintDefinitionError
from declval.schema import SchemaKind, SchemaNode, string_schema

from .base import Establish, Refine


def _rule(name: str, *args: Any) -> Refine:
    return Refine(f"string.{name}", lambda node: node.rule(SchemaKind.STRING, name, *args), args)


def _limit(name: str, limit: int) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        node._require_kind(f"string.{name}", SchemaKind.STRING)
        return getattr(node, name)(limit)

    return Refine(f"string.{name}", transform, (limit,))


def _pattern(pattern: str | re.Pattern) -> str:
    source = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
    try:
        re.compile(source)
    except re.error as exc:
        raise ConstraintDefinitionError(f"Invalid regular expression {source!r}: {exc}") from exc
    return source


def StringSchema() -> Establish:
    return Establish("string", lambda registry: string_schema())


def Alphanum() -> Refine:
    return _rule("alphanum")


def CreditCard() -> Refine:
    """Digits passing the Luhn checksum."""
    return _rule("credit_card")


def Email() -> Refine:
    return _rule("email")


def Guid() -> Refine:
    return _rule("guid")


Uuid = Guid


def Hex() -> Refine:
    return _rule("hex")


def Hostname() -> Refine:
    return _rule("hostname")


def Insensitive() -> Refine:
    """Compare allowed and invalid values case-insensitively."""
    return _rule("insensitive")


def Ip() -> Refine:
    """IPv4 or IPv6 address."""
    return _rule("ip")


def IsoDate() -> Refine:
    return _rule("iso_date")


def Length(limit: int) -> Refine:
    return _limit("length", limit)


def Lowercase() -> Refine:
    return _rule("lowercase")


def Max(limit: int) -> Refine:
    return _limit("max", limit)


def Min(limit: int) -> Refine:
    return _limit("min", limit)


def Regex(pattern: str | re.Pattern, name: str | None = None, invert: bool = False) -> Refine:
    """The value must match ``pattern`` (or must not, with ``invert``)."""
    def transform(node: SchemaNode) -> SchemaNode:
        return node.rule(SchemaKind.STRING, "regex", _pattern(pattern), name, invert)

    return Refine("string.regex", transform, (pattern,))


Pattern = Regex


def Replace(pattern: str | re.Pattern, replacement: str) -> Refine:
    """Replace every match of ``pattern`` before the remaining rules run."""
    def transform(node: SchemaNode) -> SchemaNode:
        return node.rule(SchemaKind.STRING, "replace", _pattern(pattern), replacement)

    return Refine("string.replace", transform, (pattern, replacement))


def Token() -> Refine:
    """Letters, digits and underscores only."""
    return _rule("token")


def Trim(enabled: bool = True) -> Refine:
    return _rule("trim", enabled)


def Uppercase() -> Refine:
    return _rule("uppercase")


def Uri() -> Refine:
    return _rule("uri")
