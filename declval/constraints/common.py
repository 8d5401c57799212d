"""Rules available on every base kind.

Usage:
    class Account(Validatable):
        nickname: Annotated[str, StringSchema(), Optional(), Label("Nickname")]
        status: Annotated[str, AnySchema(), Valid("open", "closed"), Default("open")]
"""
from __future__ import annotations

from typing import Any

from declval.schema import SchemaNode, any_schema

from .base import Compose, Establish, Refine, refine


def AnySchema() -> Establish:
    """Accept any value. Use when the shape is intentionally unconstrained."""
    return Establish("any", lambda registry: any_schema())


def Allow(*values: Any) -> Refine:
    return refine("allow", "allow", *values)


def Concat(schema: Any) -> Compose:
    """Add the rules of ``schema`` (a schema or an annotated class) to the property."""
    return Compose("concat", lambda node, other: node.concat(other), [schema])


def Default(value: Any = None, description: str | None = None) -> Refine:
    """Value used when the property is absent. Callables are invoked on every validation."""
    return Refine("default", lambda node: node.default_value(value, description), (value,))


def Description(text: str) -> Refine:
    return refine("description", "description", text)


def Empty(*values: Any) -> Refine:
    """Treat ``values`` as if the property were absent."""
    return refine("empty", "empty_values", *values)


def Example(value: Any) -> Refine:
    """Record an example. Fails at definition time if the example does not validate."""
    return refine("example", "example", value)


def Forbidden() -> Refine:
    return refine("forbidden", "forbidden")


def Invalid(*values: Any) -> Refine:
    return refine("invalid", "invalid_values", *values)


Disallow = Invalid
Not = Invalid


def Label(name: str) -> Refine:
    """Name used for the property in error messages."""
    return refine("label", "label", name)


def Meta(meta: Any) -> Refine:
    return refine("meta", "meta", meta)


def Notes(*notes: str) -> Refine:
    return refine("notes", "notes", *notes)


def Optional() -> Refine:
    return refine("optional", "optional")


def Options(**options: Any) -> Refine:
    """Override validation options (convert, allow_unknown, strip_unknown, presence) for this key and its children."""
    return Refine("options", lambda node: node.options(**options), tuple(options.items()))


def Raw(enabled: bool = True) -> Refine:
    """Output the original value instead of the converted one."""
    return refine("raw", "raw", enabled)


def Required() -> Refine:
    return refine("required", "required")


def Strict(enabled: bool = True) -> Refine:
    """Disable type conversion for this key and its children."""
    return refine("strict", "strict", enabled)


def Strip() -> Refine:
    """Remove the property from the validated output."""
    return refine("strip", "strip")


def Tags(*tags: str) -> Refine:
    return refine("tags", "tags", *tags)


def Unit(name: str) -> Refine:
    return refine("unit", "unit", name)


def Valid(*values: Any) -> Refine:
    return refine("valid", "valid", *values)


Only = Valid
Equal = Valid


def When(ref: str, is_: Any, then: SchemaNode | None = None, otherwise: SchemaNode | None = None) -> Refine:
    """Merge ``then`` into the schema when the sibling at ``ref`` matches ``is_``, else ``otherwise``.

    ``is_`` is either a schema the sibling must pass or a literal it must equal.
    """
    return Refine("when", lambda node: node.when(ref, is_, then, otherwise), (ref, is_))
