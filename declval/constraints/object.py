"""Object rules.

An object property is established with ObjectSchema() and its nested keys
supplied with Keys(). Key values may be schemas or other annotated classes;
a class contributes the keys visible on it, inherited ones included.

Usage:
    class Address(Validatable):
        city: Annotated[str, StringSchema(), Required()]

    class Customer(Validatable):
        address: Annotated[Address, ObjectSchema(), Keys({"home": Address})]
        billing: Annotated[Address, ObjectSchema(Address)]
"""
from __future__ import annotations

from typing import Any, Mapping

from declval.errors import ConstraintDefinitionError
from declval.metadata import SchemaRegistry
from declval.schema import SchemaKind, SchemaNode, object_schema

from .base import Compose, Establish, Refine


def _rule(name: str, *args: Any) -> Refine:
    return Refine(f"object.{name}", lambda node: node.rule(SchemaKind.OBJECT, name, *args), args)


def _limit(name: str, limit: int) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        node._require_kind(f"object.{name}", SchemaKind.OBJECT)
        return getattr(node, name)(limit)

    return Refine(f"object.{name}", transform, (limit,))


def _peers(name: str, peers: tuple[str, ...]) -> Refine:
    def transform(node: SchemaNode) -> SchemaNode:
        if not peers:
            raise ConstraintDefinitionError(f"object.{name} requires at least one peer")
        return node.rule(SchemaKind.OBJECT, name, *peers)

    return Refine(f"object.{name}", transform, peers)


def ObjectSchema(target: Any = None) -> Establish:
    """Establish an object; with ``target`` (an annotated class or object schema) its keys are taken over."""
    def factory(registry: SchemaRegistry) -> SchemaNode:
        if target is None:
            return object_schema()
        node = registry.resolve_reference(target)
        if node.kind is not SchemaKind.OBJECT:
            raise ConstraintDefinitionError(f"ObjectSchema target must be an object schema, got {node.kind.value}")
        return node

    return Establish("object", factory, () if target is None else (target,))


def Keys(keys: Mapping[str, Any]) -> Compose:
    """Declare nested keys. Values are schemas or annotated classes."""
    names = list(keys)

    def combine(node: SchemaNode, *schemas: SchemaNode) -> SchemaNode:
        return node.keys(dict(zip(names, schemas)))

    return Compose("object.keys", combine, [keys[name] for name in names])


def And(*peers: str) -> Refine:
    """If any of ``peers`` is present, all of them must be."""
    return _peers("and", peers)


def Nand(*peers: str) -> Refine:
    """``peers`` must not all be present together."""
    return _peers("nand", peers)


def Or(*peers: str) -> Refine:
    """At least one of ``peers`` must be present."""
    return _peers("or", peers)


def Xor(*peers: str) -> Refine:
    """Exactly one of ``peers`` must be present."""
    return _peers("xor", peers)


def With(key: str, *peers: str) -> Refine:
    """When ``key`` is present, ``peers`` must be too."""
    return _rule("with", key, peers)


def Without(key: str, *peers: str) -> Refine:
    """When ``key`` is present, none of ``peers`` may be."""
    return _rule("without", key, peers)


def Length(limit: int) -> Refine:
    return _limit("length", limit)


def Max(limit: int) -> Refine:
    return _limit("max", limit)


def Min(limit: int) -> Refine:
    return _limit("min", limit)


def Rename(source: str, target: str, alias: bool = False, override: bool = False) -> Refine:
    """Move ``source`` to ``target`` before validation; ``alias`` keeps the original key."""
    return _rule("rename", source, target, alias, override)


def Type(cls: type, name: str | None = None) -> Refine:
    """The value must be an instance of ``cls``."""
    def transform(node: SchemaNode) -> SchemaNode:
        if not isinstance(cls, type):
            raise ConstraintDefinitionError("object.type requires a class")
        return node.rule(SchemaKind.OBJECT, "type", cls, name)

    return Refine("object.type", transform, (cls,))


def Unknown(allow: bool = True) -> Refine:
    """Allow (or forbid) keys that are not declared."""
    return _rule("unknown", allow)
