"""Metadata store and class registration."""
from dataclasses import dataclass
from typing import Annotated

import pytest

from declval import (
    ConstraintDefinitionError,
    SchemaReferenceError,
    Validatable,
    ValidationSchemaNotFound,
    schema_class,
)
from declval.constraints import NumberSchema, Optional, Required, StringSchema
from declval.errors import ErrorCode
from declval.schema import Presence, SchemaKind, number_schema, string_schema


class Owner:
    pass


def test_set_and_get_schema(registry):
    node = number_schema()
    registry.set_schema(Owner, "amount", node)

    assert registry.get_schema(Owner, "amount") is node
    assert registry.get_schema(Owner, "other") is None
    assert Owner in registry


def test_update_schema_requires_existing_schema(registry):
    with pytest.raises(ValidationSchemaNotFound) as info:
        registry.update_schema(Owner, "amount", lambda node: node.required())

    assert info.value.property_key == "amount"
    assert info.value.owner is Owner
    assert info.value.code is ErrorCode.E7001_SCHEMA_NOT_FOUND


def test_update_schema_stores_transformed_node(registry):
    registry.set_schema(Owner, "amount", number_schema())
    updated = registry.update_schema(Owner, "amount", lambda node: node.required())

    assert updated.presence is Presence.REQUIRED
    assert registry.get_schema(Owner, "amount") is updated


def test_class_metadata_walks_bases_with_derived_overrides(registry):
    class Base(Validatable, registry=registry):
        shared: Annotated[int, NumberSchema()]
        base_only: Annotated[str, StringSchema()]

    class Derived(Base):
        shared: Annotated[str, StringSchema(), Required()]
        derived_only: Annotated[int, NumberSchema()]

    metadata = registry.class_metadata(Derived)

    assert list(metadata) == ["shared", "base_only", "derived_only"]
    assert metadata["shared"].schema.kind is SchemaKind.STRING
    assert registry.get_schema(Derived, "base_only") is None
    assert registry.class_metadata(Base)["shared"].schema.kind is SchemaKind.NUMBER


def test_subclass_inherits_registry(registry):
    class Base(Validatable, registry=registry):
        amount: Annotated[int, NumberSchema()]

    class Derived(Base):
        label: Annotated[str, StringSchema()]

    assert registry.own_metadata(Derived).keys() == {"label"}


def test_composite_schema_is_an_object_of_properties(registry):
    class Subject(Validatable, registry=registry):
        amount: Annotated[int, NumberSchema(), Optional()]
        name: Annotated[str, StringSchema()]

    composite = registry.composite_schema(Subject)

    assert composite.kind is SchemaKind.OBJECT
    assert set(composite.keys_map) == {"amount", "name"}


def test_plain_annotations_are_ignored(registry):
    class Subject(Validatable, registry=registry):
        untouched: int
        described: Annotated[int, "just a note"]
        amount: Annotated[int, NumberSchema()]

    assert list(registry.own_metadata(Subject)) == ["amount"]


def test_schema_class_decorator_registers_dataclasses(registry):
    @schema_class(registry=registry)
    @dataclass
    class Point:
        x: Annotated[float, NumberSchema()] = 0.0

    assert registry.get_schema(Point, "x").kind is SchemaKind.NUMBER


def test_resolve_reference(registry):
    class Address(Validatable, registry=registry):
        city: Annotated[str, StringSchema()]

    node = string_schema()
    assert registry.resolve_reference(node) is node
    assert set(registry.resolve_reference(Address).keys_map) == {"city"}
    assert registry.resolve_reference("fixed").allowed == ("fixed",)


def test_resolve_reference_to_unannotated_class(registry):
    with pytest.raises(SchemaReferenceError) as info:
        registry.resolve_reference(Owner)

    assert isinstance(info.value, ConstraintDefinitionError)
    assert info.value.code is ErrorCode.E7003_INVALID_REFERENCE


def test_clear(registry):
    registry.set_schema(Owner, "amount", number_schema())
    registry.clear(Owner)
    assert not registry.is_registered(Owner)
