"""Registration when annotations are stored as strings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import pytest

from declval import SchemaDefinitionError, Validatable, schema_class
from declval.constraints import ArraySchema, NumberSchema, ObjectSchema, Required, StringSchema, number


def test_function_local_class_reference(validator, registry):
    class Inner(Validatable, registry=registry):
        count: Annotated[int, NumberSchema(), Required()]

    class Outer(Validatable, registry=registry):
        inner: Annotated[Inner, ObjectSchema(Inner), Required()]

    outer = Outer()
    outer.inner = {"count": 2}
    assert validator.validate(outer).unwrap() == {"inner": {"count": 2}}

    outer.inner = {}
    assert validator.validate(outer).unwrap_err().paths == ["inner.count"]


def test_self_referencing_type_hint(validator, registry):
    class Node(Validatable, registry=registry):
        name: Annotated[str, StringSchema(), Required()]
        children: Annotated[list[Node], ArraySchema()]

    node = Node()
    node.name, node.children = "root", []
    assert validator.is_valid(node)


def test_function_local_rule_arguments(validator, registry):
    floor = 10

    class Reading(Validatable, registry=registry):
        value: Annotated[float, NumberSchema(), number.Min(floor)]

    reading = Reading()
    reading.value = 5
    assert not validator.is_valid(reading)


def test_decorated_dataclass_with_local_reference(validator, registry):
    @schema_class(registry=registry)
    @dataclass
    class Size:
        width: Annotated[float, NumberSchema(), Required()] = 1.0

    @schema_class(registry=registry)
    @dataclass
    class Box:
        size: Annotated[Size, ObjectSchema(Size)] = None

    assert validator.validate(Box(size=Size(width=3))).unwrap() == {"size": {"width": 3}}


def test_undefined_name_names_the_property(registry):
    with pytest.raises(SchemaDefinitionError) as info:
        class Broken(Validatable, registry=registry):
            other: Annotated[Missing, ObjectSchema(Missing)]  # noqa: F821

    assert info.value.property_key == "other"
    assert info.value.owner.__name__ == "Broken"
