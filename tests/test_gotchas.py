"""Behaviour that surprises people coming from type-hint driven validators."""
from typing import Annotated, Optional as Maybe

import pytest

from declval import Validatable, ValidationSchemaNotFound, Validator, ValidationOptions
from declval.constraints import Keys, NumberSchema, ObjectSchema, Optional, number
from declval.schema import number_schema


def test_nested_shape_requires_explicit_object_schema(registry):
    with pytest.raises(ValidationSchemaNotFound) as info:
        class Subject(Validatable, registry=registry):
            my_property: Annotated[dict, Keys({"nested_property": number_schema()})]

    assert info.value == ValidationSchemaNotFound("my_property")

    class Annotated2(Validatable, registry=registry):
        my_property: Annotated[dict, ObjectSchema(), Keys({"nested_property": number_schema()})]

    instance = Annotated2()
    instance.my_property = {"nested_property": 123}
    assert Validator(ValidationOptions(), registry=registry).is_valid(instance)


def test_absent_optional_property_skips_its_constraints(validator, registry):
    class Subject(Validatable, registry=registry):
        my_property: Annotated[Maybe[float], NumberSchema(), Optional(), number.Min(10)]

    assert validator.is_valid(Subject())


def test_type_hint_alone_does_not_establish_a_schema(registry):
    with pytest.raises(ValidationSchemaNotFound) as info:
        class Subject(Validatable, registry=registry):
            my_property: Annotated[Maybe[float], Optional(), number.Min(10)]

    assert info.value == ValidationSchemaNotFound("my_property")


def test_nullable_hint_without_schema_fails(registry):
    with pytest.raises(ValidationSchemaNotFound):
        class Subject(Validatable, registry=registry):
            my_property: Annotated[Maybe[float], number.Min(10)]


def test_nullable_hint_with_schema_passes(validator, registry):
    class Subject(Validatable, registry=registry):
        my_property: Annotated[Maybe[float], NumberSchema(), number.Min(10)]

    instance = Subject()
    instance.my_property = 20
    assert validator.is_valid(instance)


def test_min_optional_number_end_to_end(validator, registry):
    class Subject(Validatable, registry=registry):
        my_property: Annotated[float, NumberSchema(), Optional(), number.Min(10)]

    instance = Subject()
    assert validator.validate(instance).is_ok()

    instance.my_property = 5
    failure = validator.validate(instance).unwrap_err()
    assert [e.path for e in failure.details] == ["my_property"]

    instance.my_property = 20
    assert validator.validate(instance).unwrap() == {"my_property": 20}
