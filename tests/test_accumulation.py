"""How rules on one property combine into its schema."""
from typing import Annotated

import pytest

from declval import (
    ConstraintDefinitionError,
    SchemaDefinitionError,
    Validatable,
    ValidationSchemaNotFound,
)
from declval.constraints import (
    AnySchema,
    Equal,
    NumberSchema,
    Only,
    Optional,
    Required,
    StringSchema,
    Valid,
    boolean,
    number,
    string,
)
from declval.errors import ErrorCode
from declval.schema import Presence


def test_second_establishing_rule_fails(registry):
    with pytest.raises(ConstraintDefinitionError) as info:
        class Subject(Validatable, registry=registry):
            amount: Annotated[int, NumberSchema(), StringSchema()]

    assert info.value.property_key == "amount"
    assert "amount" in str(info.value)
    assert info.value.code is ErrorCode.E7002_CONSTRAINT_CONFLICT


def test_refinement_before_establishment_fails(registry):
    with pytest.raises(ValidationSchemaNotFound) as info:
        class Subject(Validatable, registry=registry):
            amount: Annotated[int, Required(), NumberSchema()]

    assert info.value.property_key == "amount"
    assert info.value.owner.__name__ == "Subject"


def test_failures_carry_a_note_naming_the_rule(registry):
    with pytest.raises(SchemaDefinitionError) as info:
        class Subject(Validatable, registry=registry):
            amount: Annotated[int, number.Min(3)]

    assert any("number.min(3)" in note and "Subject.amount" in note for note in info.value.__notes__)


def test_kind_specific_rule_on_wrong_kind_fails(registry):
    with pytest.raises(ConstraintDefinitionError) as info:
        class Subject(Validatable, registry=registry):
            name: Annotated[str, StringSchema(), number.Min(3)]

    assert info.value.property_key == "name"

    with pytest.raises(ConstraintDefinitionError):
        class Other(Validatable, registry=registry):
            flag: Annotated[bool, NumberSchema(), boolean.Truthy("yes")]


def test_rules_apply_in_declaration_order(registry):
    class Subject(Validatable, registry=registry):
        required_last: Annotated[int, NumberSchema(), Optional(), Required()]
        optional_last: Annotated[int, NumberSchema(), Required(), Optional()]

    assert registry.get_schema(Subject, "required_last").presence is Presence.REQUIRED
    assert registry.get_schema(Subject, "optional_last").presence is Presence.OPTIONAL


def test_last_presence_rule_decides_absent_properties(validator, registry):
    class RequiredLast(Validatable, registry=registry):
        amount: Annotated[int, NumberSchema(), Optional(), Required()]

    class OptionalLast(Validatable, registry=registry):
        amount: Annotated[int, NumberSchema(), Required(), Optional()]

    failure = validator.validate(RequiredLast()).unwrap_err()
    assert (failure.paths, failure.details[0].type) == (["amount"], "missing")
    assert validator.validate(OptionalLast()).unwrap() == {}


def test_refinements_fold_over_the_established_node(registry):
    class Subject(Validatable, registry=registry):
        code: Annotated[str, StringSchema(), string.Min(2), string.Max(4), string.Alphanum()]

    node = registry.get_schema(Subject, "code")
    assert [rule.name for rule in node.rules] == ["min", "max", "alphanum"]
    assert node.history == ("string.min", "string.max", "string.alphanum")


def test_aliases_denote_the_same_operation(registry):
    class Subject(Validatable, registry=registry):
        a: Annotated[str, AnySchema(), Valid("x", "y")]
        b: Annotated[str, AnySchema(), Only("x", "y")]
        c: Annotated[str, AnySchema(), Equal("x", "y")]

    schemas = [registry.get_schema(Subject, key) for key in "abc"]
    assert {(s.allowed, s.only) for s in schemas} == {(("x", "y"), True)}


def test_rule_is_directly_callable(registry):
    class Plain:
        pass

    NumberSchema()(Plain, "amount", registry)
    Required()(Plain, "amount", registry)

    assert registry.get_schema(Plain, "amount").presence is Presence.REQUIRED


def test_rule_repr():
    assert repr(number.Min(10)) == "number.min(10)"
    assert repr(Valid("a", 1)) == "valid('a', 1)"
