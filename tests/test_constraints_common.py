"""Rules shared by every base kind."""
from typing import Annotated

import pytest

from declval import Validatable
from declval.constraints import (
    Allow,
    AnySchema,
    ArraySchema,
    Concat,
    Default,
    Description,
    Disallow,
    Empty,
    Example,
    Forbidden,
    Invalid,
    Label,
    Meta,
    Not,
    Notes,
    NumberSchema,
    Options,
    Raw,
    Required,
    Strict,
    StringSchema,
    Strip,
    Tags,
    Unit,
    Valid,
    When,
    number,
)
from declval.errors import ConstraintDefinitionError
from declval.schema import MISSING, number_schema, string_schema


def test_any_schema_accepts_everything(check_constraint):
    check_constraint(AnySchema(), valid=[None, 0, "", [], {}, object()])


def test_allow(check_constraint):
    check_constraint(NumberSchema(), valid=[1], invalid=[None])
    check_constraint(NumberSchema(), Allow(None, "n/a"), valid=[1, None, "n/a"], invalid=["x"])


def test_valid(check_constraint):
    check_constraint(AnySchema(), Valid("a", 1), valid=["a", 1], invalid=["b", 2, True, None])


def test_invalid_and_aliases(check_constraint):
    for rule in (Invalid, Disallow, Not):
        check_constraint(NumberSchema(), rule(0, 13), valid=[1, 12], invalid=[0, 13])


def test_invalid_overrides_earlier_allow(make_subject, registry):
    subject = make_subject(AnySchema(), Allow("x"), Invalid("x"))
    node = registry.get_schema(subject, "value")

    assert node.allowed == ()
    assert node.invalid == ("x",)


def test_default(validator, make_subject):
    subject = make_subject(NumberSchema(), Default(3))

    assert validator.validate(subject()).unwrap() == {"value": 3}

    instance = subject()
    instance.value = 8
    assert validator.validate(instance).unwrap() == {"value": 8}


def test_callable_default_is_called_per_validation(validator, make_subject):
    subject = make_subject(ArraySchema(), Default(list, "empty list"))
    first = validator.validate(subject()).unwrap()["value"]
    second = validator.validate(subject()).unwrap()["value"]

    assert first == [] and first is not second


def test_default_is_not_used_for_required_keys(validator, make_subject):
    subject = make_subject(NumberSchema(), Default(3), Required())

    assert validator.validate(subject()).unwrap_err().details[0].type == "missing"


def test_required(check_constraint):
    check_constraint(NumberSchema(), Required(), valid=[1], invalid=[MISSING, None])


def test_forbidden(check_constraint):
    check_constraint(NumberSchema(), Forbidden(), valid=[MISSING], invalid=[1, None])


def test_strip_removes_key_from_output(validator, make_subject):
    subject = make_subject(StringSchema(), Strip())
    instance = subject()
    instance.value = "secret"

    assert validator.validate(instance).unwrap() == {}


def test_raw_outputs_original_value(validator, make_subject):
    subject = make_subject(NumberSchema(), Raw())
    instance = subject()
    instance.value = "12"

    assert validator.validate(instance).unwrap() == {"value": "12"}


def test_empty_values_count_as_absent(check_constraint, validator, make_subject):
    check_constraint(StringSchema(), Empty(""), valid=["", "a", MISSING])
    check_constraint(StringSchema(), Empty("", "-"), Required(), valid=["a"], invalid=["", "-"])

    subject = make_subject(StringSchema(), Empty("-"), Default("none"))
    instance = subject()
    instance.value = "-"
    assert validator.validate(instance).unwrap() == {"value": "none"}


def test_label_names_the_property_in_messages(validator, make_subject):
    subject = make_subject(NumberSchema(), Label("Order total"), number.Min(0))
    instance = subject()
    instance.value = -1

    error = validator.validate(instance).unwrap_err().details[0]
    assert error.label == "Order total"
    assert error.message.startswith("Order total: ")
    assert error.path == "value"


def test_annotations_are_recorded(make_subject, registry):
    subject = make_subject(
        NumberSchema(), Description("Total price"), Notes("incl. VAT"), Tags("money", "api"),
        Unit("EUR"), Meta({"owner": "billing"}), Example(12),
    )
    summary = registry.get_schema(subject, "value").describe()

    assert summary["description"] == "Total price"
    assert summary["notes"] == ["incl. VAT"]
    assert summary["tags"] == ["money", "api"]
    assert summary["unit"] == "EUR"
    assert summary["meta"] == [{"owner": "billing"}]
    assert summary["examples"] == [12]


def test_failing_example_is_a_definition_error(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(NumberSchema(), number.Min(10), Example(5))


def test_strict_and_options_disable_conversion(check_constraint):
    check_constraint(NumberSchema(), Strict(), valid=[1], invalid=["1"])
    check_constraint(NumberSchema(), Options(convert=False), valid=[1], invalid=["1"])
    check_constraint(NumberSchema(), Strict(), Strict(False), valid=["1"])


def test_unknown_option_is_a_definition_error(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(NumberSchema(), Options(abort_early=True))


def test_options_apply_to_children(validator, registry):
    class Inner(Validatable, registry=registry):
        count: Annotated[int, NumberSchema()]

    from declval.constraints import ObjectSchema

    class Outer(Validatable, registry=registry):
        inner: Annotated[Inner, ObjectSchema(Inner), Options(allow_unknown=True, convert=False)]

    outer = Outer()
    outer.inner = {"count": 1, "extra": True}
    assert validator.is_valid(outer)

    outer.inner = {"count": "1"}
    assert not validator.is_valid(outer)


def test_concat(check_constraint):
    check_constraint(NumberSchema(), Concat(number_schema().min(5)), valid=[5], invalid=[4])


def test_concat_class_reference(validator, registry):
    class Base(Validatable, registry=registry):
        a: Annotated[int, NumberSchema(), Required()]

    from declval.constraints import Keys, ObjectSchema

    class Subject(Validatable, registry=registry):
        value: Annotated[dict, ObjectSchema(), Keys({"b": number_schema()}), Concat(Base)]

    instance = Subject()
    instance.value = {"b": 1}
    assert validator.validate(instance).unwrap_err().paths == ["value.a"]


def test_concat_of_different_kinds_fails(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(NumberSchema(), Concat(string_schema()))


def test_when_literal(validator, registry):
    class Customer(Validatable, registry=registry):
        kind: Annotated[str, StringSchema(), Valid("private", "business")]
        vat: Annotated[str, StringSchema(), When(
            "kind", "business", then=string_schema().required(), otherwise=string_schema().forbidden(),
        )]

    customer = Customer()
    customer.kind = "business"
    assert validator.validate(customer).unwrap_err().paths == ["vat"]

    customer.vat = "NO123"
    assert validator.is_valid(customer)

    customer.kind = "private"
    assert validator.validate(customer).unwrap_err().details[0].type == "any_unknown"


def test_when_schema_condition(validator, registry):
    class Shipment(Validatable, registry=registry):
        weight: Annotated[float, NumberSchema()]
        carrier: Annotated[str, StringSchema(), When("weight", number_schema().min(30), then=string_schema().valid("freight"))]

    shipment = Shipment()
    shipment.weight, shipment.carrier = 40, "post"
    assert not validator.is_valid(shipment)

    shipment.weight = 2
    assert validator.is_valid(shipment)


def test_when_branch_of_other_kind_fails(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(StringSchema(), When("other", 1, then=number_schema()))
