"""Shared fixtures for declval tests.

Provides:
- registry: a fresh SchemaRegistry per test
- make_subject: builds a class with one property "value" carrying the given rules
- check_constraint: asserts lists of valid and invalid values for a rule set
"""
from typing import Annotated, Any

import pytest

from declval import SchemaRegistry, Validatable, ValidationOptions, Validator
from declval.schema import MISSING


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture
def make_subject(registry):
    def make(*rules):
        class Subject(Validatable, registry=registry):
            value: Annotated[(Any, *rules)]

        return Subject

    return make


def with_value(cls, value):
    instance = cls()
    if value is not MISSING:
        instance.value = value
    return instance


@pytest.fixture
def check_constraint(registry, make_subject):
    """Assert every value in ``valid`` passes and every value in ``invalid`` fails."""
    def check(*rules, valid=(), invalid=(), **options):
        subject = make_subject(*rules)
        validator = Validator(ValidationOptions(**options), registry=registry)
        for value in valid:
            result = validator.validate(with_value(subject, value))
            assert result.is_ok(), f"{value!r} should be valid: {result}"
        for value in invalid:
            result = validator.validate(with_value(subject, value))
            assert result.is_err(), f"{value!r} should be invalid"
        return subject

    return check


@pytest.fixture
def validator(registry) -> Validator:
    return Validator(ValidationOptions(), registry=registry)
