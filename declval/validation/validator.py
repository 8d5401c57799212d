"""Validator

Builds the composite schema of an instance's class from the registry and
runs it through the engine. Outcomes are Result values; assert_valid() is
the raising variant and only raises after every failure has been collected
(unless fail-fast mode was requested).
"""
from __future__ import annotations

from typing import Any

from declval.annotations import registry_for
from declval.errors import Err, Ok, Result, SchemaReferenceError
from declval.logging import validation_logger
from declval.metadata import SchemaRegistry
from declval.schema import SchemaNode, array_schema, evaluate

from .errors import PathedError, ValidationError, ValidationFailure
from .options import ValidationOptions

log = validation_logger()


class Validator:
    """Validates instances of annotated classes.

    Args:
        options: defaults for every call; read from settings when omitted
        registry: registry to read schemas from; by default the one the class registered with
    """

    def __init__(self, options: ValidationOptions | None = None, registry: SchemaRegistry | None = None):
        self.options = options or ValidationOptions.from_settings()
        self.registry = registry

    def get_schema(self, cls: type) -> SchemaNode:
        """Composite object schema of ``cls``, inherited properties included.

        Raises:
            SchemaReferenceError: ``cls`` has no annotated properties
        """
        registry = self.registry if self.registry is not None else registry_for(cls)
        if not registry.is_registered(cls):
            raise SchemaReferenceError(f"{cls.__qualname__} has no validation schema", owner=cls)
        return registry.composite_schema(cls)

    def validate(self, instance: Any, **options: Any) -> Result[Any, ValidationFailure]:
        """Validate ``instance`` against the schema of its own class."""
        cls = type(instance)
        return self._run(instance, self.get_schema(cls), cls.__qualname__, options)

    def validate_as_class(self, value: Any, cls: type, **options: Any) -> Result[Any, ValidationFailure]:
        """Validate a mapping or any object against the schema of ``cls``."""
        return self._run(value, self.get_schema(cls), cls.__qualname__, options)

    def validate_array_as_class(self, values: Any, cls: type, **options: Any) -> Result[list, ValidationFailure]:
        """Validate every element of ``values`` against the schema of ``cls``."""
        schema = array_schema(self.get_schema(cls)).required()
        return self._run(values, schema, f"list[{cls.__qualname__}]", options)

    def is_valid(self, instance: Any, **options: Any) -> bool:
        return self.validate(instance, **options).is_ok()

    def assert_valid(self, instance: Any, **options: Any) -> Any:
        """Validated value of ``instance``.

        Raises:
            ValidationError: carrying every failure detail
        """
        result = self.validate(instance, **options)
        if result.is_err():
            raise result.unwrap_err().to_exception()
        return result.unwrap()

    def _run(self, value: Any, schema: SchemaNode, target: str, overrides: dict[str, Any]) -> Result[Any, ValidationFailure]:
        options = self.options.merged(**overrides)
        outcome = evaluate(value, schema, options.engine_options())
        if outcome.ok:
            log.debug("validation_succeeded", target=target)
            return Ok(outcome.value)

        details = [PathedError.from_detail(detail, schema) for detail in outcome.details]
        log.debug("validation_failed", target=target, error_count=len(details), paths=[d.path for d in details])
        return Err(ValidationFailure.from_details(details, origin=target, mode=options.mode))


def validate(instance: Any, **options: Any) -> Result[Any, ValidationFailure]:
    return Validator().validate(instance, **options)


def validate_as_class(value: Any, cls: type, **options: Any) -> Result[Any, ValidationFailure]:
    return Validator().validate_as_class(value, cls, **options)


def validate_array_as_class(values: Any, cls: type, **options: Any) -> Result[list, ValidationFailure]:
    return Validator().validate_array_as_class(values, cls, **options)


def is_valid(instance: Any, **options: Any) -> bool:
    return Validator().is_valid(instance, **options)


def assert_valid(instance: Any, **options: Any) -> Any:
    return Validator().assert_valid(instance, **options)


def get_schema(cls: type, registry: SchemaRegistry | None = None) -> SchemaNode:
    return Validator(registry=registry).get_schema(cls)
