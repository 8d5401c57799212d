"""declval: declarative validation for Python classes

Validation rules live next to the properties they validate, as
``Annotated`` metadata. Each class accumulates one schema per property while
its body is registered; validate() assembles them into a single object
schema and checks instances against it.

Usage:
    from typing import Annotated
    from declval import Validatable, validate
    from declval.constraints import NumberSchema, Optional, number

    class Reading(Validatable):
        value: Annotated[float, NumberSchema(), Optional(), number.Min(10)]

    reading = Reading()
    reading.value = 5
    validate(reading)  # Err(...) with one error at path "value"
"""
from .annotations import Validatable, schema_class, register_class
from .errors import (
    ConstraintDefinitionError,
    Err,
    Ok,
    Result,
    SchemaDefinitionError,
    SchemaReferenceError,
    ValidationSchemaNotFound,
)
from .metadata import PropertyMetadata, SchemaRegistry, default_registry
from .validation import (
    PathedError,
    ValidationError,
    ValidationFailure,
    ValidationMode,
    ValidationOptions,
    Validator,
    assert_valid,
    get_schema,
    is_valid,
    validate,
    validate_array_as_class,
    validate_as_class,
)

__version__ = "0.1.0"

__all__ = [
    "Validatable",
    "schema_class",
    "register_class",
    "ConstraintDefinitionError",
    "Err",
    "Ok",
    "Result",
    "SchemaDefinitionError",
    "SchemaReferenceError",
    "ValidationSchemaNotFound",
    "PropertyMetadata",
    "SchemaRegistry",
    "default_registry",
    "PathedError",
    "ValidationError",
    "ValidationFailure",
    "ValidationMode",
    "ValidationOptions",
    "Validator",
    "assert_valid",
    "get_schema",
    "is_valid",
    "validate",
    "validate_array_as_class",
    "validate_as_class",
]
