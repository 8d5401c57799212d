"""Error Handling

- Result[T, E]: Ok/Err container returned by validation entry points
- AppError: error value with a typed code and metadata
- SchemaDefinitionError family: raised at class-definition time

Usage:
    from declval.errors import Ok, Err

    match validator.validate(account):
        case Ok(value):
            save(value)
        case Err(failure):
            log.warning("invalid_account", errors=[e.path for e in failure.details])
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    collect_results,
    sequence_results,
)
from .definition import (
    SchemaDefinitionError,
    ValidationSchemaNotFound,
    ConstraintDefinitionError,
    SchemaReferenceError,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "collect_results",
    "sequence_results",
    "SchemaDefinitionError",
    "ValidationSchemaNotFound",
    "ConstraintDefinitionError",
    "SchemaReferenceError",
]
