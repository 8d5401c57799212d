"""Schema Definition Errors

Raised while an annotated class body is being evaluated. They signal a
programming error in the class and abort its definition; nothing in this
package catches them.
"""
from __future__ import annotations

from .types import AppError, ErrorCode


class SchemaDefinitionError(Exception):
    """Base for errors raised while schema rules are applied to a class."""
    code: ErrorCode = ErrorCode.E7000_SCHEMA_DEFINITION_GENERIC

    def __init__(self, message: str, property_key: str | None = None, owner: type | None = None):
        super().__init__(message)
        self.message, self.property_key, self.owner = message, property_key, owner

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.message, self.property_key) == (other.message, other.property_key)

    __hash__ = Exception.__hash__

    def to_app_error(self) -> AppError:
        return AppError(
            code=self.code,
            message=self.message,
            origin=self.owner.__qualname__ if self.owner else "",
            metadata={"property": self.property_key} if self.property_key else {},
            cause=self,
        )


class ValidationSchemaNotFound(SchemaDefinitionError):
    """A refinement ran on a property that has no base-kind schema yet."""
    code = ErrorCode.E7001_SCHEMA_NOT_FOUND

    def __init__(self, property_key: str, owner: type | None = None):
        super().__init__(
            f"No validation schema exists for property: {property_key}. "
            "Annotate the property with a type schema (e.g. NumberSchema()) before adding constraints.",
            property_key,
            owner,
        )


class ConstraintDefinitionError(SchemaDefinitionError):
    """A rule conflicts with the schema already established for a property."""
    code = ErrorCode.E7002_CONSTRAINT_CONFLICT


class SchemaReferenceError(ConstraintDefinitionError):
    """A nested composition referenced a class that has no annotated properties."""
    code = ErrorCode.E7003_INVALID_REFERENCE
