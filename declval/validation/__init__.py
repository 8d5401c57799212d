"""Instance Validation

Key Features:
- Validator with validate/validate_as_class/validate_array_as_class/is_valid/assert_valid
- Result-based outcomes: Ok(value) or Err(ValidationFailure)
- Path-qualified PathedError details, label-prefixed messages
- Fail-fast or collect-all accumulation

Usage:
    from declval.validation import validate, ValidationMode

    result = validate(order, mode=ValidationMode.FAIL_FAST)
    if result.is_err():
        for error in result.unwrap_err().details:
            print(error.path, error.message)
"""
from .options import ValidationMode, ValidationOptions
from .errors import PathedError, ValidationError, ValidationFailure, error_code, format_path
from .validator import (
    Validator,
    validate,
    validate_as_class,
    validate_array_as_class,
    is_valid,
    assert_valid,
    get_schema,
)

__all__ = [
    "ValidationMode",
    "ValidationOptions",
    "PathedError",
    "ValidationError",
    "ValidationFailure",
    "error_code",
    "format_path",
    "Validator",
    "validate",
    "validate_as_class",
    "validate_array_as_class",
    "is_valid",
    "assert_valid",
    "get_schema",
]
