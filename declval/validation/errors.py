"""Validation Error System

Path-qualified error details translated from engine output, the failure
value carried by Err, and the exception raised by assert_valid().

Error Format:
{
    "error": {
        "type": "validation_error",
        "message": "Validation failed",
        "mode": "collect_all",
        "errors": [
            {
                "path": "address.city",
                "type": "missing",
                "label": "city",
                "message": "city: Field required"
            }
        ]
    }
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from declval.errors import AppError, ErrorCode
from declval.schema import MISSING, SchemaNode

from .options import ValidationMode

_CODES_BY_TYPE = {
    "missing": ErrorCode.E2001_REQUIRED_FIELD_MISSING,
    "extra_forbidden": ErrorCode.E2006_UNKNOWN_FIELD,
    "any_unknown": ErrorCode.E2006_UNKNOWN_FIELD,
    "any_invalid": ErrorCode.E2007_VALUE_NOT_ALLOWED,
    "any_only": ErrorCode.E2007_VALUE_NOT_ALLOWED,
    "any_empty": ErrorCode.E2007_VALUE_NOT_ALLOWED,
    "multiple_of": ErrorCode.E2003_OUT_OF_RANGE,
    "date_iso": ErrorCode.E2002_INVALID_FORMAT,
    "date_timestamp": ErrorCode.E2002_INVALID_FORMAT,
}

_RANGE_MARKERS = ("greater_than", "less_than", "too_short", "too_long", "_min", "_max", "_length")


def error_code(error_type: str) -> ErrorCode:
    """ErrorCode for an engine error type."""
    if error_type in _CODES_BY_TYPE:
        return _CODES_BY_TYPE[error_type]
    if any(marker in error_type for marker in _RANGE_MARKERS):
        return ErrorCode.E2003_OUT_OF_RANGE
    if error_type.endswith(("_type", "_parsing")) or error_type == "number_type":
        return ErrorCode.E2004_INVALID_TYPE
    if error_type.startswith("string_") or "_parsing" in error_type:
        return ErrorCode.E2002_INVALID_FORMAT
    return ErrorCode.E2005_CONSTRAINT_VIOLATION


def format_path(loc: Sequence[str | int]) -> str:
    """Format an engine location tuple as a path: ``items[0].name``; ``$`` for the root."""
    if not loc:
        return "$"
    parts = []
    for segment in loc:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(str(segment))
    return "".join(parts)


def _label_for(schema: SchemaNode | None, loc: Sequence[str | int]) -> str:
    node = schema
    for segment in loc:
        node = node.child(segment) if node is not None else None
    if node is not None and node.label_text:
        return node.label_text
    named = [segment for segment in loc if isinstance(segment, str)]
    if named:
        return named[-1]
    return str(loc[-1]) if loc else "value"


@dataclass(frozen=True, slots=True)
class PathedError:
    """One validation failure.

    - path: location of the offending value (``address.lines[1]``)
    - message: label-prefixed human-readable message
    - type: engine error type (``missing``, ``greater_than_equal``, ``any_only``...)
    - label: the property's Label() or its key
    - value: the rejected input, MISSING when the value was absent
    - context: error parameters (limits, peers...)
    """
    path: str
    message: str
    type: str
    label: str
    value: Any = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def code(self) -> ErrorCode:
        return error_code(self.type)

    @classmethod
    def from_detail(cls, detail: dict[str, Any], schema: SchemaNode | None = None) -> PathedError:
        """Create from an engine error detail (type, loc, msg, input, ctx)."""
        loc = tuple(detail.get("loc", ()))
        label = _label_for(schema, loc)
        error_type = detail.get("type", "validation_error")
        value = MISSING if error_type == "missing" else detail.get("input")
        return cls(path=format_path(loc), message=f"{label}: {detail.get('msg', 'Validation failed')}",
            type=error_type, label=label, value=value, context=dict(detail.get("ctx") or {}))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for API responses."""
        result = {"path": self.path, "type": self.type, "label": self.label, "message": self.message}
        if self.value is not MISSING and self.value is not None:
            result["value"] = self.value
        if self.context:
            result["context"] = self.context
        return result


@dataclass(frozen=True, slots=True)
class ValidationFailure(AppError):
    """Error value carried by Err when an instance does not conform."""
    details: tuple[PathedError, ...] = ()
    mode: ValidationMode = ValidationMode.COLLECT_ALL

    @classmethod
    def from_details(cls, details: Sequence[PathedError], *, origin: str = "",
                     mode: ValidationMode = ValidationMode.COLLECT_ALL) -> ValidationFailure:
        details = tuple(details)
        if len(details) == 1:
            message = details[0].message
        else:
            message = f"Validation failed: {len(details)} errors"
        return cls(code=ErrorCode.E2000_VALIDATION_GENERIC, message=message, origin=origin,
            metadata={"validation_mode": mode.value, "error_count": len(details),
                "errors": [d.to_dict() for d in details]},
            details=details, mode=mode)

    @property
    def paths(self) -> list[str]:
        return [d.path for d in self.details]

    def to_exception(self) -> ValidationError:
        return ValidationError(message="Validation failed", details=list(self.details), mode=self.mode)


@dataclass
class ValidationError(Exception):
    """Raised by assert_valid() with every collected failure."""
    message: str
    details: list[PathedError]
    mode: ValidationMode = ValidationMode.COLLECT_ALL

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        if len(self.details) == 1:
            return self.details[0].message
        return f"{self.message} ({len(self.details)} errors)"

    @property
    def field_errors(self) -> dict[str, list[PathedError]]:
        """Group errors by path."""
        result: dict[str, list[PathedError]] = {}
        for detail in self.details:
            result.setdefault(detail.path, []).append(detail)
        return result

    @property
    def first_error(self) -> PathedError | None:
        return self.details[0] if self.details else None

    def get_errors_for_path(self, path: str) -> list[PathedError]:
        return [d for d in self.details if d.path == path]

    def to_app_error(self) -> AppError:
        """Convert to AppError for error handling system."""
        return ValidationFailure.from_details(self.details, mode=self.mode)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for API responses."""
        return {"error": {"type": "validation_error", "message": self.message, "mode": self.mode.value,
            "error_count": len(self.details), "errors": [d.to_dict() for d in self.details]}}
