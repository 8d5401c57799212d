"""Property Annotations

Rules placed in ``Annotated[...]`` metadata on a Validatable class. The first
rule must establish the base kind; every later rule refines it, left to right.

Key Features:
- Establishing rules per kind: AnySchema, BooleanSchema, NumberSchema, ...
- Generic rules for every kind: Allow, Default, Label, Optional, Required, When, ...
- Kind-specific rules grouped by module: number.Min, string.Email, array.Unique, ...
- Nested composition: Keys, Items, Ordered and Try accept annotated classes

Usage:
    from declval.constraints import NumberSchema, Optional, number

    class Order(Validatable):
        quantity: Annotated[int, NumberSchema(), Optional(), number.Min(1)]
"""
from . import alternatives, array, boolean, date, number, object, string
from .base import Compose, Establish, Refine, SchemaRule
from .common import (
    AnySchema,
    Allow,
    Concat,
    Default,
    Description,
    Empty,
    Example,
    Forbidden,
    Invalid,
    Disallow,
    Not,
    Label,
    Meta,
    Notes,
    Optional,
    Options,
    Raw,
    Required,
    Strict,
    Strip,
    Tags,
    Unit,
    Valid,
    Only,
    Equal,
    When,
)
from .alternatives import AlternativesSchema, Try
from .array import ArraySchema, Items, Ordered
from .boolean import BooleanSchema
from .date import DateSchema
from .number import NumberSchema
from .object import ObjectSchema, Keys
from .string import StringSchema

__all__ = [
    "alternatives",
    "array",
    "boolean",
    "date",
    "number",
    "object",
    "string",
    "Compose",
    "Establish",
    "Refine",
    "SchemaRule",
    "AnySchema",
    "Allow",
    "Concat",
    "Default",
    "Description",
    "Empty",
    "Example",
    "Forbidden",
    "Invalid",
    "Disallow",
    "Not",
    "Label",
    "Meta",
    "Notes",
    "Optional",
    "Options",
    "Raw",
    "Required",
    "Strict",
    "Strip",
    "Tags",
    "Unit",
    "Valid",
    "Only",
    "Equal",
    "When",
    "AlternativesSchema",
    "Try",
    "ArraySchema",
    "Items",
    "Ordered",
    "BooleanSchema",
    "DateSchema",
    "NumberSchema",
    "ObjectSchema",
    "Keys",
    "StringSchema",
]
