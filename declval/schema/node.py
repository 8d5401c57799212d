"""Schema Nodes

A SchemaNode is an immutable value describing one rule set. Every operation
returns a new node, so nodes can be shared between properties and classes
without copying. Nodes are compiled to pydantic-core schemas by
:mod:`declval.schema.compiler` and executed by :mod:`declval.schema.engine`.

Key Features:
- One base kind per node, fixed at construction
- Generic operations available on every kind (allow, default, label, when...)
- Kind-specific rules recorded in application order
- Nested composition for object keys, array items and alternatives
- Operation history kept for introspection
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping

from declval.errors import ConstraintDefinitionError


class _Missing:
    """Sentinel for 'no value' (the analogue of undefined)."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class SchemaKind(str, Enum):
    """Base kinds a node can enforce."""
    ANY = "any"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    OBJECT = "object"
    ARRAY = "array"
    ALTERNATIVES = "alternatives"


class Presence(str, Enum):
    """Whether a key must, may or must not appear in its parent object."""
    OPTIONAL = "optional"
    REQUIRED = "required"
    FORBIDDEN = "forbidden"


# Kind-specific rule names accepted by SchemaNode.rule()
KIND_RULES: dict[SchemaKind, frozenset[str]] = {
    SchemaKind.ANY: frozenset(),
    SchemaKind.BOOLEAN: frozenset({"truthy", "falsy", "insensitive"}),
    SchemaKind.NUMBER: frozenset({
        "min", "max", "greater", "less", "integer", "multiple",
        "positive", "negative", "precision", "port",
    }),
    SchemaKind.STRING: frozenset({
        "min", "max", "length", "regex", "alphanum", "token", "hex", "email",
        "guid", "hostname", "ip", "uri", "iso_date", "credit_card",
        "lowercase", "uppercase", "trim", "replace", "insensitive",
    }),
    SchemaKind.DATE: frozenset({"min", "max", "iso", "timestamp"}),
    SchemaKind.OBJECT: frozenset({
        "min", "max", "length", "and", "nand", "or", "xor", "with", "without",
        "rename", "type", "unknown",
    }),
    SchemaKind.ARRAY: frozenset({"min", "max", "length", "unique", "single"}),
    SchemaKind.ALTERNATIVES: frozenset(),
}


@dataclass(frozen=True, slots=True)
class Rule:
    """One kind-specific constraint, e.g. Rule("min", (10,))."""
    name: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class Condition:
    """Conditional branch resolved against a sibling value.

    ``ref`` is a dotted path relative to the parent object. ``is_`` is either a
    SchemaNode the referenced value must satisfy or a literal it must equal.
    """
    ref: str
    is_: Any
    then: SchemaNode | None = None
    otherwise: SchemaNode | None = None


def _equal(a: Any, b: Any) -> bool:
    """Equality that keeps booleans apart from 0 and 1."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    try:
        return bool(a == b)
    except Exception:
        return False


def _union(current: tuple[Any, ...], values: Iterable[Any]) -> tuple[Any, ...]:
    merged = list(current)
    for value in values:
        if not any(_equal(value, existing) for existing in merged):
            merged.append(value)
    return tuple(merged)


def _without(current: tuple[Any, ...], values: Iterable[Any]) -> tuple[Any, ...]:
    values = tuple(values)
    return tuple(v for v in current if not any(_equal(v, other) for other in values))


@dataclass(frozen=True, slots=True)
class SchemaNode:
    """Immutable validation rule set with exactly one base kind."""
    kind: SchemaKind
    presence: Presence | None = None
    default: Any = MISSING
    allowed: tuple[Any, ...] = ()
    only: bool = False
    invalid: tuple[Any, ...] = ()
    empty: tuple[Any, ...] = ()
    strict_mode: bool | None = None
    raw_output: bool = False
    stripped: bool = False
    label_text: str | None = None
    description_text: str | None = None
    examples: tuple[Any, ...] = ()
    notes_text: tuple[str, ...] = ()
    tags_text: tuple[str, ...] = ()
    unit_name: str | None = None
    metadata: tuple[Any, ...] = ()
    validation_options: tuple[tuple[str, Any], ...] = ()
    rules: tuple[Rule, ...] = ()
    children: tuple[tuple[str, SchemaNode], ...] | None = None
    item_schemas: tuple[SchemaNode, ...] = ()
    ordered_schemas: tuple[SchemaNode, ...] = ()
    choices: tuple[SchemaNode, ...] = ()
    conditions: tuple[Condition, ...] = ()
    history: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _derive(self, operation: str, **changes: Any) -> SchemaNode:
        return replace(self, history=self.history + (operation,), **changes)

    def _require_kind(self, operation: str, *kinds: SchemaKind) -> None:
        if self.kind not in kinds:
            expected = " or ".join(k.value for k in kinds)
            raise ConstraintDefinitionError(
                f"{operation} requires a {expected} schema, got {self.kind.value}"
            )

    @property
    def keys_map(self) -> dict[str, SchemaNode]:
        return dict(self.children or ())

    def child(self, segment: str | int) -> SchemaNode | None:
        """Schema that validates the value found at ``segment`` under this node."""
        if self.kind is SchemaKind.OBJECT and self.children is not None:
            return self.keys_map.get(str(segment))
        if self.kind is SchemaKind.ARRAY and isinstance(segment, int):
            if segment < len(self.ordered_schemas):
                return self.ordered_schemas[segment]
            if len(self.item_schemas) == 1:
                return self.item_schemas[0]
        return None

    @property
    def is_conditional(self) -> bool:
        """True if this node or any nested node carries a when() branch."""
        if self.conditions:
            return True
        nested = [node for _, node in self.children or ()]
        nested += [*self.item_schemas, *self.ordered_schemas, *self.choices]
        return any(node.is_conditional for node in nested)

    def options_dict(self) -> dict[str, Any]:
        return dict(self.validation_options)

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    def allow(self, *values: Any) -> SchemaNode:
        """Accept the given values in addition to whatever the kind accepts."""
        return self._derive("allow", allowed=_union(self.allowed, values), invalid=_without(self.invalid, values))

    def valid(self, *values: Any) -> SchemaNode:
        """Accept only the given values."""
        return self._derive("valid", allowed=_union(self.allowed, values),
            invalid=_without(self.invalid, values), only=True)

    only_values = valid
    equal = valid

    def invalid_values(self, *values: Any) -> SchemaNode:
        """Reject the given values."""
        return self._derive("invalid", invalid=_union(self.invalid, values), allowed=_without(self.allowed, values))

    disallow = invalid_values
    not_ = invalid_values

    def default_value(self, value: Any = None, description: str | None = None) -> SchemaNode:
        """Fill ``value`` when the key is absent. Callables are invoked per validation."""
        return self._derive("default", default=value, description_text=description or self.description_text)

    def description(self, text: str) -> SchemaNode:
        return self._derive("description", description_text=text)

    def empty_values(self, *values: Any) -> SchemaNode:
        """Treat the given values as if the key were absent."""
        return self._derive("empty", empty=_union(self.empty, values))

    def example(self, value: Any) -> SchemaNode:
        """Record an example value. The example must pass this node."""
        from .engine import evaluate

        if not (result := evaluate(value, self)).ok:
            raise ConstraintDefinitionError(
                f"Example {value!r} does not pass its own schema: {result.details[0]['msg']}"
            )
        return self._derive("example", examples=self.examples + (value,))

    def forbidden(self) -> SchemaNode:
        return self._derive("forbidden", presence=Presence.FORBIDDEN)

    def label(self, name: str) -> SchemaNode:
        """Name used for this key in error messages."""
        return self._derive("label", label_text=name)

    def meta(self, meta: Any) -> SchemaNode:
        return self._derive("meta", metadata=self.metadata + (meta,))

    def notes(self, *notes: str) -> SchemaNode:
        return self._derive("notes", notes_text=self.notes_text + notes)

    def optional(self) -> SchemaNode:
        return self._derive("optional", presence=Presence.OPTIONAL)

    def required(self) -> SchemaNode:
        return self._derive("required", presence=Presence.REQUIRED)

    def options(self, **options: Any) -> SchemaNode:
        """Override validation options for this key and its children."""
        unknown = set(options) - {"convert", "allow_unknown", "strip_unknown", "presence"}
        if unknown:
            raise ConstraintDefinitionError(f"Unknown validation options: {', '.join(sorted(unknown))}")
        merged = {**self.options_dict(), **options}
        return self._derive("options", validation_options=tuple(merged.items()))

    def raw(self, enabled: bool = True) -> SchemaNode:
        """Output the original input instead of the converted value."""
        return self._derive("raw", raw_output=enabled)

    def strict(self, enabled: bool = True) -> SchemaNode:
        """Disable type conversion for this key and its children."""
        return self._derive("strict", strict_mode=enabled)

    def strip(self) -> SchemaNode:
        """Remove this key from the validated output."""
        return self._derive("strip", stripped=True)

    def tags(self, *tags: str) -> SchemaNode:
        return self._derive("tags", tags_text=self.tags_text + tags)

    def unit(self, name: str) -> SchemaNode:
        return self._derive("unit", unit_name=name)

    def when(self, ref: str, is_: Any, then: SchemaNode | None = None,
             otherwise: SchemaNode | None = None) -> SchemaNode:
        """Merge ``then`` or ``otherwise`` depending on the sibling value at ``ref``."""
        if then is None and otherwise is None:
            raise ConstraintDefinitionError("when() requires at least one of then or otherwise")
        for branch in (then, otherwise):
            if branch is not None and branch.kind not in (self.kind, SchemaKind.ANY):
                raise ConstraintDefinitionError(
                    f"when() branch of kind {branch.kind.value} cannot merge into {self.kind.value}"
                )
        return self._derive("when", conditions=self.conditions + (Condition(ref, is_, then, otherwise),))

    def concat(self, other: SchemaNode) -> SchemaNode:
        """Add the rules of ``other`` to this node."""
        if self.kind is SchemaKind.ANY:
            kind = other.kind
        elif other.kind in (SchemaKind.ANY, self.kind):
            kind = self.kind
        else:
            raise ConstraintDefinitionError(
                f"Cannot concat a {other.kind.value} schema to a {self.kind.value} schema"
            )

        if self.children is None or other.children is None:
            children = self.children if other.children is None else other.children
        else:
            children = tuple({**self.keys_map, **other.keys_map}.items())

        return self._derive(
            "concat",
            kind=kind,
            presence=other.presence or self.presence,
            default=self.default if other.default is MISSING else other.default,
            allowed=_without(_union(self.allowed, other.allowed), other.invalid),
            only=self.only or other.only,
            invalid=_without(_union(self.invalid, other.invalid), other.allowed),
            empty=_union(self.empty, other.empty),
            strict_mode=self.strict_mode if other.strict_mode is None else other.strict_mode,
            raw_output=self.raw_output or other.raw_output,
            stripped=self.stripped or other.stripped,
            label_text=other.label_text or self.label_text,
            description_text=other.description_text or self.description_text,
            examples=self.examples + other.examples,
            notes_text=self.notes_text + other.notes_text,
            tags_text=self.tags_text + other.tags_text,
            unit_name=other.unit_name or self.unit_name,
            metadata=self.metadata + other.metadata,
            validation_options=tuple({**self.options_dict(), **other.options_dict()}.items()),
            rules=self.rules + other.rules,
            children=children,
            item_schemas=self.item_schemas + other.item_schemas,
            ordered_schemas=other.ordered_schemas or self.ordered_schemas,
            choices=self.choices + other.choices,
            conditions=self.conditions + other.conditions,
        )

    # ------------------------------------------------------------------
    # Kind-specific operations
    # ------------------------------------------------------------------

    def rule(self, kind: SchemaKind, name: str, *args: Any) -> SchemaNode:
        """Append a kind-specific rule, e.g. ``node.rule(SchemaKind.NUMBER, "min", 10)``."""
        operation = f"{kind.value}.{name}"
        self._require_kind(operation, kind)
        if name not in KIND_RULES[kind]:
            raise ConstraintDefinitionError(f"Unknown rule {operation}")
        return self._derive(operation, rules=self.rules + (Rule(name, args),))

    def _limit(self, name: str, limit: Any) -> SchemaNode:
        if self.kind in (SchemaKind.STRING, SchemaKind.ARRAY, SchemaKind.OBJECT):
            if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
                raise ConstraintDefinitionError(f"{self.kind.value}.{name} limit must be a non-negative integer")
        elif self.kind is SchemaKind.NUMBER:
            if not isinstance(limit, (int, float)) or isinstance(limit, bool):
                raise ConstraintDefinitionError(f"number.{name} limit must be a number")
        return self.rule(self.kind, name, limit)

    def min(self, limit: Any) -> SchemaNode:
        return self._limit("min", limit)

    def max(self, limit: Any) -> SchemaNode:
        return self._limit("max", limit)

    def length(self, limit: int) -> SchemaNode:
        return self._limit("length", limit)

    def keys(self, keys: Mapping[str, SchemaNode] | None = None) -> SchemaNode:
        """Declare the keys of an object. Later declarations override earlier ones."""
        self._require_kind("object.keys", SchemaKind.OBJECT)
        merged = {**self.keys_map, **dict(keys or {})}
        for key, child in merged.items():
            if not isinstance(child, SchemaNode):
                raise ConstraintDefinitionError(f"object.keys value for {key!r} is not a schema")
        return self._derive("object.keys", children=tuple(merged.items()))

    def items(self, *schemas: SchemaNode) -> SchemaNode:
        """Every array element must match one of ``schemas``."""
        self._require_kind("array.items", SchemaKind.ARRAY)
        return self._derive("array.items", item_schemas=self.item_schemas + schemas)

    def ordered(self, *schemas: SchemaNode) -> SchemaNode:
        """Array elements must match ``schemas`` position by position."""
        self._require_kind("array.ordered", SchemaKind.ARRAY)
        return self._derive("array.ordered", ordered_schemas=schemas)

    def try_(self, *schemas: SchemaNode) -> SchemaNode:
        """Add candidate schemas to an alternatives node, tried in order."""
        self._require_kind("alternatives.try", SchemaKind.ALTERNATIVES)
        if not schemas:
            raise ConstraintDefinitionError("alternatives.try requires at least one schema")
        return self._derive("alternatives.try", choices=self.choices + schemas)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def describe(self) -> dict[str, Any]:
        """Plain-data summary of the node, recursing into nested schemas."""
        summary: dict[str, Any] = {"type": self.kind.value}
        flags = {
            "presence": self.presence.value if self.presence else None,
            "label": self.label_text,
            "description": self.description_text,
            "unit": self.unit_name,
            "strict": self.strict_mode,
            "raw": self.raw_output or None,
            "strip": self.stripped or None,
            "only": self.only or None,
        }
        summary.update({k: v for k, v in flags.items() if v is not None})
        if self.default is not MISSING:
            summary["default"] = self.default
        for name, values in (("valid" if self.only else "allow", self.allowed), ("invalid", self.invalid),
                             ("empty", self.empty), ("examples", self.examples), ("notes", self.notes_text),
                             ("tags", self.tags_text), ("meta", self.metadata)):
            if values:
                summary[name] = list(values)
        if self.validation_options:
            summary["options"] = self.options_dict()
        if self.rules:
            summary["rules"] = [{"name": r.name, "args": list(r.args)} for r in self.rules]
        if self.children is not None:
            summary["keys"] = {k: child.describe() for k, child in self.children}
        if self.item_schemas:
            summary["items"] = [s.describe() for s in self.item_schemas]
        if self.ordered_schemas:
            summary["ordered"] = [s.describe() for s in self.ordered_schemas]
        if self.choices:
            summary["alternatives"] = [s.describe() for s in self.choices]
        if self.conditions:
            summary["when"] = [{"ref": c.ref, "is": c.is_.describe() if isinstance(c.is_, SchemaNode) else c.is_,
                "then": c.then.describe() if c.then else None,
                "otherwise": c.otherwise.describe() if c.otherwise else None} for c in self.conditions]
        return summary


# ============================================================================
# Constructors
# ============================================================================

def any_schema() -> SchemaNode:
    return SchemaNode(SchemaKind.ANY)


def boolean_schema() -> SchemaNode:
    return SchemaNode(SchemaKind.BOOLEAN)


def number_schema() -> SchemaNode:
    return SchemaNode(SchemaKind.NUMBER)


def string_schema() -> SchemaNode:
    return SchemaNode(SchemaKind.STRING)


def date_schema() -> SchemaNode:
    return SchemaNode(SchemaKind.DATE)


def object_schema(keys: Mapping[str, SchemaNode] | None = None) -> SchemaNode:
    node = SchemaNode(SchemaKind.OBJECT)
    return node if keys is None else node.keys(keys)


def array_schema(*items: SchemaNode) -> SchemaNode:
    node = SchemaNode(SchemaKind.ARRAY)
    return node.items(*items) if items else node


def alternatives_schema(*choices: SchemaNode) -> SchemaNode:
    node = SchemaNode(SchemaKind.ALTERNATIVES)
    return node.try_(*choices) if choices else node


def literal_schema(value: Any) -> SchemaNode:
    """Schema accepting exactly ``value``."""
    return any_schema().valid(value)
