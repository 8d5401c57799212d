"""Validation Engine

Evaluates a value against a SchemaNode. Conditional branches are resolved
against the actual input first, then the resulting tree is compiled to a
pydantic-core SchemaValidator and run. Failures come back as pydantic-core
error details (type, loc, msg, input, ctx) rather than exceptions.

Key Features:
- evaluate(): value plus every error detail, or the first only when aborting early
- matches(): boolean shortcut used for when() conditions
- resolve_conditions(): folds when() branches into plain nodes
- Root-level handling of absent and empty() values
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic_core import SchemaValidator, ValidationError

from .checks import as_mapping
from .compiler import CompileContext, compile_node
from .node import MISSING, Presence, SchemaKind, SchemaNode, _equal


@dataclass(frozen=True, slots=True)
class EngineOptions:
    """Options for a single evaluation."""
    convert: bool = True
    allow_unknown: bool = False
    strip_unknown: bool = False
    presence: Presence = Presence.OPTIONAL
    abort_early: bool = False

    def context(self) -> CompileContext:
        return CompileContext(self.convert, self.allow_unknown, self.strip_unknown, self.presence)


@dataclass(slots=True)
class EngineResult:
    """Outcome of evaluate(): the validated value and the error details, if any."""
    value: Any
    details: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.details


# ============================================================================
# Condition Resolution
# ============================================================================

def _lookup(container: Any, ref: str) -> Any:
    current = container
    for segment in ref.split("."):
        if isinstance(current, (list, tuple)) and segment.lstrip("-").isdigit():
            index = int(segment)
            current = current[index] if -len(current) <= index < len(current) else MISSING
            continue
        current = as_mapping(current)
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def _condition_holds(condition: Any, parent: Any) -> bool:
    if parent is MISSING:
        return False
    target = _lookup(parent, condition.ref)
    if target is MISSING:
        return False
    if isinstance(condition.is_, SchemaNode):
        return matches(target, condition.is_.required())
    return _equal(target, condition.is_)


def resolve_conditions(node: SchemaNode, value: Any, parent: Any = MISSING) -> SchemaNode:
    """Return ``node`` with every when() branch merged in for this ``value``.

    ``parent`` is the object holding ``value``; references are looked up
    there. Nested keys, items and alternatives are resolved recursively.
    """
    if not node.is_conditional:
        return node

    resolved = node
    if node.conditions:
        resolved = node._derive("resolve", conditions=())
        for condition in node.conditions:
            branch = condition.then if _condition_holds(condition, parent) else condition.otherwise
            if branch is not None:
                resolved = resolved.concat(resolve_conditions(branch, value, parent))

    if resolved.kind is SchemaKind.OBJECT and resolved.children is not None:
        data = as_mapping(value, resolved.keys_map)
        data = data if isinstance(data, dict) else {}
        children = tuple(
            (key, resolve_conditions(child, data.get(key, MISSING), data))
            for key, child in resolved.children
        )
        resolved = resolved._derive("resolve", children=children)

    elif resolved.kind is SchemaKind.ARRAY and isinstance(value, (list, tuple)):
        conditional_items = any(item.is_conditional for item in resolved.item_schemas)
        ordered = tuple(
            resolve_conditions(item, value[index] if index < len(value) else MISSING, value)
            for index, item in enumerate(resolved.ordered_schemas)
        )
        if conditional_items and len(resolved.item_schemas) == 1:
            # Each remaining element gets its own resolved copy of the item schema
            item = resolved.item_schemas[0]
            extra = tuple(resolve_conditions(item, element, value) for element in value[len(ordered):])
            resolved = resolved._derive("resolve", ordered_schemas=ordered + extra, item_schemas=())
        else:
            items = tuple(resolve_conditions(item, MISSING, value) for item in resolved.item_schemas)
            resolved = resolved._derive("resolve", ordered_schemas=ordered, item_schemas=items)

    elif resolved.kind is SchemaKind.ALTERNATIVES:
        choices = tuple(resolve_conditions(choice, value, parent) for choice in resolved.choices)
        resolved = resolved._derive("resolve", choices=choices)

    return resolved


# ============================================================================
# Evaluation
# ============================================================================

def _absent(node: SchemaNode, options: EngineOptions) -> EngineResult:
    presence = node.presence or options.presence
    if presence is Presence.REQUIRED:
        return EngineResult(MISSING, [{
            "type": "missing", "loc": (), "msg": "Field required", "input": MISSING,
        }])
    if node.default is not MISSING:
        return EngineResult(node.default() if callable(node.default) else node.default)
    return EngineResult(MISSING)


def evaluate(value: Any, node: SchemaNode, options: EngineOptions | None = None) -> EngineResult:
    """Validate ``value`` against ``node``; never raises for invalid input."""
    options = options or EngineOptions()
    if value is not MISSING and any(_equal(value, empty) for empty in node.empty):
        value = MISSING
    if value is MISSING:
        return _absent(node, options)
    if node.presence is Presence.FORBIDDEN:
        return EngineResult(value, [{
            "type": "any_unknown", "loc": (), "msg": "Input is not allowed", "input": value,
        }])

    resolved = resolve_conditions(node, value)
    validator = SchemaValidator(compile_node(resolved, options.context()))
    try:
        output = validator.validate_python(value)
    except ValidationError as exc:
        details = exc.errors(include_url=False)
        return EngineResult(value, details[:1] if options.abort_early else list(details))
    return EngineResult(output)


def matches(value: Any, node: SchemaNode) -> bool:
    return evaluate(value, node).ok
