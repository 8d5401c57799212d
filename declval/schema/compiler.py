"""Schema Compiler

Turns a SchemaNode tree into a pydantic-core CoreSchema. Native keywords
(bounds, lengths, strictness, defaults, extra keys) map straight onto
core_schema builders; everything else is layered on with the function
validators from :mod:`declval.schema.checks`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping

from pydantic_core import CoreSchema, core_schema

from .checks import (
    BooleanConverter,
    DateInput,
    DateLimits,
    MappingInput,
    NumberOutput,
    ObjectRules,
    StringRules,
    ValueSetGuard,
    keep_raw,
    reject_present,
    to_list,
    unique_items,
    whole_number,
    wrap_single,
)
from .node import MISSING, Presence, SchemaKind, SchemaNode

_STRING_STEPS = frozenset({
    "replace", "regex", "alphanum", "token", "hex", "email", "hostname",
    "guid", "ip", "uri", "iso_date", "credit_card", "trim", "lowercase", "uppercase",
})


@dataclass(frozen=True, slots=True)
class CompileContext:
    """Validation options in effect for the node being compiled."""
    convert: bool = True
    allow_unknown: bool = False
    strip_unknown: bool = False
    presence: Presence = Presence.OPTIONAL

    def merged(self, options: Mapping[str, Any]) -> CompileContext:
        if not options:
            return self
        changes = {k: v for k, v in options.items() if k in ("convert", "allow_unknown", "strip_unknown")}
        if "presence" in options:
            changes["presence"] = Presence(options["presence"])
        return replace(self, **changes)


def _last(node: SchemaNode) -> dict[str, tuple]:
    """Latest arguments per rule name; later rules override earlier ones."""
    return {rule.name: rule.args for rule in node.rules}


def _all(node: SchemaNode, name: str) -> list[tuple]:
    return [rule.args for rule in node.rules if rule.name == name]


def _tighten(bounds: dict[str, Any], key: str, limit: Any, stricter: Callable[[Any, Any], Any]) -> None:
    bounds[key] = limit if key not in bounds else stricter(bounds[key], limit)


# ============================================================================
# Kind Builders
# ============================================================================

def _any(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    return core_schema.any_schema()


def _boolean(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    truthy = tuple(v for args in _all(node, "truthy") for v in args)
    falsy = tuple(v for args in _all(node, "falsy") for v in args)
    insensitive = _last(node).get("insensitive", (True,))[0]
    converter = BooleanConverter(truthy, falsy, insensitive, convert=not strict)
    return core_schema.no_info_wrap_validator_function(converter, core_schema.bool_schema(strict=True))


def _number(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    last = _last(node)
    bounds: dict[str, Any] = {}
    for name, keyword in (("min", "ge"), ("max", "le"), ("greater", "gt"), ("less", "lt"), ("multiple", "multiple_of")):
        if name in last:
            bounds[keyword] = last[name][0]
    if "positive" in last:
        _tighten(bounds, "gt", 0, max)
    if "negative" in last:
        _tighten(bounds, "lt", 0, min)
    if "port" in last:
        _tighten(bounds, "ge", 0, max)
        _tighten(bounds, "le", 65535, min)

    integer = "integer" in last or "port" in last
    if integer and all(float(limit).is_integer() for limit in bounds.values()):
        base = core_schema.int_schema(strict=strict, **{k: int(v) for k, v in bounds.items()})
    else:
        base = core_schema.float_schema(strict=strict, allow_inf_nan=False, **bounds)
        if integer:
            base = core_schema.no_info_after_validator_function(whole_number, base)
    precision = last["precision"][0] if "precision" in last else None
    return core_schema.no_info_wrap_validator_function(NumberOutput(precision, not strict), base)


def _string(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    last = _last(node)
    kwargs: dict[str, Any] = {}
    if "min" in last:
        kwargs["min_length"] = last["min"][0]
    if "max" in last:
        kwargs["max_length"] = last["max"][0]
    if "length" in last:
        kwargs["min_length"] = kwargs["max_length"] = last["length"][0]
    if not strict:
        kwargs["strip_whitespace"] = last.get("trim", (False,))[0]
        kwargs["to_lower"] = "lowercase" in last
        kwargs["to_upper"] = "uppercase" in last

    schema = core_schema.str_schema(strict=strict, **kwargs)
    steps = [(rule.name, rule.args) for rule in node.rules if rule.name in _STRING_STEPS]
    if steps:
        schema = core_schema.no_info_after_validator_function(StringRules(steps, convert=not strict), schema)
    return schema


def _date(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    last = _last(node)
    schema = core_schema.datetime_schema(strict=strict)
    iso, timestamp = "iso" in last, last.get("timestamp", (None,))[0]
    if iso or timestamp:
        schema = core_schema.no_info_before_validator_function(DateInput(iso, timestamp), schema)
    minimum, maximum = last.get("min", (None,))[0], last.get("max", (None,))[0]
    if minimum is not None or maximum is not None:
        schema = core_schema.no_info_after_validator_function(DateLimits(minimum, maximum), schema)
    return schema


def _object(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    last = _last(node)
    allow_unknown = last["unknown"][0] if "unknown" in last else ctx.allow_unknown
    if node.children is None:
        schema = core_schema.dict_schema(core_schema.str_schema(), core_schema.any_schema())
    else:
        fields = {key: compile_field(child, ctx) for key, child in node.children}
        extra = "allow" if allow_unknown else "ignore" if ctx.strip_unknown else "forbid"
        schema = core_schema.typed_dict_schema(fields, extra_behavior=extra)

    schema = core_schema.no_info_before_validator_function(MappingInput(node), schema)
    if rules := ObjectRules(node):
        schema = core_schema.no_info_after_validator_function(rules, schema)
    return schema


def _items(node: SchemaNode, ctx: CompileContext) -> CoreSchema:
    if len(node.item_schemas) == 1:
        return compile_node(node.item_schemas[0], ctx)
    return core_schema.union_schema(
        [compile_node(item, ctx) for item in node.item_schemas],
        custom_error_type="array_includes",
        custom_error_message="Input does not match any of the allowed types",
        mode="left_to_right",
    )


def _array(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    last = _last(node)
    lengths: dict[str, int] = {}
    if "min" in last:
        lengths["min_length"] = last["min"][0]
    if "max" in last:
        lengths["max_length"] = last["max"][0]
    if "length" in last:
        lengths["min_length"] = lengths["max_length"] = last["length"][0]

    if node.ordered_schemas:
        positional = [compile_node(item, ctx) for item in node.ordered_schemas]
        variadic = None
        if node.item_schemas:
            positional.append(_items(node, ctx))
            variadic = len(node.ordered_schemas)
        schema = core_schema.tuple_schema(positional, variadic_item_index=variadic, strict=strict, **lengths)
        schema = core_schema.no_info_after_validator_function(to_list, schema)
    else:
        items = _items(node, ctx) if node.item_schemas else None
        schema = core_schema.list_schema(items, strict=strict, **lengths)

    if "unique" in last:
        schema = core_schema.no_info_after_validator_function(unique_items, schema)
    if last.get("single", (False,))[0]:
        schema = core_schema.no_info_before_validator_function(wrap_single, schema)
    return schema


def _alternatives(node: SchemaNode, ctx: CompileContext, strict: bool) -> CoreSchema:
    if not node.choices:
        return core_schema.any_schema()
    if len(node.choices) == 1:
        return compile_node(node.choices[0], ctx)
    return core_schema.union_schema(
        [compile_node(choice, ctx) for choice in node.choices],
        custom_error_type="alternatives_match",
        custom_error_message="Input does not match any of the allowed alternatives",
        mode="left_to_right",
    )


_BUILDERS: dict[SchemaKind, Callable[[SchemaNode, CompileContext, bool], CoreSchema]] = {
    SchemaKind.ANY: _any,
    SchemaKind.BOOLEAN: _boolean,
    SchemaKind.NUMBER: _number,
    SchemaKind.STRING: _string,
    SchemaKind.DATE: _date,
    SchemaKind.OBJECT: _object,
    SchemaKind.ARRAY: _array,
    SchemaKind.ALTERNATIVES: _alternatives,
}


# ============================================================================
# Entry Points
# ============================================================================

def compile_node(node: SchemaNode, ctx: CompileContext | None = None) -> CoreSchema:
    """Compile ``node`` (already condition-resolved) to a CoreSchema."""
    ctx = (ctx or CompileContext()).merged(node.options_dict())
    if node.strict_mode is not None:
        ctx = replace(ctx, convert=not node.strict_mode)

    schema = _BUILDERS[node.kind](node, ctx, not ctx.convert)
    if node.raw_output:
        schema = core_schema.no_info_wrap_validator_function(keep_raw, schema)
    if guard := ValueSetGuard.for_node(node):
        schema = core_schema.no_info_wrap_validator_function(guard, schema)
    return schema


def compile_field(node: SchemaNode, ctx: CompileContext) -> core_schema.TypedDictField:
    """Compile ``node`` as a key of its parent object, honouring presence and default."""
    presence = node.presence or ctx.merged(node.options_dict()).presence
    if presence is Presence.FORBIDDEN:
        return core_schema.typed_dict_field(core_schema.no_info_plain_validator_function(reject_present), required=False)

    schema = compile_node(node, ctx)
    if node.default is not MISSING and presence is not Presence.REQUIRED:
        if callable(node.default):
            schema = core_schema.with_default_schema(schema, default_factory=node.default)
        else:
            schema = core_schema.with_default_schema(schema, default=node.default)
        return core_schema.typed_dict_field(schema, required=False)
    return core_schema.typed_dict_field(schema, required=presence is Presence.REQUIRED)
