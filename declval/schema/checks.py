"""Validator Functions

Function validators plugged into pydantic-core schemas for the rules
pydantic-core has no native keyword for. Every failure is raised as a
PydanticCustomError so it surfaces with a stable error type, the location
of the offending value and a formatted message.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from ipaddress import ip_address
from typing import Any, Iterable, NoReturn
from urllib.parse import urlparse
from uuid import UUID

from pydantic_core import PydanticCustomError

from .node import MISSING, SchemaKind, SchemaNode, _equal


def fail(error_type: str, message: str, **context: Any) -> NoReturn:
    raise PydanticCustomError(error_type, message, context or None)


# ============================================================================
# Generic Value Sets
# ============================================================================

class ValueSetGuard:
    """Wrap validator applying allow/valid/invalid sets around a kind schema.

    Allowed values pass untouched, invalid values fail, and with ``only`` set
    nothing else gets through to the wrapped schema.
    """
    __slots__ = ("allowed", "invalid", "only", "insensitive", "reject_empty")

    def __init__(self, allowed: tuple, invalid: tuple, only: bool, insensitive: bool, reject_empty: bool):
        self.allowed, self.invalid, self.only = allowed, invalid, only
        self.insensitive, self.reject_empty = insensitive, reject_empty

    @classmethod
    def for_node(cls, node: SchemaNode) -> ValueSetGuard | None:
        reject_empty = node.kind is SchemaKind.STRING
        if not (node.allowed or node.invalid or node.only or reject_empty):
            return None
        insensitive = node.kind is SchemaKind.STRING and any(r.name == "insensitive" for r in node.rules)
        return cls(node.allowed, node.invalid, node.only, insensitive, reject_empty)

    def _contains(self, values: tuple, value: Any) -> bool:
        if self.insensitive and isinstance(value, str):
            folded = value.casefold()
            return any(isinstance(v, str) and v.casefold() == folded for v in values)
        return any(_equal(value, v) for v in values)

    def __call__(self, value: Any, handler: Any) -> Any:
        if self._contains(self.allowed, value):
            return value
        if self._contains(self.invalid, value):
            fail("any_invalid", "Input contains an invalid value")
        if self.only:
            fail("any_only", "Input must be one of {allowed}", allowed=list(self.allowed))
        if self.reject_empty and value == "":
            fail("any_empty", "Input is not allowed to be empty")
        return handler(value)


def keep_raw(value: Any, handler: Any) -> Any:
    handler(value)
    return value


def reject_present(value: Any) -> NoReturn:
    fail("any_unknown", "Input is not allowed")


# ============================================================================
# Booleans
# ============================================================================

class BooleanConverter:
    """Maps truthy/falsy sets and 'true'/'false' strings onto bool."""
    __slots__ = ("truthy", "falsy", "insensitive", "convert")

    def __init__(self, truthy: tuple, falsy: tuple, insensitive: bool, convert: bool):
        self.truthy, self.falsy, self.insensitive, self.convert = truthy, falsy, insensitive, convert

    def _matches(self, values: tuple, value: Any) -> bool:
        if self.insensitive and isinstance(value, str):
            return any(isinstance(v, str) and v.lower() == value.lower() for v in values)
        return any(_equal(value, v) for v in values)

    def __call__(self, value: Any, handler: Any) -> Any:
        if isinstance(value, bool) or not self.convert:
            return handler(value)
        if self._matches(self.truthy, value):
            return True
        if self._matches(self.falsy, value):
            return False
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        return handler(value)


# ============================================================================
# Numbers
# ============================================================================

class NumberOutput:
    """Rejects booleans, applies precision and returns int inputs unchanged."""
    __slots__ = ("precision", "convert")

    def __init__(self, precision: int | None, convert: bool):
        self.precision, self.convert = precision, convert

    def __call__(self, value: Any, handler: Any) -> Any:
        if isinstance(value, bool):
            fail("number_type", "Input should be a valid number")
        result = handler(value)
        if self.precision is not None and isinstance(result, float):
            rounded = round(result, self.precision)
            if self.convert:
                result = rounded
            elif rounded != result:
                fail("number_precision", "Input must have no more than {limit} decimal places", limit=self.precision)
        if isinstance(value, int):
            return value
        return result


def whole_number(value: float) -> int:
    """After validator for integer() when a bound is fractional and the float schema did the bounds check."""
    if not float(value).is_integer():
        fail("int_from_float", "Input should be a valid integer, got a number with a fractional part")
    return int(value)


# ============================================================================
# Strings
# ============================================================================

_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_HOSTNAME = re.compile(
    r"^(?=.{1,253}$)([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_PATTERN_FORMATS: dict[str, tuple[re.Pattern, str]] = {
    "alphanum": (re.compile(r"^[a-zA-Z0-9]+$"), "Input must only contain alpha-numeric characters"),
    "token": (re.compile(r"^\w+$"), "Input must only contain alpha-numeric and underscore characters"),
    "hex": (re.compile(r"^[a-fA-F0-9]+$"), "Input must only contain hexadecimal characters"),
    "email": (_EMAIL, "Input must be a valid email"),
    "hostname": (_HOSTNAME, "Input must be a valid hostname"),
}


def _is_guid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _is_ip(value: str) -> bool:
    try:
        ip_address(value)
    except ValueError:
        return False
    return True


def _is_uri(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and (parsed.netloc or parsed.path))


def _is_iso_date(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _is_credit_card(value: str) -> bool:
    """Luhn checksum."""
    if not value.isdigit():
        return False
    total = 0
    for index, digit in enumerate(reversed(value)):
        n = int(digit)
        if index % 2 == 1:
            n = n * 2 - 9 if n > 4 else n * 2
        total += n
    return total % 10 == 0


_PREDICATE_FORMATS = {
    "guid": (_is_guid, "Input must be a valid GUID"),
    "ip": (_is_ip, "Input must be a valid ip address"),
    "uri": (_is_uri, "Input must be a valid uri"),
    "iso_date": (_is_iso_date, "Input must be a valid ISO 8601 date"),
    "credit_card": (_is_credit_card, "Input must be a credit card"),
}


class StringRules:
    """After validator running the string rules pydantic-core lacks, in declaration order."""
    __slots__ = ("steps", "convert")

    def __init__(self, steps: list[tuple[str, tuple]], convert: bool):
        self.steps, self.convert = steps, convert

    def __call__(self, value: str) -> str:
        for name, args in self.steps:
            value = self._apply(name, args, value)
        return value

    def _apply(self, name: str, args: tuple, value: str) -> str:
        if name == "replace":
            pattern, replacement = args
            return re.sub(pattern, replacement, value)
        if name == "regex":
            pattern, label, invert = args
            if bool(re.search(pattern, value)) == invert:
                error_type = "string_pattern_invert" if invert else "string_pattern_mismatch"
                verb = "must not match" if invert else "should match"
                fail(error_type, "String {verb} the {name} pattern", verb=verb, name=label or pattern)
            return value
        if name in _PATTERN_FORMATS:
            pattern, message = _PATTERN_FORMATS[name]
            if not pattern.match(value):
                fail(f"string_{name}", message)
            return value
        if name in _PREDICATE_FORMATS:
            predicate, message = _PREDICATE_FORMATS[name]
            if not predicate(value):
                fail(f"string_{name}", message)
            return value
        # Remaining rules only validate in strict mode; conversion happened in str_schema
        if self.convert or (args and not args[0]):
            return value
        if name == "trim" and value != value.strip():
            fail("string_trim", "Input must not have leading or trailing whitespace")
        if name == "lowercase" and value != value.lower():
            fail("string_lowercase", "Input must only contain lowercase characters")
        if name == "uppercase" and value != value.upper():
            fail("string_uppercase", "Input must only contain uppercase characters")
        return value


# ============================================================================
# Dates
# ============================================================================

class DateInput:
    """Before validator enforcing iso() and converting timestamp() inputs."""
    __slots__ = ("iso", "timestamp")

    def __init__(self, iso: bool, timestamp: str | None):
        self.iso, self.timestamp = iso, timestamp

    def __call__(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if self.timestamp:
            try:
                seconds = float(value)
            except (TypeError, ValueError):
                fail("date_timestamp", "Input must be a valid {unit} timestamp", unit=self.timestamp)
            if self.timestamp == "javascript":
                seconds /= 1000
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        if self.iso and not (isinstance(value, str) and _is_iso_date(value)):
            fail("date_iso", "Input must be a valid ISO 8601 date")
        return value


def _comparable(value: datetime, limit: Any) -> tuple[datetime, datetime]:
    """Value and limit on the same footing; a naive side is read as UTC when the other is aware."""
    if limit == "now":
        return value, datetime.now(value.tzinfo)
    if value.tzinfo is None and limit.tzinfo is not None:
        return value.replace(tzinfo=timezone.utc), limit
    if limit.tzinfo is None and value.tzinfo is not None:
        return value, limit.replace(tzinfo=timezone.utc)
    return value, limit


class DateLimits:
    """After validator for min()/max(); the limit "now" is read at validation time."""
    __slots__ = ("minimum", "maximum")

    def __init__(self, minimum: Any, maximum: Any):
        self.minimum, self.maximum = minimum, maximum

    def __call__(self, value: datetime) -> datetime:
        if self.minimum is not None:
            current, limit = _comparable(value, self.minimum)
            if current < limit:
                fail("date_min", "Input must be larger than or equal to {limit}", limit=str(limit))
        if self.maximum is not None:
            current, limit = _comparable(value, self.maximum)
            if current > limit:
                fail("date_max", "Input must be less than or equal to {limit}", limit=str(limit))
        return value


# ============================================================================
# Objects
# ============================================================================

def as_mapping(value: Any, keys: Iterable[str] = ()) -> Any:
    """Read a plain object as a dict of its declared keys and public attributes.

    Mappings are copied; anything that is neither a mapping nor an object with
    attributes is returned unchanged so the object schema reports its type.
    """
    if isinstance(value, Mapping):
        return dict(value)
    if value is None or isinstance(value, (str, bytes, int, float, list, tuple, set, frozenset)):
        return value
    if not (hasattr(value, "__dict__") or hasattr(type(value), "__slots__")):
        return value
    data = {k: v for k, v in getattr(value, "__dict__", {}).items() if not k.startswith("_")}
    for key in keys:
        if key not in data and (attr := getattr(value, key, MISSING)) is not MISSING:
            data[key] = attr
    return data


class MappingInput:
    """Before validator: type(), instance-to-dict, rename() and empty() handling."""
    __slots__ = ("keys", "instance_of", "renames", "empties")

    def __init__(self, node: SchemaNode):
        self.keys = tuple(k for k, _ in node.children or ())
        types = [r.args for r in node.rules if r.name == "type"]
        self.instance_of = types[-1] if types else None
        self.renames = [r.args for r in node.rules if r.name == "rename"]
        self.empties = {k: child.empty for k, child in node.children or () if child.empty}

    def __call__(self, value: Any) -> Any:
        if self.instance_of is not None:
            cls, name = self.instance_of
            if not isinstance(value, cls):
                fail("object_type", "Input must be an instance of {name}", name=name or cls.__name__)
        data = as_mapping(value, self.keys)
        if not isinstance(data, dict):
            return data
        for source, target, alias, override in self.renames:
            if source not in data:
                continue
            if target in data and not override:
                fail("object_rename_override", "Cannot rename {source} because it will override {target}",
                    source=source, target=target)
            data[target] = data[source] if alias else data.pop(source)
        for key, values in self.empties.items():
            if key in data and any(_equal(data[key], v) for v in values):
                del data[key]
        return data


def _dependency_error(name: str, args: tuple, present: set[str]) -> None:
    if name in ("with", "without"):
        key, peers = args
        if key not in present:
            return
        if name == "with" and (missing := [p for p in peers if p not in present]):
            fail("object_with", "{key} missing required peer {peer}", key=key, peer=missing[0])
        if name == "without" and (conflicts := [p for p in peers if p in present]):
            fail("object_without", "{key} conflict with forbidden peer {peer}", key=key, peer=conflicts[0])
        return

    peers = args
    found = [p for p in peers if p in present]
    if name == "and" and found and len(found) != len(peers):
        fail("object_and", "Input contains {present} without its required peers {missing}",
            present=found, missing=[p for p in peers if p not in present])
    if name == "nand" and len(found) == len(peers):
        fail("object_nand", "{main} must not exist simultaneously with {peers}", main=peers[0], peers=list(peers[1:]))
    if name == "or" and not found:
        fail("object_missing", "Input must contain at least one of {peers}", peers=list(peers))
    if name == "xor":
        if not found:
            fail("object_missing", "Input must contain at least one of {peers}", peers=list(peers))
        if len(found) > 1:
            fail("object_xor", "Input contains a conflict between exclusive peers {peers}", peers=found)


class ObjectRules:
    """After validator: key counts, peer dependencies and strip()."""
    __slots__ = ("counts", "dependencies", "stripped")

    def __init__(self, node: SchemaNode):
        self.counts = [(r.name, r.args[0]) for r in node.rules if r.name in ("min", "max", "length")]
        self.dependencies = [(r.name, r.args) for r in node.rules if r.name in ("and", "nand", "or", "xor", "with", "without")]
        self.stripped = {k for k, child in node.children or () if child.stripped}

    def __bool__(self) -> bool:
        return bool(self.counts or self.dependencies or self.stripped)

    def __call__(self, value: dict) -> dict:
        size = len(value)
        for name, limit in self.counts:
            if name == "min" and size < limit:
                fail("object_min", "Input must have at least {limit} children", limit=limit)
            if name == "max" and size > limit:
                fail("object_max", "Input must have less than or equal to {limit} children", limit=limit)
            if name == "length" and size != limit:
                fail("object_length", "Input must have {limit} children", limit=limit)
        present = set(value)
        for name, args in self.dependencies:
            _dependency_error(name, args, present)
        if self.stripped:
            value = {k: v for k, v in value.items() if k not in self.stripped}
        return value


# ============================================================================
# Arrays
# ============================================================================

def wrap_single(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value
    return [value]


def to_list(value: Any) -> list:
    return list(value)


def unique_items(value: list) -> list:
    for index, item in enumerate(value):
        if any(_equal(item, earlier) for earlier in value[:index]):
            fail("array_unique", "Input position {pos} contains a duplicate value", pos=index)
    return value
