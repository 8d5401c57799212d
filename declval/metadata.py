"""Metadata Store

Side-table mapping each class to the schema accumulated for each of its
annotated properties. Rules write here once, while the class body is being
registered; the validator only reads.

Key Features:
- get_schema/set_schema/update_schema per (class, property)
- update_schema refuses to run before a base kind is established
- class_metadata() merges the MRO, derived classes overriding their bases
- composite_schema() builds the object schema used for validation
- resolve_reference() turns a class reference into its composite schema
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from declval.errors import SchemaReferenceError, ValidationSchemaNotFound
from declval.schema import SchemaNode, literal_schema, object_schema


@dataclass(frozen=True, slots=True)
class PropertyMetadata:
    """Accumulated schema for one property of one class."""
    key: str
    schema: SchemaNode
    established: bool = True


class SchemaRegistry:
    """Per-class property schemas, written at class-definition time."""

    def __init__(self) -> None:
        self._store: dict[type, dict[str, PropertyMetadata]] = {}

    def __contains__(self, owner: type) -> bool:
        return self.is_registered(owner)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def get_schema(self, owner: type, key: str) -> SchemaNode | None:
        """Schema accumulated for ``key`` on exactly ``owner`` (bases are not consulted)."""
        entry = self._store.get(owner, {}).get(key)
        return entry.schema if entry else None

    def set_schema(self, owner: type, key: str, schema: SchemaNode) -> None:
        self._store.setdefault(owner, {})[key] = PropertyMetadata(key, schema)

    def update_schema(self, owner: type, key: str, transform: Callable[[SchemaNode], SchemaNode]) -> SchemaNode:
        """Apply ``transform`` to the current schema of ``key`` and store the result.

        Raises:
            ValidationSchemaNotFound: no base-kind schema was established for ``key``
        """
        current = self.get_schema(owner, key)
        if current is None:
            raise ValidationSchemaNotFound(key, owner)
        updated = transform(current)
        self.set_schema(owner, key, updated)
        return updated

    def clear(self, owner: type | None = None) -> None:
        if owner is None:
            self._store.clear()
        else:
            self._store.pop(owner, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def own_metadata(self, owner: type) -> dict[str, PropertyMetadata]:
        return dict(self._store.get(owner, {}))

    def class_metadata(self, owner: type) -> dict[str, PropertyMetadata]:
        """Property metadata visible on ``owner``, including inherited properties."""
        merged: dict[str, PropertyMetadata] = {}
        for cls in reversed(owner.__mro__):
            merged.update(self._store.get(cls, {}))
        return merged

    def is_registered(self, owner: type) -> bool:
        return any(cls in self._store for cls in owner.__mro__)

    def composite_schema(self, owner: type) -> SchemaNode:
        """Object schema with one key per property visible on ``owner``."""
        keys = {key: entry.schema for key, entry in self.class_metadata(owner).items()}
        return object_schema(keys)

    def resolve_reference(self, target: Any) -> SchemaNode:
        """Schema for a keys()/items() argument: a schema, an annotated class or a literal.

        Raises:
            SchemaReferenceError: ``target`` is a class with no annotated properties
        """
        if isinstance(target, SchemaNode):
            return target
        if isinstance(target, type):
            if not self.is_registered(target):
                raise SchemaReferenceError(
                    f"{target.__qualname__} has no validation schema; annotate it before referencing it"
                )
            return self.composite_schema(target)
        return literal_schema(target)


default_registry = SchemaRegistry()
