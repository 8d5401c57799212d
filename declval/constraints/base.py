"""Schema Rules

A schema rule is one annotation on one property. Applying it reads the
property's schema from the registry, performs a single operation and writes
the result back.

Key Features:
- Establish: creates the base-kind schema; fails if one already exists
- Refine: transforms an existing schema; fails if none exists yet
- Compose: like Refine, with class references resolved through the registry
- Uniform call contract: rule(owner, key, registry=None)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from declval.errors import ConstraintDefinitionError, SchemaDefinitionError
from declval.logging import schema_logger
from declval.metadata import SchemaRegistry, default_registry
from declval.schema import SchemaNode

log = schema_logger()


def _format_args(args: Sequence[Any]) -> str:
    return ", ".join(a.__qualname__ if isinstance(a, type) else repr(a) for a in args)


class SchemaRule(ABC):
    """Base class for property annotations that build a schema."""
    __slots__ = ("operation", "args")

    def __init__(self, operation: str, args: Sequence[Any] = ()):
        self.operation, self.args = operation, tuple(args)

    def __repr__(self) -> str:
        return f"{self.operation}({_format_args(self.args)})"

    def __call__(self, owner: type, key: str, registry: SchemaRegistry | None = None) -> SchemaNode:
        """Apply this rule to ``owner.key``.

        Raises:
            SchemaDefinitionError: the rule cannot be applied at this point
        """
        registry = registry if registry is not None else default_registry
        try:
            node = self.apply(owner, key, registry)
        except SchemaDefinitionError as exc:
            if exc.property_key is None:
                exc.property_key = key
            if exc.owner is None:
                exc.owner = owner
            exc.add_note(f"while applying {self!r} to {owner.__qualname__}.{key}")
            raise
        return node

    @abstractmethod
    def apply(self, owner: type, key: str, registry: SchemaRegistry) -> SchemaNode:
        """Perform the operation against ``registry``."""


class Establish(SchemaRule):
    """Sets the base kind of a property. Must be the first rule applied to it."""
    __slots__ = ("factory",)

    def __init__(self, operation: str, factory: Callable[[SchemaRegistry], SchemaNode], args: Sequence[Any] = ()):
        super().__init__(operation, args)
        self.factory = factory

    def apply(self, owner: type, key: str, registry: SchemaRegistry) -> SchemaNode:
        if registry.get_schema(owner, key) is not None:
            raise ConstraintDefinitionError(f"A validation schema already exists for property: {key}", key, owner)
        node = self.factory(registry)
        registry.set_schema(owner, key, node)
        log.debug("schema_established", owner=owner.__qualname__, key=key, kind=node.kind.value)
        return node


class Refine(SchemaRule):
    """Applies one operation to the already established schema of a property."""
    __slots__ = ("transform",)

    def __init__(self, operation: str, transform: Callable[[SchemaNode], SchemaNode], args: Sequence[Any] = ()):
        super().__init__(operation, args)
        self.transform = transform

    def apply(self, owner: type, key: str, registry: SchemaRegistry) -> SchemaNode:
        node = registry.update_schema(owner, key, self.transform)
        log.debug("schema_refined", owner=owner.__qualname__, key=key, rule=self.operation)
        return node


class Compose(SchemaRule):
    """Refinement whose arguments may reference other annotated classes.

    References are resolved when the rule is applied, so referenced classes
    must be fully defined before the class that references them.
    """
    __slots__ = ("combine",)

    def __init__(self, operation: str, combine: Callable[..., SchemaNode], references: Sequence[Any]):
        super().__init__(operation, references)
        self.combine = combine

    def apply(self, owner: type, key: str, registry: SchemaRegistry) -> SchemaNode:
        def transform(node: SchemaNode) -> SchemaNode:
            return self.combine(node, *(registry.resolve_reference(ref) for ref in self.args))

        node = registry.update_schema(owner, key, transform)
        log.debug("schema_refined", owner=owner.__qualname__, key=key, rule=self.operation)
        return node


def refine(operation: str, method: str, *args: Any) -> Refine:
    """Refine calling ``node.<method>(*args)``."""
    return Refine(operation, lambda node: getattr(node, method)(*args), args)
