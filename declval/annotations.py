"""Class Registration

Reads the ``Annotated[...]`` metadata of a class body and applies every
schema rule found there, in order, when the class is created.

Usage:
    class Point(Validatable):
        x: Annotated[float, NumberSchema(), Required()]
        y: Annotated[float, NumberSchema(), Required()]

    @schema_class
    @dataclass
    class Label:
        text: Annotated[str, StringSchema(), string.Max(40)] = ""
"""
from __future__ import annotations

import inspect
import sys
from typing import Annotated, Any, Callable, Mapping, TypeVar, get_origin, overload

from declval.constraints.base import SchemaRule
from declval.errors import SchemaDefinitionError
from declval.metadata import SchemaRegistry, default_registry

C = TypeVar("C", bound=type)

REGISTRY_ATTRIBUTE = "__schema_registry__"


def schema_rules(annotation: Any) -> list[SchemaRule]:
    """Schema rules carried by an ``Annotated`` annotation, in declaration order."""
    if get_origin(annotation) is not Annotated:
        return []
    return [item for item in annotation.__metadata__ if isinstance(item, SchemaRule)]


def registry_for(cls: type) -> SchemaRegistry:
    return getattr(cls, REGISTRY_ATTRIBUTE, default_registry)


def defining_namespace(depth: int = 1) -> dict[str, Any]:
    """Local names of the scope ``depth`` frames above the caller (where a class statement ran)."""
    return dict(sys._getframe(depth + 1).f_locals)


def property_annotations(cls: type, localns: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Annotations declared directly on ``cls``, string annotations evaluated.

    Strings (``from __future__ import annotations``) are evaluated against the
    class module, ``localns`` and the class namespace, so function-local and
    self references resolve.

    Raises:
        SchemaDefinitionError: an annotation names something that is not defined
    """
    module = sys.modules.get(cls.__module__)
    globalns = vars(module) if module is not None else {}
    namespace = {**(localns or {}), **vars(cls), cls.__name__: cls}
    resolved: dict[str, Any] = {}
    for key, annotation in inspect.get_annotations(cls).items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, globalns, namespace)
            except NameError as exc:
                raise SchemaDefinitionError(
                    f"Cannot resolve the annotation of property {key}: {exc}", key, cls
                ) from exc
        resolved[key] = annotation
    return resolved


def register_class(cls: C, registry: SchemaRegistry | None = None, localns: Mapping[str, Any] | None = None) -> C:
    """Apply the schema rules declared directly on ``cls`` (not its bases).

    ``localns`` holds the names visible where the class was defined; it is only
    needed for string annotations that reference function-local names.
    """
    if registry is not None:
        setattr(cls, REGISTRY_ATTRIBUTE, registry)
    registry = registry_for(cls)
    for key, annotation in property_annotations(cls, localns).items():
        for rule in schema_rules(annotation):
            rule(cls, key, registry)
    return cls


class Validatable:
    """Base class whose subclasses register their annotated properties on creation.

    Pass ``registry=`` in the class statement to use a registry other than the
    default one; subclasses inherit it.
    """

    def __init_subclass__(cls, registry: SchemaRegistry | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        register_class(cls, registry, defining_namespace())


@overload
def schema_class(cls: C) -> C: ...


@overload
def schema_class(*, registry: SchemaRegistry | None = None) -> Callable[[C], C]: ...


def schema_class(cls: Any = None, *, registry: SchemaRegistry | None = None) -> Any:
    """Class decorator equivalent of subclassing Validatable."""
    if cls is None:
        def decorate(target: C) -> C:
            return register_class(target, registry, defining_namespace())

        return decorate
    return register_class(cls, registry, defining_namespace())
