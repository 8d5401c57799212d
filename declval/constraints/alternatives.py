"""Alternatives rules: the value must match at least one candidate, tried in order."""
from __future__ import annotations

from typing import Any

from declval.schema import alternatives_schema

from .base import Compose, Establish


def AlternativesSchema() -> Establish:
    return Establish("alternatives", lambda registry: alternatives_schema())


def Try(*schemas: Any) -> Compose:
    """Add candidates: schemas, annotated classes or literal values."""
    return Compose("alternatives.try", lambda node, *resolved: node.try_(*resolved), schemas)
