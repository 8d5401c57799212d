"""Validation options and accumulation modes."""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from declval.config import Settings, get_settings
from declval.schema import EngineOptions, Presence


class ValidationMode(str, Enum):
    """Validation accumulation strategy."""
    FAIL_FAST = "fail_fast"
    COLLECT_ALL = "collect_all"


class ValidationOptions(BaseModel):
    """Options for one validate() call.

    - mode: report every failure or only the first
    - convert: coerce compatible inputs ("12" -> 12) instead of rejecting them
    - allow_unknown: keep undeclared keys instead of failing
    - strip_unknown: drop undeclared keys instead of failing
    - presence: default presence of keys without Optional/Required/Forbidden
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: ValidationMode = ValidationMode.COLLECT_ALL
    convert: bool = True
    allow_unknown: bool = False
    strip_unknown: bool = False
    presence: Presence = Presence.OPTIONAL

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ValidationOptions:
        settings = settings or get_settings()
        return cls(
            mode=settings.VALIDATION_MODE,
            convert=settings.CONVERT,
            allow_unknown=settings.ALLOW_UNKNOWN,
            strip_unknown=settings.STRIP_UNKNOWN,
            presence=settings.PRESENCE,
        )

    def merged(self, **overrides: Any) -> ValidationOptions:
        """Copy with ``overrides`` applied and validated."""
        if not overrides:
            return self
        return self.model_validate({**self.model_dump(), **overrides})

    def engine_options(self) -> EngineOptions:
        return EngineOptions(
            convert=self.convert,
            allow_unknown=self.allow_unknown,
            strip_unknown=self.strip_unknown,
            presence=self.presence,
            abort_early=self.mode is ValidationMode.FAIL_FAST,
        )
