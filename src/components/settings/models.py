"""
Settings component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.rules.models import Section, SettingsField


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class SaveSettingsInput:
    """Input for saving a submitted form."""

    values: dict[str, Any]


@dataclass(frozen=True)
class SaveSettingsOutput:
    """Output from saving settings."""

    values: dict[str, Any]
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass
class FieldArgs:
    """Resolved arguments handed to a field renderer."""

    field: SettingsField
    id: str
    name: str
    value: Any
    css_class: str = ""
    section: Section | None = None

    @property
    def type(self) -> str:
        return self.field.type.value
