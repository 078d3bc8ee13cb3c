"""
Settings error types.

Three failure kinds surface from this layer:
- ConfigurationError: the settings definition has an unrecognized shape.
- AuthorizationError: missing/invalid token or insufficient capability.
- SettingsValidationError: submitted values rejected by a validator.

ImportRejected is raised when an import payload is not a JSON object/array.
"""

from __future__ import annotations

from .models import ValidationError


class SettingsError(Exception):
    """Base class for settings framework errors."""


class ConfigurationError(SettingsError):
    """Settings definition is malformed."""


class AuthorizationError(SettingsError):
    """Caller is not allowed to perform the action."""


class SettingsValidationError(SettingsError):
    """Submitted values were rejected."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        summary = "; ".join(e.message for e in errors) or "Validation failed"
        super().__init__(summary)


class ImportRejected(SettingsError):
    """Import payload could not be accepted."""
