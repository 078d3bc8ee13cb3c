"""
Settings component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol


class OptionStorePort(Protocol):
    """Host option storage: one serialized value per option name."""

    def get(self, name: str) -> dict[str, Any] | None:
        """Get the stored mapping, or None if never saved."""
        ...

    def save(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        """Replace the stored mapping (no merge)."""
        ...

    def delete(self, name: str) -> None:
        """Remove the stored mapping."""
        ...
