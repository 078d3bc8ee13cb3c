"""
In-memory option store.

Used by tests. Values are deep-copied in and out so callers cannot
mutate stored state.
"""

from __future__ import annotations

import copy
from typing import Any


class InMemoryOptionStore:
    """Dict-backed option storage."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._options: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})
        self.save_count = 0

    def get(self, name: str) -> dict[str, Any] | None:
        value = self._options.get(name)
        return copy.deepcopy(value) if value is not None else None

    def save(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        self._options[name] = copy.deepcopy(value)
        self.save_count += 1
        return copy.deepcopy(value)

    def delete(self, name: str) -> None:
        self._options.pop(name, None)

    def list_names(self) -> list[str]:
        return sorted(self._options)
