"""
HookBus - filter/action hooks scoped to one option group.

Filters transform a value through every registered callback in priority
order. Actions run callbacks for their side effects; any string they
return is collected so renderers can splice it into the page.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


@dataclass(order=True)
class _Registration:
    priority: int
    seq: int
    callback: Callable[..., Any] = field(compare=False)


class HookBus:
    """Named filters and actions."""

    def __init__(self) -> None:
        self._filters: dict[str, list[_Registration]] = {}
        self._actions: dict[str, list[_Registration]] = {}
        self._seq = 0

    def _register(
        self,
        table: dict[str, list[_Registration]],
        name: str,
        callback: Callable[..., Any],
        priority: int,
    ) -> None:
        self._seq += 1
        regs = table.setdefault(name, [])
        regs.append(_Registration(priority, self._seq, callback))
        regs.sort()

    def add_filter(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._register(self._filters, name, callback, priority)

    def add_action(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._register(self._actions, name, callback, priority)

    def remove_action(self, name: str, callback: Callable[..., Any]) -> None:
        regs = self._actions.get(name, [])
        self._actions[name] = [r for r in regs if r.callback is not callback]

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Pass value through every filter registered under name."""
        for reg in self._filters.get(name, []):
            value = reg.callback(value, *args)
        return value

    def do_action(self, name: str, *args: Any) -> str:
        """Run every action registered under name; returns their joined string output."""
        output: list[str] = []
        for reg in self._actions.get(name, []):
            result = reg.callback(*args)
            if isinstance(result, str):
                output.append(result)
        if output:
            logger.debug("Action %s produced %d fragments", name, len(output))
        return "".join(output)
