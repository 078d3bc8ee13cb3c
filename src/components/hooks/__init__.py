"""
Hooks component - per option group filters and actions.
"""

from ._impl import DEFAULT_PRIORITY, HookBus

__all__ = [
    "DEFAULT_PRIORITY",
    "HookBus",
]
