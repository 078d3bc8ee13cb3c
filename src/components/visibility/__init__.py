"""
Visibility component - show_if/hide_if class token compiler.
"""

from .component import (
    CLAUSE_SEPARATOR,
    HIDE_IF,
    SHOW_IF,
    VALUE_SEPARATOR,
    compile_classes,
    compile_rules,
    compile_tokens,
    join_classes,
)

__all__ = [
    "CLAUSE_SEPARATOR",
    "HIDE_IF",
    "SHOW_IF",
    "VALUE_SEPARATOR",
    "compile_classes",
    "compile_rules",
    "compile_tokens",
    "join_classes",
]
