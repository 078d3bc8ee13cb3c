"""
Visibility rule compiler.

Turns `show_if` / `hide_if` declarations into class-name tokens read by
the admin page script:

    show_if: [{field: a, values: [1, 2]}]          -> "show-if show-if--a===1||2"
    show_if: [[{field: a, values: [1]},
               {field: b, values: [2]}]]           -> "show-if show-if--a===1&&b===2"

Each top-level rule is an independent (OR) token. Hide tokens always
follow show tokens. There is no parser for the reverse direction.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from src.rules.models import VisibilityCondition, VisibilityRule

SHOW_IF = "show-if"
HIDE_IF = "hide-if"

VALUE_SEPARATOR = "||"
CLAUSE_SEPARATOR = "&&"

# Accepts model instances as well as raw dicts/lists
_RULES: TypeAdapter[list[VisibilityRule]] = TypeAdapter(list[VisibilityRule])


def _clause(condition: VisibilityCondition) -> str | None:
    values = [value for value in condition.values if value]
    if not condition.field or not values:
        return None
    return f"{condition.field}==={VALUE_SEPARATOR.join(values)}"


def _rule_suffix(rule: VisibilityRule) -> str | None:
    if isinstance(rule, VisibilityCondition):
        return _clause(rule)

    clauses = [c for c in (_clause(condition) for condition in rule) if c]
    if not clauses:
        return None
    return CLAUSE_SEPARATOR.join(clauses)


def compile_tokens(rules: list[VisibilityRule] | None, namespace: str = SHOW_IF) -> list[str]:
    """
    Compile one rule list into tokens.

    A present rule list always emits the bare namespace token; each
    usable rule then adds `{namespace}--{suffix}`. Conditions missing a
    field or values are skipped.
    """
    if rules is None:
        return []

    tokens = [namespace]
    for rule in _RULES.validate_python(rules):
        suffix = _rule_suffix(rule)
        if suffix:
            tokens.append(f"{namespace}--{suffix}")
    return tokens


def compile_rules(
    show_if: list[VisibilityRule] | None = None,
    hide_if: list[VisibilityRule] | None = None,
) -> str:
    """Compile show/hide rules into a whitespace-joined token string."""
    return " ".join(compile_tokens(show_if, SHOW_IF) + compile_tokens(hide_if, HIDE_IF))


def compile_classes(obj: Any) -> str:
    """Compile the show_if/hide_if attributes of a field, section or tab."""
    return compile_rules(getattr(obj, "show_if", None), getattr(obj, "hide_if", None))


def join_classes(*classes: str) -> str:
    """Join class strings, dropping empties."""
    return " ".join(c.strip() for c in classes if c and c.strip())
