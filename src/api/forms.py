"""
Bracketed form decoding.

Settings forms post every value as `{option_name}[{key}]`, with list
fields as `...[key][]` and group rows as `...[key][{row}][{subfield}]`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from src.components.settings import SettingsRegistry
from src.rules.models import FieldType

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")

# Renderers post a hidden "0" ahead of the boxes so an empty selection still arrives
_LIST_FIELD_TYPES = (FieldType.CHECKBOXES, FieldType.IMAGE_CHECKBOXES)


def split_name(name: str, prefix: str) -> list[str] | None:
    """Path segments of `prefix[a][b]...`, or None when the name does not match."""
    if not name.startswith(prefix + "["):
        return None
    rest = name[len(prefix) :]
    segments = _SEGMENT.findall(rest)
    if not segments or "".join(f"[{s}]" for s in segments) != rest:
        return None
    if segments[0] == "" or "" in segments[1:-1]:
        return None
    return segments


def _assign(node: dict[str, Any], path: list[str], value: str) -> None:
    key, rest = path[0], path[1:]

    if not rest:
        # A later scalar never clobbers a list or row already collected
        if not isinstance(node.get(key), list | dict):
            node[key] = value
        return

    if rest == [""]:
        current = node.get(key)
        if not isinstance(current, list):
            current = []
            node[key] = current
        current.append(value)
        return

    child = node.get(key)
    if not isinstance(child, dict):
        child = {}
        node[key] = child
    _assign(child, rest, value)


def _listify(value: Any) -> Any:
    """Turn row mappings keyed "0", "1", ... into ordered lists."""
    if not isinstance(value, dict):
        return value
    converted = {k: _listify(v) for k, v in value.items()}
    if converted and all(k.isdigit() for k in converted):
        return [converted[k] for k in sorted(converted, key=int)]
    return converted


def parse_bracketed_form(items: Iterable[tuple[str, Any]], prefix: str) -> dict[str, Any]:
    """Decode posted `prefix[...]` fields into a flat storage-key mapping."""
    result: dict[str, Any] = {}
    for name, value in items:
        if not isinstance(value, str):
            continue
        path = split_name(name, prefix)
        if path is None:
            continue
        _assign(result, path, value)
    return {key: _listify(value) for key, value in result.items()}


def normalize_submission(registry: SettingsRegistry, values: dict[str, Any]) -> dict[str, Any]:
    """Map the empty-selection placeholder of multi-choice fields to []."""
    normalized = dict(values)
    for section in registry.sections:
        for field in section.fields:
            if field.type not in _LIST_FIELD_TYPES:
                continue
            key = registry.value_key(section, field)
            if normalized.get(key) == "0":
                normalized[key] = []
    return normalized
