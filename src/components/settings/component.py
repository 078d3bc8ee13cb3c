"""
Settings component - storage keys, value resolution and materialization.

Key behaviors:
- Storage key is `{tab_id}_{section_id}_{field_id}` (tabbed) or
  `{section_id}_{field_id}` (untabbed)
- Persisted value wins over the declared default, then ""
- Values are stored as one flat mapping per option group and fully
  overwritten on save
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any
from urllib.parse import urlparse

from src.rules.models import FieldType, Section, SettingsDefinition, SettingsField

from .errors import ConfigurationError, SettingsValidationError
from .models import SaveSettingsInput, SaveSettingsOutput, ValidationError
from .ports import OptionStorePort

logger = logging.getLogger(__name__)

MISSING_VALUE = ""

Validator = Callable[[dict[str, Any]], dict[str, Any]]


# --- Keys ---


def option_name(option_group: str) -> str:
    """Name of the stored option holding every value of a group."""
    return f"{option_group}_settings"


def build_key(tab_id: str | None, section_id: str, field_id: str) -> str:
    """Build the flat storage key for a field."""
    if tab_id:
        return f"{tab_id}_{section_id}_{field_id}"
    return f"{section_id}_{field_id}"


def sort_sections(sections: list[Section]) -> list[Section]:
    """Order sections by section_order; ties keep declaration order."""
    return sorted(sections, key=lambda s: s.section_order)


def value_key(field: SettingsField, key: str) -> str:
    """Key a field's value is posted, stored and read under (`name` overrides)."""
    return field.name or key


def iter_fields(
    definition: SettingsDefinition,
) -> Iterator[tuple[Section, SettingsField, str]]:
    """Yield (section, field, storage_key) in render order."""
    for section in sort_sections(definition.sections):
        tab_id = section.tab_id if definition.has_tabs else None
        for field in section.fields:
            yield section, field, build_key(tab_id, section.section_id, field.id)


def check_definition(definition: SettingsDefinition) -> None:
    """
    Reject definitions whose shape cannot be stored or materialized.

    Tabbed definitions need every section on a declared tab, and no two
    fields may share a value key.
    """
    tab_ids = {tab.id for tab in definition.tabs}
    seen: set[str] = set()

    for section in definition.sections:
        if definition.has_tabs:
            if not section.tab_id:
                raise ConfigurationError(
                    f"Section '{section.section_id}' needs a tab_id when tabs are defined"
                )
            if section.tab_id not in tab_ids:
                raise ConfigurationError(
                    f"Section '{section.section_id}' references unknown tab '{section.tab_id}'"
                )

    for _, field, key in iter_fields(definition):
        lookup = value_key(field, key)
        if lookup in seen:
            raise ConfigurationError(f"Duplicate storage key '{lookup}'")
        seen.add(lookup)


def _read_back_default(default: Any) -> Any:
    # Keyed defaults (multi inputs) are exposed as a plain list
    if isinstance(default, dict):
        return list(default.values())
    return default


def collect_defaults(definition: SettingsDefinition, collapse: bool = False) -> dict[str, Any]:
    """
    Declared defaults keyed by value key (fields without one are omitted).

    With `collapse`, keyed defaults become the list read back by
    `materialize`; renderers want the mapping.
    """
    defaults: dict[str, Any] = {}
    for _, field, key in iter_fields(definition):
        if field.has_default:
            default = _read_back_default(field.default) if collapse else field.default
            defaults[value_key(field, key)] = default
    return defaults


# --- Values ---


def resolve_value(
    defaults: dict[str, Any],
    persisted: dict[str, Any] | None,
    key: str,
) -> Any:
    """
    Resolve a single field value.

    Persisted value overrides the default; falls back to "" when neither
    exists. Lists are returned as lists.
    """
    if persisted is not None and persisted.get(key) is not None:
        return persisted[key]
    if defaults.get(key) is not None:
        return defaults[key]
    return MISSING_VALUE


def materialize(
    definition: SettingsDefinition,
    persisted: dict[str, Any] | None,
) -> dict[str, Any]:
    """
    Build the nested lookup of current values.

    Keyed tab_id -> section_id -> field_id when the definition has tabs,
    otherwise section_id -> field_id.
    """
    defaults = collect_defaults(definition, collapse=True)

    result: dict[str, Any] = {}
    for section, field, key in iter_fields(definition):
        if definition.has_tabs:
            if not section.tab_id:
                raise ConfigurationError(
                    f"Section '{section.section_id}' needs a tab_id when tabs are defined"
                )
            container = result.setdefault(section.tab_id, {}).setdefault(section.section_id, {})
        else:
            container = result.setdefault(section.section_id, {})
        container[field.id] = resolve_value(defaults, persisted, value_key(field, key))
    return result


def get_setting(
    store: OptionStorePort,
    option_group: str,
    section_id: str,
    field_id: str,
) -> Any | None:
    """
    Get one stored value.

    `section_id` may already carry the tab prefix (`tab_section`).
    Returns None when the value was never saved.
    """
    options = store.get(option_name(option_group)) or {}
    return options.get(build_key(None, section_id, field_id))


def delete_settings(store: OptionStorePort, option_group: str) -> None:
    """Delete every saved value of an option group."""
    store.delete(option_name(option_group))
    logger.info("Deleted settings for %s", option_group)


# --- Validation ---


def validate_url(value: str) -> bool:
    """Validate URL format."""
    if not value:
        return True
    try:
        result = urlparse(value)
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def _allowed_choices(field: SettingsField) -> set[str]:
    allowed: set[str] = set()
    for value, text in field.choices.items():
        # Option groups nest their own value -> text mapping
        if field.type == FieldType.SELECT and isinstance(text, dict):
            allowed.update(str(v) for v in text)
        else:
            allowed.add(str(value))
    return allowed


def _is_number(value: Any) -> bool:
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def validate_field_value(field: SettingsField, key: str, value: Any) -> list[ValidationError]:
    """Validate one submitted value against the field declaration."""
    errors: list[ValidationError] = []
    rule = field.validation
    empty = value is None or value == "" or value == []

    if rule is not None and rule.required and empty:
        return [
            ValidationError(
                field=key,
                code="required",
                message=f"Field '{field.title or field.id}' is required",
            )
        ]

    if empty:
        return errors

    if rule is not None and isinstance(value, str):
        if rule.min_length is not None and len(value) < rule.min_length:
            errors.append(
                ValidationError(
                    field=key,
                    code="min_length",
                    message=(
                        f"Field '{field.title or field.id}' must be at least "
                        f"{rule.min_length} characters"
                    ),
                )
            )
        if rule.max_length is not None and len(value) > rule.max_length:
            errors.append(
                ValidationError(
                    field=key,
                    code="max_length",
                    message=(
                        f"Field '{field.title or field.id}' must not exceed "
                        f"{rule.max_length} characters"
                    ),
                )
            )
        if rule.is_url and not validate_url(value):
            errors.append(
                ValidationError(
                    field=key,
                    code="invalid_url",
                    message=f"Field '{field.title or field.id}' must be a valid http or https URL",
                )
            )

    if field.type == FieldType.NUMBER and not _is_number(value):
        errors.append(
            ValidationError(
                field=key,
                code="invalid_type",
                message=f"Field '{field.title or field.id}' must be a number",
            )
        )

    if field.choices and field.type in (
        FieldType.SELECT,
        FieldType.RADIO,
        FieldType.IMAGE_RADIO,
        FieldType.CHECKBOXES,
        FieldType.IMAGE_CHECKBOXES,
    ):
        allowed = _allowed_choices(field)
        submitted = value if isinstance(value, list) else [value]
        invalid = [str(v) for v in submitted if str(v) not in allowed]
        if invalid:
            errors.append(
                ValidationError(
                    field=key,
                    code="invalid_value",
                    message=(
                        f"Field '{field.title or field.id}' must be one of: "
                        f"{', '.join(sorted(allowed))}"
                    ),
                )
            )

    return errors


def validate_values(
    definition: SettingsDefinition,
    values: dict[str, Any],
) -> list[ValidationError]:
    """Validate a submitted mapping against every declared field."""
    errors: list[ValidationError] = []
    for _, field, key in iter_fields(definition):
        lookup = value_key(field, key)
        errors.extend(validate_field_value(field, lookup, values.get(lookup)))
    return errors


# --- Component Entry Points ---


def run_save(
    inp: SaveSettingsInput,
    *,
    definition: SettingsDefinition,
    store: OptionStorePort,
    validator: Validator | None = None,
) -> SaveSettingsOutput:
    """
    Validate and persist a submitted mapping.

    The stored option is replaced entirely by the validated values.
    A validator may transform values or raise SettingsValidationError.
    """
    assert definition.option_group is not None
    name = option_name(definition.option_group)
    current = store.get(name) or {}

    values = dict(inp.values)
    errors = validate_values(definition, values)
    if not errors and validator is not None:
        try:
            values = validator(values)
        except SettingsValidationError as e:
            errors = list(e.errors)

    if errors:
        logger.info(
            "Rejected settings save for %s (%d errors)", definition.option_group, len(errors)
        )
        return SaveSettingsOutput(values=current, errors=errors, success=False)

    saved = store.save(name, values)
    logger.info("Saved %d settings for %s", len(saved), definition.option_group)
    return SaveSettingsOutput(values=saved, errors=[], success=True)
