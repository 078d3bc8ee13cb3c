"""
SettingsRegistry - explicit per option group settings context.

Holds the sorted sections, tabs and page registration of one option group
together with its hook bus and option store. Every operation that needs
the definition or the stored values goes through an instance of this
class; there is no module-level registry.

Hooks consulted:
- register_settings: builds a definition when none is given
- settings_validate: transforms or rejects submitted values
- settings_defaults: base field attributes, overridden by each declared field
"""

from __future__ import annotations

import logging
from typing import Any

from src.components.hooks import HookBus
from src.components.visibility import compile_classes, join_classes
from src.rules.models import Section, SettingsDefinition, SettingsField, SettingsPage, Tab

from .component import (
    build_key,
    check_definition,
    collect_defaults,
    iter_fields,
    materialize,
    option_name,
    resolve_value,
    run_save,
    sort_sections,
    value_key,
)
from .errors import ConfigurationError
from .models import FieldArgs, SaveSettingsInput, SaveSettingsOutput
from .ports import OptionStorePort

logger = logging.getLogger(__name__)


class SettingsRegistry:
    """
    Settings context for one option group.

    Provides:
    - Storage keys and form field names
    - Value resolution for rendering
    - Nested read-back of current values
    - Validated save (full overwrite)
    """

    def __init__(
        self,
        definition: SettingsDefinition,
        store: OptionStorePort,
        hooks: HookBus | None = None,
        option_group: str | None = None,
    ) -> None:
        group = option_group or definition.option_group
        if not group:
            raise ConfigurationError("An option group is required")
        check_definition(definition)

        self.option_group = group
        self.definition = definition.model_copy(
            update={"option_group": group, "sections": sort_sections(definition.sections)}
        )
        self.store = store
        self.hooks = hooks or HookBus()
        self._defaults = collect_defaults(self.definition)
        self._read_back_defaults = collect_defaults(self.definition, collapse=True)
        self._value_keys = {
            key: value_key(field, key) for _, field, key in iter_fields(self.definition)
        }

    @classmethod
    def from_hooks(
        cls,
        option_group: str,
        store: OptionStorePort,
        hooks: HookBus,
    ) -> SettingsRegistry:
        """Build the definition from the `register_settings` filter."""
        from src.rules.loader import parse_definition

        data = hooks.apply_filters("register_settings", [])
        return cls(parse_definition(data), store, hooks, option_group=option_group)

    # --- Definition ---

    @property
    def has_tabs(self) -> bool:
        return self.definition.has_tabs

    @property
    def tabs(self) -> list[Tab]:
        return self.definition.tabs

    @property
    def sections(self) -> list[Section]:
        return self.definition.sections

    @property
    def page(self) -> SettingsPage:
        return self.definition.page

    @property
    def slug(self) -> str:
        return f"{self.option_group.replace('_', '-')}-settings"

    @property
    def option_name(self) -> str:
        return option_name(self.option_group)

    def sections_for_tab(self, tab_id: str | None) -> list[Section]:
        if tab_id is None:
            return list(self.sections)
        return [s for s in self.sections if s.tab_id == tab_id]

    def tab_has_settings(self, tab_id: str) -> bool:
        return any(section.tab_id == tab_id for section in self.sections)

    def storage_key(self, section: Section, field: SettingsField) -> str:
        tab_id = section.tab_id if self.has_tabs else None
        return build_key(tab_id, section.section_id, field.id)

    def value_key(self, section: Section, field: SettingsField) -> str:
        """Key the field is posted, stored and read under."""
        return value_key(field, self.storage_key(section, field))

    def field_name(self, key: str) -> str:
        """HTML form name for a storage key."""
        return f"{self.option_name}[{key}]"

    # --- Values ---

    def stored(self) -> dict[str, Any]:
        return self.store.get(self.option_name) or {}

    def field_args(
        self,
        section: Section,
        field: SettingsField,
        values: dict[str, Any] | None = None,
    ) -> FieldArgs:
        """
        Resolve renderer arguments for a field.

        `values` overrides the stored mapping, which keeps submitted input
        when a rejected form is rendered again.
        """
        field = self._with_field_defaults(field)
        key = self.storage_key(section, field)
        lookup = value_key(field, key)
        source = values if values is not None else self.stored()
        defaults = dict(self._defaults)
        if field.has_default:
            defaults[lookup] = field.default

        return FieldArgs(
            field=field,
            id=key,
            name=self.field_name(lookup),
            value=resolve_value(defaults, source, lookup),
            css_class=join_classes(field.css_class, compile_classes(field)),
            section=section,
        )

    def _with_field_defaults(self, field: SettingsField) -> SettingsField:
        base = self.hooks.apply_filters("settings_defaults", {})
        if not base:
            return field
        declared = field.model_dump(by_alias=True, exclude_unset=True)
        return SettingsField.model_validate({**base, **declared})

    def get_settings(self) -> dict[str, Any]:
        """Nested tab -> section -> field values (section -> field when untabbed)."""
        return materialize(self.definition, self.stored())

    def get(self, section_id: str, field_id: str, tab_id: str | None = None) -> Any:
        """Current value of one field, shaped as in `get_settings`."""
        key = build_key(tab_id, section_id, field_id)
        lookup = self._value_keys.get(key, key)
        return resolve_value(self._read_back_defaults, self.stored(), lookup)

    def keys(self) -> list[str]:
        return [key for _, _, key in iter_fields(self.definition)]

    def save(self, values: dict[str, Any]) -> SaveSettingsOutput:
        """Validate and store submitted values, replacing what was stored."""
        return run_save(
            SaveSettingsInput(values=values),
            definition=self.definition,
            store=self.store,
            validator=lambda v: self.hooks.apply_filters("settings_validate", v),
        )


def build_registries(
    definitions: dict[str, SettingsDefinition],
    store: OptionStorePort,
) -> dict[str, SettingsRegistry]:
    """Create one registry per loaded definition."""
    registries = {
        group: SettingsRegistry(definition, store, option_group=group)
        for group, definition in definitions.items()
    }
    logger.info("Registered %d option groups", len(registries))
    return registries
