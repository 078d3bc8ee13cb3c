from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class FieldType(str, Enum):
    TEXT = "text"
    HIDDEN = "hidden"
    NUMBER = "number"
    TIME = "time"
    DATE = "date"
    EXPORT = "export"
    IMPORT = "import"
    GROUP = "group"
    IMAGE_CHECKBOXES = "image_checkboxes"
    IMAGE_RADIO = "image_radio"
    SELECT = "select"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TOGGLE = "toggle"
    CHECKBOXES = "checkboxes"
    COLOR = "color"
    FILE = "file"
    EDITOR = "editor"
    CODE_EDITOR = "code_editor"
    CUSTOM = "custom"
    MULTIINPUTS = "multiinputs"


class VisibilityCondition(BaseModel):
    """
    One `field === value1 || value2` clause.

    Both parts are optional so that incomplete conditions can be loaded
    and later skipped by the rule compiler.
    """

    field: str | None = None
    values: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("values", "value")
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str | int | float | bool):
            v = [v]
        # Checked boxes and toggles post "1"; empty values are dropped
        items = [_condition_value(item) for item in v]
        return [item for item in items if item]


def _condition_value(item: Any) -> str:
    if isinstance(item, bool):
        return "1" if item else ""
    return "" if item is None else str(item)


# A top-level rule is a single condition or a conjunction of conditions.
VisibilityRule = VisibilityCondition | list[VisibilityCondition]


class Conditional(BaseModel):
    show_if: list[VisibilityRule] | None = None
    hide_if: list[VisibilityRule] | None = None


class FieldLink(BaseModel):
    url: str = ""
    text: str = "Learn More"
    external: bool = True
    type: str = "tooltip"


class FieldValidation(BaseModel):
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    is_url: bool = False


class SettingsField(Conditional):
    id: str
    title: str = ""
    type: FieldType = FieldType.TEXT
    default: Any = None
    desc: str = ""
    placeholder: str = ""
    subtitle: str = ""
    name: str | None = None
    css_class: str = Field(default="", alias="class")
    link: FieldLink | None = None
    choices: dict[str, Any] = Field(default_factory=dict)
    subfields: list["SettingsField"] = Field(default_factory=list)
    datepicker: dict[str, Any] | None = None
    timepicker: dict[str, Any] | None = None
    editor_settings: dict[str, Any] | None = None
    mimetype: str = "text/plain"
    output: str | Callable[..., Any] | None = None
    validation: FieldValidation | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("choices", mode="before")
    @classmethod
    def _choices_to_mapping(cls, v: Any) -> dict[str, Any]:
        # YAML lists of plain values become value -> value
        if v is None:
            return {}
        if isinstance(v, list):
            return {str(item): item for item in v}
        return {str(key): value for key, value in v.items()}

    @property
    def has_default(self) -> bool:
        return self.default is not None


class Section(Conditional):
    section_id: str
    section_title: str = ""
    section_order: int = 0
    section_description: str = ""
    tab_id: str | None = None
    fields: list[SettingsField] = Field(default_factory=list)


class Tab(Conditional):
    id: str
    title: str = ""
    css_class: str = Field(default="", alias="class")

    model_config = ConfigDict(populate_by_name=True)


class SettingsPage(BaseModel):
    title: str = ""
    menu_title: str = ""
    parent_slug: str | None = None
    capability: str = "manage_options"
    icon_url: str = ""
    position: int | None = None


class SettingsDefinition(BaseModel):
    option_group: str | None = None
    page: SettingsPage = Field(default_factory=SettingsPage)
    tabs: list[Tab] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)

    @property
    def has_tabs(self) -> bool:
        return bool(self.tabs)
