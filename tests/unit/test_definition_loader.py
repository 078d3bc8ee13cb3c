"""
Tests for settings definition loading and validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.components.settings import ConfigurationError
from src.rules.loader import (
    load_definition,
    load_definitions,
    option_group_from_path,
    parse_definition,
)
from src.rules.models import FieldType

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class TestParseDefinition:
    """Shape checks on raw definition data."""

    def test_bare_list_is_untabbed(self) -> None:
        definition = parse_definition([{"section_id": "main", "fields": [{"id": "a"}]}])

        assert definition.has_tabs is False
        assert definition.sections[0].fields[0].type == FieldType.TEXT

    def test_mapping_with_tabs(self, definition_data) -> None:
        definition = parse_definition(definition_data)

        assert definition.has_tabs is True
        assert [t.id for t in definition.tabs] == ["general", "tools"]
        assert definition.page.title == "Demo Settings"

    @pytest.mark.parametrize("data", ["text", 42, None])
    def test_unrecognized_shape(self, data) -> None:
        with pytest.raises(ConfigurationError):
            parse_definition(data)

    def test_missing_sections(self) -> None:
        with pytest.raises(ConfigurationError, match="sections"):
            parse_definition({"tabs": []})

    def test_unknown_field_type(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_definition([{"section_id": "s", "fields": [{"id": "a", "type": "slider"}]}])

    def test_section_without_tab_in_tabbed_definition(self) -> None:
        data = {"tabs": [{"id": "t"}], "sections": [{"section_id": "s"}]}
        with pytest.raises(ConfigurationError, match="tab_id"):
            parse_definition(data)

    def test_section_with_unknown_tab(self) -> None:
        data = {"tabs": [{"id": "t"}], "sections": [{"section_id": "s", "tab_id": "other"}]}
        with pytest.raises(ConfigurationError, match="unknown tab"):
            parse_definition(data)

    def test_duplicate_storage_key(self) -> None:
        data = [
            {"section_id": "a_b", "fields": [{"id": "c"}]},
            {"section_id": "a", "fields": [{"id": "b_c"}]},
        ]
        with pytest.raises(ConfigurationError, match="a_b_c"):
            parse_definition(data)

    def test_choices_list_becomes_mapping(self) -> None:
        field = {"id": "size", "type": "radio", "choices": ["S", "M"]}
        definition = parse_definition([{"section_id": "s", "fields": [field]}])
        assert definition.sections[0].fields[0].choices == {"S": "S", "M": "M"}

    def test_class_alias(self) -> None:
        definition = parse_definition(
            [{"section_id": "s", "fields": [{"id": "a", "class": "wide"}]}]
        )
        assert definition.sections[0].fields[0].css_class == "wide"


class TestLoadDefinition:
    """YAML files on disk."""

    def test_option_group_from_file_name(self, tmp_path: Path) -> None:
        path = tmp_path / "my-plugin_options.yaml"
        path.write_text("- section_id: main\n  fields:\n    - id: title\n")

        definition = load_definition(path)

        assert definition.option_group == "mypluginoptions"
        assert option_group_from_path(path) == "mypluginoptions"

    def test_declared_option_group_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "anything.yaml"
        path.write_text("option_group: shop\nsections:\n  - section_id: main\n")

        assert load_definition(path).option_group == "shop"

    def test_explicit_argument_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "anything.yaml"
        path.write_text("option_group: shop\nsections: []\n")

        assert load_definition(path, option_group="other").option_group == "other"

    def test_markdown_fences_tolerated(self, tmp_path: Path) -> None:
        path = tmp_path / "fenced.yaml"
        path.write_text("Notes\n```yaml\nsections:\n  - section_id: main\n```\ntrailing\n")

        definition = load_definition(path)

        assert definition.sections[0].section_id == "main"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("sections: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_definition(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_definition(tmp_path / "nope.yaml")


class TestLoadDefinitions:
    """Directory scanning."""

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert load_definitions(tmp_path / "absent") == {}

    def test_duplicate_option_group(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text("option_group: same\nsections: []\n")
        (tmp_path / "b.yml").write_text("option_group: same\nsections: []\n")

        with pytest.raises(ConfigurationError, match="defined twice"):
            load_definitions(tmp_path)

    def test_bundled_example_loads(self) -> None:
        definitions = load_definitions(PROJECT_ROOT / "definitions")

        example = definitions["example"]
        assert example.has_tabs is True
        assert example.page.capability == "manage_options"
