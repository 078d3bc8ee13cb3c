from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.adapters.memory import InMemoryOptionStore
from src.api.auth_utils import create_access_token
from src.api.deps import AppConfig, get_config, get_registries
from src.api.main import app
from src.components.hooks import HookBus
from src.components.settings import SettingsRegistry
from src.rules.loader import parse_definition

TEST_SECRET = "test-secret"


def tabbed_definition_data() -> dict[str, Any]:
    """Two tabs, three sections; `links` sorts ahead of `display`."""
    return {
        "page": {"title": "Demo Settings", "menu_title": "Demo", "capability": "manage_options"},
        "tabs": [
            {"id": "general", "title": "General"},
            {"id": "tools", "title": "Tools"},
        ],
        "sections": [
            {
                "tab_id": "general",
                "section_id": "display",
                "section_title": "Display",
                "section_order": 10,
                "fields": [
                    {"id": "enabled", "title": "Enabled", "type": "toggle", "default": "1"},
                    {
                        "id": "layout",
                        "title": "Layout",
                        "type": "select",
                        "default": "grid",
                        "choices": {"grid": "Grid", "list": "List"},
                    },
                    {
                        "id": "columns",
                        "title": "Columns",
                        "type": "number",
                        "default": "3",
                        "show_if": [{"field": "general_display_layout", "value": ["grid"]}],
                    },
                ],
            },
            {
                "tab_id": "general",
                "section_id": "links",
                "section_title": "Links",
                "section_order": 5,
                "fields": [
                    {
                        "id": "homepage",
                        "title": "Homepage",
                        "type": "text",
                        "validation": {"is_url": True},
                    },
                    {
                        "id": "socials",
                        "title": "Socials",
                        "type": "checkboxes",
                        "default": ["twitter"],
                        "choices": {"twitter": "Twitter", "github": "GitHub"},
                    },
                    {
                        "id": "contacts",
                        "title": "Contacts",
                        "type": "group",
                        "subfields": [
                            {"id": "name", "title": "Name", "type": "text"},
                            {"id": "email", "title": "Email", "type": "text"},
                        ],
                    },
                ],
            },
            {
                "tab_id": "tools",
                "section_id": "transfer",
                "section_title": "Import / Export",
                "fields": [
                    {"id": "export", "title": "Export", "type": "export"},
                    {"id": "import", "title": "Import", "type": "import"},
                ],
            },
        ],
    }


def untabbed_definition_data() -> list[dict[str, Any]]:
    return [
        {
            "section_id": "general",
            "section_title": "General",
            "fields": [
                {"id": "name", "title": "Name", "type": "text", "default": "Acme"},
                {"id": "notes", "title": "Notes", "type": "textarea"},
            ],
        }
    ]


@pytest.fixture
def definition_data() -> dict[str, Any]:
    return tabbed_definition_data()


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET


@pytest.fixture
def store() -> InMemoryOptionStore:
    return InMemoryOptionStore()


@pytest.fixture
def hooks() -> HookBus:
    return HookBus()


@pytest.fixture
def registry(
    definition_data: dict[str, Any], store: InMemoryOptionStore, hooks: HookBus
) -> SettingsRegistry:
    """Tabbed registry for option group `demo`."""
    return SettingsRegistry(parse_definition(definition_data), store, hooks, option_group="demo")


@pytest.fixture
def untabbed_registry(store: InMemoryOptionStore) -> SettingsRegistry:
    return SettingsRegistry(
        parse_definition(untabbed_definition_data()), store, option_group="plain"
    )


@pytest.fixture
def test_config(tmp_path) -> AppConfig:
    config = AppConfig()
    config.data_dir = tmp_path
    config.db_path = str(tmp_path / "options.db")
    config.definitions_dir = tmp_path / "definitions"
    config.secret_key = TEST_SECRET
    return config


@pytest.fixture
def client(registry: SettingsRegistry, test_config: AppConfig):
    """TestClient with the `demo` registry and a fixed signing key."""
    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_registries] = lambda: {"demo": registry}
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_token(user_id: str = "1", caps: list[str] | None = None) -> str:
    return create_access_token(
        {"sub": user_id, "name": "Admin", "caps": caps if caps is not None else ["manage_options"]},
        secret_key=TEST_SECRET,
    )


@pytest.fixture
def make_token():
    """Factory for signed access tokens."""
    return _make_token


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token()}"}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(user_id='2', caps=['read'])}"}
