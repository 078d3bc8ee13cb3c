"""
Tests for the admin settings API.

Covers page listing, HTML rendering, form save (full overwrite),
values read-back and the token-guarded export/import endpoints.
"""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from src.adapters.memory import InMemoryOptionStore
from src.components.transfer import create_nonce, export_action, import_action

BASE = "/api/admin/settings"


def save_token(secret_key: str, user_id: str = "1") -> str:
    return create_nonce("demo-options", user_id, secret_key)


class TestAuth:
    def test_missing_token(self, client: TestClient) -> None:
        assert client.get(f"{BASE}/demo").status_code == 401

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/demo", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_cookie_token(self, client: TestClient, make_token) -> None:
        cookie = f"access_token=Bearer {make_token()}"
        assert client.get(f"{BASE}/demo", headers={"Cookie": cookie}).status_code == 200

    def test_lacking_capability(self, client: TestClient, viewer_headers) -> None:
        response = client.get(f"{BASE}/demo", headers=viewer_headers)

        assert response.status_code == 403
        assert "sufficient permissions" in response.json()["detail"]

    def test_unknown_group(self, client: TestClient, admin_headers) -> None:
        assert client.get(f"{BASE}/missing", headers=admin_headers).status_code == 404


class TestListPages:
    def test_lists_accessible_pages(self, client: TestClient, admin_headers) -> None:
        response = client.get(BASE, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        page = data["items"][0]
        assert page["option_group"] == "demo"
        assert page["slug"] == "demo-settings"
        assert page["menu_title"] == "Demo"
        assert page["url"] == f"{BASE}/demo"

    def test_hides_pages_without_capability(self, client: TestClient, viewer_headers) -> None:
        response = client.get(BASE, headers=viewer_headers)
        assert response.json() == {"items": [], "total": 0}


class TestGetPage:
    def test_renders_form(self, client: TestClient, admin_headers) -> None:
        response = client.get(f"{BASE}/demo", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        html = response.text
        assert "<title>Demo Settings</title>" in html
        assert f'<form action="{BASE}/demo" method="post"' in html
        assert f'href="{BASE}/demo/export?_token=' in html
        assert f'data-url="{BASE}/demo/import"' in html

    def test_updated_notice(self, client: TestClient, admin_headers) -> None:
        response = client.get(f"{BASE}/demo?settings-updated=true", headers=admin_headers)
        assert "Settings saved." in response.text


class TestSave:
    def test_save_redirects_and_overwrites(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        store.save("demo_settings", {"stale": "x"})

        response = client.post(
            f"{BASE}/demo",
            headers=admin_headers,
            data={
                "_token": save_token(secret_key),
                "option_page": "demo",
                "demo_settings[general_display_layout]": "list",
                "demo_settings[general_display_enabled]": ["0", "1"],
                "demo_settings[general_links_socials]": "0",
            },
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"{BASE}/demo?settings-updated=true"
        assert store.get("demo_settings") == {
            "general_display_layout": "list",
            "general_display_enabled": "1",
            "general_links_socials": [],
        }

    def test_save_list_and_group_fields(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        response = client.post(
            f"{BASE}/demo",
            headers=admin_headers,
            data={
                "_token": save_token(secret_key),
                "demo_settings[general_links_socials][]": ["twitter", "github"],
                "demo_settings[general_links_contacts][0][name]": "Ada",
                "demo_settings[general_links_contacts][1][name]": "Grace",
            },
            follow_redirects=False,
        )

        assert response.status_code == 303
        saved = store.get("demo_settings")
        assert saved["general_links_socials"] == ["twitter", "github"]
        assert saved["general_links_contacts"] == [{"name": "Ada"}, {"name": "Grace"}]

    def test_invalid_submission_rerenders(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        store.save("demo_settings", {"general_display_layout": "list"})

        response = client.post(
            f"{BASE}/demo",
            headers=admin_headers,
            data={
                "_token": save_token(secret_key),
                "demo_settings[general_links_homepage]": "not-a-url",
            },
        )

        assert response.status_code == 400
        assert "notice-error" in response.text
        assert 'value="not-a-url"' in response.text
        assert store.get("demo_settings") == {"general_display_layout": "list"}

    def test_bad_token(self, client: TestClient, admin_headers, store: InMemoryOptionStore) -> None:
        response = client.post(
            f"{BASE}/demo",
            headers=admin_headers,
            data={"_token": "forged", "demo_settings[general_display_layout]": "list"},
        )

        assert response.status_code == 403
        assert store.get("demo_settings") is None

    def test_token_for_other_user(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        response = client.post(
            f"{BASE}/demo",
            headers=admin_headers,
            data={"_token": save_token(secret_key, user_id="someone-else")},
        )
        assert response.status_code == 403


class TestValues:
    def test_materialized_values(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore
    ) -> None:
        store.save("demo_settings", {"general_display_layout": "list"})

        response = client.get(f"{BASE}/demo/values", headers=admin_headers)

        assert response.status_code == 200
        display = response.json()["general"]["display"]
        assert display == {"enabled": "1", "layout": "list", "columns": "3"}

    def test_requires_capability(self, client: TestClient, viewer_headers) -> None:
        assert client.get(f"{BASE}/demo/values", headers=viewer_headers).status_code == 403


class TestExport:
    def test_download(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        store.save("demo_settings", {"general_display_layout": "list"})
        token = create_nonce(export_action("demo"), "1", secret_key)

        response = client.get(
            f"{BASE}/demo/export", params={"_token": token}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json; charset=utf-8"
        assert response.headers["content-disposition"] == (
            "attachment; filename=settings-demo.json"
        )
        assert response.json() == {"general_display_layout": "list"}

    def test_missing_token(self, client: TestClient, admin_headers) -> None:
        assert client.get(f"{BASE}/demo/export", headers=admin_headers).status_code == 403

    def test_import_token_not_accepted(
        self, client: TestClient, admin_headers, secret_key: str
    ) -> None:
        token = create_nonce(import_action("demo"), "1", secret_key)
        response = client.get(
            f"{BASE}/demo/export", params={"_token": token}, headers=admin_headers
        )
        assert response.status_code == 403


class TestImport:
    def test_import_replaces_values(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        store.save("demo_settings", {"old": "1"})
        payload = json.dumps({"general_display_layout": "list"})
        token = create_nonce(import_action("demo"), "1", secret_key)

        response = client.post(
            f"{BASE}/demo/import",
            headers=admin_headers,
            data={"_token": token, "settings": payload},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert store.get("demo_settings") == {"general_display_layout": "list"}

    def test_uploaded_file(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        response = client.post(
            f"{BASE}/demo/import",
            headers=admin_headers,
            data={"_token": create_nonce(import_action("demo"), "1", secret_key)},
            files={"settings": ("settings-demo.json", b'{"a": "b"}', "application/json")},
        )

        assert response.json() == {"success": True}
        assert store.get("demo_settings") == {"a": "b"}

    def test_malformed_payload(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore, secret_key: str
    ) -> None:
        store.save("demo_settings", {"old": "1"})

        response = client.post(
            f"{BASE}/demo/import",
            headers=admin_headers,
            data={"_token": create_nonce(import_action("demo"), "1", secret_key), "settings": "{"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "JSON" in body["data"]
        assert store.get("demo_settings") == {"old": "1"}

    def test_bad_token(
        self, client: TestClient, admin_headers, store: InMemoryOptionStore
    ) -> None:
        response = client.post(
            f"{BASE}/demo/import",
            headers=admin_headers,
            data={"_token": "forged", "settings": "{}"},
        )

        assert response.status_code == 403
        assert response.json() == {"success": False, "data": "Invalid token"}
        assert store.get("demo_settings") is None
