"""
Tests for the health endpoint and app wiring.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from src.api.main import app


class TestHealth:
    def test_health_ok(self) -> None:
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "api"}

    def test_settings_routes_mounted(self) -> None:
        assert app.url_path_for("list_settings_pages") == "/api/admin/settings"
        assert app.url_path_for("get_settings_page", option_group="demo") == (
            "/api/admin/settings/demo"
        )
        assert app.url_path_for("export_settings_file", option_group="demo") == (
            "/api/admin/settings/demo/export"
        )
        assert app.url_path_for("import_settings_file", option_group="demo") == (
            "/api/admin/settings/demo/import"
        )
