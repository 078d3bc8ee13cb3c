import json
import sqlite3
from datetime import UTC, datetime
from typing import Any


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteOptionStore:
    """SQLite adapter for option storage (one JSON blob per option name)."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def get(self, name: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT option_value FROM options WHERE option_name = ?", (name,)
            ).fetchone()
            if not row:
                return None
            value = json.loads(row["option_value"])
            return value if isinstance(value, dict) else None
        finally:
            conn.close()

    def save(self, name: str, value: dict[str, Any]) -> dict[str, Any]:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO options (option_name, option_value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(option_name) DO UPDATE SET
                    option_value=excluded.option_value,
                    updated_at=excluded.updated_at
            """,
                (name, json.dumps(value), datetime.now(UTC).isoformat()),
            )
            conn.commit()
            return value
        finally:
            conn.close()

    def delete(self, name: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM options WHERE option_name = ?", (name,))
            conn.commit()
        finally:
            conn.close()

    def list_names(self) -> list[str]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT option_name FROM options ORDER BY option_name").fetchall()
            return [row["option_name"] for row in rows]
        finally:
            conn.close()
