"""
Schema migrations for the option store.

Every `*.sql` file in the migrations directory runs once, in file name
order, and is recorded in `_migrations`. Only the part above a
`-- Down` marker is applied.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"

LEDGER_DDL = """
    CREATE TABLE IF NOT EXISTS _migrations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        filename TEXT UNIQUE NOT NULL,
        applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
"""


def up_script(path: Path) -> str:
    return path.read_text(encoding="utf-8").split(DOWN_MARKER, 1)[0]


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def pending(self, conn: sqlite3.Connection) -> list[Path]:
        done = {row[0] for row in conn.execute("SELECT filename FROM _migrations")}
        scripts = sorted(self.migrations_dir.glob("*.sql"), key=lambda p: p.name)
        return [path for path in scripts if path.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations; returns the file names applied by this call."""
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(LEDGER_DDL)
            applied: list[str] = []
            for path in self.pending(conn):
                self._apply(conn, path)
                applied.append(path.name)
        finally:
            conn.close()

        if applied:
            logger.info("Applied %d migrations to %s: %s", len(applied), self.db_path, applied)
        return applied

    def _apply(self, conn: sqlite3.Connection, path: Path) -> None:
        try:
            conn.executescript(up_script(path))
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (path.name,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {path.name} failed: {e}") from e
