"""
Schema migrations applied through the service's connection pool.

Each `NNNN_name.sql` file holds an up script, optionally followed by a
`-- Down` section that is never run automatically. Applied files are
recorded in `schema_migrations`; a file is applied together with its
ledger row in one transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy.pool import PoolProxiedConnection

from newsletter_service.adapters.sqlite_db import SQLiteConnectionPool, translate_errors
from newsletter_service.domain.errors import StorageError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"
DOWN_MARKER = "-- Down"

LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    filename TEXT PRIMARY KEY,
    applied_at TEXT NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    filename: str
    up_sql: str

    @classmethod
    def from_file(cls, path: Path) -> Migration:
        up_sql, _, _ = path.read_text(encoding="utf-8").partition(DOWN_MARKER)
        return cls(filename=path.name, up_sql=up_sql)


def discover_migrations(directory: Path) -> list[Migration]:
    """All migration files in `directory`, in filename order."""
    return [Migration.from_file(p) for p in sorted(directory.glob("*.sql"))]


class SQLiteMigrator:
    def __init__(self, pool: SQLiteConnectionPool, migrations_dir: Path = MIGRATIONS_DIR):
        self.pool = pool
        self.migrations_dir = Path(migrations_dir)

    def applied(self) -> set[str]:
        with self.pool.connection() as conn, translate_errors():
            conn.execute(LEDGER_DDL)
            conn.commit()
            rows = conn.execute("SELECT filename FROM schema_migrations").fetchall()
        return {row["filename"] for row in rows}

    def pending(self) -> list[Migration]:
        done = self.applied()
        return [m for m in discover_migrations(self.migrations_dir) if m.filename not in done]

    def run_migrations(self) -> list[str]:
        """Apply pending migrations in order and return their filenames."""
        applied_now: list[str] = []
        for migration in self.pending():
            logger.info("Applying migration %s", migration.filename)
            with self.pool.connection() as conn:
                self._apply(conn, migration)
            applied_now.append(migration.filename)
        return applied_now

    def _apply(self, conn: PoolProxiedConnection, migration: Migration) -> None:
        try:
            conn.executescript("BEGIN;\n" + migration.up_sql)
            conn.execute(
                "INSERT INTO schema_migrations (filename, applied_at) VALUES (?, ?)",
                (migration.filename, datetime.now(UTC).isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Migration {migration.filename} failed: {e}") from e
