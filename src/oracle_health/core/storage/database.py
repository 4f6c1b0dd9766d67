"""SQLite database management for the health history bank.

One SQLite file (or an in-memory database in tests) holding the encrypted
health check history. Opening it applies any missing schema version.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_SCHEMA_V1 = """
-- One row per completed health check
CREATE TABLE IF NOT EXISTS health_records (
    id                   TEXT PRIMARY KEY,
    recorded_at          TEXT NOT NULL,

    -- Encrypted JSON blobs (raw vitals, predictions + AI guidance)
    vitals_enc           TEXT NOT NULL,
    analysis_enc         TEXT NOT NULL,

    -- Unencrypted computed values (for progress charts without decryption)
    bmi                  REAL,
    diabetes_score       REAL,
    cardiovascular_score REAL,
    hypertension_score   REAL,

    created_at           TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_records_recorded_at ON health_records(recorded_at);
"""


class DatabaseError(Exception):
    """Raised when the history database is used before it is open."""


def _open_connection(db_path: str) -> sqlite3.Connection:
    if db_path == ":memory:":
        return sqlite3.connect(":memory:", check_same_thread=False)
    db_file = Path(db_path).expanduser()
    db_file.parent.mkdir(parents=True, exist_ok=True)
    # Sync MCP tools may run on a worker thread
    return sqlite3.connect(str(db_file), check_same_thread=False)


class HealthDatabase:
    """Owns the SQLite connection behind the health history.

    ``db_path`` may be a file path (``~`` is expanded, parent folders are
    created) or ``:memory:``.

    Usage::

        with HealthDatabase("~/.oracle_health/history.db") as db:
            db.connection.execute("SELECT COUNT(*) FROM health_records")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """
        Raises:
            DatabaseError: If ``initialize()`` has not been called.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the database and bring the schema up to date. Idempotent."""
        if self._conn is not None:
            return
        conn = _open_connection(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        self._conn = conn
        self._migrate()
        logger.info("Health history database initialized: %s", self._db_path)

    def _migrate(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)
        found = self.get_schema_version()
        if found >= SCHEMA_VERSION:
            return
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
        conn.commit()
        logger.info("History schema migrated: v%d -> v%d", found, SCHEMA_VERSION)

    def get_schema_version(self) -> int:
        """Highest applied schema version, 0 for an empty database."""
        (version,) = self.connection.execute(
            "SELECT MAX(version) FROM schema_version"
        ).fetchone()
        return version or 0

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Health history database closed")

    def __enter__(self) -> HealthDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
