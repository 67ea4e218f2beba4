# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. One row per key.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from clincerta.cache.base_cache_store import BaseCacheStore
from clincerta.core.errors import CacheIoError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_blobs (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise CacheIoError(f"Cannot open cache database {self._db_path}: {e}") from e

    async def get(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM cache_blobs WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise CacheIoError(f"Failed to read cache blob {key}: {e}") from e
        return None if row is None else row[0]

    async def put(self, key: str, value: str) -> None:
        """Store a blob (upsert)."""
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO cache_blobs (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise CacheIoError(f"Failed to write cache blob {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM cache_blobs WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            raise CacheIoError(f"Failed to delete cache blob {key}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
