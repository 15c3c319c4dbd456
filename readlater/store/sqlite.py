"""SQLite-backed key-value store shared across processes.

Every operation opens its own connection, so one ``SQLiteStore`` (or
several, in different processes) can point at the same file.  ``update``
takes SQLite's write lock with ``BEGIN IMMEDIATE`` before reading, which
serializes concurrent read-modify-write cycles on the database.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from readlater.errors import StorageUnavailable
from readlater.store.base import KeyValueStore, Updater

logger = logging.getLogger(__name__)

_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value BLOB NOT NULL)"
_UPSERT = (
    "INSERT INTO kv (key, value) VALUES (?, ?) "
    "ON CONFLICT(key) DO UPDATE SET value = excluded.value"
)


class SQLiteStore(KeyValueStore):
    def __init__(self, path: Path, *, timeout: float = 10.0) -> None:
        self.path = Path(path)
        self.timeout = timeout
        try:
            with closing(self._connect()) as conn:
                conn.execute(_SCHEMA)
        except sqlite3.Error as exc:
            raise StorageUnavailable(
                f"Cannot open shared store at {self.path}: {exc}"
            ) from exc

    def _connect(self) -> sqlite3.Connection:
        # Autocommit mode: transactions are opened explicitly in update().
        return sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)

    def get(self, key: str) -> bytes | None:
        try:
            with closing(self._connect()) as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot read {key!r}: {exc}") from exc
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        try:
            with closing(self._connect()) as conn:
                conn.execute(_UPSERT, (key, value))
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot write {key!r}: {exc}") from exc

    def update(self, key: str, fn: Updater) -> bytes:
        try:
            with closing(self._connect()) as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    row = conn.execute(
                        "SELECT value FROM kv WHERE key = ?", (key,),
                    ).fetchone()
                    value = fn(bytes(row[0]) if row else None)
                    conn.execute(_UPSERT, (key, value))
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot update {key!r}: {exc}") from exc
        logger.debug("Updated %r in %s (%d bytes)", key, self.path, len(value))
        return value
