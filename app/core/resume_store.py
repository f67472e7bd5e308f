from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timezone

from app.core.config import settings

_store: "ResumeStore | None" = None
_store_lock = threading.Lock()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ResumeStore:
    """SQLite-backed key-value map; ``set`` on an existing key overwrites it."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is not None:
                return self._conn

            if self._db_path != ":memory:":
                directory = os.path.dirname(self._db_path)
                if directory:
                    os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                self._db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            self._conn = conn
            return conn

    def set(self, key: str, value: str) -> None:
        conn = self._get_connection()
        with self._lock:
            conn.execute(
                """
                INSERT INTO kv_records (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, _utc_now().isoformat()),
            )

    def get(self, key: str) -> str | None:
        conn = self._get_connection()
        with self._lock:
            row = conn.execute("SELECT value FROM kv_records WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def list(self, prefix: str = "") -> list[str]:
        """Keys starting with ``prefix``, most recently written first."""
        conn = self._get_connection()
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._lock:
            rows = conn.execute(
                "SELECT key FROM kv_records WHERE key LIKE ? ESCAPE '\\' ORDER BY updated_at DESC, key",
                (f"{escaped}%",),
            ).fetchall()
        return [row[0] for row in rows]

    def delete(self, key: str) -> None:
        conn = self._get_connection()
        with self._lock:
            conn.execute("DELETE FROM kv_records WHERE key = ?", (key,))

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def get_resume_store() -> ResumeStore:
    global _store
    with _store_lock:
        if _store is None:
            _store = ResumeStore(settings.resume_store_db_path)
        return _store
