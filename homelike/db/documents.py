"""Keyed JSON text documents stored in SQLite."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..errors import PersistenceError
from .schema import ensure_schema

DEFAULT_DB_PATH = "~/.config/homelike/homelike.db"


class DocumentDB:
    """Manages the documents table: one text body per fixed key."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = ensure_schema(self._db_path)
            except (sqlite3.Error, OSError) as e:
                raise PersistenceError(f"cannot open {self._db_path}: {e}") from e
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get(self, key: str) -> str | None:
        """Return the stored body for ``key``, or None if never written."""
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT body FROM documents WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot read {key!r}: {e}") from e
        return row["body"] if row else None

    def put(self, key: str, body: str) -> None:
        """Insert or replace the body stored under ``key``."""
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO documents (key, body) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                     body=excluded.body,
                     updated_at=datetime('now', 'localtime')""",
                (key, body),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot write {key!r}: {e}") from e

    def keys(self) -> list[str]:
        """Return every stored key in sorted order."""
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key FROM documents ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot list documents: {e}") from e
        return [r["key"] for r in rows]
