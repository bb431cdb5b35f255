"""
db.py
SQLite helpers for local client storage (the persisted auth session).

No business data is kept here; customers, parcels and payments live in the
backend and are fetched on every page render.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path

from config import settings

DB_FILE = Path(settings.STORAGE_FILE)


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def init_db() -> None:
    execute(
        """
        CREATE TABLE IF NOT EXISTS client_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )


def get_value(key: str, default: str | None = None) -> str | None:
    row = fetch_one("SELECT value FROM client_storage WHERE key = ?", (key,))
    if row:
        return str(row["value"])
    return default


def set_value(key: str, value: str) -> None:
    execute(
        """
        INSERT INTO client_storage(key, value) VALUES(?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=CURRENT_TIMESTAMP
        """,
        (key, value),
    )


def delete_value(key: str) -> None:
    execute("DELETE FROM client_storage WHERE key = ?", (key,))
