"""Database migration utilities.

Schema evolution is tracked by an integer `schema_version` stored in the
metadata table. Each migration upgrades the SQLite schema in-place while
preserving user data.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Optional

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("cashbook.db.migrate")


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 1
        if version < 2:
            _migrate_to_v2(conn)
            version = 2
        _set_schema_version(conn, version)
        conn.commit()
        logger.debug("schema at version %s (%s)", version, db_path)
        return version
    finally:
        conn.close()


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _columns(cur: sqlite3.Cursor, table: str) -> set[str]:
    cur.execute(f"PRAGMA table_info({table})")
    return {r[1] for r in cur.fetchall()}


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Backfill budget month/year from budget_date.

    Version 1 stores wrote month/year from the client clock, which could drift
    across a day boundary; version 2 derives both from the stored date.
    """
    cur = conn.cursor()
    try:
        if {"budget_date", "month", "year"} <= _columns(cur, "budget_history"):
            cur.execute(
                """
                UPDATE budget_history
                SET month = CAST(substr(budget_date, 6, 2) AS INTEGER),
                    year = CAST(substr(budget_date, 1, 4) AS INTEGER)
                WHERE month != CAST(substr(budget_date, 6, 2) AS INTEGER)
                   OR year != CAST(substr(budget_date, 1, 4) AS INTEGER)
                """
            )
            if cur.rowcount:
                logger.info("realigned %s budget entries to their dates", cur.rowcount)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
