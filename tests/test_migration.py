from __future__ import annotations

import sqlite3

from cashbook.db.dal import Database
from cashbook.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations
from cashbook.db.schema import init_db


def test_fresh_database_reaches_current_version(tmp_path) -> None:
    path = tmp_path / "fresh.sqlite3"
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    # idempotent
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION


def test_v2_realigns_budget_month_with_its_date(tmp_path) -> None:
    path = tmp_path / "old.sqlite3"
    init_db(path)
    conn = sqlite3.connect(path)
    conn.execute("INSERT INTO users (id, email, password_hash) VALUES ('u1', 'a@b.co', 'x')")
    conn.execute(
        "INSERT INTO budget_history (id, user_id, amount, budget_date, month, year) "
        "VALUES ('b1', 'u1', 100, '2024-06-01', 5, 2024)"
    )
    conn.execute("INSERT INTO metadata (key, value) VALUES ('schema_version', '1')")
    conn.commit()
    conn.close()

    assert apply_migrations(path) == 2
    row = Database(path).get_budget_entry("u1", "b1")
    assert (row["month"], row["year"]) == (6, 2024)
