"""Database schema DDL definitions and initialization utilities.

Tables:
  - users / sessions: email + password accounts and bearer sessions
  - profiles: at most one display profile per user
  - expenses: individual expense records (user scoped)
  - budget_history: additive budget entries with derived month/year
  - wallets: named stores of funds with an initial balance
  - wallet_transactions: deposits / withdrawals against one wallet
  - user_preferences: per-user key/value preference store
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

SESSIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS sessions (
    token TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    expires_at TEXT NOT NULL, -- ISO timestamp (UTC)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

PROFILES_DDL = f"""
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL UNIQUE,
    name TEXT,
    image_url TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

EXPENSES_DDL = f"""
CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    category TEXT NOT NULL CHECK (category IN (
        'food','transport','shopping','bills','health','education','entertainment','other'
    )),
    description TEXT,
    expense_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

BUDGET_HISTORY_DDL = f"""
CREATE TABLE IF NOT EXISTS budget_history (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    description TEXT,
    budget_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    month INTEGER NOT NULL CHECK (month BETWEEN 1 AND 12),
    year INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

WALLETS_DDL = f"""
CREATE TABLE IF NOT EXISTS wallets (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    wallet_type TEXT NOT NULL CHECK (wallet_type IN ('bank','bkash','nagad','rocket','custom')),
    wallet_name TEXT NOT NULL,
    initial_balance REAL NOT NULL DEFAULT 0 CHECK (initial_balance >= 0),
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

WALLET_TRANSACTIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS wallet_transactions (
    id TEXT PRIMARY KEY,
    wallet_id TEXT NOT NULL,
    transaction_type TEXT NOT NULL CHECK (transaction_type IN ('deposit','withdraw')),
    amount REAL NOT NULL CHECK (amount > 0),
    description TEXT,
    transaction_date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (wallet_id) REFERENCES wallets(id) ON DELETE CASCADE
);
"""

USER_PREFERENCES_DDL = f"""
CREATE TABLE IF NOT EXISTS user_preferences (
    user_id TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    PRIMARY KEY (user_id, key),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

INDEXES_DDL: Sequence[str] = (
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_expenses_user_date ON expenses(user_id, expense_date);",
    "CREATE INDEX IF NOT EXISTS idx_budget_user_period ON budget_history(user_id, year, month);",
    "CREATE INDEX IF NOT EXISTS idx_wallets_user ON wallets(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_wallet_txn_wallet_date ON wallet_transactions(wallet_id, transaction_date);",
)

DDL_ORDER: Sequence[str] = (
    USERS_DDL,
    SESSIONS_DDL,
    PROFILES_DDL,
    EXPENSES_DDL,
    BUDGET_HISTORY_DDL,
    WALLETS_DDL,
    WALLET_TRANSACTIONS_DDL,
    USER_PREFERENCES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        for ddl in INDEXES_DDL:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
