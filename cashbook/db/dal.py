"""Data Access Layer scoped to the owning user.

Responsibilities
----------------
- Provide CRUD helpers for every table, always filtered by the owning user
  (wallet transactions are scoped through their wallet's owner).
- Derive redundant columns on write (budget month/year from budget_date).
- Translate store failures on writes into `BackendError` subclasses so the
  HTTP layer can surface them as notifications.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
import logging
import sqlite3
from typing import Any, Dict, Iterator, List, Mapping, Optional
import uuid

from cashbook.core.errors import BackendError, ConflictError, NotFoundError
from cashbook.models import BudgetEntryIn, ExpenseIn, WalletIn, WalletTransactionIn

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

EXPENSE_FIELDS = ("amount", "category", "description", "expense_date")
BUDGET_FIELDS = ("amount", "description", "budget_date")
WALLET_FIELDS = ("wallet_name", "initial_balance")
TRANSACTION_FIELDS = ("amount", "description", "transaction_date")
PROFILE_FIELDS = ("name", "image_url")

logger = logging.getLogger("cashbook.db")


def _new_id() -> str:
    return str(uuid.uuid4())


def _sql_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def _assignments(fields: Mapping[str, Any], allowed: tuple[str, ...]) -> tuple[str, list]:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"unsupported fields: {sorted(unknown)}")
    cols = [k for k in allowed if k in fields]
    return ", ".join(f"{c} = ?" for c in cols), [_sql_value(fields[c]) for c in cols]


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def _write(self, action: str) -> Iterator[sqlite3.Cursor]:
        """Cursor for a mutation; store errors become BackendError."""
        try:
            with self._connect() as conn:
                yield conn.cursor()
        except BackendError:
            raise
        except sqlite3.IntegrityError as e:
            logger.warning("integrity error during %s: %s", action, e)
            raise ConflictError(f"failed to {action}: constraint violated") from e
        except sqlite3.Error as e:
            logger.exception("store error during %s", action)
            raise BackendError(f"failed to {action}") from e

    def _fetch_all(self, sql: str, params: list | tuple) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [dict(r) for r in cur.fetchall()]

    def _fetch_one(self, sql: str, params: list | tuple) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            row = cur.fetchone()
            return dict(row) if row else None

    # ------------------------------------------------------------------
    # Users & sessions
    def create_user(self, email: str, password_hash: str) -> str:
        user_id = _new_id()
        try:
            with self._write("create account") as cur:
                cur.execute(
                    "INSERT INTO users (id, email, password_hash) VALUES (?, ?, ?)",
                    (user_id, email, password_hash),
                )
        except ConflictError as e:
            raise ConflictError("an account with this email already exists") from e
        return user_id

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))

    def update_password_hash(self, user_id: str, password_hash: str) -> None:
        with self._write("update password") as cur:
            cur.execute(
                "UPDATE users SET password_hash = ? WHERE id = ?",
                (password_hash, user_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError("user not found")

    def create_session(self, user_id: str, token: str, expires_at: datetime) -> None:
        with self._write("create session") as cur:
            cur.execute(
                "INSERT INTO sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
                (token, user_id, expires_at.isoformat()),
            )

    def get_session(self, token: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            """
            SELECT s.token, s.user_id, s.expires_at, u.email
            FROM sessions s JOIN users u ON u.id = s.user_id
            WHERE s.token = ?
            """,
            (token,),
        )

    def delete_session(self, token: str) -> bool:
        with self._write("sign out") as cur:
            cur.execute("DELETE FROM sessions WHERE token = ?", (token,))
            return cur.rowcount > 0

    def delete_expired_sessions(self, now: datetime) -> int:
        with self._write("purge sessions") as cur:
            cur.execute("DELETE FROM sessions WHERE expires_at <= ?", (now.isoformat(),))
            return cur.rowcount

    # ------------------------------------------------------------------
    # Profiles
    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM profiles WHERE user_id = ?", (user_id,))

    def upsert_profile(self, user_id: str, fields: Mapping[str, Any]) -> None:
        sets, values = _assignments(fields, PROFILE_FIELDS)
        with self._write("update profile") as cur:
            cur.execute(
                f"""
                INSERT INTO profiles (id, user_id, name, image_url)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    {sets + ', ' if sets else ''}updated_at = ({UTC_NOW_SQL})
                """,
                [_new_id(), user_id, fields.get("name"), fields.get("image_url")] + values,
            )

    # ------------------------------------------------------------------
    # Expenses
    def list_expenses(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if start_date:
            clauses.append("expense_date >= ?")
            params.append(start_date.isoformat())
        if end_date:
            clauses.append("expense_date <= ?")
            params.append(end_date.isoformat())
        where = " WHERE " + " AND ".join(clauses)
        return self._fetch_all(
            f"SELECT * FROM expenses{where} ORDER BY expense_date DESC, created_at DESC, rowid DESC",
            params,
        )

    def get_expense(self, user_id: str, expense_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT * FROM expenses WHERE id = ? AND user_id = ?", (expense_id, user_id)
        )

    def insert_expense(self, user_id: str, expense: ExpenseIn) -> str:
        expense_id = _new_id()
        with self._write("add expense") as cur:
            cur.execute(
                """
                INSERT INTO expenses (id, user_id, amount, category, description, expense_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    expense_id,
                    user_id,
                    expense.amount,
                    expense.category,
                    expense.description,
                    expense.expense_date.isoformat(),
                ),
            )
        return expense_id

    def update_expense(self, user_id: str, expense_id: str, fields: Mapping[str, Any]) -> None:
        sets, values = _assignments(fields, EXPENSE_FIELDS)
        if not sets:
            return
        with self._write("update expense") as cur:
            cur.execute(
                f"UPDATE expenses SET {sets} WHERE id = ? AND user_id = ?",
                values + [expense_id, user_id],
            )
            if cur.rowcount == 0:
                raise NotFoundError("expense not found")

    def delete_expense(self, user_id: str, expense_id: str) -> None:
        with self._write("delete expense") as cur:
            cur.execute(
                "DELETE FROM expenses WHERE id = ? AND user_id = ?", (expense_id, user_id)
            )
            if cur.rowcount == 0:
                raise NotFoundError("expense not found")

    # ------------------------------------------------------------------
    # Budget history (month/year always derived from budget_date)
    def list_budget_entries(
        self,
        user_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if month is not None:
            clauses.append("month = ?")
            params.append(month)
        if year is not None:
            clauses.append("year = ?")
            params.append(year)
        if start_date:
            clauses.append("budget_date >= ?")
            params.append(start_date.isoformat())
        if end_date:
            clauses.append("budget_date <= ?")
            params.append(end_date.isoformat())
        where = " WHERE " + " AND ".join(clauses)
        return self._fetch_all(
            f"SELECT * FROM budget_history{where} ORDER BY budget_date DESC, created_at DESC, rowid DESC",
            params,
        )

    def get_budget_entry(self, user_id: str, entry_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT * FROM budget_history WHERE id = ? AND user_id = ?", (entry_id, user_id)
        )

    def insert_budget_entry(self, user_id: str, entry: BudgetEntryIn) -> str:
        entry_id = _new_id()
        d = entry.budget_date
        with self._write("add budget") as cur:
            cur.execute(
                """
                INSERT INTO budget_history (id, user_id, amount, description, budget_date, month, year)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (entry_id, user_id, entry.amount, entry.description, d.isoformat(), d.month, d.year),
            )
        return entry_id

    def update_budget_entry(self, user_id: str, entry_id: str, fields: Mapping[str, Any]) -> None:
        sets, values = _assignments(fields, BUDGET_FIELDS)
        with self._write("update budget") as cur:
            cur.execute(
                "SELECT budget_date FROM budget_history WHERE id = ? AND user_id = ?",
                (entry_id, user_id),
            )
            row = cur.fetchone()
            if not row:
                raise NotFoundError("budget entry not found")
            budget_date = fields.get("budget_date") or date.fromisoformat(row["budget_date"])
            assignments = ", ".join(filter(None, [sets, "month = ?", "year = ?"]))
            cur.execute(
                f"UPDATE budget_history SET {assignments} WHERE id = ? AND user_id = ?",
                values + [budget_date.month, budget_date.year, entry_id, user_id],
            )

    def delete_budget_entry(self, user_id: str, entry_id: str) -> None:
        with self._write("delete budget") as cur:
            cur.execute(
                "DELETE FROM budget_history WHERE id = ? AND user_id = ?", (entry_id, user_id)
            )
            if cur.rowcount == 0:
                raise NotFoundError("budget entry not found")

    # ------------------------------------------------------------------
    # Wallets
    def list_wallets(self, user_id: str) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT * FROM wallets WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        )

    def get_wallet(self, user_id: str, wallet_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT * FROM wallets WHERE id = ? AND user_id = ?", (wallet_id, user_id)
        )

    def insert_wallet(self, user_id: str, wallet: WalletIn) -> str:
        wallet_id = _new_id()
        with self._write("add wallet") as cur:
            cur.execute(
                """
                INSERT INTO wallets (id, user_id, wallet_type, wallet_name, initial_balance)
                VALUES (?, ?, ?, ?, ?)
                """,
                (wallet_id, user_id, wallet.wallet_type, wallet.wallet_name, wallet.initial_balance),
            )
        return wallet_id

    def update_wallet(self, user_id: str, wallet_id: str, fields: Mapping[str, Any]) -> None:
        sets, values = _assignments(fields, WALLET_FIELDS)
        if not sets:
            return
        with self._write("update wallet") as cur:
            cur.execute(
                f"""
                UPDATE wallets SET {sets}, updated_at = ({UTC_NOW_SQL})
                WHERE id = ? AND user_id = ?
                """,
                values + [wallet_id, user_id],
            )
            if cur.rowcount == 0:
                raise NotFoundError("wallet not found")

    def delete_wallet(self, user_id: str, wallet_id: str) -> None:
        # wallet_transactions rows go with it (ON DELETE CASCADE)
        with self._write("delete wallet") as cur:
            cur.execute(
                "DELETE FROM wallets WHERE id = ? AND user_id = ?", (wallet_id, user_id)
            )
            if cur.rowcount == 0:
                raise NotFoundError("wallet not found")

    # ------------------------------------------------------------------
    # Wallet transactions (ownership resolved through wallets.user_id)
    def list_wallet_transactions(
        self, user_id: str, wallet_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        clauses = ["w.user_id = ?"]
        params: List[Any] = [user_id]
        if wallet_id:
            clauses.append("t.wallet_id = ?")
            params.append(wallet_id)
        where = " WHERE " + " AND ".join(clauses)
        return self._fetch_all(
            f"""
            SELECT t.* FROM wallet_transactions t
            JOIN wallets w ON w.id = t.wallet_id
            {where}
            ORDER BY t.transaction_date DESC, t.created_at DESC, t.rowid DESC
            """,
            params,
        )

    def get_wallet_transaction(self, user_id: str, txn_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            """
            SELECT t.* FROM wallet_transactions t
            JOIN wallets w ON w.id = t.wallet_id
            WHERE t.id = ? AND w.user_id = ?
            """,
            (txn_id, user_id),
        )

    def insert_wallet_transaction(self, user_id: str, txn: WalletTransactionIn) -> str:
        txn_id = _new_id()
        with self._write("add transaction") as cur:
            cur.execute(
                "SELECT 1 FROM wallets WHERE id = ? AND user_id = ?", (txn.wallet_id, user_id)
            )
            if cur.fetchone() is None:
                raise NotFoundError("wallet not found")
            cur.execute(
                """
                INSERT INTO wallet_transactions
                    (id, wallet_id, transaction_type, amount, description, transaction_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    txn_id,
                    txn.wallet_id,
                    txn.transaction_type,
                    txn.amount,
                    txn.description,
                    txn.transaction_date.isoformat(),
                ),
            )
        return txn_id

    def update_wallet_transaction(
        self, user_id: str, txn_id: str, fields: Mapping[str, Any]
    ) -> None:
        sets, values = _assignments(fields, TRANSACTION_FIELDS)
        if not sets:
            return
        with self._write("update transaction") as cur:
            cur.execute(
                f"""
                UPDATE wallet_transactions SET {sets}
                WHERE id = ?
                  AND wallet_id IN (SELECT id FROM wallets WHERE user_id = ?)
                """,
                values + [txn_id, user_id],
            )
            if cur.rowcount == 0:
                raise NotFoundError("transaction not found")

    def delete_wallet_transaction(self, user_id: str, txn_id: str) -> None:
        with self._write("delete transaction") as cur:
            cur.execute(
                """
                DELETE FROM wallet_transactions
                WHERE id = ?
                  AND wallet_id IN (SELECT id FROM wallets WHERE user_id = ?)
                """,
                (txn_id, user_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError("transaction not found")

    # ------------------------------------------------------------------
    # Per-user preference key/value store
    def get_preference(self, user_id: str, key: str) -> Optional[str]:
        row = self._fetch_one(
            "SELECT value FROM user_preferences WHERE user_id = ? AND key = ?",
            (user_id, key),
        )
        return row["value"] if row else None

    def set_preference(self, user_id: str, key: str, value: str) -> None:
        with self._write("save preferences") as cur:
            cur.execute(
                f"""
                INSERT INTO user_preferences (user_id, key, value) VALUES (?, ?, ?)
                ON CONFLICT(user_id, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = ({UTC_NOW_SQL})
                """,
                (user_id, key, value),
            )

    def delete_preference(self, user_id: str, key: str) -> None:
        with self._write("save preferences") as cur:
            cur.execute(
                "DELETE FROM user_preferences WHERE user_id = ? AND key = ?", (user_id, key)
            )


__all__ = ["Database"]
