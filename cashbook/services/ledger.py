"""Cached record fetches shared by the API routes.

Each helper reads one record kind for one user through the ``QueryCache``,
keyed by the period (or range) it covers, so repeated renders of the same
month do not hit the store until a mutation invalidates that kind.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from cashbook.db.dal import Database
from cashbook.services import query_cache as qc
from cashbook.services.periods import Period


def fetch_expenses(
    db: Database, cache: qc.QueryCache, user_id: str, period: Period
) -> List[Dict[str, Any]]:
    return cache.get_list(
        qc.EXPENSES,
        user_id,
        lambda: db.list_expenses(user_id, start_date=period.start, end_date=period.end),
        period=period.key(),
    )


def fetch_expenses_between(
    db: Database, cache: qc.QueryCache, user_id: str, start: date, end: date
) -> List[Dict[str, Any]]:
    return cache.get_list(
        qc.EXPENSES,
        user_id,
        lambda: db.list_expenses(user_id, start_date=start, end_date=end),
        period=f"{start.isoformat()}..{end.isoformat()}",
    )


def fetch_budget_entries(
    db: Database, cache: qc.QueryCache, user_id: str, period: Period
) -> List[Dict[str, Any]]:
    return cache.get_list(
        qc.BUDGET_HISTORY,
        user_id,
        lambda: db.list_budget_entries(user_id, month=period.month, year=period.year),
        period=period.key(),
    )


def fetch_budget_entries_for(
    db: Database, cache: qc.QueryCache, user_id: str, periods: Sequence[Period]
) -> List[Dict[str, Any]]:
    if not periods:
        return []
    first, last = min(periods), max(periods)
    return cache.get_list(
        qc.BUDGET_HISTORY,
        user_id,
        lambda: db.list_budget_entries(user_id, start_date=first.start, end_date=last.end),
        period=f"{first.key()}..{last.key()}",
    )


def fetch_wallets(db: Database, cache: qc.QueryCache, user_id: str) -> List[Dict[str, Any]]:
    return cache.get_list(qc.WALLETS, user_id, lambda: db.list_wallets(user_id))


def fetch_wallet_transactions(
    db: Database, cache: qc.QueryCache, user_id: str, wallet_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    return cache.get_list(
        qc.WALLET_TRANSACTIONS,
        user_id,
        lambda: db.list_wallet_transactions(user_id, wallet_id=wallet_id),
        period=wallet_id or "*",
    )


def fetch_profile(
    db: Database, cache: qc.QueryCache, user_id: str
) -> Optional[Dict[str, Any]]:
    return cache.get_or_fetch(qc.PROFILE, user_id, lambda: db.get_profile(user_id))


__all__ = [
    "fetch_expenses",
    "fetch_expenses_between",
    "fetch_budget_entries",
    "fetch_budget_entries_for",
    "fetch_wallets",
    "fetch_wallet_transactions",
    "fetch_profile",
]
