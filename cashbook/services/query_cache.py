"""Per-user cache of fetched record lists.

Entries are keyed by (kind, user_id, period) and expire after a TTL. Every
mutation names the record kinds it invalidates in ``MUTATION_INVALIDATES``;
after a successful write the router calls ``invalidate_for(mutation, user)``
and the next read refetches from the store.

Reads that fail are logged and served as an empty list ("no data yet"). Such
empty results are not cached, so the following read retries the store.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import sqlite3
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("cashbook.cache")

EXPENSES = "expenses"
BUDGET_HISTORY = "budget_history"
WALLETS = "wallets"
WALLET_TRANSACTIONS = "wallet_transactions"
PROFILE = "profile"

KINDS = (EXPENSES, BUDGET_HISTORY, WALLETS, WALLET_TRANSACTIONS, PROFILE)

MUTATION_INVALIDATES: Dict[str, Tuple[str, ...]] = {
    "expense.add": (EXPENSES,),
    "expense.update": (EXPENSES,),
    "expense.delete": (EXPENSES,),
    "budget.add": (BUDGET_HISTORY,),
    "budget.update": (BUDGET_HISTORY,),
    "budget.delete": (BUDGET_HISTORY,),
    "wallet.add": (WALLETS,),
    "wallet.update": (WALLETS,),
    "wallet.delete": (WALLETS, WALLET_TRANSACTIONS),
    "transaction.add": (WALLET_TRANSACTIONS,),
    "transaction.update": (WALLET_TRANSACTIONS,),
    "transaction.delete": (WALLET_TRANSACTIONS,),
    "profile.update": (PROFILE,),
}

CacheKey = Tuple[str, str, str]


@dataclass
class _CacheEntry:
    value: Any
    fetched_at: datetime


class QueryCache:
    """TTL-bound result cache with explicit, mutation-driven invalidation."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 1024):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries
        # least recently used first
        self._entries: "OrderedDict[CacheKey, _CacheEntry]" = OrderedDict()
        self._lock = Lock()

    # Internal --------------------------------------------------
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _is_entry_valid(self, entry: _CacheEntry) -> bool:
        return self._now() - entry.fetched_at < self._ttl

    def _store(self, key: CacheKey, value: Any) -> None:
        """Insert under the lock, dropping expired entries then the LRU overflow."""
        for k in [k for k, e in self._entries.items() if not self._is_entry_valid(e)]:
            del self._entries[k]
        self._entries[key] = _CacheEntry(value=value, fetched_at=self._now())
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    # Public API -----------------------------------------------
    def get_or_fetch(
        self,
        kind: str,
        user_id: str,
        fetch: Callable[[], Any],
        period: str = "*",
        default_factory: Callable[[], Any] = lambda: None,
    ) -> Any:
        if kind not in KINDS:
            raise ValueError(f"unknown record kind '{kind}'")
        key = (kind, user_id, period)
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._is_entry_valid(entry):
                self._entries.move_to_end(key)
                return entry.value
        try:
            value = fetch()
        except sqlite3.Error:
            logger.exception("read failed for %s (period %s); serving empty result", kind, period)
            return default_factory()
        with self._lock:
            self._store(key, value)
        return value

    def get_list(
        self, kind: str, user_id: str, fetch: Callable[[], List[Any]], period: str = "*"
    ) -> List[Any]:
        return self.get_or_fetch(kind, user_id, fetch, period=period, default_factory=list)

    def invalidate(self, kinds: Tuple[str, ...] | List[str], user_id: str) -> int:
        """Drop every period of the given kinds for one user."""
        with self._lock:
            stale = [k for k in self._entries if k[0] in kinds and k[1] == user_id]
            for k in stale:
                self._entries.pop(k, None)
        if stale:
            logger.debug("invalidated %d cached result(s) for %s", len(stale), ",".join(kinds))
        return len(stale)

    def invalidate_for(self, mutation: str, user_id: str) -> int:
        try:
            kinds = MUTATION_INVALIDATES[mutation]
        except KeyError:
            raise ValueError(f"mutation '{mutation}' declares no invalidation") from None
        return self.invalidate(kinds, user_id)

    def clear(self, user_id: Optional[str] = None) -> None:
        with self._lock:
            if user_id is None:
                self._entries.clear()
            else:
                for k in [k for k in self._entries if k[1] == user_id]:
                    self._entries.pop(k, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return bool(entry and self._is_entry_valid(entry))


__all__ = [
    "QueryCache",
    "MUTATION_INVALIDATES",
    "KINDS",
    "EXPENSES",
    "BUDGET_HISTORY",
    "WALLETS",
    "WALLET_TRANSACTIONS",
    "PROFILE",
]
