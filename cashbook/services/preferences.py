"""User preference record for the budget limit alert.

Preferences persist through an injected ``PreferenceStore`` holding string
values under fixed keys:
  - budget_limit (default 0, meaning no limit)
  - budget_warning_threshold (default 80, 1..100)
  - budget_alert_dismissed (default false)

Loading never fails: missing or malformed values fall back to defaults.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Protocol

from cashbook.db.dal import Database
from cashbook.models.constants import MAX_AMOUNT
from cashbook.models.preferences import (
    DEFAULT_BUDGET_LIMIT,
    DEFAULT_WARNING_THRESHOLD,
    UserPreferences,
)

LIMIT_KEY = "budget_limit"
THRESHOLD_KEY = "budget_warning_threshold"
DISMISSED_KEY = "budget_alert_dismissed"


class PreferenceStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class DatabasePreferenceStore:
    """Preferences kept in the user_preferences table for one user."""

    def __init__(self, db: Database, user_id: str):
        self._db = db
        self._user_id = user_id

    def get(self, key: str) -> Optional[str]:
        return self._db.get_preference(self._user_id, key)

    def set(self, key: str, value: str) -> None:
        self._db.set_preference(self._user_id, key, value)

    def delete(self, key: str) -> None:
        self._db.delete_preference(self._user_id, key)


class MemoryPreferenceStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


def _stored_number(raw: Optional[str], low: float, high: float, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value) or not low <= value <= high:
        return default
    return value


def load_preferences(store: PreferenceStore) -> UserPreferences:
    limit = _stored_number(store.get(LIMIT_KEY), 0.0, MAX_AMOUNT, DEFAULT_BUDGET_LIMIT)
    threshold = _stored_number(
        store.get(THRESHOLD_KEY), 1.0, 100.0, DEFAULT_WARNING_THRESHOLD
    )
    dismissed = store.get(DISMISSED_KEY) in ("1", "true", "True")
    return UserPreferences(
        budget_limit=limit, warning_threshold=threshold, alert_dismissed=dismissed
    )


def save_preferences(
    store: PreferenceStore,
    budget_limit: Optional[float] = None,
    warning_threshold: Optional[float] = None,
) -> UserPreferences:
    """Store the values that are in range and re-arm the alert.

    A limit is kept only when > 0 and a threshold only when within 1..100;
    out-of-range values are ignored and the previous setting stays.
    """
    if budget_limit is not None and 0 < budget_limit <= MAX_AMOUNT:
        store.set(LIMIT_KEY, repr(float(budget_limit)))
    if warning_threshold is not None and 1 <= warning_threshold <= 100:
        store.set(THRESHOLD_KEY, repr(float(warning_threshold)))
    store.set(DISMISSED_KEY, "0")
    return load_preferences(store)


def clear_budget_limit(store: PreferenceStore) -> UserPreferences:
    store.delete(LIMIT_KEY)
    return load_preferences(store)


def dismiss_alert(store: PreferenceStore) -> UserPreferences:
    store.set(DISMISSED_KEY, "1")
    return load_preferences(store)


__all__ = [
    "PreferenceStore",
    "DatabasePreferenceStore",
    "MemoryPreferenceStore",
    "load_preferences",
    "save_preferences",
    "clear_budget_limit",
    "dismiss_alert",
]
