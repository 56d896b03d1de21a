"""Ledger aggregation over already-fetched, user-scoped record lists.

Everything here is pure: callers pass the expense, budget and wallet rows
they already hold (DAL dicts or model objects) and get display-ready
summaries back. Nothing is rejected; a missing list is treated as empty and
a missing or malformed amount counts as zero.

Dates are compared as ``yyyy-MM-dd`` tokens. Any timezone conversion has to
happen before records get here (see ``cashbook.services.periods``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from cashbook.services.money import round1
from cashbook.services.periods import Period, each_day, month_bounds, week_bounds

INITIAL_BALANCE_DESCRIPTION = "Initial balance"


def _get(record: Any, name: str) -> Any:
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _amount(record: Any, amount_field: str = "amount") -> float:
    try:
        value = float(_get(record, amount_field))
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def date_token(value: Any) -> Optional[str]:
    """Normalize a date-ish value to its ``yyyy-MM-dd`` token.

    Anything that does not start with a real calendar date yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    token = str(value)[:10]
    if len(token) != 10:
        return None
    try:
        return date.fromisoformat(token).isoformat()
    except ValueError:
        return None


def _fsum(values: Iterable[float]) -> float:
    values = list(values)
    try:
        return math.fsum(values)
    except OverflowError:
        # fsum refuses intermediate overflow; a plain sum saturates to +-inf
        return sum(values)


def _rows(records: Optional[Iterable[Any]]) -> List[Any]:
    return list(records) if records else []


# ---------------- Totals -----------------
def total(records: Optional[Iterable[Any]], amount_field: str = "amount") -> float:
    """Sum of ``amount_field`` across records (0 for an empty list)."""
    return _fsum(_amount(r, amount_field) for r in _rows(records))


def remaining_budget(total_budget: float, total_expense: float) -> float:
    """Budget left; negative when over budget."""
    return (total_budget or 0.0) - (total_expense or 0.0)


def percent_used(total_expense: float, total_budget: float) -> float:
    if not total_budget or total_budget <= 0:
        return 0.0
    return (total_expense or 0.0) / total_budget * 100


# ---------------- Category Breakdown -----------------
@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percent: float


def category_breakdown(expenses: Optional[Iterable[Any]]) -> Dict[str, CategoryShare]:
    """Per-category totals with their share of the grand total.

    Categories are keyed in order of first appearance; categories with no
    expenses are omitted. Percent is rounded to one decimal.
    """
    sums: Dict[str, List[float]] = {}
    for e in _rows(expenses):
        category = _get(e, "category") or "other"
        sums.setdefault(category, []).append(_amount(e))
    totals = {c: _fsum(v) for c, v in sums.items()}
    grand = _fsum(totals.values())
    return {
        c: CategoryShare(
            category=c,
            amount=amount,
            percent=round1(amount / grand * 100) if grand > 0 else 0.0,
        )
        for c, amount in totals.items()
    }


# ---------------- Daily Buckets -----------------
@dataclass(frozen=True)
class DayBucket:
    date: date
    total: float
    count: int
    categories: Dict[str, float] = field(default_factory=dict)


def _group_by_day(expenses: Iterable[Any], date_field: str) -> Dict[str, List[Any]]:
    grouped: Dict[str, List[Any]] = {}
    for e in expenses:
        token = date_token(_get(e, date_field))
        if token is not None:
            grouped.setdefault(token, []).append(e)
    return grouped


def _bucket(day: date, rows: Sequence[Any]) -> DayBucket:
    categories: Dict[str, float] = {}
    for r in rows:
        category = _get(r, "category") or "other"
        categories[category] = categories.get(category, 0.0) + _amount(r)
    return DayBucket(date=day, total=total(rows), count=len(rows), categories=categories)


def daily_buckets(
    expenses: Optional[Iterable[Any]],
    window_start: date,
    window_end: date,
    date_field: str = "expense_date",
) -> List[DayBucket]:
    """One bucket per calendar day of the closed window, oldest first."""
    grouped = _group_by_day(_rows(expenses), date_field)
    return [
        _bucket(day, grouped.get(day.isoformat(), []))
        for day in each_day(window_start, window_end)
    ]


def last_n_days(
    expenses: Optional[Iterable[Any]],
    n: int,
    today: date,
    date_field: str = "expense_date",
) -> List[DayBucket]:
    """Buckets for today and the n-1 days before it, newest first."""
    if n <= 0:
        return []
    start = date.fromordinal(today.toordinal() - (n - 1))
    return list(reversed(daily_buckets(expenses, start, today, date_field)))


def filter_by_date(
    records: Optional[Iterable[Any]], day: date, date_field: str = "expense_date"
) -> List[Any]:
    token = day.isoformat()
    return [r for r in _rows(records) if date_token(_get(r, date_field)) == token]


def filter_by_range(
    records: Optional[Iterable[Any]],
    start: Optional[date],
    end: Optional[date],
    date_field: str = "expense_date",
) -> List[Any]:
    lo = start.isoformat() if start else None
    hi = end.isoformat() if end else None
    out = []
    for r in _rows(records):
        token = date_token(_get(r, date_field))
        if token is None:
            continue
        if lo and token < lo:
            continue
        if hi and token > hi:
            continue
        out.append(r)
    return out


def series_for_view(
    expenses: Optional[Iterable[Any]],
    view: str,
    today: date,
    period: Optional[Period] = None,
    week_start: str = "saturday",
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> List[DayBucket]:
    """Per-day chart series for the day / week / month / custom views.

    An incomplete custom range yields an empty series.
    """
    if view == "day":
        return daily_buckets(expenses, today, today)
    if view == "week":
        start, end = week_bounds(today, week_start)
        return daily_buckets(expenses, start, end)
    if view == "month":
        p = period or Period(year=today.year, month=today.month)
        start, end = month_bounds(p.year, p.month)
        return daily_buckets(expenses, start, end)
    if view == "custom":
        if not custom_start or not custom_end:
            return []
        in_range = filter_by_range(expenses, custom_start, custom_end)
        return daily_buckets(in_range, custom_start, custom_end)
    raise ValueError(f"unknown view '{view}'")


# ---------------- Budget -----------------
@dataclass(frozen=True)
class BudgetSummary:
    total_budget: float
    total_expense: float
    remaining: float
    percent_used: float
    level: str


def progress_level(pct: float) -> str:
    if pct > 100:
        return "over"
    if pct > 75:
        return "warning"
    return "ok"


def budget_summary(
    budget_entries: Optional[Iterable[Any]], expenses: Optional[Iterable[Any]]
) -> BudgetSummary:
    budget = total(budget_entries)
    spent = total(expenses)
    pct = percent_used(spent, budget)
    return BudgetSummary(
        total_budget=budget,
        total_expense=spent,
        remaining=remaining_budget(budget, spent),
        percent_used=pct,
        level=progress_level(pct),
    )


def budget_by_month(
    budget_entries: Optional[Iterable[Any]], periods: Sequence[Period]
) -> List[tuple[Period, float]]:
    """Summed budget for each requested period, in the order given."""
    sums: Dict[Period, List[float]] = {p: [] for p in periods}
    for entry in _rows(budget_entries):
        month, year = _get(entry, "month"), _get(entry, "year")
        if month is None or year is None:
            token = date_token(_get(entry, "budget_date"))
            if token is None:
                continue
            year, month = int(token[:4]), int(token[5:7])
        try:
            key = Period(year=int(year), month=int(month))
        except (TypeError, ValueError):
            continue
        if key in sums:
            sums[key].append(_amount(entry))
    return [(p, _fsum(sums[p])) for p in periods]


# ---------------- Wallets -----------------
def _signed(txn: Any) -> float:
    amount = _amount(txn)
    return amount if _get(txn, "transaction_type") == "deposit" else -amount


def wallet_balance(wallet: Any, transactions: Optional[Iterable[Any]]) -> float:
    """Initial balance plus deposits minus withdrawals; may go negative."""
    wallet_id = _get(wallet, "id")
    deltas = [_signed(t) for t in _rows(transactions) if _get(t, "wallet_id") == wallet_id]
    return _fsum([_amount(wallet, "initial_balance")] + deltas)


def wallet_balances(
    wallets: Optional[Iterable[Any]], transactions: Optional[Iterable[Any]]
) -> Dict[str, float]:
    txns = _rows(transactions)
    return {_get(w, "id"): wallet_balance(w, txns) for w in _rows(wallets)}


@dataclass(frozen=True)
class WalletTotals:
    total_deposit: float
    total_withdraw: float
    total_balance: float


def wallet_totals(
    wallets: Optional[Iterable[Any]], transactions: Optional[Iterable[Any]]
) -> WalletTotals:
    """Totals across wallets; initial balances count as deposits."""
    wallet_rows = _rows(wallets)
    txns = _rows(transactions)
    deposits = [_amount(t) for t in txns if _get(t, "transaction_type") == "deposit"]
    withdrawals = [_amount(t) for t in txns if _get(t, "transaction_type") == "withdraw"]
    total_deposit = _fsum(deposits + [_amount(w, "initial_balance") for w in wallet_rows])
    balances = wallet_balances(wallet_rows, txns)
    return WalletTotals(
        total_deposit=total_deposit,
        total_withdraw=_fsum(withdrawals),
        total_balance=_fsum(balances.values()),
    )


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    wallet_id: str
    transaction_type: str
    amount: float
    description: Optional[str]
    transaction_date: date
    is_initial_balance: bool = False


def ledger_entries(
    wallets: Optional[Iterable[Any]],
    transactions: Optional[Iterable[Any]],
    wallet_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[LedgerEntry]:
    """Transaction list with one synthetic deposit per funded wallet.

    Wallets with an initial balance > 0 contribute an "initial balance"
    deposit dated on the wallet's creation day. Filters apply to both kinds
    of entry; the result is newest first.
    """
    entries: List[LedgerEntry] = []
    for w in _rows(wallets):
        initial = _amount(w, "initial_balance")
        token = date_token(_get(w, "created_at"))
        if initial > 0 and token:
            entries.append(
                LedgerEntry(
                    id=f"initial-{_get(w, 'id')}",
                    wallet_id=_get(w, "id"),
                    transaction_type="deposit",
                    amount=initial,
                    description=INITIAL_BALANCE_DESCRIPTION,
                    transaction_date=date.fromisoformat(token),
                    is_initial_balance=True,
                )
            )
    for t in _rows(transactions):
        token = date_token(_get(t, "transaction_date"))
        if token is None:
            continue
        entries.append(
            LedgerEntry(
                id=_get(t, "id"),
                wallet_id=_get(t, "wallet_id"),
                transaction_type=_get(t, "transaction_type"),
                amount=_amount(t),
                description=_get(t, "description"),
                transaction_date=date.fromisoformat(token),
            )
        )
    if wallet_id:
        entries = [e for e in entries if e.wallet_id == wallet_id]
    if transaction_type:
        entries = [e for e in entries if e.transaction_type == transaction_type]
    if start_date:
        entries = [e for e in entries if e.transaction_date >= start_date]
    if end_date:
        entries = [e for e in entries if e.transaction_date <= end_date]
    return sorted(entries, key=lambda e: e.transaction_date, reverse=True)


__all__ = [
    "CategoryShare",
    "DayBucket",
    "BudgetSummary",
    "WalletTotals",
    "LedgerEntry",
    "date_token",
    "total",
    "remaining_budget",
    "percent_used",
    "category_breakdown",
    "daily_buckets",
    "last_n_days",
    "filter_by_date",
    "filter_by_range",
    "series_for_view",
    "progress_level",
    "budget_summary",
    "budget_by_month",
    "wallet_balance",
    "wallet_balances",
    "wallet_totals",
    "ledger_entries",
]
