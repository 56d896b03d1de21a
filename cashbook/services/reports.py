"""Expense, budget and wallet reports plus their printable HTML pages."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from cashbook.models.constants import (
    CATEGORIES,
    CATEGORY_LABELS,
    MONTH_NAMES,
    WALLET_TYPE_LABELS,
)
from cashbook.services import aggregator
from cashbook.services.money import format_currency, round2
from cashbook.services.periods import Period

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


@dataclass
class ExpenseReport:
    month: int
    year: int
    title: str
    total: float
    count: int
    category_totals: Dict[str, float]
    rows: List[Dict[str, Any]] = field(default_factory=list)
    filter_date: Optional[date] = None


@dataclass
class BudgetReport:
    month: int
    year: int
    title: str
    total_budget: float
    total_expense: float
    remaining: float
    percent_used: float
    rows: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class WalletReport:
    title: str
    total_deposit: float
    total_withdraw: float
    net: float
    rows: List[Dict[str, Any]] = field(default_factory=list)
    wallet_id: Optional[str] = None
    transaction_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def _period_title(kind: str, period: Period) -> str:
    return f"{kind} {MONTH_NAMES[period.month - 1]} {period.year}"


def build_expense_report(
    expenses: Iterable[Any], period: Period, filter_date: Optional[date] = None
) -> ExpenseReport:
    """Expense report for a month, optionally narrowed to one day.

    Category totals only list categories that have spending, in the
    canonical category order.
    """
    rows = list(expenses or [])
    if filter_date is not None:
        rows = aggregator.filter_by_date(rows, filter_date)
    shares = aggregator.category_breakdown(rows)
    category_totals = {
        c: round2(shares[c].amount) for c in CATEGORIES if c in shares and shares[c].amount > 0
    }
    return ExpenseReport(
        month=period.month,
        year=period.year,
        title=_period_title("Expense report", period),
        total=round2(aggregator.total(rows)),
        count=len(rows),
        category_totals=category_totals,
        rows=[
            {
                "id": r["id"],
                "expense_date": aggregator.date_token(r.get("expense_date")),
                "category": r.get("category"),
                "category_label": CATEGORY_LABELS.get(r.get("category"), r.get("category")),
                "description": r.get("description") or "",
                "amount": round2(float(r.get("amount") or 0)),
            }
            for r in rows
        ],
        filter_date=filter_date,
    )


def build_budget_report(
    budget_entries: Iterable[Any], expenses: Iterable[Any], period: Period
) -> BudgetReport:
    entries = list(budget_entries or [])
    summary = aggregator.budget_summary(entries, expenses)
    return BudgetReport(
        month=period.month,
        year=period.year,
        title=_period_title("Budget report", period),
        total_budget=round2(summary.total_budget),
        total_expense=round2(summary.total_expense),
        remaining=round2(summary.remaining),
        percent_used=round2(summary.percent_used),
        rows=[
            {
                "id": e["id"],
                "budget_date": aggregator.date_token(e.get("budget_date")),
                "description": e.get("description") or "",
                "amount": round2(float(e.get("amount") or 0)),
            }
            for e in entries
        ],
    )


def build_wallet_report(
    wallets: Iterable[Any],
    transactions: Iterable[Any],
    wallet_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> WalletReport:
    """Filtered ledger with deposit / withdrawal totals.

    Initial balances show up as deposit rows, so they count toward the
    deposit total just like in the ledger view.
    """
    wallet_rows = list(wallets or [])
    names = {w["id"]: w for w in wallet_rows}
    entries = aggregator.ledger_entries(
        wallet_rows,
        transactions,
        wallet_id=wallet_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
    )
    deposit = aggregator.total([e for e in entries if e.transaction_type == "deposit"])
    withdraw = aggregator.total([e for e in entries if e.transaction_type == "withdraw"])
    rows = []
    for e in entries:
        wallet = names.get(e.wallet_id) or {}
        row = asdict(e)
        row["transaction_date"] = e.transaction_date.isoformat()
        row["wallet_name"] = wallet.get("wallet_name", "")
        row["wallet_type_label"] = WALLET_TYPE_LABELS.get(wallet.get("wallet_type"), "")
        row["amount"] = round2(e.amount)
        rows.append(row)
    return WalletReport(
        title="Wallet transaction report",
        total_deposit=round2(deposit),
        total_withdraw=round2(withdraw),
        net=round2(deposit - withdraw),
        rows=rows,
        wallet_id=wallet_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
    )


_env: Optional[Environment] = None


def get_environment() -> Environment:
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )
    return _env


def render_report(template_name: str, report: Any, currency_symbol: str, **extra: Any) -> str:
    """Render a report dataclass into its printable HTML page."""
    env = get_environment()
    template = env.get_template(f"reports/{template_name}")

    def money(value: Any) -> str:
        return format_currency(value, currency_symbol)

    context = {"report": report, "money": money, "category_labels": CATEGORY_LABELS}
    context.update(extra)
    return template.render(**context)


__all__ = [
    "ExpenseReport",
    "BudgetReport",
    "WalletReport",
    "build_expense_report",
    "build_budget_report",
    "build_wallet_report",
    "get_environment",
    "render_report",
]
