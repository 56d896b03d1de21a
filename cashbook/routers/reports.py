from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from cashbook.core.config import Settings, get_settings
from cashbook.core.errors import BackendError
from cashbook.db.dal import Database
from cashbook.models.wallet import TransactionType
from cashbook.routers.deps import (
    get_current_user_id,
    get_db,
    get_period,
    get_query_cache,
    get_today,
)
from cashbook.services import reports as report_service
from cashbook.services.ledger import (
    fetch_budget_entries,
    fetch_expenses,
    fetch_wallet_transactions,
    fetch_wallets,
)
from cashbook.services.periods import Period
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/reports", tags=["reports"])


# Builders (shared by the JSON and printable routes) --------------
def expense_report(
    day: Optional[date] = Query(None, alias="date", description="Only this calendar day"),
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> report_service.ExpenseReport:
    return report_service.build_expense_report(
        fetch_expenses(db, cache, user_id, period), period, filter_date=day
    )


def budget_report(
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> report_service.BudgetReport:
    return report_service.build_budget_report(
        fetch_budget_entries(db, cache, user_id, period),
        fetch_expenses(db, cache, user_id, period),
        period,
    )


def wallet_report(
    wallet_id: Optional[str] = Query(None),
    transaction_type: Optional[TransactionType] = Query(None),
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> report_service.WalletReport:
    if start_date and end_date and start_date > end_date:
        raise BackendError("start_date cannot be after end_date")
    return report_service.build_wallet_report(
        fetch_wallets(db, cache, user_id),
        fetch_wallet_transactions(db, cache, user_id),
        wallet_id=wallet_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
    )


def _render(template: str, report, settings: Settings, today: date) -> HTMLResponse:
    html = report_service.render_report(
        template,
        report,
        settings.report_currency_symbol,
        app_name=settings.app_name,
        generated_on=today.isoformat(),
    )
    return HTMLResponse(html)


# Routes -----------------------------------------------------------
@router.get("/expenses", summary="Expense report for a month")
async def expenses_json(report=Depends(expense_report)):
    return report


@router.get("/expenses/print", response_class=HTMLResponse, summary="Printable expense report")
async def expenses_print(
    report=Depends(expense_report),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    return _render("expenses.html", report, settings, today)


@router.get("/budget", summary="Budget report for a month")
async def budget_json(report=Depends(budget_report)):
    return report


@router.get("/budget/print", response_class=HTMLResponse, summary="Printable budget report")
async def budget_print(
    report=Depends(budget_report),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    return _render("budget.html", report, settings, today)


@router.get("/wallets", summary="Wallet transaction report")
async def wallets_json(report=Depends(wallet_report)):
    return report


@router.get("/wallets/print", response_class=HTMLResponse, summary="Printable wallet report")
async def wallets_print(
    report=Depends(wallet_report),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    return _render("wallets.html", report, settings, today)
