from typing import List

from fastapi import APIRouter, Depends

from cashbook.core.errors import NotFoundError
from cashbook.db.dal import Database
from cashbook.models.budget import (
    BudgetEntryIn,
    BudgetEntryOut,
    BudgetEntryUpdateIn,
    BudgetSummaryOut,
)
from cashbook.routers.deps import (
    get_current_user_id,
    get_db,
    get_period,
    get_query_cache,
    partial_fields,
)
from cashbook.services import aggregator
from cashbook.services.ledger import fetch_budget_entries, fetch_expenses
from cashbook.services.money import round2
from cashbook.services.periods import Period
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/budgets", tags=["budgets"])

REQUIRED_FIELDS = ("amount", "budget_date")


@router.get("", response_model=List[BudgetEntryOut], summary="Budget history for a month")
async def list_budget_entries(
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    rows = fetch_budget_entries(db, cache, user_id, period)
    return [BudgetEntryOut.model_validate(r) for r in rows]


@router.get(
    "/summary", response_model=BudgetSummaryOut, summary="Budget vs spending for a month"
)
async def budget_summary(
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    summary = aggregator.budget_summary(
        fetch_budget_entries(db, cache, user_id, period),
        fetch_expenses(db, cache, user_id, period),
    )
    return BudgetSummaryOut(
        month=period.month,
        year=period.year,
        total_budget=round2(summary.total_budget),
        total_expense=round2(summary.total_expense),
        remaining=round2(summary.remaining),
        percent_used=round2(summary.percent_used),
        level=summary.level,
    )


@router.post("", response_model=BudgetEntryOut, status_code=201, summary="Add to a month's budget")
async def create_budget_entry(
    payload: BudgetEntryIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    entry_id = db.insert_budget_entry(user_id, payload)
    cache.invalidate_for("budget.add", user_id)
    return BudgetEntryOut.model_validate(db.get_budget_entry(user_id, entry_id))


@router.patch("/{entry_id}", response_model=BudgetEntryOut, summary="Edit a budget entry")
async def patch_budget_entry(
    entry_id: str,
    payload: BudgetEntryUpdateIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    # month/year are re-derived from budget_date by the store
    db.update_budget_entry(user_id, entry_id, partial_fields(payload, REQUIRED_FIELDS))
    cache.invalidate_for("budget.update", user_id)
    row = db.get_budget_entry(user_id, entry_id)
    if not row:
        raise NotFoundError("budget entry not found")
    return BudgetEntryOut.model_validate(row)


@router.delete("/{entry_id}", status_code=204, summary="Delete a budget entry")
async def delete_budget_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.delete_budget_entry(user_id, entry_id)
    cache.invalidate_for("budget.delete", user_id)
    return None
