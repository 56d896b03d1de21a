from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cashbook.core.errors import NotFoundError
from cashbook.db.dal import Database
from cashbook.models.expense import ExpenseIn, ExpenseOut, ExpenseUpdateIn
from cashbook.routers.deps import (
    get_current_user_id,
    get_db,
    get_period,
    get_query_cache,
    partial_fields,
)
from cashbook.services import aggregator
from cashbook.services.ledger import fetch_expenses
from cashbook.services.periods import Period
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/expenses", tags=["expenses"])

REQUIRED_FIELDS = ("amount", "category", "expense_date")


@router.get("", response_model=List[ExpenseOut], summary="List a month's expenses")
async def list_expenses(
    day: Optional[date] = Query(None, alias="date", description="Only this calendar day"),
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    rows = fetch_expenses(db, cache, user_id, period)
    if day is not None:
        rows = aggregator.filter_by_date(rows, day)
    return [ExpenseOut.model_validate(r) for r in rows]


@router.post("", response_model=ExpenseOut, status_code=201, summary="Add an expense")
async def create_expense(
    payload: ExpenseIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    expense_id = db.insert_expense(user_id, payload)
    cache.invalidate_for("expense.add", user_id)
    return ExpenseOut.model_validate(db.get_expense(user_id, expense_id))


@router.patch("/{expense_id}", response_model=ExpenseOut, summary="Edit an expense (partial)")
async def patch_expense(
    expense_id: str,
    payload: ExpenseUpdateIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    if not db.get_expense(user_id, expense_id):
        raise NotFoundError("expense not found")
    db.update_expense(user_id, expense_id, partial_fields(payload, REQUIRED_FIELDS))
    cache.invalidate_for("expense.update", user_id)
    return ExpenseOut.model_validate(db.get_expense(user_id, expense_id))


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.delete_expense(user_id, expense_id)
    cache.invalidate_for("expense.delete", user_id)
    return None
