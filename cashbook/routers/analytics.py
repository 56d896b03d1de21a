from datetime import date, timedelta
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from cashbook.core.config import Settings, get_settings
from cashbook.core.errors import BackendError
from cashbook.db.dal import Database
from cashbook.models.constants import CATEGORY_LABELS, MONTH_NAMES
from cashbook.routers.deps import (
    get_current_user_id,
    get_db,
    get_period,
    get_query_cache,
    get_today,
)
from cashbook.services import aggregator
from cashbook.services.ledger import (
    fetch_budget_entries,
    fetch_budget_entries_for,
    fetch_expenses,
    fetch_expenses_between,
)
from cashbook.services.money import round2
from cashbook.services.periods import Period, recent_periods, week_bounds
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/analytics", tags=["analytics"])


class MonthSummary(BaseModel):
    month: int
    year: int
    total_expense: float
    total_budget: float
    remaining: float
    percent_used: float
    level: str
    expense_count: int


class CategoryBreakdownItem(BaseModel):
    category: str
    label: str
    amount: float
    percent: float


class DayBucketOut(BaseModel):
    date: date
    total: float
    count: int
    categories: Dict[str, float]


class BudgetMonthPoint(BaseModel):
    month: int
    year: int
    label: str
    total_budget: float


def _bucket_out(b: aggregator.DayBucket) -> DayBucketOut:
    return DayBucketOut(
        date=b.date,
        total=round2(b.total),
        count=b.count,
        categories={k: round2(v) for k, v in b.categories.items()},
    )


@router.get("/summary", response_model=MonthSummary, summary="Month totals at a glance")
async def month_summary(
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    expenses = fetch_expenses(db, cache, user_id, period)
    summary = aggregator.budget_summary(fetch_budget_entries(db, cache, user_id, period), expenses)
    return MonthSummary(
        month=period.month,
        year=period.year,
        total_expense=round2(summary.total_expense),
        total_budget=round2(summary.total_budget),
        remaining=round2(summary.remaining),
        percent_used=round2(summary.percent_used),
        level=summary.level,
        expense_count=len(expenses),
    )


@router.get(
    "/category-breakdown",
    response_model=List[CategoryBreakdownItem],
    summary="Totals per category with percent of the month total",
)
async def category_breakdown(
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    shares = aggregator.category_breakdown(fetch_expenses(db, cache, user_id, period))
    ordered = sorted(shares.values(), key=lambda s: s.amount, reverse=True)
    return [
        CategoryBreakdownItem(
            category=s.category,
            label=CATEGORY_LABELS.get(s.category, s.category),
            amount=round2(s.amount),
            percent=s.percent,
        )
        for s in ordered
    ]


def _check_window(start: date, end: date, settings: Settings) -> None:
    if (end - start).days + 1 > settings.max_window_days:
        raise BackendError(f"date window cannot exceed {settings.max_window_days} days")


@router.get(
    "/daily",
    response_model=List[DayBucketOut],
    summary="Per-day totals over a window (defaults to the month)",
)
async def daily(
    start_date: Optional[date] = Query(None, description="Window start inclusive"),
    end_date: Optional[date] = Query(None, description="Window end inclusive"),
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
):
    start = start_date or period.start
    end = end_date or period.end
    if start > end:
        raise BackendError("start_date cannot be after end_date")
    _check_window(start, end, settings)
    expenses = fetch_expenses_between(db, cache, user_id, start, end)
    return [_bucket_out(b) for b in aggregator.daily_buckets(expenses, start, end)]


@router.get(
    "/recent-days",
    response_model=List[DayBucketOut],
    summary="Today and the days before it, newest first",
)
async def recent_days(
    days: Optional[int] = Query(None, ge=1, le=366),
    today: date = Depends(get_today),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
):
    n = days or settings.recent_days
    start = today - timedelta(days=n - 1)
    expenses = fetch_expenses_between(db, cache, user_id, start, today)
    return [_bucket_out(b) for b in aggregator.last_n_days(expenses, n, today)]


@router.get(
    "/series",
    response_model=List[DayBucketOut],
    summary="Chart series for the day, week, month or custom view",
)
async def series(
    view: Literal["day", "week", "month", "custom"] = Query("month"),
    start_date: Optional[date] = Query(None, description="Custom view start"),
    end_date: Optional[date] = Query(None, description="Custom view end"),
    period: Period = Depends(get_period),
    today: date = Depends(get_today),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
):
    if view == "custom":
        if not start_date or not end_date:
            return []
        if start_date > end_date:
            raise BackendError("start_date cannot be after end_date")
        _check_window(start_date, end_date, settings)
        window = (start_date, end_date)
    elif view == "week":
        window = week_bounds(today, settings.week_start)
    elif view == "day":
        window = (today, today)
    else:
        window = (period.start, period.end)
    expenses = fetch_expenses_between(db, cache, user_id, *window)
    buckets = aggregator.series_for_view(
        expenses,
        view,
        today,
        period=period,
        week_start=settings.week_start,
        custom_start=start_date,
        custom_end=end_date,
    )
    return [_bucket_out(b) for b in buckets]


@router.get(
    "/budget-months",
    response_model=List[BudgetMonthPoint],
    summary="Budget totals for the months ending at the requested one",
)
async def budget_months(
    count: int = Query(6, ge=1, le=24),
    period: Period = Depends(get_period),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    periods = recent_periods(period, count)
    entries = fetch_budget_entries_for(db, cache, user_id, periods)
    return [
        BudgetMonthPoint(
            month=p.month,
            year=p.year,
            label=f"{MONTH_NAMES[p.month - 1][:3]} {p.year}",
            total_budget=round2(amount),
        )
        for p, amount in aggregator.budget_by_month(entries, periods)
    ]
