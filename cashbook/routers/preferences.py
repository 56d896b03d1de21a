from fastapi import APIRouter, Depends

from cashbook.core.config import Settings, get_settings
from cashbook.db.dal import Database
from cashbook.models.preferences import LimitAlertOut, PreferencesUpdateIn, UserPreferences
from cashbook.routers.deps import get_current_user_id, get_db, get_period, get_query_cache
from cashbook.services import aggregator
from cashbook.services import preferences as prefs_service
from cashbook.services.alerts import evaluate_limit_alert
from cashbook.services.ledger import fetch_expenses
from cashbook.services.periods import Period
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/preferences", tags=["preferences"])


def get_preference_store(
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
) -> prefs_service.PreferenceStore:
    return prefs_service.DatabasePreferenceStore(db, user_id)


@router.get("", response_model=UserPreferences, summary="Current alert preferences")
async def get_preferences(store=Depends(get_preference_store)):
    return prefs_service.load_preferences(store)


@router.put("", response_model=UserPreferences, summary="Set budget limit and threshold")
async def put_preferences(payload: PreferencesUpdateIn, store=Depends(get_preference_store)):
    return prefs_service.save_preferences(
        store,
        budget_limit=payload.budget_limit,
        warning_threshold=payload.warning_threshold,
    )


@router.delete("/limit", response_model=UserPreferences, summary="Remove the budget limit")
async def clear_limit(store=Depends(get_preference_store)):
    return prefs_service.clear_budget_limit(store)


@router.post("/dismiss", response_model=UserPreferences, summary="Dismiss the limit alert")
async def dismiss(store=Depends(get_preference_store)):
    return prefs_service.dismiss_alert(store)


@router.get("/alert", response_model=LimitAlertOut, summary="Evaluate the budget limit alert")
async def limit_alert(
    period: Period = Depends(get_period),
    store=Depends(get_preference_store),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    settings: Settings = Depends(get_settings),
):
    spent = aggregator.total(fetch_expenses(db, cache, user_id, period))
    return evaluate_limit_alert(
        spent, prefs_service.load_preferences(store), settings.report_currency_symbol
    )
