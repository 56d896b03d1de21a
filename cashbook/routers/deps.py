"""Shared route dependencies: settings, store, cache and signed-in user."""

from datetime import date
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cashbook.core.config import Settings, get_settings
from cashbook.core.errors import AuthError
from cashbook.core.logging import user_id_ctx
from cashbook.db.dal import Database
from cashbook.services.auth import Session, resolve_session
from cashbook.services.periods import Period, civil_today, resolve_period
from cashbook.services.query_cache import QueryCache

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return Database(settings.db_path)


def get_query_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache


async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> Session:
    if credentials is None:
        raise AuthError("not signed in")
    session = resolve_session(db, credentials.credentials)
    user_id_ctx.set(session.user_id)
    return session


async def get_current_user_id(session: Session = Depends(get_session)) -> str:
    return session.user_id


def get_period(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    settings: Settings = Depends(get_settings),
) -> Period:
    """Requested month/year, defaulting to the current civil month."""
    return resolve_period(settings.civil_timezone, month=month, year=year)


def get_today(settings: Settings = Depends(get_settings)) -> date:
    return civil_today(settings.civil_timezone)


def partial_fields(payload: Any, required: Tuple[str, ...] = ()) -> Dict[str, Any]:
    """Fields the client actually sent, minus nulls for NOT NULL columns."""
    fields = payload.model_dump(exclude_unset=True)
    return {k: v for k, v in fields.items() if v is not None or k not in required}
