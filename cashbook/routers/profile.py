from typing import Optional

from fastapi import APIRouter, Depends

from cashbook.db.dal import Database
from cashbook.models.profile import ProfileOut, ProfileUpdateIn
from cashbook.routers.deps import get_current_user_id, get_db, get_query_cache
from cashbook.services.ledger import fetch_profile
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=Optional[ProfileOut], summary="Signed-in user's profile")
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    row = fetch_profile(db, cache, user_id)
    return ProfileOut.model_validate(row) if row else None


@router.put("", response_model=ProfileOut, summary="Create or update the profile")
async def put_profile(
    payload: ProfileUpdateIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.upsert_profile(user_id, payload.model_dump(exclude_unset=True))
    cache.invalidate_for("profile.update", user_id)
    return ProfileOut.model_validate(db.get_profile(user_id))
