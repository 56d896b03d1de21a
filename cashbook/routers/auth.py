from fastapi import APIRouter, Depends

from cashbook.core.config import Settings, get_settings
from cashbook.db.dal import Database
from cashbook.models.auth import Credentials, PasswordChangeIn, SessionOut
from cashbook.routers.deps import get_db, get_session
from cashbook.services import auth as auth_service
from cashbook.services.auth import Session

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_out(session: Session) -> SessionOut:
    return SessionOut(
        access_token=session.token,
        user_id=session.user_id,
        email=session.email,
        expires_at=session.expires_at,
    )


@router.post(
    "/signup", response_model=SessionOut, status_code=201, summary="Create an account"
)
async def sign_up(
    payload: Credentials,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # New accounts are signed in straight away
    auth_service.sign_up(db, payload, settings)
    return _session_out(auth_service.sign_in(db, payload, settings))


@router.post("/signin", response_model=SessionOut, summary="Sign in with email and password")
async def sign_in(
    payload: Credentials,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _session_out(auth_service.sign_in(db, payload, settings))


@router.post("/signout", status_code=204, summary="Revoke the current session")
async def sign_out(
    session: Session = Depends(get_session),
    db: Database = Depends(get_db),
):
    auth_service.sign_out(db, session.token)
    return None


@router.put("/password", status_code=204, summary="Change the signed-in user's password")
async def change_password(
    payload: PasswordChangeIn,
    session: Session = Depends(get_session),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    auth_service.change_password(db, session.user_id, payload.password, settings)
    return None
