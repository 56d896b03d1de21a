"""Email/password accounts and bearer sessions.

Passwords are hashed with bcrypt; sessions are opaque random tokens stored
with an expiry. Expired sessions are rejected and removed on lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import secrets
from typing import Optional

import bcrypt

from cashbook.core.config import Settings
from cashbook.core.errors import AuthError, BackendError
from cashbook.db.dal import Database
from cashbook.models.auth import Credentials

logger = logging.getLogger("cashbook.auth")

BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    email: str
    expires_at: datetime


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _check_password_rules(password: str, settings: Settings) -> None:
    if len(password) < settings.min_password_length:
        raise BackendError(
            f"password must be at least {settings.min_password_length} characters"
        )
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise BackendError(f"password cannot be longer than {BCRYPT_MAX_BYTES} bytes")


def _utcnow(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def sign_up(db: Database, creds: Credentials, settings: Settings) -> str:
    _check_password_rules(creds.password, settings)
    user_id = db.create_user(creds.email, hash_password(creds.password))
    logger.info("account created for user %s", user_id)
    return user_id


def sign_in(
    db: Database, creds: Credentials, settings: Settings, now: Optional[datetime] = None
) -> Session:
    user = db.get_user_by_email(creds.email)
    if not user or not verify_password(creds.password, user["password_hash"]):
        raise AuthError("invalid email or password")
    db.delete_expired_sessions(_utcnow(now))
    token = secrets.token_urlsafe(32)
    expires_at = _utcnow(now) + timedelta(minutes=settings.session_ttl_minutes)
    db.create_session(user["id"], token, expires_at)
    return Session(token=token, user_id=user["id"], email=user["email"], expires_at=expires_at)


def sign_out(db: Database, token: str) -> None:
    db.delete_session(token)


def resolve_session(db: Database, token: str, now: Optional[datetime] = None) -> Session:
    row = db.get_session(token)
    if not row:
        raise AuthError("not signed in")
    expires_at = datetime.fromisoformat(row["expires_at"])
    if expires_at <= _utcnow(now):
        db.delete_session(token)
        raise AuthError("session expired")
    return Session(
        token=row["token"], user_id=row["user_id"], email=row["email"], expires_at=expires_at
    )


def change_password(db: Database, user_id: str, new_password: str, settings: Settings) -> None:
    _check_password_rules(new_password, settings)
    db.update_password_hash(user_id, hash_password(new_password))
    logger.info("password changed for user %s", user_id)


__all__ = [
    "Session",
    "hash_password",
    "verify_password",
    "sign_up",
    "sign_in",
    "sign_out",
    "resolve_session",
    "change_password",
]
