from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class Credentials(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("invalid email address")
        return v


class PasswordChangeIn(BaseModel):
    password: str


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    expires_at: datetime
