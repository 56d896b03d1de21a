from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "ProfileUpdateIn":
        if self.name is None and self.image_url is None:
            raise ValueError("at least one field must be provided")
        return self


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
