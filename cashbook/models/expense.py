from __future__ import annotations

from datetime import date as Date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import MAX_AMOUNT
Category = Literal[
    "food",
    "transport",
    "shopping",
    "bills",
    "health",
    "education",
    "entertainment",
    "other",
]


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class ExpenseIn(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    category: Category
    description: Optional[str] = None
    expense_date: Date

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ExpenseOut(ExpenseIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime


class ExpenseUpdateIn(BaseModel):
    """Partial update; at least one field must be provided."""

    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    category: Optional[Category] = None
    description: Optional[str] = None
    expense_date: Optional[Date] = None

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _at_least_one(self) -> "ExpenseUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self
