from __future__ import annotations

from datetime import date as Date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import MAX_AMOUNT
from .expense import _blank_to_none


class BudgetEntryIn(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    budget_date: Date

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class BudgetEntryOut(BudgetEntryIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    month: int
    year: int
    created_at: datetime


class BudgetEntryUpdateIn(BaseModel):
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    budget_date: Optional[Date] = None

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _at_least_one(self) -> "BudgetEntryUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self


class BudgetSummaryOut(BaseModel):
    month: int
    year: int
    total_budget: float
    total_expense: float
    remaining: float
    percent_used: float
    level: str
