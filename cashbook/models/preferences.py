from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .constants import MAX_AMOUNT

DEFAULT_BUDGET_LIMIT = 0.0
DEFAULT_WARNING_THRESHOLD = 80.0


class UserPreferences(BaseModel):
    """Budget limit alert settings. A limit of 0 means no limit is set."""

    budget_limit: float = Field(DEFAULT_BUDGET_LIMIT, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    warning_threshold: float = Field(
        DEFAULT_WARNING_THRESHOLD, ge=1, le=100, allow_inf_nan=False
    )
    alert_dismissed: bool = False


class PreferencesUpdateIn(BaseModel):
    # out-of-range values are accepted here and ignored when saving
    budget_limit: Optional[float] = Field(None, le=MAX_AMOUNT, allow_inf_nan=False)
    warning_threshold: Optional[float] = Field(None, allow_inf_nan=False)


class LimitAlertOut(BaseModel):
    level: Literal["none", "warning", "exceeded"]
    percent_used: float
    budget_limit: float
    total_expenses: float
    warning_threshold: float
    message: Optional[str] = None
