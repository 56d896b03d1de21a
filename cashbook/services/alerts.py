"""Budget limit alert evaluation.

Levels:
  none     - no limit set, alert dismissed, or spend below the threshold
  warning  - spend at or above the warning threshold but below the limit
  exceeded - spend at or above the limit
"""

from __future__ import annotations

from cashbook.models.preferences import LimitAlertOut, UserPreferences
from cashbook.services.aggregator import percent_used
from cashbook.services.money import format_currency


def evaluate_limit_alert(
    total_expenses: float, prefs: UserPreferences, currency_symbol: str = "৳"
) -> LimitAlertOut:
    pct = percent_used(total_expenses, prefs.budget_limit)
    level = "none"
    message = None
    if prefs.budget_limit > 0 and not prefs.alert_dismissed:
        if pct >= 100:
            level = "exceeded"
            message = (
                f"Spending {format_currency(total_expenses, currency_symbol)} has exceeded "
                f"the budget limit of {format_currency(prefs.budget_limit, currency_symbol)}"
            )
        elif pct >= prefs.warning_threshold:
            level = "warning"
            message = f"You have used {round(pct)}% of your budget limit"
    return LimitAlertOut(
        level=level,
        percent_used=round(pct, 2),
        budget_limit=prefs.budget_limit,
        total_expenses=total_expenses,
        warning_threshold=prefs.warning_threshold,
        message=message,
    )


__all__ = ["evaluate_limit_alert"]
