"""Civil calendar helpers.

Month boundaries, "today" and week windows are read in one configured civil
timezone rather than the executing host's local zone, so every user sees the
same month roll over at the same instant.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

WEEKDAY_INDEX = {"monday": 0, "sunday": 6, "saturday": 5}


@dataclass(frozen=True, order=True)
class Period:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError("month must be between 1 and 12")

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def shift(self, months: int) -> "Period":
        index = self.year * 12 + (self.month - 1) + months
        return Period(year=index // 12, month=index % 12 + 1)

    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def civil_now(tz_name: str, now: Optional[datetime] = None) -> datetime:
    """Current instant expressed in the civil timezone.

    A naive ``now`` is taken to be UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name))


def civil_today(tz_name: str, now: Optional[datetime] = None) -> date:
    return civil_now(tz_name, now).date()


def current_period(tz_name: str, now: Optional[datetime] = None) -> Period:
    local = civil_now(tz_name, now)
    return Period(year=local.year, month=local.month)


def period_of(d: date) -> Period:
    """Period from a calendar date's own components (no timezone involved)."""
    return Period(year=d.year, month=d.month)


def resolve_period(
    tz_name: str,
    month: Optional[int] = None,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Period:
    """Explicit month/year where given, falling back to the current civil period."""
    current = current_period(tz_name, now)
    return Period(
        year=year if year is not None else current.year,
        month=month if month is not None else current.month,
    )


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    p = Period(year=year, month=month)
    return p.start, p.end


def week_bounds(day: date, week_start: str = "saturday") -> Tuple[date, date]:
    first = WEEKDAY_INDEX[week_start]
    start = day - timedelta(days=(day.weekday() - first) % 7)
    return start, start + timedelta(days=6)


def recent_periods(period: Period, count: int) -> List[Period]:
    """The ``count`` periods ending at ``period``, oldest first."""
    return [period.shift(-i) for i in range(count - 1, -1, -1)]


def each_day(start: date, end: date) -> List[date]:
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


__all__ = [
    "Period",
    "civil_now",
    "civil_today",
    "current_period",
    "period_of",
    "resolve_period",
    "month_bounds",
    "week_bounds",
    "recent_periods",
    "each_day",
]
