from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from cashbook.services import periods as p
from cashbook.services.money import format_currency, round1, round2


def test_current_period_uses_civil_timezone() -> None:
    # 18:30 UTC on Jan 31 is already Feb 1 in Dhaka (UTC+6)
    now = datetime(2024, 1, 31, 18, 30, tzinfo=timezone.utc)
    assert p.current_period("Asia/Dhaka", now) == p.Period(2024, 2)
    assert p.current_period("UTC", now) == p.Period(2024, 1)
    assert p.civil_today("Asia/Dhaka", now) == date(2024, 2, 1)


def test_naive_now_is_treated_as_utc() -> None:
    naive = datetime(2023, 12, 31, 19, 0)
    assert p.current_period("Asia/Dhaka", naive) == p.Period(2024, 1)


def test_resolve_period_prefers_explicit_values() -> None:
    now = datetime(2024, 5, 10, tzinfo=timezone.utc)
    assert p.resolve_period("Asia/Dhaka", month=2, year=2023, now=now) == p.Period(2023, 2)
    assert p.resolve_period("Asia/Dhaka", month=2, now=now) == p.Period(2024, 2)
    assert p.resolve_period("Asia/Dhaka", now=now) == p.Period(2024, 5)


def test_period_validation_and_bounds() -> None:
    with pytest.raises(ValueError):
        p.Period(2024, 13)
    assert p.month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert p.Period(2023, 12).key() == "2023-12"
    assert p.period_of(date(2024, 7, 15)) == p.Period(2024, 7)


def test_recent_periods_cross_year_boundary() -> None:
    got = p.recent_periods(p.Period(2024, 2), 6)
    assert [x.key() for x in got] == [
        "2023-09",
        "2023-10",
        "2023-11",
        "2023-12",
        "2024-01",
        "2024-02",
    ]


def test_week_bounds_start_day() -> None:
    friday = date(2024, 5, 10)
    assert p.week_bounds(friday) == (date(2024, 5, 4), date(2024, 5, 10))
    assert p.week_bounds(friday, "monday") == (date(2024, 5, 6), date(2024, 5, 12))
    saturday = date(2024, 5, 4)
    assert p.week_bounds(saturday)[0] == saturday


def test_each_day_empty_when_reversed() -> None:
    assert p.each_day(date(2024, 5, 2), date(2024, 5, 1)) == []
    assert len(p.each_day(date(2024, 5, 1), date(2024, 5, 31))) == 31


def test_rounding_and_currency_format() -> None:
    assert round1(42.85) == 42.9
    assert round2(0.125) == 0.13
    assert format_currency(1250) == "৳1,250"
    assert format_currency(-300, "Tk ") == "-Tk 300"


def test_rounding_tolerates_huge_and_infinite_sums() -> None:
    assert round2(float("inf")) == float("inf")
    assert round1(1e308) == 1e308
    assert format_currency(1e20) == "৳100,000,000,000,000,000,000"
    assert format_currency(float("inf")) == "৳inf"
