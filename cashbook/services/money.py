"""Money / rounding helpers.

Centralized so analytics, reports and alerts use identical rounding semantics.
Non-finite values (an overflowed sum) pass through unrounded.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP

# Beyond this a float carries no fractional digits worth rounding, and the
# decimal context (28 digits) can no longer quantize it.
_EXACT_LIMIT = 1e15


def _quantize(value: float, exp: str) -> float:
    if not math.isfinite(value) or abs(value) >= _EXACT_LIMIT:
        return value
    return float(Decimal(str(value)).quantize(Decimal(exp), rounding=ROUND_HALF_UP))


def round1(value: float) -> float:
    return _quantize(value, "0.1")


def round2(value: float) -> float:
    return _quantize(value, "0.01")


def format_currency(value: float, symbol: str = "৳") -> str:
    """Whole-unit display amount, e.g. ``৳1,250`` or ``-৳300``."""
    if not math.isfinite(value):
        return f"{symbol}{value}"
    whole = int(_quantize(value, "1"))
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"
