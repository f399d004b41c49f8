"""
Fixed holiday calendar used to block appointment booking.

The holiday list is a set of (day, month) pairs; it is expanded into concrete
dates once per calendar year and cached.
"""

from datetime import date
from functools import lru_cache
from typing import FrozenSet, Iterable, Optional, Tuple

from clinica.core.config import HOLIDAYS

SUNDAY_MESSAGE = "Appointments cannot be booked on Sundays."
HOLIDAY_MESSAGE = "Appointments cannot be booked on holidays."


def _expand(year: int, pairs: Iterable[Tuple[int, int]]) -> FrozenSet[date]:
    return frozenset(date(year, month, day) for day, month in pairs)


@lru_cache(maxsize=None)
def holidays_for_year(year: int) -> FrozenSet[date]:
    return _expand(year, HOLIDAYS)


def is_sunday(day: date) -> bool:
    return day.weekday() == 6


def is_holiday(day: date) -> bool:
    return day in holidays_for_year(day.year)


def non_bookable_reason(day: date) -> Optional[str]:
    """Return the rejection message for ``day``, or None when it can be booked."""
    if is_sunday(day):
        return SUNDAY_MESSAGE
    if is_holiday(day):
        return HOLIDAY_MESSAGE
    return None
