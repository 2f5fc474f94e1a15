from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TypeVar

D = TypeVar("D", bound=date)

_SATURDAY = 5


def is_business_day(day: date) -> bool:
    return day.weekday() < _SATURDAY


def add_business_days(day: D, n: int) -> D:
    """Step `abs(n)` weekdays from `day` in the direction of `n`.

    Walks one calendar day at a time and only counts Monday-Friday, so the
    result is always a weekday unless `n == 0` (input returned unchanged).
    Works on `date` and `datetime`; a datetime keeps its time of day.
    """
    step = timedelta(days=1 if n >= 0 else -1)
    remaining = abs(n)
    result = day
    while remaining > 0:
        result = result + step
        if is_business_day(result):
            remaining -= 1
    return result


def business_days_between(start: date, end: date) -> int:
    """Weekdays stepped over going from `start` to `end` (start excluded, end included).

    Negative when `end` is before `start`. Only calendar dates are compared.
    """
    start_day = as_calendar_date(start)
    end_day = as_calendar_date(end)
    if end_day == start_day:
        return 0
    sign = 1 if end_day > start_day else -1
    step = timedelta(days=sign)
    count = 0
    current = start_day
    while current != end_day:
        current = current + step
        if is_business_day(current):
            count += 1
    return sign * count


def as_calendar_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value
