from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import WEEKEND_DAYS
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}") from None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"Invalid month: {month!r}")
    last = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def school_days(start: date, end: date) -> list[date]:
    """Every date in [start, end] except Saturdays and Sundays."""
    return [d for d in iter_days(start, end) if d.weekday() not in WEEKEND_DAYS]
