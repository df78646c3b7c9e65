from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import month_bounds
from ..core.enums import NavState
from ..ledger.repository import RecordStore
from ..ledger.service import ensure_not_future
from ..meetings.repository import MeetingRepository


class DateNavigationIndex:
    """Which dates of a month already hold observations or meetings.

    Recomputed on every call; callers keep the result only while a month
    view is open.
    """

    def __init__(self, store: RecordStore, meetings: Optional[MeetingRepository] = None):
        self._store = store
        self._meetings = meetings

    async def marked_dates(self, subject_id: str, year: int, month: int) -> set[date]:
        start, end = month_bounds(year, month)
        return set(await self._store.list_marked_dates(subject_id, start=start, end=end))

    async def meeting_dates(self, classroom_id: str, year: int, month: int) -> set[date]:
        if self._meetings is None:
            return set()
        start, end = month_bounds(year, month)
        meetings = await self._meetings.list_meetings(classroom_ids=[classroom_id], start=start, end=end)
        return {m.meeting_date for m in meetings}


@dataclass
class DayCursor:
    """Selected day of an attendance sheet.

    Starts on today. Moving back or picking a past date enters PAST_DATE;
    moving forward never passes today; "return to today" also resets the
    calendar month.
    """

    today: date
    selected: Optional[date] = None
    calendar_year: int = 0
    calendar_month: int = 0

    def __post_init__(self) -> None:
        if self.selected is None:
            self.selected = self.today
        ensure_not_future(self.selected, self.today)
        if not self.calendar_year:
            self.calendar_year, self.calendar_month = self.selected.year, self.selected.month

    @property
    def state(self) -> NavState:
        return NavState.TODAY if self.selected == self.today else NavState.PAST_DATE

    def _select(self, day: date) -> None:
        self.selected = day
        self.calendar_year, self.calendar_month = day.year, day.month

    def previous_day(self) -> date:
        self._select(self.selected - timedelta(days=1))
        return self.selected

    def next_day(self) -> date:
        nxt = self.selected + timedelta(days=1)
        if nxt <= self.today:
            self._select(nxt)
        return self.selected

    def pick(self, day: date) -> date:
        ensure_not_future(day, self.today)
        self._select(day)
        return self.selected

    def return_to_today(self) -> date:
        self._select(self.today)
        return self.selected

    def show_month(self, year: int, month: int) -> None:
        """Browse the calendar without changing the selected day."""
        month_bounds(year, month)
        self.calendar_year, self.calendar_month = int(year), int(month)
