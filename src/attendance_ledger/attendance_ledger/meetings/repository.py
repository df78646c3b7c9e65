from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..subjects.model import Meeting


class MeetingRepository(Protocol):
    async def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        raise NotImplementedError

    async def list_meetings(
        self,
        *,
        classroom_ids: Optional[Sequence[str]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Meeting]:
        """Meetings ordered by date, newest first.

        `classroom_ids=None` means every classroom.
        """

        raise NotImplementedError

    async def create_meeting(self, *, classroom_id: str, title: str, meeting_date: date) -> str:
        """Returns meeting_id."""

        raise NotImplementedError

    async def delete_meeting(self, *, meeting_id: str) -> bool:
        """Attendance rows of the meeting go with it (store cascade)."""

        raise NotImplementedError
