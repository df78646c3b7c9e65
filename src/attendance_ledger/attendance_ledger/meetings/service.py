from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Action, FamilyRelation
from ..core.exceptions import ValidationError
from ..ledger.repository import RecordStore
from ..people.model import SessionContext
from ..people.visibility import require_permission, visible_subjects
from ..reports import calculator
from ..reports.model import ConsolidatedMeetingSummary, MeetingSummary
from ..subjects.model import Classroom, Meeting
from ..subjects.repository import SubjectRepository
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


class MeetingService:
    """Use case: schedule parent meetings and summarize who attended."""

    def __init__(self, meetings: MeetingRepository, store: RecordStore, subjects: SubjectRepository):
        self._meetings = meetings
        self._store = store
        self._subjects = subjects

    async def get_meeting(self, ctx: SessionContext, meeting_id: str) -> Meeting:
        meeting = await self._meetings.get_meeting(meeting_id)
        if not meeting:
            raise ValidationError("Meeting does not exist")
        require_permission(ctx.actor, Action.RECORD_ATTENDANCE, meeting)
        return meeting

    async def schedule_meeting(self, ctx: SessionContext, classroom: Classroom, *, title: str, meeting_date: date) -> Meeting:
        require_permission(ctx.actor, Action.MANAGE_MEETINGS, classroom)
        title = require_non_empty(title, "Meeting title")

        meeting_id = await self._meetings.create_meeting(
            classroom_id=classroom.classroom_id,
            title=title,
            meeting_date=meeting_date,
        )
        logger.info("Scheduled meeting %s for classroom %s on %s", meeting_id, classroom.classroom_id, meeting_date)
        return Meeting(
            meeting_id=meeting_id,
            title=title,
            meeting_date=meeting_date,
            classroom_id=classroom.classroom_id,
            level=classroom.level,
            classroom_name=classroom.name,
        )

    async def cancel_meeting(self, ctx: SessionContext, meeting: Meeting) -> None:
        require_permission(ctx.actor, Action.MANAGE_MEETINGS, meeting)
        if not await self._meetings.delete_meeting(meeting_id=meeting.meeting_id):
            raise ValidationError("Meeting could not be deleted")
        logger.info("Cancelled meeting %s", meeting.meeting_id)

    async def list_meetings(
        self,
        ctx: SessionContext,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Meeting]:
        meetings = await self._meetings.list_meetings(start=start, end=end)
        return visible_subjects(ctx.actor, list(meetings))

    async def meeting_summary(self, ctx: SessionContext, meeting: Meeting) -> MeetingSummary:
        require_permission(ctx.actor, Action.VIEW_REPORTS, meeting)

        rows = await self._store.fetch(meeting.meeting_id, start=meeting.meeting_date, end=meeting.meeting_date)
        students = await self._subjects.list_persons_for_subject(meeting.classroom_id)

        # students who left the classroom still have rows; count the current roster only
        roster = {s.student_id for s in students}
        attended = [o for o in rows if o.value.attended and o.person_id in roster]
        return MeetingSummary(
            meeting_id=meeting.meeting_id,
            title=meeting.title,
            meeting_date=meeting.meeting_date,
            classroom_id=meeting.classroom_id,
            attended=len(attended),
            total_students=len(students),
            percentage=calculator.percentage(len(attended), len(students)),
            by_relation=calculator.relation_counts(attended),
        )

    async def consolidated_summary(self, ctx: SessionContext, meetings: Sequence[Meeting]) -> ConsolidatedMeetingSummary:
        """Totals over several meetings, one store round-trip at a time."""

        summaries = []
        for m in meetings:
            summaries.append(await self.meeting_summary(ctx, m))

        attended = sum(s.attended for s in summaries)
        total_students = sum(s.total_students for s in summaries)
        by_relation = {r: sum(s.by_relation.get(r, 0) for s in summaries) for r in FamilyRelation}

        return ConsolidatedMeetingSummary(
            total_meetings=len(summaries),
            total_students=total_students,
            attended=attended,
            percentage=calculator.percentage(attended, total_students),
            by_relation=by_relation,
            relation_shares={r: calculator.percentage(n, attended) for r, n in by_relation.items()},
        )
