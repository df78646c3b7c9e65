from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import school_days
from ..core.constants import STATUS_LETTERS, WEEK_DAYS
from ..core.enums import Action, ReportRange
from ..core.exceptions import ValidationError
from ..ledger.kinds.base import ObservationKind
from ..ledger.repository import RecordStore
from ..people.model import SessionContext
from ..people.visibility import require_permission, visible_subjects
from ..subjects.model import Classroom
from ..subjects.repository import SubjectRepository
from . import calculator
from .model import BimesterRow, BimesterSheet, ClassroomReport, ReportQuery

logger = logging.getLogger(__name__)


def resolve_window(query: ReportQuery) -> tuple[date, Optional[date]]:
    """Inclusive [start, end] window of a report query.

    Day -> the start date only. Custom -> both bounds, required.
    Week -> end_date if given, else seven days from start.
    Bimester/Semester -> end_date if given, else open-ended (end=None).
    """

    start = query.start_date
    rng = query.report_range

    if rng == ReportRange.DAY:
        return start, start

    if rng == ReportRange.CUSTOM:
        if query.end_date is None:
            raise ValidationError("Custom range needs an end date")
        end: Optional[date] = query.end_date
    elif rng == ReportRange.WEEK:
        end = query.end_date or start + timedelta(days=WEEK_DAYS - 1)
    else:
        end = query.end_date

    if end is not None and end < start:
        raise ValidationError("End date is before start date")
    return start, end


class AggregationEngine:
    """Range statistics over the observations of a record store.

    Nothing here is cached: every call reflects the store at query time.
    """

    def __init__(self, store: RecordStore, subjects: SubjectRepository, kind: ObservationKind):
        self._store = store
        self._subjects = subjects
        self._kind = kind

    @staticmethod
    def reportable_days(start: date, end: date) -> list[date]:
        return school_days(start, end)

    async def classroom_report(
        self,
        ctx: SessionContext,
        classroom: Classroom,
        query: ReportQuery,
        *,
        with_roster: bool = True,
    ) -> ClassroomReport:
        require_permission(ctx.actor, Action.VIEW_REPORTS, classroom)
        start, end = resolve_window(query)

        rows = await self._store.fetch(classroom.classroom_id, start=start, end=end)
        roster: list[str] = []
        if with_roster:
            roster = [s.student_id for s in await self._subjects.list_persons_for_subject(classroom.classroom_id)]

        if query.report_range == ReportRange.DAY:
            stats = calculator.day_stats(rows, self._kind)
            persons = tuple(calculator.person_completions(rows, self._kind, roster=roster))
            present, absent, pct = stats.present_equivalent, stats.absent_equivalent, stats.percentage
        else:
            enrolled = len(roster) if with_roster else classroom.student_count
            stats = calculator.range_stats(rows, self._kind, enrolled=enrolled, roster=roster)
            persons = stats.persons
            present, absent, pct = stats.present_equivalent, stats.absent_equivalent, stats.percentage

        return ClassroomReport(
            classroom_id=classroom.classroom_id,
            name=classroom.name,
            level=classroom.level,
            report_range=query.report_range,
            start=start,
            end=end,
            present_equivalent=present,
            absent_equivalent=absent,
            percentage=pct,
            persons=persons,
        )

    async def school_overview(self, ctx: SessionContext, query: ReportQuery) -> list[ClassroomReport]:
        """One report per active classroom visible to the acting staff member.

        Classrooms are fetched one after the other; enrolment comes from the
        classroom's student count.
        """

        classrooms = visible_subjects(ctx.actor, await self._subjects.list_subjects(active_only=True))
        out: list[ClassroomReport] = []
        for c in classrooms:
            out.append(await self.classroom_report(ctx, c, query, with_roster=False))
        logger.debug("Built overview of %d classrooms for %s", len(out), ctx.actor.staff_id)
        return out

    async def bimester_sheet(self, ctx: SessionContext, classroom: Classroom, *, start: date, end: date) -> BimesterSheet:
        require_permission(ctx.actor, Action.VIEW_REPORTS, classroom)
        if end < start:
            raise ValidationError("End date is before start date")

        rows = await self._store.fetch(classroom.classroom_id, start=start, end=end)
        students = await self._subjects.list_persons_for_subject(classroom.classroom_id)

        letters: dict[str, dict[date, str]] = {}
        for o in rows:
            letters.setdefault(o.person_id, {})[o.on_date] = STATUS_LETTERS.get(o.value, "P")

        completions = {
            p.person_id: p.completion
            for p in calculator.person_completions(rows, self._kind, roster=[s.student_id for s in students])
        }

        return BimesterSheet(
            classroom_id=classroom.classroom_id,
            start=start,
            end=end,
            days=self.reportable_days(start, end),
            rows=[
                BimesterRow(
                    person_id=s.student_id,
                    full_name=s.full_name,
                    letters=letters.get(s.student_id, {}),
                    completion=completions.get(s.student_id, 0.0),
                )
                for s in students
            ],
        )
