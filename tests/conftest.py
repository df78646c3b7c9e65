from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest

from attendance_ledger.core.enums import Level, Role
from attendance_ledger.core.exceptions import StoreUnavailable
from attendance_ledger.ledger.model import Observation
from attendance_ledger.people.model import Assignment, SessionContext, StaffMember, Student
from attendance_ledger.subjects.model import Classroom, Meeting


class InMemoryRecordStore:
    """Record store keyed by (subject, person, date); last write wins."""

    def __init__(self):
        self.rows: dict[tuple[str, str, date], Observation] = {}
        self.write_calls = 0
        self.fail_next = False

    async def fetch(self, subject_id: str, *, start: date, end: Optional[date]) -> Sequence[Observation]:
        return sorted(
            (
                o
                for (sid, _, d), o in self.rows.items()
                if sid == subject_id and d >= start and (end is None or d <= end)
            ),
            key=lambda o: (o.on_date, o.person_id),
        )

    def _check_available(self) -> None:
        if self.fail_next:
            self.fail_next = False
            raise StoreUnavailable("connection lost")

    async def upsert(self, observations: Sequence[Observation]) -> None:
        self._check_available()
        self.write_calls += 1
        for o in observations:
            self.rows[(o.subject_id, o.person_id, o.on_date)] = o

    async def replace_set(self, subject_id: str, on_date: date, observations: Sequence[Observation]) -> None:
        self._check_available()
        self.write_calls += 1
        keep = {o.person_id for o in observations}
        for key in [k for k in self.rows if k[0] == subject_id and k[2] == on_date and k[1] not in keep]:
            del self.rows[key]
        for o in observations:
            self.rows[(o.subject_id, o.person_id, o.on_date)] = o

    async def list_marked_dates(self, subject_id: str, *, start: date, end: date) -> set[date]:
        return {d for (sid, _, d) in self.rows if sid == subject_id and start <= d <= end}


@dataclass
class InMemorySubjects:
    classrooms: dict[str, Classroom] = field(default_factory=dict)
    students: dict[str, list[Student]] = field(default_factory=dict)

    async def list_subjects(self, *, active_only: bool = True) -> Sequence[Classroom]:
        return [c for c in self.classrooms.values() if c.active or not active_only]

    async def get_classroom(self, classroom_id: str) -> Optional[Classroom]:
        return self.classrooms.get(classroom_id)

    async def list_persons_for_subject(self, classroom_id: str) -> Sequence[Student]:
        return list(self.students.get(classroom_id, []))


class InMemoryMeetings:
    def __init__(self, subjects: InMemorySubjects):
        self._subjects = subjects
        self.meetings: dict[str, Meeting] = {}
        self._next_id = 1

    async def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        return self.meetings.get(meeting_id)

    async def list_meetings(
        self,
        *,
        classroom_ids: Optional[Sequence[str]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Meeting]:
        out = [
            m
            for m in self.meetings.values()
            if (classroom_ids is None or m.classroom_id in classroom_ids)
            and (start is None or m.meeting_date >= start)
            and (end is None or m.meeting_date <= end)
        ]
        return sorted(out, key=lambda m: m.meeting_date, reverse=True)

    async def create_meeting(self, *, classroom_id: str, title: str, meeting_date: date) -> str:
        classroom = self._subjects.classrooms[classroom_id]
        meeting_id = str(self._next_id)
        self._next_id += 1
        self.meetings[meeting_id] = Meeting(
            meeting_id=meeting_id,
            title=title,
            meeting_date=meeting_date,
            classroom_id=classroom_id,
            level=classroom.level,
            classroom_name=classroom.name,
        )
        return meeting_id

    async def delete_meeting(self, *, meeting_id: str) -> bool:
        return self.meetings.pop(meeting_id, None) is not None


class InMemoryStaff:
    def __init__(self, members: Sequence[StaffMember] = (), inactive: Sequence[str] = ()):
        self.members: dict[str, StaffMember] = {m.staff_id: m for m in members}
        self.inactive = set(inactive)

    async def list_active_staff(self) -> Sequence[StaffMember]:
        active = [m for m in self.members.values() if m.staff_id not in self.inactive]
        return sorted(active, key=lambda m: m.full_name)

    async def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        if staff_id in self.inactive:
            return None
        return self.members.get(staff_id)

    async def replace_assignments(self, staff_id: str, assignments: Sequence[Assignment]) -> None:
        self.members[staff_id] = replace(self.members[staff_id], assignments=tuple(assignments))


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 20, 9, 0, 0)


@pytest.fixture
def classrooms() -> dict[str, Classroom]:
    return {
        "C1": Classroom(classroom_id="C1", name="1ro Primaria A", level=Level.PRIMARY, student_count=4),
        "C2": Classroom(classroom_id="C2", name="2do Primaria B", level=Level.PRIMARY, student_count=2),
        "C3": Classroom(classroom_id="C3", name="Inicial 4 años", level=Level.INITIAL, student_count=2),
        "C4": Classroom(classroom_id="C4", name="1ro Secundaria", level=Level.SECONDARY, student_count=0),
    }


@pytest.fixture
def subjects_repo(classrooms) -> InMemorySubjects:
    return InMemorySubjects(
        classrooms=dict(classrooms),
        students={
            "C1": [
                Student("S1", "Alvarez, Ana"),
                Student("S2", "Benites, Bruno"),
                Student("S3", "Castro, Carla"),
                Student("S4", "Diaz, Diego"),
            ],
            "C2": [Student("S5", "Espinoza, Elena"), Student("S6", "Flores, Fabio")],
            "C3": [Student("S7", "Gomez, Gabriel"), Student("S8", "Huaman, Hilda")],
        },
    )


@pytest.fixture
def daily_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def meeting_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def meetings_repo(subjects_repo) -> InMemoryMeetings:
    return InMemoryMeetings(subjects_repo)


@pytest.fixture
def admin() -> StaffMember:
    return StaffMember(staff_id="1", full_name="Rosa Admin", role=Role.ADMIN)


@pytest.fixture
def teacher_c1() -> StaffMember:
    return StaffMember(
        staff_id="7",
        full_name="Luis Tutor",
        role=Role.TEACHER,
        assignments=(Assignment(classroom_id="C1"),),
    )


@pytest.fixture
def other_teacher_c1() -> StaffMember:
    return StaffMember(
        staff_id="8",
        full_name="Marta Tutora",
        role=Role.TEACHER,
        assignments=(Assignment(classroom_id="C1"),),
    )


@pytest.fixture
def auxiliary_initial() -> StaffMember:
    return StaffMember(
        staff_id="9",
        full_name="Pedro Auxiliar",
        role=Role.AUXILIARY,
        assignments=(Assignment(level=Level.INITIAL),),
    )


@pytest.fixture
def make_ctx(fixed_now):
    def _make(actor: StaffMember, now: Optional[datetime] = None) -> SessionContext:
        return SessionContext(actor=actor, now=now or fixed_now)

    return _make


@pytest.fixture
def staff_repo(admin, teacher_c1, other_teacher_c1, auxiliary_initial) -> InMemoryStaff:
    return InMemoryStaff([admin, teacher_c1, other_teacher_c1, auxiliary_initial])
