from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .ledger.kinds.daily_kind import DailyAttendanceKind
from .ledger.kinds.meeting_kind import MeetingAttendanceKind
from .ledger.mysql_daily_record_store import MySQLDailyRecordStore
from .ledger.repository import RecordStore
from .ledger.service import AttendanceLedger
from .meetings.mysql_meeting_record_store import MySQLMeetingRecordStore
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.repository import MeetingRepository
from .meetings.service import MeetingService
from .navigation.service import DateNavigationIndex
from .reports.service import AggregationEngine
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import StaffService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository


@dataclass(frozen=True)
class Container:
    subjects_repo: SubjectRepository
    meetings_repo: MeetingRepository
    staff_repo: StaffRepository
    daily_store: RecordStore
    meeting_store: RecordStore

    daily_ledger: AttendanceLedger
    meeting_ledger: AttendanceLedger
    aggregation: AggregationEngine
    meeting_service: MeetingService
    staff_service: StaffService
    daily_navigation: DateNavigationIndex
    meeting_navigation: DateNavigationIndex


def wire(
    *,
    subjects_repo: SubjectRepository,
    meetings_repo: MeetingRepository,
    staff_repo: StaffRepository,
    daily_store: RecordStore,
    meeting_store: RecordStore,
) -> Container:
    """Assemble services over any repository implementations."""

    daily_kind = DailyAttendanceKind()
    meeting_kind = MeetingAttendanceKind()

    return Container(
        subjects_repo=subjects_repo,
        meetings_repo=meetings_repo,
        staff_repo=staff_repo,
        daily_store=daily_store,
        meeting_store=meeting_store,
        daily_ledger=AttendanceLedger(daily_store, daily_kind),
        meeting_ledger=AttendanceLedger(meeting_store, meeting_kind),
        aggregation=AggregationEngine(daily_store, subjects_repo, daily_kind),
        meeting_service=MeetingService(meetings_repo, meeting_store, subjects_repo),
        staff_service=StaffService(staff_repo, subjects_repo),
        daily_navigation=DateNavigationIndex(daily_store),
        meeting_navigation=DateNavigationIndex(meeting_store, meetings_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        subjects_repo=MySQLSubjectRepository(conn),
        meetings_repo=MySQLMeetingRepository(conn),
        staff_repo=MySQLStaffRepository(conn),
        daily_store=MySQLDailyRecordStore(conn),
        meeting_store=MySQLMeetingRecordStore(conn),
    )
