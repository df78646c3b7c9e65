from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles used by the visibility filter."""

    ADMIN = "admin"
    TEACHER = "teacher"
    AUXILIARY = "auxiliary"
    SUPERVISOR = "supervisor"
    SECRETARY = "secretary"


class Level(str, Enum):
    """School level a classroom belongs to."""

    INITIAL = "initial"
    PRIMARY = "primary"
    SECONDARY = "secondary"


class AttendanceStatus(str, Enum):
    """Daily attendance status of one student."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    JUSTIFIED = "JUSTIFIED"


class FamilyRelation(str, Enum):
    """Who attended a parent meeting on behalf of a student."""

    FATHER = "father"
    MOTHER = "mother"
    BOTH = "both"
    OTHER = "other"


class ReportRange(str, Enum):
    DAY = "day"
    WEEK = "week"
    BIMESTER = "bimester"
    SEMESTER = "semester"
    CUSTOM = "custom"


class Action(str, Enum):
    """Actions checked by the visibility filter."""

    RECORD_ATTENDANCE = "record_attendance"
    VIEW_REPORTS = "view_reports"
    MANAGE_MEETINGS = "manage_meetings"
    MANAGE_CLASSROOMS = "manage_classrooms"


class NavState(str, Enum):
    TODAY = "today"
    PAST_DATE = "past_date"
