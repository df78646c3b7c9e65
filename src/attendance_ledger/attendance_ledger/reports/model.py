from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import FamilyRelation, Level, ReportRange


@dataclass(frozen=True)
class ReportQuery:
    report_range: ReportRange
    start_date: date
    end_date: Optional[date] = None


@dataclass(frozen=True)
class DayStats:
    present_equivalent: int
    absent_equivalent: int
    percentage: float


@dataclass(frozen=True)
class PersonCompletion:
    person_id: str
    days_present: int
    days_recorded: int
    completion: float


@dataclass(frozen=True)
class RangeStats:
    present_equivalent: int
    absent_equivalent: int
    distinct_dates: int
    enrolled: int
    percentage: float
    persons: tuple[PersonCompletion, ...] = ()


@dataclass(frozen=True)
class ClassroomReport:
    """Read-model for one classroom over a report window (never persisted)."""

    classroom_id: str
    name: str
    level: Level
    report_range: ReportRange
    start: date
    end: Optional[date]
    present_equivalent: int
    absent_equivalent: int
    percentage: float
    persons: tuple[PersonCompletion, ...] = ()


@dataclass(frozen=True)
class BimesterRow:
    person_id: str
    full_name: str
    letters: dict[date, str]
    completion: float


@dataclass(frozen=True)
class BimesterSheet:
    classroom_id: str
    start: date
    end: date
    days: list[date]
    rows: list[BimesterRow]


@dataclass(frozen=True)
class MeetingSummary:
    meeting_id: str
    title: str
    meeting_date: date
    classroom_id: str
    attended: int
    total_students: int
    percentage: float
    by_relation: dict[FamilyRelation, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ConsolidatedMeetingSummary:
    total_meetings: int
    total_students: int
    attended: int
    percentage: float
    by_relation: dict[FamilyRelation, int]
    relation_shares: dict[FamilyRelation, float]
