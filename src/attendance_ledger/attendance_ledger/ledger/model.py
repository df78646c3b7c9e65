from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import AttendanceStatus, FamilyRelation


@dataclass(frozen=True)
class MeetingMark:
    """Value of a parent-meeting observation."""

    attended: bool
    relation: Optional[FamilyRelation] = None
    other_name: Optional[str] = None


ObservationValue = Union[AttendanceStatus, MeetingMark]


@dataclass(frozen=True)
class Observation:
    """One presence fact for one person, on one subject, on one date."""

    subject_id: str
    person_id: str
    on_date: date
    value: ObservationValue
    note: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_by_name: Optional[str] = None
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True)
class Provenance:
    recorded_by: Optional[str]
    recorded_by_name: Optional[str]
    recorded_at: datetime


@dataclass
class ObservationSet:
    """All observations sharing one (subject, date), keyed by person.

    `provenance` is None until the set has been saved at least once.
    """

    subject_id: str
    on_date: date
    entries: dict[str, Observation] = field(default_factory=dict)
    provenance: Optional[Provenance] = None

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def exists(self) -> bool:
        return self.provenance is not None

    def observations(self) -> list[Observation]:
        return list(self.entries.values())
