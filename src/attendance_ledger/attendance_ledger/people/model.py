from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import Level, Role


@dataclass(frozen=True)
class Student:
    """Domain entity: a student enrolled in a classroom."""

    student_id: str
    full_name: str
    dni: Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    """Either a single classroom or a whole level."""

    classroom_id: Optional[str] = None
    level: Optional[Level] = None


@dataclass(frozen=True)
class StaffMember:
    """Domain entity: a staff member.

    Note: Plain data object; the visibility filter reads role and assignments.
    """

    staff_id: str
    full_name: str
    role: Role
    assignments: tuple[Assignment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionContext:
    """Who is acting and when; passed explicitly into every core operation."""

    actor: StaffMember
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()
