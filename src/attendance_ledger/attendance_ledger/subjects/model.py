from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Union

from ..core.enums import Level


@dataclass(frozen=True)
class Classroom:
    """Subject of daily attendance."""

    classroom_id: str
    name: str
    level: Level
    student_count: int = 0
    active: bool = True

    @property
    def subject_id(self) -> str:
        return self.classroom_id


@dataclass(frozen=True)
class Meeting:
    """Subject of parent-meeting attendance, owned by one classroom."""

    meeting_id: str
    title: str
    meeting_date: date
    classroom_id: str
    level: Level
    classroom_name: str = ""

    @property
    def subject_id(self) -> str:
        return self.meeting_id


Subject = Union[Classroom, Meeting]
