from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..people.model import Student
from .model import Classroom


class SubjectRepository(Protocol):
    """Async read access to classrooms and their rosters."""

    async def list_subjects(self, *, active_only: bool = True) -> Sequence[Classroom]:
        raise NotImplementedError

    async def get_classroom(self, classroom_id: str) -> Optional[Classroom]:
        raise NotImplementedError

    async def list_persons_for_subject(self, classroom_id: str) -> Sequence[Student]:
        """Students enrolled in a classroom, ordered by name."""

        raise NotImplementedError
