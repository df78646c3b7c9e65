from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..people.model import Assignment, StaffMember


class StaffRepository(Protocol):
    """Async access to staff members and their course assignments."""

    async def list_active_staff(self) -> Sequence[StaffMember]:
        """Active staff ordered by name, each with its assignments."""

        raise NotImplementedError

    async def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        """Active staff member with assignments; None when unknown or inactive."""

        raise NotImplementedError

    async def replace_assignments(self, staff_id: str, assignments: Sequence[Assignment]) -> None:
        """Delete the member's assignments and insert `assignments`, in one transaction."""

        raise NotImplementedError
