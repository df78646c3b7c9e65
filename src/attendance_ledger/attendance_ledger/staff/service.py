from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..core.enums import Action, Level
from ..core.exceptions import NotAuthorized, ValidationError
from ..people.model import Assignment, SessionContext, StaffMember
from ..people.visibility import require_permission
from ..subjects.repository import SubjectRepository
from .repository import StaffRepository

logger = logging.getLogger(__name__)


class StaffService:
    """Use case: who works here and which classrooms or levels they cover.

    Assignments saved here are what the visibility filter reads on the
    next request of that staff member.
    """

    def __init__(self, staff: StaffRepository, subjects: SubjectRepository):
        self._staff = staff
        self._subjects = subjects

    async def acting_member(self, staff_id: str) -> StaffMember:
        """Staff member behind an authenticated session, with current assignments."""

        member = await self._staff.get_staff(staff_id)
        if not member:
            raise NotAuthorized("Staff member is unknown or inactive")
        return member

    async def list_staff_with_assignments(self, ctx: SessionContext) -> list[StaffMember]:
        require_permission(ctx.actor, Action.MANAGE_CLASSROOMS)
        return list(await self._staff.list_active_staff())

    async def save_assignments(
        self,
        ctx: SessionContext,
        staff_id: str,
        classroom_ids: Iterable[str],
        *,
        levels: Sequence[Level] = (),
    ) -> StaffMember:
        """Replace every assignment of one staff member."""

        require_permission(ctx.actor, Action.MANAGE_CLASSROOMS)

        member = await self._staff.get_staff(staff_id)
        if not member:
            raise ValidationError("Staff member does not exist")

        known = {c.classroom_id for c in await self._subjects.list_subjects(active_only=False)}
        wanted = list(dict.fromkeys(str(cid) for cid in classroom_ids))
        unknown = [cid for cid in wanted if cid not in known]
        if unknown:
            raise ValidationError(f"Unknown classroom(s): {', '.join(unknown)}")

        assignments = [Assignment(classroom_id=cid) for cid in wanted]
        assignments += [Assignment(level=lvl) for lvl in dict.fromkeys(levels)]

        await self._staff.replace_assignments(member.staff_id, assignments)
        logger.info(
            "Assignments of staff=%s set to %d classroom(s) and %d level(s) by=%s",
            member.staff_id,
            len(wanted),
            len(assignments) - len(wanted),
            ctx.actor.staff_id,
        )
        return StaffMember(
            staff_id=member.staff_id,
            full_name=member.full_name,
            role=member.role,
            assignments=tuple(assignments),
        )
