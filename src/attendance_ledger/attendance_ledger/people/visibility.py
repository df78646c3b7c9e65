from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from ..core.constants import UNRESTRICTED_ROLES
from ..core.enums import Action, Role
from ..core.exceptions import NotAuthorized
from ..subjects.model import Subject
from .model import StaffMember

S = TypeVar("S", bound=Subject)


def can_see(person: StaffMember, subject: Subject) -> bool:
    """Admins and supervisors see everything; others need a matching assignment.

    A meeting is matched through its owning classroom.
    """

    if person.role in UNRESTRICTED_ROLES:
        return True
    return any(
        (a.classroom_id is not None and a.classroom_id == subject.classroom_id)
        or (a.level is not None and a.level == subject.level)
        for a in person.assignments
    )


def visible_subjects(person: StaffMember, subjects: Sequence[S]) -> list[S]:
    return [s for s in subjects if can_see(person, s)]


def is_permitted(person: StaffMember, action: Action, subject: Optional[Subject] = None) -> bool:
    if action == Action.MANAGE_CLASSROOMS:
        return person.role == Role.ADMIN
    if subject is None:
        return False
    return can_see(person, subject)


def require_permission(person: StaffMember, action: Action, subject: Optional[Subject] = None) -> None:
    if not is_permitted(person, action, subject):
        raise NotAuthorized(f"{person.full_name} is not allowed to {action.value.replace('_', ' ')}")
