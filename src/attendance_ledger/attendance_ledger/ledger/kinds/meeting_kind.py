from __future__ import annotations

from ...common.validators import require_non_empty
from ...core.enums import FamilyRelation
from ...core.exceptions import ValidationError
from ..model import MeetingMark, ObservationValue
from .base import ObservationKind


class MeetingAttendanceKind(ObservationKind):
    """Parent-meeting attendance: attended flag plus who came."""

    name = "meeting"

    def validate(self, value: object) -> ObservationValue:
        if not isinstance(value, MeetingMark):
            raise ValidationError(f"Invalid meeting attendance: {value!r}")

        if not value.attended:
            return MeetingMark(attended=False)

        relation = value.relation or FamilyRelation.FATHER
        if relation == FamilyRelation.BOTH:
            # legacy rows only: still decoded and counted, never written
            raise ValidationError("Choose father, mother or another family member")
        if relation == FamilyRelation.OTHER:
            name = require_non_empty(value.other_name, "Family member name")
            return MeetingMark(attended=True, relation=relation, other_name=name)

        return MeetingMark(attended=True, relation=relation)

    def present_value(self) -> ObservationValue:
        return MeetingMark(attended=True, relation=FamilyRelation.FATHER)

    def is_present_equivalent(self, value: ObservationValue) -> bool:
        return isinstance(value, MeetingMark) and value.attended
