from __future__ import annotations

from ...core.constants import PRESENT_EQUIVALENT
from ...core.enums import AttendanceStatus
from ...core.exceptions import ValidationError
from ..model import ObservationValue
from .base import ObservationKind


class DailyAttendanceKind(ObservationKind):
    """Classroom attendance: one AttendanceStatus per student per day."""

    name = "daily"

    def validate(self, value: object) -> ObservationValue:
        if isinstance(value, AttendanceStatus):
            return value
        if isinstance(value, str):
            try:
                return AttendanceStatus(value.strip().upper())
            except ValueError:
                pass
        raise ValidationError(f"Invalid attendance status: {value!r}")

    def present_value(self) -> ObservationValue:
        return AttendanceStatus.PRESENT

    def is_present_equivalent(self, value: ObservationValue) -> bool:
        return value in PRESENT_EQUIVALENT
