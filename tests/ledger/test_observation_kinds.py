from __future__ import annotations

import pytest

from attendance_ledger.core.enums import AttendanceStatus, FamilyRelation
from attendance_ledger.core.exceptions import ValidationError
from attendance_ledger.ledger.kinds.daily_kind import DailyAttendanceKind
from attendance_ledger.ledger.kinds.meeting_kind import MeetingAttendanceKind
from attendance_ledger.ledger.model import MeetingMark


def test_daily_kind_accepts_enum_and_case_insensitive_text():
    kind = DailyAttendanceKind()

    assert kind.validate(AttendanceStatus.LATE) == AttendanceStatus.LATE
    assert kind.validate(" justified ") == AttendanceStatus.JUSTIFIED


@pytest.mark.parametrize("raw", ["HERE", 1, None, ""])
def test_daily_kind_rejects_unknown_values(raw):
    with pytest.raises(ValidationError):
        DailyAttendanceKind().validate(raw)


def test_daily_present_equivalence():
    kind = DailyAttendanceKind()

    assert kind.is_present_equivalent(AttendanceStatus.PRESENT)
    assert kind.is_present_equivalent(AttendanceStatus.LATE)
    assert not kind.is_present_equivalent(AttendanceStatus.ABSENT)
    assert not kind.is_present_equivalent(AttendanceStatus.JUSTIFIED)
    assert kind.present_value() == AttendanceStatus.PRESENT


def test_meeting_kind_defaults_relation_to_father():
    mark = MeetingAttendanceKind().validate(MeetingMark(attended=True))

    assert mark == MeetingMark(attended=True, relation=FamilyRelation.FATHER)


def test_meeting_kind_other_requires_name():
    kind = MeetingAttendanceKind()

    with pytest.raises(ValidationError):
        kind.validate(MeetingMark(attended=True, relation=FamilyRelation.OTHER, other_name="  "))

    mark = kind.validate(MeetingMark(attended=True, relation=FamilyRelation.OTHER, other_name=" Tía Carmen "))
    assert mark.other_name == "Tía Carmen"


def test_meeting_kind_not_attended_drops_relation():
    mark = MeetingAttendanceKind().validate(MeetingMark(attended=False, relation=FamilyRelation.MOTHER, other_name="x"))

    assert mark == MeetingMark(attended=False)
    assert not MeetingAttendanceKind().is_present_equivalent(mark)


def test_meeting_kind_rejects_daily_status():
    with pytest.raises(ValidationError):
        MeetingAttendanceKind().validate(AttendanceStatus.PRESENT)


def test_meeting_kind_rejects_legacy_both_relation():
    with pytest.raises(ValidationError):
        MeetingAttendanceKind().validate(MeetingMark(attended=True, relation=FamilyRelation.BOTH))

    assert MeetingAttendanceKind().is_present_equivalent(MeetingMark(attended=True, relation=FamilyRelation.BOTH))
