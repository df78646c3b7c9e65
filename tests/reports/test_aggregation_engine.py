from __future__ import annotations

import asyncio
from datetime import date

import pytest

from attendance_ledger.core.enums import AttendanceStatus, ReportRange
from attendance_ledger.core.exceptions import NotAuthorized, ValidationError
from attendance_ledger.ledger.kinds.daily_kind import DailyAttendanceKind
from attendance_ledger.ledger.model import Observation
from attendance_ledger.reports.model import ReportQuery
from attendance_ledger.reports.service import AggregationEngine, resolve_window

P, L, A, J = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
    AttendanceStatus.ABSENT,
    AttendanceStatus.JUSTIFIED,
)


def _seed(store, classroom_id: str, on_date: date, marks: dict) -> None:
    for pid, status in marks.items():
        store.rows[(classroom_id, pid, on_date)] = Observation(
            subject_id=classroom_id, person_id=pid, on_date=on_date, value=status
        )


@pytest.fixture
def engine(daily_store, subjects_repo) -> AggregationEngine:
    return AggregationEngine(daily_store, subjects_repo, DailyAttendanceKind())


def test_resolve_window_day_is_single_date():
    assert resolve_window(ReportQuery(ReportRange.DAY, date(2024, 3, 1), date(2024, 3, 9))) == (
        date(2024, 3, 1),
        date(2024, 3, 1),
    )


def test_resolve_window_week_defaults_to_seven_days():
    assert resolve_window(ReportQuery(ReportRange.WEEK, date(2024, 3, 4))) == (date(2024, 3, 4), date(2024, 3, 10))
    assert resolve_window(ReportQuery(ReportRange.WEEK, date(2024, 3, 4), date(2024, 3, 8))) == (
        date(2024, 3, 4),
        date(2024, 3, 8),
    )


@pytest.mark.parametrize("rng", [ReportRange.BIMESTER, ReportRange.SEMESTER])
def test_resolve_window_long_ranges_are_open_ended_without_end(rng):
    assert resolve_window(ReportQuery(rng, date(2024, 3, 11))) == (date(2024, 3, 11), None)


def test_resolve_window_custom_needs_end():
    with pytest.raises(ValidationError):
        resolve_window(ReportQuery(ReportRange.CUSTOM, date(2024, 3, 1)))


def test_resolve_window_rejects_reversed_bounds():
    with pytest.raises(ValidationError):
        resolve_window(ReportQuery(ReportRange.CUSTOM, date(2024, 3, 10), date(2024, 3, 1)))


def test_day_report_matches_marked_statuses(engine, daily_store, teacher_c1, classrooms, make_ctx):
    _seed(daily_store, "C1", date(2024, 3, 1), {"S1": P, "S2": L, "S3": A, "S4": J})

    report = asyncio.run(
        engine.classroom_report(make_ctx(teacher_c1), classrooms["C1"], ReportQuery(ReportRange.DAY, date(2024, 3, 1)))
    )

    assert report.present_equivalent == 2
    assert report.absent_equivalent == 2
    assert report.percentage == 50.0
    assert [p.person_id for p in report.persons] == ["S1", "S2", "S3", "S4"]


def test_unmarked_day_reports_zero(engine, teacher_c1, classrooms, make_ctx):
    report = asyncio.run(
        engine.classroom_report(make_ctx(teacher_c1), classrooms["C1"], ReportQuery(ReportRange.DAY, date(2024, 3, 2)))
    )

    assert (report.present_equivalent, report.absent_equivalent, report.percentage) == (0, 0, 0.0)


def test_week_report_uses_roster_and_recorded_dates(engine, daily_store, teacher_c1, classrooms, make_ctx):
    _seed(daily_store, "C1", date(2024, 3, 4), {"S1": P, "S2": P, "S3": L, "S4": A})
    _seed(daily_store, "C1", date(2024, 3, 5), {"S1": P, "S2": J, "S3": P, "S4": L})
    # next week, outside the window
    _seed(daily_store, "C1", date(2024, 3, 11), {"S1": A, "S2": A, "S3": A, "S4": A})

    report = asyncio.run(
        engine.classroom_report(make_ctx(teacher_c1), classrooms["C1"], ReportQuery(ReportRange.WEEK, date(2024, 3, 4)))
    )

    assert report.end == date(2024, 3, 10)
    assert report.present_equivalent == 6
    assert report.percentage == 75.0


def test_report_reflects_new_saves_immediately(engine, daily_store, teacher_c1, classrooms, make_ctx):
    ctx = make_ctx(teacher_c1)
    query = ReportQuery(ReportRange.DAY, date(2024, 3, 1))
    _seed(daily_store, "C1", date(2024, 3, 1), {"S1": A})

    before = asyncio.run(engine.classroom_report(ctx, classrooms["C1"], query))
    _seed(daily_store, "C1", date(2024, 3, 1), {"S1": P})
    after = asyncio.run(engine.classroom_report(ctx, classrooms["C1"], query))

    assert before.percentage == 0.0
    assert after.percentage == 100.0


def test_report_on_invisible_classroom_is_not_authorized(engine, teacher_c1, classrooms, make_ctx):
    with pytest.raises(NotAuthorized):
        asyncio.run(
            engine.classroom_report(make_ctx(teacher_c1), classrooms["C2"], ReportQuery(ReportRange.DAY, date(2024, 3, 1)))
        )


def test_school_overview_only_lists_visible_classrooms(engine, daily_store, teacher_c1, admin, make_ctx):
    _seed(daily_store, "C1", date(2024, 3, 1), {"S1": P, "S2": P, "S3": A, "S4": P})
    query = ReportQuery(ReportRange.CUSTOM, date(2024, 3, 1), date(2024, 3, 1))

    mine = asyncio.run(engine.school_overview(make_ctx(teacher_c1), query))
    everything = asyncio.run(engine.school_overview(make_ctx(admin), query))

    assert [r.classroom_id for r in mine] == ["C1"]
    assert mine[0].percentage == 75.0
    assert [r.classroom_id for r in everything] == ["C1", "C2", "C3", "C4"]
    assert everything[3].percentage == 0.0


def test_bimester_sheet_letters_and_completion(engine, daily_store, teacher_c1, classrooms, make_ctx):
    start, end = date(2024, 3, 4), date(2024, 3, 15)
    days = engine.reportable_days(start, end)
    for i, d in enumerate(days):
        _seed(daily_store, "C1", d, {"S1": A if i == 0 else P})
    _seed(daily_store, "C1", date(2024, 3, 5), {"S2": L})

    sheet = asyncio.run(engine.bimester_sheet(make_ctx(teacher_c1), classrooms["C1"], start=start, end=end))

    assert len(sheet.days) == 10
    assert date(2024, 3, 9) not in sheet.days
    rows = {r.person_id: r for r in sheet.rows}
    assert [r.person_id for r in sheet.rows] == ["S1", "S2", "S3", "S4"]
    assert rows["S1"].letters[date(2024, 3, 4)] == "F"
    assert rows["S1"].letters[date(2024, 3, 5)] == "P"
    assert rows["S1"].completion == 90.0
    assert rows["S2"].letters == {date(2024, 3, 5): "T"}
    assert rows["S2"].completion == 100.0
    assert rows["S3"].completion == 0.0


def test_bimester_sheet_rejects_reversed_bounds(engine, admin, classrooms, make_ctx):
    with pytest.raises(ValidationError):
        asyncio.run(
            engine.bimester_sheet(make_ctx(admin), classrooms["C1"], start=date(2024, 5, 1), end=date(2024, 3, 1))
        )
