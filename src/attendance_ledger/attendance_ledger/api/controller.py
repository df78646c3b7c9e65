from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..core.enums import Action, FamilyRelation, Level, ReportRange
from ..core.exceptions import (
    DomainError,
    EmptyObservationSet,
    InvalidDate,
    NotAuthorized,
    StoreUnavailable,
    ValidationError,
)
from ..container import Container
from ..ledger.model import MeetingMark, ObservationSet
from ..people.model import SessionContext
from ..people.visibility import require_permission, visible_subjects
from ..reports.model import ReportQuery
from ..staff.service import StaffService
from ..subjects.model import Classroom

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    ValidationError: 400,
    EmptyObservationSet: 400,
    InvalidDate: 400,
    NotAuthorized: 403,
    StoreUnavailable: 503,
}


def to_json(value: Any) -> Any:
    """dataclasses/enums/dates -> plain JSON types (ISO dates, enum values)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_json(k)): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [to_json(v) for v in value]
        return sorted(items) if isinstance(value, (set, frozenset)) else items
    return value


async def current_context(staff: StaffService) -> SessionContext:
    """Acting staff member for the session user, with role and assignments read from the store."""

    if "user_id" not in session:
        raise NotAuthorized("Login required")
    actor = await staff.acting_member(str(session["user_id"]))
    return SessionContext(actor=actor, now=now_local())


def _parse_levels(raw: Any) -> list[Level]:
    levels = []
    for value in raw or []:
        try:
            levels.append(Level(value))
        except ValueError:
            raise ValidationError(f"Unknown level: {value!r}") from None
    return levels


def _parse_query(args) -> ReportQuery:
    try:
        report_range = ReportRange((args.get("range") or ReportRange.DAY.value).lower())
    except ValueError:
        raise ValidationError(f"Unknown report range: {args.get('range')!r}") from None

    start_s = args.get("start")
    start = parse_iso_date(start_s) if start_s else now_local().date()
    end_s = args.get("end")
    return ReportQuery(report_range=report_range, start_date=start, end_date=parse_iso_date(end_s) if end_s else None)


def _meeting_mark(raw: Any) -> MeetingMark:
    if not isinstance(raw, dict):
        raise ValidationError("Meeting attendance entries must be objects")
    relation: Optional[FamilyRelation] = None
    if raw.get("relation"):
        try:
            relation = FamilyRelation(raw["relation"])
        except ValueError:
            raise ValidationError(f"Unknown family relation: {raw['relation']!r}") from None
    return MeetingMark(attended=bool(raw.get("attended", True)), relation=relation, other_name=raw.get("other_name"))


def _set_json(obs_set: ObservationSet) -> dict:
    return {
        "subject_id": obs_set.subject_id,
        "date": obs_set.on_date.isoformat(),
        "exists": obs_set.exists,
        "provenance": to_json(obs_set.provenance),
        "entries": {
            pid: {"value": to_json(o.value), "note": o.note}
            for pid, o in sorted(obs_set.entries.items())
        },
    }


def register(app: Flask, container: Container) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        code = next((c for t, c in _STATUS_CODES.items() if isinstance(e, t)), 400)
        if code >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.path, e)
        return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), code

    async def _classroom(classroom_id: str) -> Classroom:
        classroom = await container.subjects_repo.get_classroom(classroom_id)
        if not classroom:
            raise ValidationError("Classroom does not exist")
        return classroom

    @app.route("/api/classrooms", methods=["GET"], endpoint="api_classrooms")
    async def api_classrooms():
        ctx = await current_context(container.staff_service)
        classrooms = visible_subjects(ctx.actor, list(await container.subjects_repo.list_subjects(active_only=True)))
        return jsonify({"success": True, "classrooms": to_json(classrooms)})

    @app.route("/api/classrooms/<classroom_id>/attendance/<day>", methods=["GET"], endpoint="api_attendance_get")
    async def api_attendance_get(classroom_id: str, day: str):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        obs_set = await container.daily_ledger.load_observation_set(ctx, classroom, parse_iso_date(day))
        students = await container.subjects_repo.list_persons_for_subject(classroom.classroom_id)
        return jsonify({"success": True, "students": to_json(students), "set": _set_json(obs_set)})

    @app.route("/api/classrooms/<classroom_id>/attendance/<day>", methods=["PUT"], endpoint="api_attendance_save")
    async def api_attendance_save(classroom_id: str, day: str):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        payload = request.get_json(silent=True) or {}
        ledger = container.daily_ledger

        obs_set = await ledger.load_observation_set(ctx, classroom, parse_iso_date(day))
        if payload.get("mark_all_present"):
            students = await container.subjects_repo.list_persons_for_subject(classroom.classroom_id)
            ledger.mark_all_present(obs_set, [s.student_id for s in students])

        notes = payload.get("notes") or {}
        for person_id, status in (payload.get("marks") or {}).items():
            ledger.set_status(obs_set, str(person_id), status, note=notes.get(person_id))

        saved = await ledger.save(ctx, classroom, obs_set)
        return jsonify({"success": True, "set": _set_json(saved)})

    @app.route("/api/classrooms/<classroom_id>/calendar/<int:year>/<int:month>", methods=["GET"], endpoint="api_calendar")
    async def api_calendar(classroom_id: str, year: int, month: int):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        require_permission(ctx.actor, Action.RECORD_ATTENDANCE, classroom)
        dates = await container.daily_navigation.marked_dates(classroom.classroom_id, year, month)
        return jsonify({"success": True, "dates": to_json(dates)})

    @app.route("/api/classrooms/<classroom_id>/report", methods=["GET"], endpoint="api_classroom_report")
    async def api_classroom_report(classroom_id: str):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        report = await container.aggregation.classroom_report(ctx, classroom, _parse_query(request.args))
        return jsonify({"success": True, "report": to_json(report)})

    @app.route("/api/classrooms/<classroom_id>/bimester", methods=["GET"], endpoint="api_bimester")
    async def api_bimester(classroom_id: str):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        start = parse_iso_date(request.args.get("start") or "")
        end = parse_iso_date(request.args.get("end") or "")
        sheet = await container.aggregation.bimester_sheet(ctx, classroom, start=start, end=end)
        return jsonify({"success": True, "sheet": to_json(sheet)})

    @app.route("/api/reports", methods=["GET"], endpoint="api_reports")
    async def api_reports():
        ctx = await current_context(container.staff_service)
        reports = await container.aggregation.school_overview(ctx, _parse_query(request.args))
        return jsonify({"success": True, "classrooms": to_json(reports)})

    @app.route("/api/meetings", methods=["GET"], endpoint="api_meetings")
    async def api_meetings():
        ctx = await current_context(container.staff_service)
        start_s, end_s = request.args.get("start"), request.args.get("end")
        meetings = await container.meeting_service.list_meetings(
            ctx,
            start=parse_iso_date(start_s) if start_s else None,
            end=parse_iso_date(end_s) if end_s else None,
        )
        return jsonify({"success": True, "meetings": to_json(meetings)})

    @app.route("/api/classrooms/<classroom_id>/meetings", methods=["POST"], endpoint="api_meeting_create")
    async def api_meeting_create(classroom_id: str):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        payload = request.get_json(silent=True) or {}
        meeting = await container.meeting_service.schedule_meeting(
            ctx,
            classroom,
            title=payload.get("title") or "",
            meeting_date=parse_iso_date(payload.get("date") or ""),
        )
        return jsonify({"success": True, "meeting": to_json(meeting)}), 201

    @app.route("/api/classrooms/<classroom_id>/meetings/calendar/<int:year>/<int:month>", methods=["GET"], endpoint="api_meeting_calendar")
    async def api_meeting_calendar(classroom_id: str, year: int, month: int):
        ctx = await current_context(container.staff_service)
        classroom = await _classroom(classroom_id)
        require_permission(ctx.actor, Action.RECORD_ATTENDANCE, classroom)
        dates = await container.meeting_navigation.meeting_dates(classroom.classroom_id, year, month)
        return jsonify({"success": True, "dates": to_json(dates)})

    @app.route("/api/meetings/<meeting_id>", methods=["DELETE"], endpoint="api_meeting_delete")
    async def api_meeting_delete(meeting_id: str):
        ctx = await current_context(container.staff_service)
        meeting = await container.meeting_service.get_meeting(ctx, meeting_id)
        await container.meeting_service.cancel_meeting(ctx, meeting)
        return jsonify({"success": True})

    @app.route("/api/meetings/<meeting_id>/attendance", methods=["GET"], endpoint="api_meeting_attendance_get")
    async def api_meeting_attendance_get(meeting_id: str):
        ctx = await current_context(container.staff_service)
        meeting = await container.meeting_service.get_meeting(ctx, meeting_id)
        obs_set = await container.meeting_ledger.load_observation_set(ctx, meeting, meeting.meeting_date)
        students = await container.subjects_repo.list_persons_for_subject(meeting.classroom_id)
        return jsonify({"success": True, "meeting": to_json(meeting), "students": to_json(students), "set": _set_json(obs_set)})

    @app.route("/api/meetings/<meeting_id>/attendance", methods=["PUT"], endpoint="api_meeting_attendance_save")
    async def api_meeting_attendance_save(meeting_id: str):
        ctx = await current_context(container.staff_service)
        meeting = await container.meeting_service.get_meeting(ctx, meeting_id)
        payload = request.get_json(silent=True) or {}
        ledger = container.meeting_ledger

        obs_set = await ledger.load_observation_set(ctx, meeting, meeting.meeting_date)
        for person_id, raw in (payload.get("marks") or {}).items():
            ledger.set_status(obs_set, str(person_id), _meeting_mark(raw))

        saved = await ledger.save(ctx, meeting, obs_set)
        return jsonify({"success": True, "set": _set_json(saved)})

    @app.route("/api/meetings/<meeting_id>/summary", methods=["GET"], endpoint="api_meeting_summary")
    async def api_meeting_summary(meeting_id: str):
        ctx = await current_context(container.staff_service)
        meeting = await container.meeting_service.get_meeting(ctx, meeting_id)
        summary = await container.meeting_service.meeting_summary(ctx, meeting)
        return jsonify({"success": True, "summary": to_json(summary)})

    @app.route("/api/staff", methods=["GET"], endpoint="api_staff")
    async def api_staff():
        ctx = await current_context(container.staff_service)
        staff = await container.staff_service.list_staff_with_assignments(ctx)
        return jsonify({"success": True, "staff": to_json(staff)})

    @app.route("/api/staff/<staff_id>/assignments", methods=["PUT"], endpoint="api_staff_assignments")
    async def api_staff_assignments(staff_id: str):
        ctx = await current_context(container.staff_service)
        payload = request.get_json(silent=True) or {}
        classroom_ids = payload.get("classroom_ids") or []
        if not isinstance(classroom_ids, list):
            raise ValidationError("classroom_ids must be a list")
        member = await container.staff_service.save_assignments(
            ctx,
            staff_id,
            classroom_ids,
            levels=_parse_levels(payload.get("levels")),
        )
        return jsonify({"success": True, "staff": to_json(member)})
