from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.codecs import STATUS_CODEC
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, run_db
from .model import Observation
from .repository import RecordStore


class MySQLDailyRecordStore(RecordStore):
    """Daily attendance rows in `attendance`, unique on (student_id, date)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def fetch(self, subject_id: str, *, start: date, end: Optional[date]) -> Sequence[Observation]:
        return await run_db(self._fetch, subject_id, start, end)

    async def upsert(self, observations: Sequence[Observation]) -> None:
        if not observations:
            return
        await run_db(self._upsert, list(observations))

    async def replace_set(self, subject_id: str, on_date: date, observations: Sequence[Observation]) -> None:
        await run_db(self._replace_set, subject_id, on_date, list(observations))

    async def list_marked_dates(self, subject_id: str, *, start: date, end: date) -> set[date]:
        return await run_db(self._marked_dates, subject_id, start, end)

    def _fetch(self, classroom_id: str, start: date, end: Optional[date]) -> list[Observation]:
        clauses = ["a.classroom_id=%s", "a.date >= %s"]
        params: list[object] = [classroom_id, start]
        if end is not None:
            clauses.append("a.date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.student_id, a.classroom_id, a.date, a.attendance_type_id, a.notes,
                       a.created_by, a.created_at, st.full_name AS created_by_name
                FROM attendance a
                LEFT JOIN staff st ON st.id = a.created_by
                WHERE {where}
                ORDER BY a.date ASC, a.student_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            return [
                Observation(
                    subject_id=str(r["classroom_id"]),
                    person_id=str(r["student_id"]),
                    on_date=as_date(r["date"]),
                    value=STATUS_CODEC.decode(int(r["attendance_type_id"])),
                    note=r.get("notes"),
                    recorded_by=str(r["created_by"]) if r.get("created_by") is not None else None,
                    recorded_by_name=r.get("created_by_name"),
                    recorded_at=r.get("created_at"),
                )
                for r in rows
            ]

    def _upsert(self, observations: list[Observation]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._write_rows(cur, observations)

    def _replace_set(self, classroom_id: str, on_date: date, observations: list[Observation]) -> None:
        keep = [o.person_id for o in observations]

        with db_cursor(self._conn_factory) as (_, cur):
            if keep:
                cur.execute(
                    f"""
                    DELETE FROM attendance
                    WHERE classroom_id=%s AND date=%s AND student_id NOT IN ({', '.join(['%s'] * len(keep))})
                    """,
                    (classroom_id, on_date, *keep),
                )
            else:
                cur.execute("DELETE FROM attendance WHERE classroom_id=%s AND date=%s", (classroom_id, on_date))
            if observations:
                self._write_rows(cur, observations)

    @staticmethod
    def _write_rows(cur, observations: list[Observation]) -> None:
        params = []
        for o in observations:
            status = o.value if isinstance(o.value, AttendanceStatus) else AttendanceStatus(o.value)
            params.append(
                (
                    o.person_id,
                    o.subject_id,
                    o.on_date,
                    status.value,
                    STATUS_CODEC.encode(status),
                    o.note,
                    o.recorded_by,
                    o.recorded_at,
                )
            )

        cur.executemany(
            """
            INSERT INTO attendance(student_id, classroom_id, date, status, attendance_type_id, notes, created_by, created_at)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                classroom_id=VALUES(classroom_id),
                status=VALUES(status),
                attendance_type_id=VALUES(attendance_type_id),
                notes=VALUES(notes),
                created_by=VALUES(created_by),
                created_at=VALUES(created_at)
            """,
            params,
        )

    def _marked_dates(self, classroom_id: str, start: date, end: date) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT date
                FROM attendance
                WHERE classroom_id=%s AND date BETWEEN %s AND %s
                """,
                (classroom_id, start, end),
            )
            return {as_date(r["date"]) for r in fetchall(cur)}
