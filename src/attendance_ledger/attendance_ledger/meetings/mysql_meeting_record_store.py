from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.codecs import RELATION_CODEC
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, run_db
from ..ledger.model import MeetingMark, Observation
from ..ledger.repository import RecordStore


class MySQLMeetingRecordStore(RecordStore):
    """Meeting attendance rows in `meeting_attendance`, unique on (meeting_id, student_id).

    A row with attended_at NULL is a family that did not come.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def fetch(self, subject_id: str, *, start: date, end: Optional[date]) -> Sequence[Observation]:
        return await run_db(self._fetch, subject_id, start, end)

    async def upsert(self, observations: Sequence[Observation]) -> None:
        if not observations:
            return
        await run_db(self._upsert, list(observations))

    async def replace_set(self, subject_id: str, on_date: date, observations: Sequence[Observation]) -> None:
        await run_db(self._replace_set, subject_id, list(observations))

    async def list_marked_dates(self, subject_id: str, *, start: date, end: date) -> set[date]:
        return await run_db(self._marked_dates, subject_id, start, end)

    def _fetch(self, meeting_id: str, start: date, end: Optional[date]) -> list[Observation]:
        clauses = ["ma.meeting_id=%s", "m.date >= %s"]
        params: list[object] = [meeting_id, start]
        if end is not None:
            clauses.append("m.date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ma.meeting_id, ma.student_id, m.date, ma.family_member_type,
                       ma.other_family_member_name, ma.attended_at,
                       ma.created_by, ma.created_at, st.full_name AS created_by_name
                FROM meeting_attendance ma
                JOIN meetings m ON m.id = ma.meeting_id
                LEFT JOIN staff st ON st.id = ma.created_by
                WHERE {where}
                ORDER BY ma.student_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            out: list[Observation] = []
            for r in rows:
                attended = r.get("attended_at") is not None
                relation = RELATION_CODEC.decode(r["family_member_type"]) if attended and r.get("family_member_type") else None
                out.append(
                    Observation(
                        subject_id=str(r["meeting_id"]),
                        person_id=str(r["student_id"]),
                        on_date=as_date(r["date"]),
                        value=MeetingMark(
                            attended=attended,
                            relation=relation,
                            other_name=r.get("other_family_member_name"),
                        ),
                        recorded_by=str(r["created_by"]) if r.get("created_by") is not None else None,
                        recorded_by_name=r.get("created_by_name"),
                        recorded_at=r.get("created_at") or r.get("attended_at"),
                    )
                )
            return out

    def _upsert(self, observations: list[Observation]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._write_rows(cur, observations)

    def _replace_set(self, meeting_id: str, observations: list[Observation]) -> None:
        # one meeting holds one date, so the set is every row of the meeting
        keep = [o.person_id for o in observations]

        with db_cursor(self._conn_factory) as (_, cur):
            if keep:
                cur.execute(
                    f"""
                    DELETE FROM meeting_attendance
                    WHERE meeting_id=%s AND student_id NOT IN ({', '.join(['%s'] * len(keep))})
                    """,
                    (meeting_id, *keep),
                )
            else:
                cur.execute("DELETE FROM meeting_attendance WHERE meeting_id=%s", (meeting_id,))
            if observations:
                self._write_rows(cur, observations)

    @staticmethod
    def _write_rows(cur, observations: list[Observation]) -> None:
        params = []
        for o in observations:
            mark = o.value
            attended = isinstance(mark, MeetingMark) and mark.attended
            params.append(
                (
                    o.subject_id,
                    o.person_id,
                    RELATION_CODEC.encode(mark.relation) if attended and mark.relation else None,
                    mark.other_name if attended else None,
                    o.recorded_at if attended else None,
                    o.recorded_by,
                    o.recorded_at,
                )
            )

        cur.executemany(
            """
            INSERT INTO meeting_attendance(
                meeting_id, student_id, family_member_type, other_family_member_name,
                attended_at, created_by, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                family_member_type=VALUES(family_member_type),
                other_family_member_name=VALUES(other_family_member_name),
                attended_at=VALUES(attended_at),
                created_by=VALUES(created_by),
                created_at=VALUES(created_at)
            """,
            params,
        )

    def _marked_dates(self, meeting_id: str, start: date, end: date) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT m.date
                FROM meetings m
                JOIN meeting_attendance ma ON ma.meeting_id = m.id
                WHERE m.id=%s AND m.date BETWEEN %s AND %s
                """,
                (meeting_id, start, end),
            )
            return {as_date(r["date"]) for r in fetchall(cur)}
