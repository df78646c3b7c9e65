from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.codecs import LEVEL_CODEC
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, run_db
from ..subjects.model import Meeting
from .repository import MeetingRepository

_SELECT = """
    SELECT m.id, m.title, m.date, m.classroom_id, c.name AS classroom_name, c.level
    FROM meetings m
    JOIN classrooms c ON c.id = m.classroom_id
"""


def _to_meeting(r: dict) -> Meeting:
    return Meeting(
        meeting_id=str(r["id"]),
        title=r["title"],
        meeting_date=as_date(r["date"]),
        classroom_id=str(r["classroom_id"]),
        level=LEVEL_CODEC.decode(r["level"]),
        classroom_name=r.get("classroom_name") or "",
    )


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        return await run_db(self._get, meeting_id)

    async def list_meetings(
        self,
        *,
        classroom_ids: Optional[Sequence[str]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Meeting]:
        return await run_db(self._list, classroom_ids, start, end)

    async def create_meeting(self, *, classroom_id: str, title: str, meeting_date: date) -> str:
        return await run_db(self._create, classroom_id, title, meeting_date)

    async def delete_meeting(self, *, meeting_id: str) -> bool:
        return await run_db(self._delete, meeting_id)

    def _get(self, meeting_id: str) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE m.id=%s", (meeting_id,))
            r = fetchone(cur)
            return _to_meeting(r) if r else None

    def _list(self, classroom_ids: Optional[Sequence[str]], start: Optional[date], end: Optional[date]) -> list[Meeting]:
        if classroom_ids is not None and not classroom_ids:
            return []

        clauses: list[str] = []
        params: list[object] = []
        if classroom_ids is not None:
            clauses.append(f"m.classroom_id IN ({', '.join(['%s'] * len(classroom_ids))})")
            params.extend(classroom_ids)
        if start is not None:
            clauses.append("m.date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("m.date <= %s")
            params.append(end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY m.date DESC, m.id DESC", tuple(params))
            return [_to_meeting(r) for r in fetchall(cur)]

    def _create(self, classroom_id: str, title: str, meeting_date: date) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO meetings(title, date, classroom_id) VALUES(%s,%s,%s)",
                (title, meeting_date, classroom_id),
            )
            return str(cur.lastrowid)

    def _delete(self, meeting_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM meetings WHERE id=%s", (meeting_id,))
            return cur.rowcount > 0
