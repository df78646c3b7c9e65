from __future__ import annotations

from typing import Optional, Sequence

from ..database.codecs import LEVEL_CODEC
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, run_db
from ..people.model import Student
from .model import Classroom
from .repository import SubjectRepository

_SELECT = """
    SELECT c.id, c.name, c.level, c.active, COUNT(s.id) AS student_count
    FROM classrooms c
    LEFT JOIN students s ON s.classroom_id = c.id
"""


def _to_classroom(r: dict) -> Classroom:
    return Classroom(
        classroom_id=str(r["id"]),
        name=r["name"],
        level=LEVEL_CODEC.decode(r["level"]),
        student_count=int(r.get("student_count") or 0),
        active=bool(r.get("active", True)),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def list_subjects(self, *, active_only: bool = True) -> Sequence[Classroom]:
        return await run_db(self._list, active_only)

    async def get_classroom(self, classroom_id: str) -> Optional[Classroom]:
        return await run_db(self._get, classroom_id)

    async def list_persons_for_subject(self, classroom_id: str) -> Sequence[Student]:
        return await run_db(self._students, classroom_id)

    def _list(self, active_only: bool) -> list[Classroom]:
        where = "WHERE c.active = 1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} GROUP BY c.id, c.name, c.level, c.active ORDER BY c.id ASC")
            return [_to_classroom(r) for r in fetchall(cur)]

    def _get(self, classroom_id: str) -> Optional[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE c.id=%s GROUP BY c.id, c.name, c.level, c.active",
                (classroom_id,),
            )
            r = fetchone(cur)
            return _to_classroom(r) if r else None

    def _students(self, classroom_id: str) -> list[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, first_name, last_name, dni
                FROM students
                WHERE classroom_id=%s
                ORDER BY last_name ASC, first_name ASC
                """,
                (classroom_id,),
            )
            return [
                Student(
                    student_id=str(r["id"]),
                    full_name=f"{r['last_name']}, {r['first_name']}",
                    dni=r.get("dni"),
                )
                for r in fetchall(cur)
            ]
