from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.codecs import LEVEL_CODEC
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, run_db
from ..people.model import Assignment, StaffMember
from .repository import StaffRepository


def _to_assignment(r: dict) -> Assignment:
    return Assignment(
        classroom_id=str(r["classroom_id"]) if r.get("classroom_id") is not None else None,
        level=LEVEL_CODEC.decode(r["level"]) if r.get("level") else None,
    )


def _to_staff(r: dict, assignments: Sequence[Assignment]) -> StaffMember:
    return StaffMember(
        staff_id=str(r["id"]),
        full_name=r["full_name"],
        role=Role(r["role"]),
        assignments=tuple(assignments),
    )


class MySQLStaffRepository(StaffRepository):
    """Staff in `staff`; classroom or level assignments in `course_assignments`."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def list_active_staff(self) -> Sequence[StaffMember]:
        return await run_db(self._list_active)

    async def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        return await run_db(self._get, staff_id)

    async def replace_assignments(self, staff_id: str, assignments: Sequence[Assignment]) -> None:
        await run_db(self._replace_assignments, staff_id, list(assignments))

    def _list_active(self) -> list[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, role
                FROM staff
                WHERE active = 1
                ORDER BY full_name ASC
                """
            )
            staff_rows = fetchall(cur)

            cur.execute(
                """
                SELECT ca.staff_id, ca.classroom_id, ca.level
                FROM course_assignments ca
                JOIN staff st ON st.id = ca.staff_id
                WHERE st.active = 1
                ORDER BY ca.id ASC
                """
            )
            by_staff: dict[str, list[Assignment]] = {}
            for r in fetchall(cur):
                by_staff.setdefault(str(r["staff_id"]), []).append(_to_assignment(r))

            return [_to_staff(r, by_staff.get(str(r["id"]), [])) for r in staff_rows]

    def _get(self, staff_id: str) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, full_name, role FROM staff WHERE id=%s AND active = 1",
                (staff_id,),
            )
            row = fetchone(cur)
            if not row:
                return None

            cur.execute(
                "SELECT classroom_id, level FROM course_assignments WHERE staff_id=%s ORDER BY id ASC",
                (staff_id,),
            )
            return _to_staff(row, [_to_assignment(r) for r in fetchall(cur)])

    def _replace_assignments(self, staff_id: str, assignments: list[Assignment]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM course_assignments WHERE staff_id=%s", (staff_id,))
            if assignments:
                cur.executemany(
                    """
                    INSERT INTO course_assignments(staff_id, classroom_id, level, created_at)
                    VALUES(%s,%s,%s,NOW())
                    """,
                    [
                        (
                            staff_id,
                            a.classroom_id,
                            LEVEL_CODEC.encode(a.level) if a.level is not None else None,
                        )
                        for a in assignments
                    ],
                )
