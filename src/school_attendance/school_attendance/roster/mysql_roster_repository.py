from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import SchoolClass, Student
from .repository import RosterRepository

_STUDENT_SELECT = """
    SELECT
        s.id, s.given_name, s.family_name, s.class_id, s.parent_id,
        c.teacher_id, c.name AS class_name,
        p.given_name AS parent_given_name, p.family_name AS parent_family_name
    FROM students s
    LEFT JOIN classes c ON c.id = s.class_id
    LEFT JOIN parents p ON p.id = s.parent_id
"""


def _row_to_student(r: dict) -> Student:
    return Student(
        id=int(r["id"]),
        given_name=r["given_name"],
        family_name=r["family_name"],
        class_id=r.get("class_id"),
        parent_id=r.get("parent_id"),
        teacher_id=r.get("teacher_id"),
        class_name=r.get("class_name"),
        parent_given_name=r.get("parent_given_name"),
        parent_family_name=r.get("parent_family_name"),
    )


def _row_to_class(r: dict) -> SchoolClass:
    return SchoolClass(
        id=int(r["id"]),
        name=r["name"],
        teacher_id=r.get("teacher_id"),
        student_count=int(r.get("student_count") or 0),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.id, c.name, c.teacher_id, COUNT(s.id) AS student_count
                FROM classes c
                LEFT JOIN students s ON s.class_id = c.id
                WHERE c.id=%s
                GROUP BY c.id, c.name, c.teacher_id
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            return _row_to_class(r) if r else None

    def list_classes(self, *, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        where = ""
        params: tuple = ()
        if teacher_id is not None:
            where = "WHERE c.teacher_id=%s"
            params = (int(teacher_id),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT c.id, c.name, c.teacher_id, COUNT(s.id) AS student_count
                FROM classes c
                LEFT JOIN students s ON s.class_id = c.id
                {where}
                GROUP BY c.id, c.name, c.teacher_id
                ORDER BY c.name ASC
                """,
                params,
            )
            return [_row_to_class(r) for r in fetchall(cur)]

    def create_class(self, *, name: str, teacher_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO classes(name, teacher_id) VALUES(%s,%s)", (name, int(teacher_id)))
            return int(cur.lastrowid)

    def rename_class(self, *, class_id: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE classes SET name=%s WHERE id=%s", (name, int(class_id)))
            return cur.rowcount > 0

    def delete_class(self, *, class_id: int) -> bool:
        # The students FK refuses the delete while the class is not empty.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE id=%s", (int(class_id),))
            return cur.rowcount > 0

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_STUDENT_SELECT + " WHERE s.id=%s", (int(student_id),))
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def get_students_by_ids(self, student_ids: Iterable[int]) -> Sequence[Student]:
        ids = sorted({int(i) for i in student_ids})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_STUDENT_SELECT + f" WHERE s.id IN ({in_placeholders(ids)}) ORDER BY s.id", tuple(ids))
            return [_row_to_student(r) for r in fetchall(cur)]

    def list_students_for_class(self, class_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _STUDENT_SELECT + " WHERE s.class_id=%s ORDER BY s.family_name, s.given_name, s.id",
                (int(class_id),),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def list_students_for_parent(self, parent_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _STUDENT_SELECT + " WHERE s.parent_id=%s ORDER BY s.family_name, s.given_name, s.id",
                (int(parent_id),),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def create_student(self, *, given_name: str, family_name: str, class_id: int, parent_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(given_name, family_name, class_id, parent_id)
                VALUES(%s,%s,%s,%s)
                """,
                (given_name, family_name, int(class_id), int(parent_id)),
            )
            return int(cur.lastrowid)

    def update_student(
        self,
        *,
        student_id: int,
        given_name: str,
        family_name: str,
        class_id: int,
        parent_id: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET given_name=%s, family_name=%s, class_id=%s, parent_id=%s
                WHERE id=%s
                """,
                (given_name, family_name, int(class_id), int(parent_id), int(student_id)),
            )
            # rowcount is 0 when nothing changed; existence was checked by the service.
            return cur.rowcount >= 0

    def delete_student(self, *, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (int(student_id),))
            cur.execute("DELETE FROM notifications WHERE student_id=%s", (int(student_id),))
            cur.execute("DELETE FROM students WHERE id=%s", (int(student_id),))
            return cur.rowcount > 0

    def count_classes(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM classes")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_students(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
