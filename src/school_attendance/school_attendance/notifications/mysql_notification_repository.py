from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = "n.notification_id, n.teacher_id, n.student_id, n.parent_id, n.message, n.type, n.created_at, n.is_read"


def _name(r: dict, prefix: str) -> Optional[str]:
    given = r.get(f"{prefix}_given_name")
    family = r.get(f"{prefix}_family_name")
    if given is None and family is None:
        return None
    return f"{given or ''} {family or ''}".strip()


def _row_to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        teacher_id=int(r["teacher_id"]),
        student_id=int(r["student_id"]),
        parent_id=int(r["parent_id"]),
        message=r["message"],
        type=NotificationType(r["type"]),
        created_at=r["created_at"],
        is_read=bool(r.get("is_read")),
        student_name=_name(r, "student"),
        parent_name=_name(r, "parent"),
        teacher_name=_name(r, "teacher"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        teacher_id: int,
        student_id: int,
        parent_id: int,
        message: str,
        type: NotificationType,
    ) -> Notification:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(teacher_id, student_id, parent_id, message, type, created_at, is_read)
                VALUES(%s,%s,%s,%s,%s,NOW(),0)
                """,
                (int(teacher_id), int(student_id), int(parent_id), message, type.value),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM notifications n WHERE n.notification_id=%s", (new_id,))
            return _row_to_notification(fetchone(cur))

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM notifications n WHERE n.notification_id=%s",
                (int(notification_id),),
            )
            r = fetchone(cur)
            return _row_to_notification(r) if r else None

    def mark_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE notification_id=%s", (int(notification_id),))
            return cur.rowcount > 0

    def list_for_teacher(self, teacher_id: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       s.given_name AS student_given_name, s.family_name AS student_family_name
                FROM notifications n
                LEFT JOIN students s ON s.id = n.student_id
                WHERE n.teacher_id=%s
                ORDER BY n.created_at DESC, n.notification_id DESC
                """,
                (int(teacher_id),),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def list_for_parent(self, parent_id: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       s.given_name AS student_given_name, s.family_name AS student_family_name,
                       t.given_name AS teacher_given_name, t.family_name AS teacher_family_name
                FROM notifications n
                LEFT JOIN students s ON s.id = n.student_id
                LEFT JOIN teachers t ON t.id = n.teacher_id
                WHERE n.parent_id=%s
                ORDER BY n.created_at DESC, n.notification_id DESC
                """,
                (int(parent_id),),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       s.given_name AS student_given_name, s.family_name AS student_family_name,
                       p.given_name AS parent_given_name, p.family_name AS parent_family_name,
                       t.given_name AS teacher_given_name, t.family_name AS teacher_family_name
                FROM notifications n
                LEFT JOIN students s ON s.id = n.student_id
                LEFT JOIN parents p ON p.id = n.parent_id
                LEFT JOIN teachers t ON t.id = n.teacher_id
                ORDER BY n.created_at DESC, n.notification_id DESC
                """
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def count_unread_for_parent(self, parent_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE parent_id=%s AND is_read=0",
                (int(parent_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
