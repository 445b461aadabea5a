from __future__ import annotations

from datetime import date
from typing import Optional

from ..access.model import Principal
from ..attendance.repository import AttendanceRepository
from ..core.constants import NOT_AUTHORIZED
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError
from ..identities.repository import IdentityRepository
from ..notifications.repository import NotificationRepository
from ..roster.repository import RosterRepository


class DashboardService:
    """Role-conditional summary of "today" for the landing screen.

    Reads scope themselves by role (own classes, own children), so no policy
    round-trip per row.
    """

    def __init__(
        self,
        identities: IdentityRepository,
        roster: RosterRepository,
        attendance: AttendanceRepository,
        notifications: NotificationRepository,
    ):
        self._identities = identities
        self._roster = roster
        self._attendance = attendance
        self._notifications = notifications

    def for_principal(self, principal: Principal, today: Optional[date] = None) -> dict:
        today = today or date.today()
        if principal.is_admin:
            return self._admin(today)
        if principal.is_teacher:
            return self._teacher(principal.identity_id, today)
        if principal.is_parent:
            return self._parent(principal.identity_id, today)
        raise AuthorizationError(NOT_AUTHORIZED)

    def _admin(self, today: date) -> dict:
        by_status = self._attendance.count_by_status(today)
        return {
            "role": Role.ADMIN.value,
            "date": today.isoformat(),
            "counts": {
                "teachers": self._identities.count_by_role(Role.TEACHER),
                "parents": self._identities.count_by_role(Role.PARENT),
                "classes": self._roster.count_classes(),
                "students": self._roster.count_students(),
            },
            "today": {
                "present": by_status.get(AttendanceStatus.PRESENT, 0),
                "absent": by_status.get(AttendanceStatus.ABSENT, 0),
                "justified": by_status.get(AttendanceStatus.ABSENT_JUSTIFIED, 0),
            },
        }

    def _teacher(self, teacher_id: int, today: date) -> dict:
        classes = []
        for c in self._roster.list_classes(teacher_id=teacher_id):
            rows = self._attendance.list_for_class_and_date(c.id, today)
            present = sum(1 for r in rows if r.record.status == AttendanceStatus.PRESENT)
            absent = len(rows) - present
            classes.append(
                {
                    "id": c.id,
                    "name": c.name,
                    "student_count": c.student_count,
                    "present": present,
                    "absent": absent,
                    "unmarked": max(c.student_count - len(rows), 0),
                }
            )
        return {"role": Role.TEACHER.value, "date": today.isoformat(), "classes": classes}

    def _parent(self, parent_id: int, today: date) -> dict:
        children = self._roster.list_students_for_parent(parent_id)
        records = self._attendance.list_for_students_in_range([s.id for s in children], today, today)
        by_student = {r.student_id: r for r in records}

        out = []
        for s in children:
            r = by_student.get(s.id)
            out.append(
                {
                    "id": s.id,
                    "given_name": s.given_name,
                    "family_name": s.family_name,
                    "class_name": s.class_name,
                    "today": r.to_dict() if r else None,
                }
            )
        return {
            "role": Role.PARENT.value,
            "date": today.isoformat(),
            "children": out,
            "unread_notifications": self._notifications.count_unread_for_parent(parent_id),
        }
