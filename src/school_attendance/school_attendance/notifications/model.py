from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    """Domain entity: a message from a teacher to a parent about a student.

    Append-only except for is_read. The *_name fields are filled by listings
    that join the related rows (admin view).
    """

    notification_id: int
    teacher_id: int
    student_id: int
    parent_id: int
    message: str
    type: NotificationType
    created_at: datetime
    is_read: bool = False
    student_name: Optional[str] = None
    parent_name: Optional[str] = None
    teacher_name: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.notification_id,
            "teacher_id": self.teacher_id,
            "student_id": self.student_id,
            "parent_id": self.parent_id,
            "message": self.message,
            "type": self.type.value,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "read": self.is_read,
        }
        for key in ("student_name", "parent_name", "teacher_name"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data
