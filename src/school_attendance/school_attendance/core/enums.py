from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of an authenticated identity.

    The role is not a column: it is determined by the table the account lives in.
    """

    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"


class AttendanceStatus(str, Enum):
    """Presence state of a student for one calendar day."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    ABSENT_JUSTIFIED = "ABSENT_JUSTIFIED"

    @property
    def counts_as_present(self) -> bool:
        # Legacy clients read a justified absence as "present".
        return self is not AttendanceStatus.ABSENT


class NotificationType(str, Enum):
    ABSENCE = "absence"
    TARDINESS = "tardiness"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "NotificationType":
        v = str(value or "").strip().lower()
        if not v:
            return cls.OTHER
        v = {"retard": "tardiness", "autre": "other"}.get(v, v)
        return cls(v)


class Action(str, Enum):
    """Operations checked by the access policy."""

    READ = "read"
    WRITE = "write"
    JUSTIFY = "justify"
    ACKNOWLEDGE = "acknowledge"


class ResourceKind(str, Enum):
    IDENTITY = "identity"
    CLASS = "class"
    STUDENT = "student"
    ATTENDANCE = "attendance"
    NOTIFICATION = "notification"
