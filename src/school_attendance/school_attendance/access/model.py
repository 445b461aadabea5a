from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ResourceKind, Role


@dataclass(frozen=True)
class Principal:
    """An already-authenticated caller: who they are and which role table they live in."""

    identity_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_parent(self) -> bool:
        return self.role == Role.PARENT


@dataclass(frozen=True)
class Target:
    """Ownership fields of the resource being accessed.

    The caller loads them; the policy never touches storage.
    - teacher_id: owning teacher of the class (for classes, students, attendance)
      or the author (for notifications).
    - parent_id: parent of the student, or the addressee of a notification.
    - identity_role: role table of an identity row.
    """

    kind: ResourceKind
    teacher_id: Optional[int] = None
    parent_id: Optional[int] = None
    identity_role: Optional[Role] = None

    @classmethod
    def identity(cls, role: Role) -> "Target":
        return cls(kind=ResourceKind.IDENTITY, identity_role=role)

    @classmethod
    def school_class(cls, teacher_id: Optional[int]) -> "Target":
        return cls(kind=ResourceKind.CLASS, teacher_id=teacher_id)

    @classmethod
    def student(cls, student) -> "Target":
        return cls(kind=ResourceKind.STUDENT, teacher_id=student.teacher_id, parent_id=student.parent_id)

    @classmethod
    def attendance(cls, student) -> "Target":
        return cls(kind=ResourceKind.ATTENDANCE, teacher_id=student.teacher_id, parent_id=student.parent_id)

    @classmethod
    def class_attendance(cls, teacher_id: Optional[int]) -> "Target":
        return cls(kind=ResourceKind.ATTENDANCE, teacher_id=teacher_id)

    @classmethod
    def notification(cls, teacher_id: Optional[int], parent_id: Optional[int]) -> "Target":
        return cls(kind=ResourceKind.NOTIFICATION, teacher_id=teacher_id, parent_id=parent_id)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed
