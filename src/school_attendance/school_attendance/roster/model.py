from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class, owned by exactly one teacher."""

    id: int
    name: str
    teacher_id: Optional[int]
    student_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "teacher_id": self.teacher_id,
            "student_count": self.student_count,
        }


@dataclass(frozen=True)
class Student:
    """Domain entity: a student.

    teacher_id is the owning teacher of the student's class, joined in by the
    repository so ownership checks need no extra query.
    """

    id: int
    given_name: str
    family_name: str
    class_id: Optional[int]
    parent_id: Optional[int]
    teacher_id: Optional[int] = None
    class_name: Optional[str] = None
    parent_given_name: Optional[str] = None
    parent_family_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "given_name": self.given_name,
            "family_name": self.family_name,
            "class_id": self.class_id,
            "class_name": self.class_name,
            "parent_id": self.parent_id,
            "parent_given_name": self.parent_given_name,
            "parent_family_name": self.parent_family_name,
        }
