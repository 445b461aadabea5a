from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import SchoolClass, Student


class RosterRepository(Protocol):
    # Classes
    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_classes(self, *, teacher_id: Optional[int] = None) -> Sequence[SchoolClass]:
        """All classes, or only those owned by teacher_id; ordered by name."""

        raise NotImplementedError

    def create_class(self, *, name: str, teacher_id: int) -> int:
        raise NotImplementedError

    def rename_class(self, *, class_id: int, name: str) -> bool:
        raise NotImplementedError

    def delete_class(self, *, class_id: int) -> bool:
        raise NotImplementedError

    # Students
    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_students_by_ids(self, student_ids: Iterable[int]) -> Sequence[Student]:
        raise NotImplementedError

    def list_students_for_class(self, class_id: int) -> Sequence[Student]:
        """Ordered by family name, given name."""

        raise NotImplementedError

    def list_students_for_parent(self, parent_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def create_student(self, *, given_name: str, family_name: str, class_id: int, parent_id: int) -> int:
        raise NotImplementedError

    def update_student(
        self,
        *,
        student_id: int,
        given_name: str,
        family_name: str,
        class_id: int,
        parent_id: int,
    ) -> bool:
        raise NotImplementedError

    def delete_student(self, *, student_id: int) -> bool:
        """Delete the student with its attendance rows and notifications."""

        raise NotImplementedError

    def count_classes(self) -> int:
        raise NotImplementedError

    def count_students(self) -> int:
        raise NotImplementedError
