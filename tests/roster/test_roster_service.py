from __future__ import annotations

from datetime import date

import pytest

from src.school_attendance.school_attendance.core.enums import NotificationType
from src.school_attendance.school_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)


def test_classes_visible_per_role(school, admin, teacher_a, parent_1):
    svc = school.container.roster_service

    assert [c.id for c in svc.list_classes(admin)] == [2, 1]  # ordered by name
    assert [c.id for c in svc.list_classes(teacher_a)] == [1]
    with pytest.raises(AuthorizationError):
        svc.list_classes(parent_1)


def test_teacher_creates_own_class_admin_assigns(school, admin, teacher_a):
    svc = school.container.roster_service

    mine = svc.create_class(teacher_a, name="4eme A", teacher_id=2)
    assert mine.teacher_id == 1

    assigned = svc.create_class(admin, name="4eme B", teacher_id=2)
    assert assigned.teacher_id == 2

    with pytest.raises(ValidationError):
        svc.create_class(admin, name="3eme A", teacher_id=99)


def test_rename_and_delete_class_by_id(school, teacher_a, teacher_b):
    svc = school.container.roster_service

    assert svc.rename_class(teacher_a, class_id=1, name="6eme C").name == "6eme C"
    with pytest.raises(NotFoundError):
        svc.rename_class(teacher_b, class_id=1, name="stolen")

    # Class 1 still has students.
    with pytest.raises(ValidationError):
        svc.delete_class(teacher_a, class_id=1)

    empty = svc.create_class(teacher_a, name="Option latin")
    svc.delete_class(teacher_a, class_id=empty.id)
    with pytest.raises(NotFoundError):
        svc.delete_class(teacher_a, class_id=empty.id)


def test_class_roster_is_scoped(school, teacher_a, teacher_b, admin):
    svc = school.container.roster_service

    assert [s.id for s in svc.list_students_for_class(teacher_a, 1)] == [7, 9]
    with pytest.raises(AuthorizationError):
        svc.list_students_for_class(teacher_b, 1)
    with pytest.raises(AuthorizationError):
        svc.list_students_for_class(teacher_b, 404)
    with pytest.raises(NotFoundError):
        svc.list_students_for_class(admin, 404)


def test_enrol_student_by_parent_email(school, teacher_a):
    student = school.container.roster_service.enrol_student(
        teacher_a,
        given_name="Lea",
        family_name="Bernard",
        class_id=1,
        parent_email="JEAN@gmail.com",
    )

    assert student.parent_id == 1
    assert student.teacher_id == 1
    assert school.roster.get_student(student.id).class_id == 1


def test_enrol_requires_existing_parent_and_owned_class(school, teacher_a):
    svc = school.container.roster_service

    with pytest.raises(ValidationError):
        svc.enrol_student(teacher_a, given_name="X", family_name="Y", class_id=1, parent_email="nobody@x.fr")
    with pytest.raises(ValidationError):
        svc.enrol_student(teacher_a, given_name="X", family_name="Y", class_id=1, parent_id=42)
    with pytest.raises(ValidationError):
        svc.enrol_student(teacher_a, given_name="X", family_name="Y", class_id=1)
    with pytest.raises(AuthorizationError):
        svc.enrol_student(teacher_a, given_name="X", family_name="Y", class_id=2, parent_id=1)


def test_moving_a_student_needs_both_classes(school, teacher_a, admin):
    svc = school.container.roster_service

    with pytest.raises(AuthorizationError):
        svc.update_student(teacher_a, student_id=7, class_id=2)

    moved = svc.update_student(admin, student_id=7, class_id=2, given_name="Lucas-Marie")
    assert moved.class_id == 2
    assert moved.teacher_id == 2
    assert moved.given_name == "Lucas-Marie"
    assert moved.parent_id == 1


def test_update_foreign_student_is_not_found(school, teacher_b):
    with pytest.raises(NotFoundError):
        school.container.roster_service.update_student(teacher_b, student_id=7, given_name="X")


def test_delete_student_removes_attendance_and_notifications(school, teacher_a):
    container = school.container
    container.attendance_service.mark_attendance(teacher_a, student_id=7, attendance_date=date(2024, 9, 2), present=False)
    container.notification_service.create(
        teacher_a, student_id=7, message="absent today", type=NotificationType.ABSENCE
    )

    container.roster_service.delete_student(teacher_a, student_id=7)

    assert school.roster.get_student(7) is None
    assert all(k[0] != 7 for k in school.attendance.by_key)
    assert all(n.student_id != 7 for n in school.notifications.rows.values())


def test_list_children_scoping(school, parent_1, parent_2, teacher_a, teacher_b):
    svc = school.container.roster_service

    assert [s.id for s in svc.list_children(parent_2, 2)] == [9, 11]
    with pytest.raises(AuthorizationError):
        svc.list_children(parent_1, 2)

    # Teachers only see the children enrolled in their classes.
    assert [s.id for s in svc.list_children(teacher_a, 2)] == [9]
    assert [s.id for s in svc.list_children(teacher_b, 2)] == [11]
