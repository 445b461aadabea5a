import pytest

from src.school_attendance.school_attendance.access.model import Principal, Target
from src.school_attendance.school_attendance.access.policy import AccessPolicy
from src.school_attendance.school_attendance.core.enums import Action, Role
from src.school_attendance.school_attendance.core.exceptions import AuthorizationError
from src.school_attendance.school_attendance.roster.model import Student

policy = AccessPolicy()

STUDENT_OF_A = Student(id=7, given_name="Lucas", family_name="Bernard", class_id=1, parent_id=1, teacher_id=1)


def test_admin_manages_teacher_and_parent_accounts_but_not_admins(admin):
    assert policy.can(admin, Action.WRITE, Target.identity(Role.TEACHER))
    assert policy.can(admin, Action.WRITE, Target.identity(Role.PARENT))
    assert not policy.can(admin, Action.WRITE, Target.identity(Role.ADMIN))


def test_admin_is_read_only_on_attendance_and_notifications(admin):
    assert policy.can(admin, Action.READ, Target.attendance(STUDENT_OF_A))
    assert not policy.can(admin, Action.WRITE, Target.attendance(STUDENT_OF_A))
    assert not policy.can(admin, Action.JUSTIFY, Target.attendance(STUDENT_OF_A))
    assert not policy.can(admin, Action.ACKNOWLEDGE, Target.notification(1, 1))


def test_teacher_writes_attendance_only_for_owned_class(teacher_a, teacher_b):
    assert policy.can(teacher_a, Action.WRITE, Target.attendance(STUDENT_OF_A))
    assert policy.can(teacher_a, Action.JUSTIFY, Target.attendance(STUDENT_OF_A))
    assert not policy.can(teacher_b, Action.WRITE, Target.attendance(STUDENT_OF_A))
    assert not policy.can(teacher_b, Action.READ, Target.school_class(1))


def test_teacher_reads_parent_directory_read_only(teacher_a):
    assert policy.can(teacher_a, Action.READ, Target.identity(Role.PARENT))
    assert not policy.can(teacher_a, Action.WRITE, Target.identity(Role.PARENT))
    assert not policy.can(teacher_a, Action.READ, Target.identity(Role.TEACHER))


def test_parent_scope_is_own_children(parent_1, parent_2):
    assert policy.can(parent_1, Action.READ, Target.attendance(STUDENT_OF_A))
    assert policy.can(parent_1, Action.JUSTIFY, Target.attendance(STUDENT_OF_A))
    assert not policy.can(parent_1, Action.WRITE, Target.attendance(STUDENT_OF_A))
    assert not policy.can(parent_2, Action.READ, Target.attendance(STUDENT_OF_A))


def test_notification_acknowledge_by_addressee_or_author(parent_1, parent_2, teacher_a, teacher_b):
    target = Target.notification(teacher_id=1, parent_id=1)
    assert policy.can(parent_1, Action.ACKNOWLEDGE, target)
    assert policy.can(teacher_a, Action.ACKNOWLEDGE, target)
    assert not policy.can(parent_2, Action.ACKNOWLEDGE, target)
    assert not policy.can(teacher_b, Action.READ, target)


def test_deny_carries_generic_reason_and_require_raises(teacher_b):
    decision = policy.authorize(teacher_b, Action.READ, Target.school_class(1))
    assert not decision
    assert decision.reason == "not authorized"

    with pytest.raises(AuthorizationError, match="not authorized"):
        policy.require(teacher_b, Action.READ, Target.school_class(1))


def test_missing_owner_is_never_owned():
    teacher = Principal(identity_id=1, role=Role.TEACHER)
    assert not policy.can(teacher, Action.READ, Target.school_class(None))
