from __future__ import annotations

from typing import Optional, Sequence

from ..access.model import Principal, Target
from ..access.policy import AccessPolicy
from ..app_logger import get_logger
from ..common.validators import require_email, require_non_empty, require_positive_int
from ..core.constants import NOT_AUTHORIZED
from ..core.enums import Action, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..identities.repository import IdentityRepository
from .model import SchoolClass, Student
from .repository import RosterRepository

log = get_logger("roster")


class RosterService:
    """Use case: classes and students.

    Class-scoped lookups (a class used as a container) answer a missing class
    the same way as a foreign one: AuthorizationError. Operations addressed to
    a class or student by id answer NotFoundError for both.
    """

    def __init__(
        self,
        roster: RosterRepository,
        identities: IdentityRepository,
        policy: Optional[AccessPolicy] = None,
    ):
        self._roster = roster
        self._identities = identities
        self._policy = policy or AccessPolicy()

    # ---------- helpers ----------
    def _scoped_class(self, principal: Principal, class_id: int, action: Action) -> SchoolClass:
        cls = self._roster.get_class(int(class_id))
        if cls is None:
            if principal.is_admin:
                raise NotFoundError("class not found")
            raise AuthorizationError(NOT_AUTHORIZED)
        self._policy.require(principal, action, Target.school_class(cls.teacher_id))
        return cls

    def _class_by_id(self, principal: Principal, class_id: int) -> SchoolClass:
        cls = self._roster.get_class(int(class_id))
        if cls is None or not self._policy.can(principal, Action.WRITE, Target.school_class(cls.teacher_id)):
            raise NotFoundError("class not found")
        return cls

    def _student_by_id(self, principal: Principal, student_id: int, action: Action) -> Student:
        student = self._roster.get_student(int(student_id))
        if student is None or not self._policy.can(principal, action, Target.student(student)):
            raise NotFoundError("student not found")
        return student

    def _resolve_parent_id(self, parent_id, parent_email) -> int:
        if parent_id not in (None, ""):
            pid = require_positive_int(parent_id, "parent_id")
            if not self._identities.get_by_id(pid, Role.PARENT):
                raise ValidationError("parent not found")
            return pid
        if parent_email:
            parent = self._identities.get_by_email(require_email(parent_email, "parent email"), Role.PARENT)
            if not parent:
                raise ValidationError("no parent account with this email")
            return parent.id
        raise ValidationError("parent_id or parent_email is required")

    # ---------- classes ----------
    def list_classes(self, principal: Principal) -> Sequence[SchoolClass]:
        if principal.is_admin:
            return self._roster.list_classes()
        if principal.is_teacher:
            return self._roster.list_classes(teacher_id=principal.identity_id)
        raise AuthorizationError(NOT_AUTHORIZED)

    def get_class(self, principal: Principal, class_id: int) -> SchoolClass:
        return self._scoped_class(principal, class_id, Action.READ)

    def create_class(self, principal: Principal, *, name: str, teacher_id: int | None = None) -> SchoolClass:
        name = require_non_empty(name, "class name")
        if principal.is_teacher:
            owner_id = principal.identity_id
        else:
            owner_id = require_positive_int(teacher_id, "teacher_id")
        self._policy.require(principal, Action.WRITE, Target.school_class(owner_id))

        if not self._identities.get_by_id(owner_id, Role.TEACHER):
            raise ValidationError("teacher not found")

        class_id = self._roster.create_class(name=name, teacher_id=owner_id)
        log.info("class #%d %r created for teacher #%d", class_id, name, owner_id)
        return SchoolClass(id=class_id, name=name, teacher_id=owner_id)

    def rename_class(self, principal: Principal, *, class_id: int, name: str) -> SchoolClass:
        name = require_non_empty(name, "class name")
        cls = self._class_by_id(principal, class_id)
        self._roster.rename_class(class_id=cls.id, name=name)
        return SchoolClass(id=cls.id, name=name, teacher_id=cls.teacher_id, student_count=cls.student_count)

    def delete_class(self, principal: Principal, *, class_id: int) -> None:
        cls = self._class_by_id(principal, class_id)
        if cls.student_count > 0:
            raise ValidationError("class still has enrolled students")
        if not self._roster.delete_class(class_id=cls.id):
            raise NotFoundError("class not found")
        log.info("class #%d deleted by %s #%d", cls.id, principal.role.value, principal.identity_id)

    # ---------- students ----------
    def list_students_for_class(self, principal: Principal, class_id: int) -> Sequence[Student]:
        cls = self._scoped_class(principal, class_id, Action.READ)
        return self._roster.list_students_for_class(cls.id)

    def list_children(self, principal: Principal, parent_id: int) -> Sequence[Student]:
        parent_id = int(parent_id)
        if principal.is_parent and principal.identity_id != parent_id:
            raise AuthorizationError(NOT_AUTHORIZED)
        children = self._roster.list_students_for_parent(parent_id)
        # Teachers only see the children enrolled in their own classes.
        return [s for s in children if self._policy.can(principal, Action.READ, Target.student(s))]

    def get_student(self, principal: Principal, student_id: int) -> Student:
        return self._student_by_id(principal, student_id, Action.READ)

    def enrol_student(
        self,
        principal: Principal,
        *,
        given_name: str,
        family_name: str,
        class_id,
        parent_id=None,
        parent_email: str | None = None,
    ) -> Student:
        given_name = require_non_empty(given_name, "given name")
        family_name = require_non_empty(family_name, "family name")
        cls = self._scoped_class(principal, require_positive_int(class_id, "class_id"), Action.WRITE)
        pid = self._resolve_parent_id(parent_id, parent_email)

        student_id = self._roster.create_student(
            given_name=given_name,
            family_name=family_name,
            class_id=cls.id,
            parent_id=pid,
        )
        log.info("student #%d enrolled in class #%d (parent #%d)", student_id, cls.id, pid)
        return Student(
            id=student_id,
            given_name=given_name,
            family_name=family_name,
            class_id=cls.id,
            parent_id=pid,
            teacher_id=cls.teacher_id,
            class_name=cls.name,
        )

    def update_student(
        self,
        principal: Principal,
        *,
        student_id: int,
        given_name: str | None = None,
        family_name: str | None = None,
        class_id=None,
        parent_id=None,
        parent_email: str | None = None,
    ) -> Student:
        current = self._student_by_id(principal, student_id, Action.WRITE)

        new_given = require_non_empty(given_name, "given name") if given_name is not None else current.given_name
        new_family = require_non_empty(family_name, "family name") if family_name is not None else current.family_name

        cls_id, teacher_id, class_name = current.class_id, current.teacher_id, current.class_name
        if class_id not in (None, ""):
            new_class_id = require_positive_int(class_id, "class_id")
            if new_class_id != current.class_id:
                # Moving a student needs write access on the destination class too.
                dest = self._scoped_class(principal, new_class_id, Action.WRITE)
                cls_id, teacher_id, class_name = dest.id, dest.teacher_id, dest.name

        if parent_id not in (None, "") or parent_email:
            pid = self._resolve_parent_id(parent_id, parent_email)
        else:
            pid = current.parent_id

        if cls_id is None or pid is None:
            raise ValidationError("student must have a class and a parent")

        self._roster.update_student(
            student_id=current.id,
            given_name=new_given,
            family_name=new_family,
            class_id=cls_id,
            parent_id=pid,
        )
        return Student(
            id=current.id,
            given_name=new_given,
            family_name=new_family,
            class_id=cls_id,
            parent_id=pid,
            teacher_id=teacher_id,
            class_name=class_name,
        )

    def delete_student(self, principal: Principal, *, student_id: int) -> None:
        student = self._student_by_id(principal, student_id, Action.WRITE)
        if not self._roster.delete_student(student_id=student.id):
            raise NotFoundError("student not found")
        log.info("student #%d deleted by %s #%d", student.id, principal.role.value, principal.identity_id)
