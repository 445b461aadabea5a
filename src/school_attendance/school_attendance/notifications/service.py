from __future__ import annotations

from typing import Any, Optional, Sequence

from ..access.model import Principal, Target
from ..access.policy import AccessPolicy
from ..app_logger import get_logger
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import NOT_AUTHORIZED
from ..core.enums import Action, NotificationType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..roster.repository import RosterRepository
from .model import Notification
from .repository import NotificationRepository

log = get_logger("notifications")


def parse_notification_type(value: Any) -> NotificationType:
    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType.parse(value)
    except ValueError:
        raise ValidationError("type must be one of absence, tardiness, other")


class NotificationService:
    def __init__(
        self,
        notifications: NotificationRepository,
        roster: RosterRepository,
        policy: Optional[AccessPolicy] = None,
    ):
        self._notifications = notifications
        self._roster = roster
        self._policy = policy or AccessPolicy()

    def create(
        self,
        principal: Principal,
        *,
        student_id: Any,
        message: str,
        type: Any = None,
        parent_id: Any = None,
    ) -> Notification:
        """Teacher writes to the parent of a student in one of their classes.

        parent_id is optional: it defaults to the student's parent and must
        match it when given.
        """
        message = require_non_empty(message, "message")
        ntype = parse_notification_type(type)
        student_id = require_positive_int(student_id, "student_id")

        student = self._roster.get_student(student_id)
        if student is None or not self._policy.can(principal, Action.WRITE, Target.student(student)):
            raise AuthorizationError(NOT_AUTHORIZED)

        if student.parent_id is None:
            raise ValidationError("student has no parent to notify")
        if parent_id not in (None, "") and require_positive_int(parent_id, "parent_id") != student.parent_id:
            raise ValidationError("parent_id does not match the student's parent")

        self._policy.require(
            principal,
            Action.WRITE,
            Target.notification(principal.identity_id, student.parent_id),
        )
        created = self._notifications.create(
            teacher_id=principal.identity_id,
            student_id=student.id,
            parent_id=student.parent_id,
            message=message,
            type=ntype,
        )
        log.info(
            "notification #%d (%s) teacher #%d -> parent #%d",
            created.notification_id,
            ntype.value,
            principal.identity_id,
            student.parent_id,
        )
        return created

    def mark_read(self, principal: Principal, notification_id: Any) -> Notification:
        """Idempotent: marking an already-read notification is a no-op."""
        n = self._notifications.get_by_id(require_positive_int(notification_id, "notification_id"))
        if n is None or not self._policy.can(
            principal, Action.ACKNOWLEDGE, Target.notification(n.teacher_id, n.parent_id)
        ):
            raise NotFoundError("notification not found")

        if not n.is_read:
            self._notifications.mark_read(n.notification_id)
        return self._notifications.get_by_id(n.notification_id) or n

    def list_for(self, principal: Principal) -> Sequence[Notification]:
        if principal.is_admin:
            return self._notifications.list_all()
        if principal.is_teacher:
            return self._notifications.list_for_teacher(principal.identity_id)
        if principal.is_parent:
            return self._notifications.list_for_parent(principal.identity_id)
        raise AuthorizationError(NOT_AUTHORIZED)

    def unread_count(self, principal: Principal) -> int:
        if not principal.is_parent:
            return 0
        return self._notifications.count_unread_for_parent(principal.identity_id)
