from __future__ import annotations

from typing import Optional

from ..core.constants import NOT_AUTHORIZED
from ..core.enums import Action, ResourceKind, Role
from ..core.exceptions import AuthorizationError
from .model import Decision, Principal, Target

ALLOW = Decision(True)
DENY = Decision(False, NOT_AUTHORIZED)

_ROSTER = {ResourceKind.CLASS, ResourceKind.STUDENT}


def _owns(principal_id: int, owner_id: Optional[int]) -> bool:
    return owner_id is not None and int(owner_id) == int(principal_id)


class AccessPolicy:
    """Role x action rules with ownership checks.

    Pure decision function: no storage access, no side effects. Every deny
    carries the same generic reason so callers learn nothing about the resource.

    - admin: read/write teacher and parent accounts and the roster; read-only
      on attendance and notifications.
    - teacher: read/write roster and attendance of the classes they own,
      notifications they authored; read-only on parent accounts.
    - parent: read their own children and their attendance, justify those
      absences, read/acknowledge notifications addressed to them.
    """

    def authorize(self, principal: Principal, action: Action, target: Target) -> Decision:
        if principal.role == Role.ADMIN:
            allowed = self._admin(action, target)
        elif principal.role == Role.TEACHER:
            allowed = self._teacher(principal.identity_id, action, target)
        elif principal.role == Role.PARENT:
            allowed = self._parent(principal.identity_id, action, target)
        else:
            allowed = False
        return ALLOW if allowed else DENY

    def require(self, principal: Principal, action: Action, target: Target) -> None:
        decision = self.authorize(principal, action, target)
        if not decision.allowed:
            raise AuthorizationError(decision.reason or NOT_AUTHORIZED)

    def can(self, principal: Principal, action: Action, target: Target) -> bool:
        return self.authorize(principal, action, target).allowed

    @staticmethod
    def _admin(action: Action, target: Target) -> bool:
        if target.kind == ResourceKind.IDENTITY:
            return target.identity_role in {Role.TEACHER, Role.PARENT} and action in {Action.READ, Action.WRITE}
        if target.kind in _ROSTER:
            return action in {Action.READ, Action.WRITE}
        if target.kind in {ResourceKind.ATTENDANCE, ResourceKind.NOTIFICATION}:
            return action == Action.READ
        return False

    @staticmethod
    def _teacher(teacher_id: int, action: Action, target: Target) -> bool:
        if target.kind == ResourceKind.IDENTITY:
            return target.identity_role == Role.PARENT and action == Action.READ
        if target.kind in _ROSTER:
            return action in {Action.READ, Action.WRITE} and _owns(teacher_id, target.teacher_id)
        if target.kind == ResourceKind.ATTENDANCE:
            return action in {Action.READ, Action.WRITE, Action.JUSTIFY} and _owns(teacher_id, target.teacher_id)
        if target.kind == ResourceKind.NOTIFICATION:
            return action in {Action.READ, Action.WRITE, Action.ACKNOWLEDGE} and _owns(teacher_id, target.teacher_id)
        return False

    @staticmethod
    def _parent(parent_id: int, action: Action, target: Target) -> bool:
        if target.kind == ResourceKind.STUDENT:
            return action == Action.READ and _owns(parent_id, target.parent_id)
        if target.kind == ResourceKind.ATTENDANCE:
            return action in {Action.READ, Action.JUSTIFY} and _owns(parent_id, target.parent_id)
        if target.kind == ResourceKind.NOTIFICATION:
            return action in {Action.READ, Action.ACKNOWLEDGE} and _owns(parent_id, target.parent_id)
        return False
