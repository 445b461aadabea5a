from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        teacher_id: int,
        student_id: int,
        parent_id: int,
        message: str,
        type: NotificationType,
    ) -> Notification:
        """Insert with is_read = false and created_at = server time."""

        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def mark_read(self, notification_id: int) -> bool:
        raise NotImplementedError

    # Listings are ordered by created_at descending.
    def list_for_teacher(self, teacher_id: int) -> Sequence[Notification]:
        raise NotImplementedError

    def list_for_parent(self, parent_id: int) -> Sequence[Notification]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread_for_parent(self, parent_id: int) -> int:
        raise NotImplementedError
