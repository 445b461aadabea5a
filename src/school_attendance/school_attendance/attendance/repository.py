from __future__ import annotations

from datetime import date, time
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, DailyRosterRow


class AttendanceRepository(Protocol):
    def upsert_for_day(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        arrival_time: Optional[time],
    ) -> AttendanceRecord:
        """Insert or update the (student_id, attendance_date) row in one statement.

        Updates touch status and arrival_time only; justification is kept.
        Returns the row as stored after the write.
        """

        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def justify(self, *, record_id: int, justification: str) -> bool:
        """ABSENT -> ABSENT_JUSTIFIED; False when the row is not ABSENT (anymore)."""

        raise NotImplementedError

    def list_for_class_and_date(self, class_id: int, attendance_date: date) -> Sequence[DailyRosterRow]:
        raise NotImplementedError

    def list_for_students_in_range(
        self,
        student_ids: Sequence[int],
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_status(self, attendance_date: date) -> Dict[AttendanceStatus, int]:
        raise NotImplementedError
