from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one calendar day.

    (student_id, attendance_date) is the natural key; record_id is synthetic.
    """

    record_id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    arrival_time: Optional[time] = None
    justification: Optional[str] = None

    @property
    def present(self) -> bool:
        return self.status.counts_as_present

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "student_id": self.student_id,
            "date": self.attendance_date.isoformat(),
            "status": self.status.value,
            "present": self.present,
            "arrival_time": self.arrival_time.strftime("%H:%M:%S") if self.arrival_time else None,
            "justification": self.justification,
        }


@dataclass(frozen=True)
class DailyRosterRow:
    """Read-model: a record joined with the student's names (class/day view)."""

    record: AttendanceRecord
    given_name: str
    family_name: str

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["given_name"] = self.given_name
        data["family_name"] = self.family_name
        return data
