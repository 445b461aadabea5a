from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from ..access.model import Principal
from ..attendance.service import AttendanceService
from ..common.validators import parse_id_list
from ..core.enums import AttendanceStatus
from ..roster.model import Student
from ..roster.repository import RosterRepository


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def attendance_rate(present: int, total: int) -> Optional[float]:
    """Share of marked days counted as present, in percent (None when nothing is marked)."""
    if total <= 0:
        return None
    return round(100.0 * present / total, 1)


class AttendanceReportService:
    """Per-student attendance summary over a date range.

    Scoping goes through AttendanceService, so a report never shows more than
    the caller could query directly.
    """

    def __init__(self, attendance_service: AttendanceService, roster: RosterRepository):
        self._attendance_service = attendance_service
        self._roster = roster

    def default_student_ids(self, principal: Principal) -> list[int]:
        """Students a report covers when the caller names none."""
        if principal.is_parent:
            students = self._roster.list_students_for_parent(principal.identity_id)
        else:
            teacher_id = principal.identity_id if principal.is_teacher else None
            students = [
                s
                for c in self._roster.list_classes(teacher_id=teacher_id)
                for s in self._roster.list_students_for_class(c.id)
            ]
        return sorted({s.id for s in students})

    def build_attendance_report(
        self,
        principal: Principal,
        *,
        start: date,
        end: date,
        student_ids: Iterable[Any] | str | None = None,
    ) -> ReportData:
        records = self._attendance_service.query_by_students_and_date_range(
            principal,
            student_ids=student_ids,
            start_date=start,
            end_date=end,
        )
        # Authorized above; names come from the roster.
        students: dict[int, Student] = {
            s.id: s for s in self._roster.get_students_by_ids(parse_id_list(student_ids, "student_ids"))
        }

        out_rows: list[dict] = []
        summary_map: dict[int, dict] = {
            sid: {
                "student_id": sid,
                "full_name": s.full_name,
                "class_name": s.class_name or "-",
                "present": 0,
                "absent": 0,
                "justified": 0,
            }
            for sid, s in students.items()
        }

        for r in records:
            s = students.get(r.student_id)
            out_rows.append(
                {
                    "date": r.attendance_date.strftime("%Y-%m-%d"),
                    "student_id": r.student_id,
                    "full_name": s.full_name if s else "-",
                    "class_name": (s.class_name if s else None) or "-",
                    "status": r.status.value,
                    "arrival_time": r.arrival_time.strftime("%H:%M") if r.arrival_time else "-",
                    "justification": r.justification or "",
                }
            )

            counts = summary_map.get(r.student_id)
            if counts is None:
                continue
            if r.status == AttendanceStatus.PRESENT:
                counts["present"] += 1
            elif r.status == AttendanceStatus.ABSENT_JUSTIFIED:
                counts["justified"] += 1
            else:
                counts["absent"] += 1

        summary = []
        for counts in summary_map.values():
            total = counts["present"] + counts["absent"] + counts["justified"]
            summary.append(
                {
                    **counts,
                    "total": total,
                    "rate": attendance_rate(counts["present"], total),
                }
            )

        summary.sort(key=lambda x: (x["class_name"], x["full_name"]))
        return ReportData(rows=out_rows, summary=summary)
