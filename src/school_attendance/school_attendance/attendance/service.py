from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Iterable, Optional, Sequence

from ..access.model import Principal, Target
from ..access.policy import AccessPolicy
from ..app_logger import get_logger
from ..common.datetime_utils import now_local, parse_clock_time, parse_iso_date
from ..common.validators import parse_id_list, require_bool, require_non_empty, require_positive_int
from ..core.constants import MAX_JUSTIFICATION_LENGTH, NOT_AUTHORIZED
from ..core.enums import Action, AttendanceStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..roster.repository import RosterRepository
from .model import AttendanceRecord, DailyRosterRow
from .repository import AttendanceRepository

log = get_logger("attendance")


def _as_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError(f"{field_name} is required")
    return parse_iso_date(str(value))


def _as_time(value: Any) -> Optional[time]:
    if value is None or isinstance(value, time):
        return value
    return parse_clock_time(str(value))


class AttendanceService:
    """Use case: mark attendance, justify absences, query the ledger.

    Error kinds per operation (missing and out-of-scope are never told apart):
    - mark_attendance, query_by_date_and_class, query_by_students_and_date_range:
      AuthorizationError
    - justify_absence, get_record: NotFoundError
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        policy: Optional[AccessPolicy] = None,
    ):
        self._attendance = attendance
        self._roster = roster
        self._policy = policy or AccessPolicy()

    def mark_attendance(
        self,
        principal: Principal,
        *,
        student_id: Any,
        attendance_date: Any,
        present: Any,
        arrival_time: Any = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        student_id = require_positive_int(student_id, "student_id")
        day = _as_date(attendance_date)
        present = require_bool(present, "present")
        arrival = _as_time(arrival_time)

        student = self._roster.get_student(student_id)
        if student is None or not self._policy.can(principal, Action.WRITE, Target.attendance(student)):
            raise AuthorizationError(NOT_AUTHORIZED)

        if present:
            status = AttendanceStatus.PRESENT
            if arrival is None:
                arrival = (now or now_local()).time().replace(microsecond=0)
        else:
            status = AttendanceStatus.ABSENT
            arrival = None

        record = self._attendance.upsert_for_day(
            student_id=student_id,
            attendance_date=day,
            status=status,
            arrival_time=arrival,
        )
        log.info(
            "attendance student #%d %s -> %s by %s #%d",
            student_id,
            day.isoformat(),
            record.status.value,
            principal.role.value,
            principal.identity_id,
        )
        return record

    def justify_absence(self, principal: Principal, *, record_id: Any, text: str) -> AttendanceRecord:
        text = require_non_empty(text, "justification")
        if len(text) > MAX_JUSTIFICATION_LENGTH:
            raise ValidationError(f"justification must be at most {MAX_JUSTIFICATION_LENGTH} characters")

        record = self._scoped_record(principal, record_id, Action.JUSTIFY)
        if record.status != AttendanceStatus.ABSENT:
            raise InvalidStateError("only an unjustified absence can be justified")

        # Conditional on status='ABSENT': a concurrent justification loses here.
        if not self._attendance.justify(record_id=record.record_id, justification=text):
            raise InvalidStateError("only an unjustified absence can be justified")

        log.info("absence #%d justified by %s #%d", record.record_id, principal.role.value, principal.identity_id)
        updated = self._attendance.get_by_id(record.record_id)
        if updated is None:
            raise NotFoundError("attendance record not found")
        return updated

    def get_record(self, principal: Principal, record_id: Any) -> AttendanceRecord:
        return self._scoped_record(principal, record_id, Action.READ)

    def query_by_date_and_class(
        self,
        principal: Principal,
        *,
        attendance_date: Any,
        class_id: Any,
    ) -> Sequence[DailyRosterRow]:
        day = _as_date(attendance_date)
        class_id = require_positive_int(class_id, "class_id")

        cls = self._roster.get_class(class_id)
        if cls is None or not self._policy.can(principal, Action.READ, Target.class_attendance(cls.teacher_id)):
            raise AuthorizationError(NOT_AUTHORIZED)
        return self._attendance.list_for_class_and_date(cls.id, day)

    def query_by_students_and_date_range(
        self,
        principal: Principal,
        *,
        student_ids: Iterable[Any] | str | None,
        start_date: Any,
        end_date: Any,
    ) -> Sequence[AttendanceRecord]:
        ids = sorted(set(parse_id_list(student_ids, "student_ids")))
        if not ids:
            return []

        start = _as_date(start_date, "start")
        end = _as_date(end_date, "end")
        if start > end:
            raise ValidationError("start must be on or before end")

        students = self._roster.get_students_by_ids(ids)
        if len(students) != len(ids):
            raise AuthorizationError(NOT_AUTHORIZED)
        for s in students:
            self._policy.require(principal, Action.READ, Target.attendance(s))

        return self._attendance.list_for_students_in_range(ids, start, end)

    def _scoped_record(self, principal: Principal, record_id: Any, action: Action) -> AttendanceRecord:
        record = self._attendance.get_by_id(require_positive_int(record_id, "record_id"))
        if record is None:
            raise NotFoundError("attendance record not found")
        student = self._roster.get_student(record.student_id)
        if student is None or not self._policy.can(principal, action, Target.attendance(student)):
            raise NotFoundError("attendance record not found")
        return record
