from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Dict, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.school_attendance.school_attendance.access.model import Principal
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord, DailyRosterRow
from src.school_attendance.school_attendance.container import Container, wire_container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, NotificationType, Role
from src.school_attendance.school_attendance.identities.model import IDENTITY_TYPES
from src.school_attendance.school_attendance.notifications.model import Notification
from src.school_attendance.school_attendance.roster.model import SchoolClass, Student


class InMemoryIdentities:
    def __init__(self):
        self._rows: dict[Role, dict[int, object]] = {r: {} for r in Role}
        self._next = {r: 0 for r in Role}

    def add(self, role: Role, *, id: int, given_name: str, family_name: str, email: str, password: str):
        account = IDENTITY_TYPES[role](
            id=id,
            given_name=given_name,
            family_name=family_name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        self._rows[role][id] = account
        self._next[role] = max(self._next[role], id)
        return account

    def get_by_email(self, email: str, role: Role):
        return next((a for a in self._rows[role].values() if a.email == email), None)

    def get_by_id(self, identity_id: int, role: Role):
        return self._rows[role].get(int(identity_id))

    def list_by_role(self, role: Role):
        return sorted(self._rows[role].values(), key=lambda a: (a.family_name, a.given_name))

    def create(self, *, role: Role, given_name: str, family_name: str, email: str, password_hash: str) -> int:
        self._next[role] += 1
        new_id = self._next[role]
        self._rows[role][new_id] = IDENTITY_TYPES[role](
            id=new_id,
            given_name=given_name,
            family_name=family_name,
            email=email,
            password_hash=password_hash,
        )
        return new_id

    def delete(self, identity_id: int, role: Role) -> bool:
        return self._rows[role].pop(int(identity_id), None) is not None

    def count_by_role(self, role: Role) -> int:
        return len(self._rows[role])


class InMemoryRoster:
    def __init__(self):
        self.classes: dict[int, SchoolClass] = {}
        self.students: dict[int, dict] = {}
        self.on_delete_student = []
        self._next_class = 0
        self._next_student = 0

    def _student(self, row: dict) -> Student:
        cls = self.classes.get(row["class_id"])
        return Student(
            id=row["id"],
            given_name=row["given_name"],
            family_name=row["family_name"],
            class_id=row["class_id"],
            parent_id=row["parent_id"],
            teacher_id=cls.teacher_id if cls else None,
            class_name=cls.name if cls else None,
        )

    def _count(self, class_id: int) -> int:
        return sum(1 for s in self.students.values() if s["class_id"] == class_id)

    def add_class(self, *, id: int, name: str, teacher_id: int) -> None:
        self.classes[id] = SchoolClass(id=id, name=name, teacher_id=teacher_id)
        self._next_class = max(self._next_class, id)

    def add_student(self, *, id: int, given_name: str, family_name: str, class_id: int, parent_id: int) -> None:
        self.students[id] = {
            "id": id,
            "given_name": given_name,
            "family_name": family_name,
            "class_id": class_id,
            "parent_id": parent_id,
        }
        self._next_student = max(self._next_student, id)

    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        cls = self.classes.get(int(class_id))
        return replace(cls, student_count=self._count(cls.id)) if cls else None

    def list_classes(self, *, teacher_id: Optional[int] = None):
        rows = [self.get_class(c) for c in self.classes]
        if teacher_id is not None:
            rows = [c for c in rows if c.teacher_id == teacher_id]
        return sorted(rows, key=lambda c: c.name)

    def create_class(self, *, name: str, teacher_id: int) -> int:
        self._next_class += 1
        self.classes[self._next_class] = SchoolClass(id=self._next_class, name=name, teacher_id=teacher_id)
        return self._next_class

    def rename_class(self, *, class_id: int, name: str) -> bool:
        cls = self.classes.get(class_id)
        if not cls:
            return False
        self.classes[class_id] = replace(cls, name=name)
        return True

    def delete_class(self, *, class_id: int) -> bool:
        return self.classes.pop(class_id, None) is not None

    def get_student(self, student_id: int) -> Optional[Student]:
        row = self.students.get(int(student_id))
        return self._student(row) if row else None

    def get_students_by_ids(self, student_ids):
        return [self._student(self.students[i]) for i in sorted({int(i) for i in student_ids}) if i in self.students]

    def list_students_for_class(self, class_id: int):
        rows = [self._student(r) for r in self.students.values() if r["class_id"] == class_id]
        return sorted(rows, key=lambda s: (s.family_name, s.given_name, s.id))

    def list_students_for_parent(self, parent_id: int):
        rows = [self._student(r) for r in self.students.values() if r["parent_id"] == parent_id]
        return sorted(rows, key=lambda s: (s.family_name, s.given_name, s.id))

    def create_student(self, *, given_name: str, family_name: str, class_id: int, parent_id: int) -> int:
        self._next_student += 1
        self.add_student(
            id=self._next_student,
            given_name=given_name,
            family_name=family_name,
            class_id=class_id,
            parent_id=parent_id,
        )
        return self._next_student

    def update_student(self, *, student_id: int, given_name: str, family_name: str, class_id: int, parent_id: int) -> bool:
        if student_id not in self.students:
            return False
        self.students[student_id].update(
            given_name=given_name, family_name=family_name, class_id=class_id, parent_id=parent_id
        )
        return True

    def delete_student(self, *, student_id: int) -> bool:
        if self.students.pop(student_id, None) is None:
            return False
        for hook in self.on_delete_student:
            hook(student_id)
        return True

    def count_classes(self) -> int:
        return len(self.classes)

    def count_students(self) -> int:
        return len(self.students)


class InMemoryAttendance:
    """Keyed by (student_id, date) like the UNIQUE KEY; a lock stands in for row locking."""

    def __init__(self, roster: InMemoryRoster):
        self._roster = roster
        self._lock = threading.Lock()
        self.by_key: Dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0
        self.range_calls = 0

    def upsert_for_day(self, *, student_id: int, attendance_date: date, status: AttendanceStatus, arrival_time: Optional[time]):
        with self._lock:
            key = (student_id, attendance_date)
            current = self.by_key.get(key)
            if current:
                rec = replace(current, status=status, arrival_time=arrival_time)
            else:
                self._id += 1
                rec = AttendanceRecord(
                    record_id=self._id,
                    student_id=student_id,
                    attendance_date=attendance_date,
                    status=status,
                    arrival_time=arrival_time,
                    justification=None,
                )
            self.by_key[key] = rec
            return rec

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return next((r for r in self.by_key.values() if r.record_id == record_id), None)

    def justify(self, *, record_id: int, justification: str) -> bool:
        with self._lock:
            for key, r in self.by_key.items():
                if r.record_id == record_id and r.status == AttendanceStatus.ABSENT:
                    self.by_key[key] = replace(r, status=AttendanceStatus.ABSENT_JUSTIFIED, justification=justification)
                    return True
            return False

    def list_for_class_and_date(self, class_id: int, attendance_date: date):
        out = []
        for s in self._roster.list_students_for_class(class_id):
            r = self.by_key.get((s.id, attendance_date))
            if r:
                out.append(DailyRosterRow(record=r, given_name=s.given_name, family_name=s.family_name))
        return out

    def list_for_students_in_range(self, student_ids, start_date: date, end_date: date):
        self.range_calls += 1
        ids = {int(i) for i in student_ids}
        rows = [r for r in self.by_key.values() if r.student_id in ids and start_date <= r.attendance_date <= end_date]
        return sorted(rows, key=lambda r: (r.attendance_date, r.student_id))

    def count_by_status(self, attendance_date: date):
        counts = {s: 0 for s in AttendanceStatus}
        for r in self.by_key.values():
            if r.attendance_date == attendance_date:
                counts[r.status] += 1
        return counts

    def delete_for_student(self, student_id: int) -> None:
        for key in [k for k in self.by_key if k[0] == student_id]:
            del self.by_key[key]


class InMemoryNotifications:
    def __init__(self, now: datetime):
        self.now = now
        self.rows: dict[int, Notification] = {}
        self._id = 0

    def create(self, *, teacher_id: int, student_id: int, parent_id: int, message: str, type: NotificationType):
        self._id += 1
        n = Notification(
            notification_id=self._id,
            teacher_id=teacher_id,
            student_id=student_id,
            parent_id=parent_id,
            message=message,
            type=type,
            created_at=self.now,
        )
        self.rows[n.notification_id] = n
        return n

    def get_by_id(self, notification_id: int):
        return self.rows.get(notification_id)

    def mark_read(self, notification_id: int) -> bool:
        n = self.rows.get(notification_id)
        if not n:
            return False
        self.rows[notification_id] = replace(n, is_read=True)
        return True

    def _sorted(self, rows):
        return sorted(rows, key=lambda n: (n.created_at, n.notification_id), reverse=True)

    def list_for_teacher(self, teacher_id: int):
        return self._sorted(n for n in self.rows.values() if n.teacher_id == teacher_id)

    def list_for_parent(self, parent_id: int):
        return self._sorted(n for n in self.rows.values() if n.parent_id == parent_id)

    def list_all(self):
        return self._sorted(self.rows.values())

    def count_unread_for_parent(self, parent_id: int) -> int:
        return sum(1 for n in self.rows.values() if n.parent_id == parent_id and not n.is_read)

    def delete_for_student(self, student_id: int) -> None:
        for k in [k for k, n in self.rows.items() if n.student_id == student_id]:
            del self.rows[k]


@dataclass
class School:
    identities: InMemoryIdentities
    roster: InMemoryRoster
    attendance: InMemoryAttendance
    notifications: InMemoryNotifications
    container: Container


ADMIN = Principal(identity_id=1, role=Role.ADMIN)
TEACHER_A = Principal(identity_id=1, role=Role.TEACHER)
TEACHER_B = Principal(identity_id=2, role=Role.TEACHER)
PARENT_1 = Principal(identity_id=1, role=Role.PARENT)
PARENT_2 = Principal(identity_id=2, role=Role.PARENT)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 9, 2, 8, 15, 30, 123456)


@pytest.fixture
def school(fixed_now) -> School:
    """Two teachers with one class each.

    - class 1 (teacher A): student 7 (parent 1), student 9 (parent 2)
    - class 2 (teacher B): student 11 (parent 2)
    """

    identities = InMemoryIdentities()
    identities.add(Role.ADMIN, id=1, given_name="Admin", family_name="Lycee", email="admin@ecole.fr", password="admin123")
    identities.add(Role.TEACHER, id=1, given_name="Marie", family_name="Dupont", email="marie@ecole.fr", password="1234")
    identities.add(Role.TEACHER, id=2, given_name="Pierre", family_name="Martin", email="pierre@ecole.fr", password="4567")
    identities.add(Role.PARENT, id=1, given_name="Jean", family_name="Bernard", email="jean@gmail.com", password="password1")
    identities.add(Role.PARENT, id=2, given_name="Sophie", family_name="Petit", email="sophie@gmail.com", password="password2")

    roster = InMemoryRoster()
    roster.add_class(id=1, name="6eme A", teacher_id=1)
    roster.add_class(id=2, name="5eme B", teacher_id=2)
    roster.add_student(id=7, given_name="Lucas", family_name="Bernard", class_id=1, parent_id=1)
    roster.add_student(id=9, given_name="Emma", family_name="Petit", class_id=1, parent_id=2)
    roster.add_student(id=11, given_name="Hugo", family_name="Petit", class_id=2, parent_id=2)

    attendance = InMemoryAttendance(roster)
    notifications = InMemoryNotifications(now=fixed_now)
    roster.on_delete_student.extend([attendance.delete_for_student, notifications.delete_for_student])

    container = wire_container(
        conn=None,
        identities_repo=identities,
        roster_repo=roster,
        attendance_repo=attendance,
        notifications_repo=notifications,
    )
    return School(
        identities=identities,
        roster=roster,
        attendance=attendance,
        notifications=notifications,
        container=container,
    )


@pytest.fixture
def admin() -> Principal:
    return ADMIN


@pytest.fixture
def teacher_a() -> Principal:
    return TEACHER_A


@pytest.fixture
def teacher_b() -> Principal:
    return TEACHER_B


@pytest.fixture
def parent_1() -> Principal:
    return PARENT_1


@pytest.fixture
def parent_2() -> Principal:
    return PARENT_2
