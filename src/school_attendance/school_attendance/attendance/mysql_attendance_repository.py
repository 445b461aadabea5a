from __future__ import annotations

from datetime import date, time
from typing import Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders, normalize_mysql_time
from .model import AttendanceRecord, DailyRosterRow
from .repository import AttendanceRepository

_COLUMNS = "a.record_id, a.student_id, a.attendance_date, a.status, a.arrival_time, a.justification"


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        arrival_time=normalize_mysql_time(r.get("arrival_time")),
        justification=r.get("justification"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_for_day(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        arrival_time: Optional[time],
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, status, arrival_time, justification)
                VALUES(%s,%s,%s,%s,NULL)
                ON DUPLICATE KEY UPDATE status=VALUES(status), arrival_time=VALUES(arrival_time)
                """,
                (int(student_id), attendance_date, status.value, arrival_time),
            )
            # Same transaction: we read back our own write.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.student_id=%s AND a.attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            return _row_to_record(fetchone(cur))

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def justify(self, *, record_id: int, justification: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, justification=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    AttendanceStatus.ABSENT_JUSTIFIED.value,
                    justification,
                    int(record_id),
                    AttendanceStatus.ABSENT.value,
                ),
            )
            return cur.rowcount > 0

    def list_for_class_and_date(self, class_id: int, attendance_date: date) -> Sequence[DailyRosterRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, s.given_name, s.family_name
                FROM attendance_records a
                JOIN students s ON s.id = a.student_id
                WHERE s.class_id=%s AND a.attendance_date=%s
                ORDER BY s.family_name, s.given_name, s.id
                """,
                (int(class_id), attendance_date),
            )
            return [
                DailyRosterRow(record=_row_to_record(r), given_name=r["given_name"], family_name=r["family_name"])
                for r in fetchall(cur)
            ]

    def list_for_students_in_range(
        self,
        student_ids: Sequence[int],
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceRecord]:
        ids = sorted({int(i) for i in student_ids})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.student_id IN ({in_placeholders(ids)})
                  AND a.attendance_date BETWEEN %s AND %s
                ORDER BY a.attendance_date ASC, a.student_id ASC
                """,
                (*ids, start_date, end_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_by_status(self, attendance_date: date) -> Dict[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS n
                FROM attendance_records
                WHERE attendance_date=%s
                GROUP BY status
                """,
                (attendance_date,),
            )
            counts = {s: 0 for s in AttendanceStatus}
            for r in fetchall(cur):
                counts[AttendanceStatus(r["status"])] = int(r["n"])
            return counts
