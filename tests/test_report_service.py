from datetime import date

import pytest

from src.school_attendance.school_attendance.core.exceptions import AuthorizationError
from src.school_attendance.school_attendance.reports.service import attendance_rate


def test_attendance_rate():
    assert attendance_rate(3, 4) == 75.0
    assert attendance_rate(0, 0) is None


def test_report_counts_per_student(school, teacher_a, parent_1):
    att = school.container.attendance_service
    d1, d2, d3 = date(2024, 9, 2), date(2024, 9, 3), date(2024, 9, 4)
    att.mark_attendance(teacher_a, student_id=7, attendance_date=d1, present=True)
    att.mark_attendance(teacher_a, student_id=7, attendance_date=d2, present=False)
    rec = att.mark_attendance(teacher_a, student_id=7, attendance_date=d3, present=False)
    att.justify_absence(parent_1, record_id=rec.record_id, text="dentist")

    data = school.container.report_service.build_attendance_report(
        teacher_a, start=d1, end=d3, student_ids=[7, 9]
    )

    assert [r["date"] for r in data.rows] == ["2024-09-02", "2024-09-03", "2024-09-04"]
    by_id = {s["student_id"]: s for s in data.summary}
    assert by_id[7]["present"] == 1
    assert by_id[7]["absent"] == 1
    assert by_id[7]["justified"] == 1
    assert by_id[7]["rate"] == pytest.approx(33.3)
    assert by_id[9]["total"] == 0
    assert by_id[9]["rate"] is None


def test_report_is_scoped_like_queries(school, parent_1):
    with pytest.raises(AuthorizationError):
        school.container.report_service.build_attendance_report(
            parent_1, start=date(2024, 9, 1), end=date(2024, 9, 30), student_ids=[9]
        )


def test_default_student_ids_per_role(school, admin, teacher_b, parent_2):
    svc = school.container.report_service
    assert svc.default_student_ids(admin) == [7, 9, 11]
    assert svc.default_student_ids(teacher_b) == [11]
    assert svc.default_student_ids(parent_2) == [9, 11]
