from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import Role

_REPORT_FIELDS = [
    "date",
    "student_id",
    "full_name",
    "class_name",
    "status",
    "arrival_time",
    "justification",
]


def register(app: Flask, container: Container) -> None:
    def _report_range() -> tuple[date, date]:
        today = date.today()
        end = parse_iso_date(request.args["end"]) if request.args.get("end") else today
        start = (
            parse_iso_date(request.args["start"])
            if request.args.get("start")
            else end - timedelta(days=DEFAULT_REPORT_DAYS - 1)
        )
        return start, end

    def _build_report():
        start, end = _report_range()
        student_ids = request.args.get("student_ids") or container.report_service.default_student_ids(g.principal)
        data = container.report_service.build_attendance_report(
            g.principal,
            start=start,
            end=end,
            student_ids=student_ids,
        )
        return start, end, data

    def _write_report_csv(*, data, filename: str):
        """Write report rows to a CSV download (BOM so spreadsheet apps read UTF-8)."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="api_mark_attendance")
    @roles_required(Role.TEACHER)
    def mark_attendance():
        body = json_body()
        record = container.attendance_service.mark_attendance(
            g.principal,
            student_id=body.get("student_id"),
            attendance_date=body.get("date") or date.today(),
            present=body.get("present"),
            arrival_time=body.get("arrival_time"),
        )
        return ok(record.to_dict())

    @app.route("/api/attendance/<int:record_id>", methods=["GET"], endpoint="api_get_attendance")
    @login_required
    def get_attendance(record_id: int):
        record = container.attendance_service.get_record(g.principal, record_id)
        return ok(record.to_dict())

    @app.route("/api/attendance/<int:record_id>/justification", methods=["PUT"], endpoint="api_justify_absence")
    @roles_required(Role.TEACHER, Role.PARENT)
    def justify_absence(record_id: int):
        body = json_body()
        record = container.attendance_service.justify_absence(
            g.principal,
            record_id=record_id,
            text=body.get("justification") or "",
        )
        return ok(record.to_dict())

    @app.route("/api/classes/<int:class_id>/attendance", methods=["GET"], endpoint="api_class_attendance")
    @login_required
    def class_attendance(class_id: int):
        day = request.args.get("date") or date.today()
        rows = container.attendance_service.query_by_date_and_class(
            g.principal,
            attendance_date=day,
            class_id=class_id,
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_range")
    @login_required
    def attendance_range():
        rows = container.attendance_service.query_by_students_and_date_range(
            g.principal,
            student_ids=request.args.get("student_ids"),
            start_date=request.args.get("start"),
            end_date=request.args.get("end"),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/api/attendance/report", methods=["GET"], endpoint="api_attendance_report")
    @login_required
    def attendance_report():
        start, end, data = _build_report()
        return ok(
            {"rows": data.rows, "summary": data.summary},
            start=start.strftime("%Y-%m-%d"),
            end=end.strftime("%Y-%m-%d"),
        )

    @app.route("/api/attendance/report.csv", methods=["GET"], endpoint="api_attendance_report_csv")
    @login_required
    def attendance_report_csv():
        start, end, data = _build_report()
        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)
