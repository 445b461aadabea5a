"""Example: drive the service layer directly (no Flask).

Controllers are thin; the rules live in the services, so a script can mark
and query attendance with the same checks as the API.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.school_attendance.school_attendance.access.model import Principal
from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import Role


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    teacher = Principal(identity_id=1, role=Role.TEACHER)
    for cls in container.roster_service.list_classes(teacher):
        rows = container.attendance_service.query_by_date_and_class(
            teacher, attendance_date=date.today(), class_id=cls.id
        )
        print(cls.name, [r.to_dict() for r in rows])


if __name__ == "__main__":
    main()
