from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.policy import AccessPolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository
from .identities.service import AuthService, IdentityService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .reports.service import AttendanceReportService
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    identities_repo: IdentityRepository
    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository
    notifications_repo: NotificationRepository

    auth_service: AuthService
    identity_service: IdentityService
    roster_service: RosterService
    attendance_service: AttendanceService
    notification_service: NotificationService
    report_service: AttendanceReportService
    dashboard_service: DashboardService


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    identities_repo: IdentityRepository,
    roster_repo: RosterRepository,
    attendance_repo: AttendanceRepository,
    notifications_repo: NotificationRepository,
    policy: Optional[AccessPolicy] = None,
) -> Container:
    """Build the services on top of the given repositories (MySQL or in-memory)."""

    policy = policy or AccessPolicy()
    attendance_service = AttendanceService(attendance_repo, roster_repo, policy)

    return Container(
        conn=conn,
        identities_repo=identities_repo,
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        auth_service=AuthService(identities_repo),
        identity_service=IdentityService(identities_repo, policy),
        roster_service=RosterService(roster_repo, identities_repo, policy),
        attendance_service=attendance_service,
        notification_service=NotificationService(notifications_repo, roster_repo, policy),
        report_service=AttendanceReportService(attendance_service, roster_repo),
        dashboard_service=DashboardService(identities_repo, roster_repo, attendance_repo, notifications_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        identities_repo=MySQLIdentityRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
    )
