from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .join_requests.mysql_join_request_repository import MySQLJoinRequestRepository
from .join_requests.repository import JoinRequestRepository
from .join_requests.service import JoinRequestService
from .notices.mysql_notice_repository import MySQLNoticeRepository
from .notices.repository import NoticeRepository
from .notices.service import NoticeService
from .papers.mysql_paper_repository import MySQLPaperRepository
from .papers.repository import PaperRepository
from .papers.service import PaperService
from .system_settings.mysql_settings_repository import MySQLSettingsRepository
from .system_settings.repository import SettingsRepository
from .system_settings.service import SettingsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    join_requests_repo: JoinRequestRepository
    attendance_repo: AttendanceRepository
    notices_repo: NoticeRepository
    papers_repo: PaperRepository
    settings_repo: SettingsRepository

    auth_service: AuthService
    user_service: UserService
    join_request_service: JoinRequestService
    attendance_service: AttendanceService
    notice_service: NoticeService
    paper_service: PaperService
    settings_service: SettingsService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: UserRepository,
    join_requests_repo: JoinRequestRepository,
    attendance_repo: AttendanceRepository,
    notices_repo: NoticeRepository,
    papers_repo: PaperRepository,
    settings_repo: SettingsRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, fakes in tests)."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        join_requests_repo=join_requests_repo,
        attendance_repo=attendance_repo,
        notices_repo=notices_repo,
        papers_repo=papers_repo,
        settings_repo=settings_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        join_request_service=JoinRequestService(join_requests_repo, users_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo),
        notice_service=NoticeService(notices_repo, users_repo),
        paper_service=PaperService(papers_repo, users_repo),
        settings_service=SettingsService(settings_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        join_requests_repo=MySQLJoinRequestRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notices_repo=MySQLNoticeRepository(conn),
        papers_repo=MySQLPaperRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
    )
