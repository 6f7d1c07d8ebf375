from __future__ import annotations

from dataclasses import dataclass

from .analytics.service import DashboardService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.service import ProfileService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .worklogs.mysql_worklog_repository import MySQLWorkLogRepository
from .worklogs.service import WorkLogService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    user_service: UserService
    profile_service: ProfileService
    task_service: TaskService
    worklog_service: WorkLogService
    attendance_service: AttendanceService
    dashboard_service: DashboardService


def build_container(*, db_config: dict, atomic_profile_updates: bool = False) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    profiles_repo = MySQLProfileRepository(conn)
    tasks_repo = MySQLTaskRepository(conn)
    worklogs_repo = MySQLWorkLogRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    return Container(
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, profiles_repo),
        profile_service=ProfileService(profiles_repo, atomic_updates=atomic_profile_updates),
        task_service=TaskService(tasks_repo, users_repo),
        worklog_service=WorkLogService(worklogs_repo, tasks_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo),
        dashboard_service=DashboardService(tasks_repo, worklogs_repo, users_repo),
    )
