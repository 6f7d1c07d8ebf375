from __future__ import annotations

import pytest

from src.staffdesk.staffdesk.analytics.service import DashboardService
from src.staffdesk.staffdesk.core.enums import Role, TaskPriority, TaskStatus, WorkLogStatus
from src.staffdesk.staffdesk.tasks.model import Task
from src.staffdesk.staffdesk.users.model import User
from src.staffdesk.staffdesk.worklogs.model import WorkLog


class StaticTasks:
    def __init__(self, tasks):
        self._tasks = tasks

    def list_all(self, *, assigned_to=None):
        return [t for t in self._tasks if assigned_to is None or t.assigned_to == assigned_to]


class StaticWorkLogs:
    def __init__(self, logs):
        self._logs = logs

    def list_all(self, *, status=None):
        return [w for w in self._logs if status is None or w.status == status]

    def list_for_user(self, user_id):
        return [w for w in self._logs if w.user_id == user_id]


class StaticUsers:
    def __init__(self, users):
        self._users = users

    def list_all(self, *, role=None):
        return [u for u in self._users if role is None or u.role == role]


def _task(task_id, status, assigned_to) -> Task:
    return Task(
        task_id=task_id,
        title=task_id,
        description=None,
        status=status,
        priority=TaskPriority.MEDIUM,
        task_type="GENERAL",
        assigned_to=assigned_to,
        assigned_by="admin",
    )


def _log(worklog_id, user_id, status, minutes) -> WorkLog:
    return WorkLog(
        worklog_id=worklog_id, user_id=user_id, title="t", summary="s", time_spent_min=minutes, status=status
    )


def _user(user_id, role, department=None, is_active=True) -> User:
    return User(
        user_id=user_id,
        name=user_id,
        email=f"{user_id}@x.io",
        password_hash="-",
        role=role,
        department=department,
        is_active=is_active,
    )


@pytest.fixture
def svc():
    tasks = [
        _task("t1", TaskStatus.COMPLETED, "staff"),
        _task("t2", TaskStatus.PENDING, "staff"),
        _task("t3", TaskStatus.IN_PROGRESS, "dev"),
        _task("t4", TaskStatus.COMPLETED, "client"),
    ]
    logs = [
        _log("w1", "staff", WorkLogStatus.APPROVED, 90),
        _log("w2", "staff", WorkLogStatus.PENDING, 30),
        _log("w3", "dev", WorkLogStatus.APPROVED, 30),
    ]
    users = [
        _user("admin", Role.ADMIN, "Management"),
        _user("staff", Role.STAFF, "Development"),
        _user("dev", Role.STAFF, "Development"),
        _user("client", Role.CLIENT),
        _user("old", Role.STAFF, is_active=False),
    ]
    return DashboardService(StaticTasks(tasks), StaticWorkLogs(logs), StaticUsers(users))


def test_overview_counts(svc):
    data = svc.overview()

    assert data["totalTasks"] == 4
    assert data["tasksByStatus"]["COMPLETED"] == 2
    assert data["tasksByStatus"]["CANCELLED"] == 0
    assert sum(data["tasksByStatus"].values()) == data["totalTasks"]
    assert data["workLogsByStatus"] == {"PENDING": 1, "APPROVED": 2, "REJECTED": 0}
    assert data["usersByRole"] == {"ADMIN": 1, "STAFF": 2, "CLIENT": 1}
    assert data["totalUsers"] == 4


def test_performance_metrics(svc):
    data = svc.performance()

    assert data["completedTasks"] == 2
    assert data["totalTasks"] == 4
    assert data["completionRate"] == 50.0
    # 3 team tasks over 4 team members (admin, staff, dev, old)
    assert data["averageTasksPerUser"] == 0.8
    assert data["totalWorkHours"] == 2.0
    assert data["departments"] == [
        {"department": "Development", "count": 2},
        {"department": "Management", "count": 1},
    ]
    assert data["taskStatusPercentages"]["IN_PROGRESS"] == 25.0


def test_staff_stats(svc):
    data = svc.staff_stats()

    assert data["totalStaff"] == 4
    assert data["activeStaff"] == 3
    assert data["departments"] == 2
    assert data["departmentBreakdown"] == {"Development": 2, "Management": 1}


def test_my_overview_is_scoped_to_user(svc):
    data = svc.my_overview(user_id="staff")

    assert data["totalTasks"] == 2
    assert data["tasksByStatus"]["PENDING"] == 1
    assert data["workLogsByStatus"]["APPROVED"] == 1
    assert data["minutesLogged"] == 120


def test_empty_store_gives_zeros():
    svc = DashboardService(StaticTasks([]), StaticWorkLogs([]), StaticUsers([]))

    perf = svc.performance()
    assert perf["completionRate"] == 0.0
    assert perf["averageTasksPerUser"] == 0.0
    assert svc.overview()["tasksByStatus"]["PENDING"] == 0
