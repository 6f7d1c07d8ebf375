from __future__ import annotations

from ..core.enums import Role, TaskStatus, WorkLogStatus
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository
from ..worklogs.repository import WorkLogRepository
from .aggregation import aggregate_group_counts, count_for, percentage

_TEAM_ROLES = (Role.STAFF, Role.ADMIN)


def _status_counts(counts: dict, statuses) -> dict:
    # Every status present, zero when absent
    return {s.value: count_for(counts, s) for s in statuses}


class DashboardService:
    """Read-only statistics for the dashboards."""

    def __init__(self, tasks: TaskRepository, worklogs: WorkLogRepository, users: UserRepository):
        self._tasks = tasks
        self._worklogs = worklogs
        self._users = users

    def overview(self) -> dict:
        tasks = self._tasks.list_all()
        logs = self._worklogs.list_all()
        users = [u for u in self._users.list_all() if u.is_active]

        return {
            "totalTasks": len(tasks),
            "totalWorkLogs": len(logs),
            "totalUsers": len(users),
            "tasksByStatus": _status_counts(aggregate_group_counts(tasks, "status"), TaskStatus),
            "workLogsByStatus": _status_counts(aggregate_group_counts(logs, "status"), WorkLogStatus),
            "usersByRole": _status_counts(aggregate_group_counts(users, "role"), Role),
        }

    def performance(self) -> dict:
        tasks = self._tasks.list_all()
        logs = self._worklogs.list_all()
        team = [u for u in self._users.list_all() if u.role in _TEAM_ROLES]

        task_counts = aggregate_group_counts(tasks, "status")
        completed = count_for(task_counts, TaskStatus.COMPLETED)

        team_ids = {u.user_id for u in team}
        team_assigned = sum(1 for t in tasks if t.assigned_to in team_ids)
        approved_minutes = sum(w.time_spent_min for w in logs if w.status == WorkLogStatus.APPROVED)

        departments = aggregate_group_counts([u for u in team if u.department], "department")

        return {
            "completedTasks": completed,
            "totalTasks": len(tasks),
            "completionRate": percentage(completed, len(tasks)),
            "averageTasksPerUser": round(team_assigned / len(team), 1) if team else 0.0,
            "totalWorkHours": round(approved_minutes / 60.0, 1),
            "departments": [{"department": d, "count": n} for d, n in sorted(departments.items())],
            "taskStatusPercentages": {
                s.value: percentage(count_for(task_counts, s), len(tasks)) for s in TaskStatus
            },
        }

    def staff_stats(self) -> dict:
        staff = [u for u in self._users.list_all() if u.role in _TEAM_ROLES]
        departments = aggregate_group_counts([u for u in staff if u.department], "department")

        return {
            "totalStaff": len(staff),
            "activeStaff": sum(1 for u in staff if u.is_active),
            "departments": len(departments),
            "departmentBreakdown": dict(sorted(departments.items())),
            "totalTasks": len(self._tasks.list_all()),
            "totalWorkLogs": len(self._worklogs.list_all()),
        }

    def my_overview(self, *, user_id: str) -> dict:
        tasks = self._tasks.list_all(assigned_to=user_id)
        logs = self._worklogs.list_for_user(user_id)
        task_counts = aggregate_group_counts(tasks, "status")

        return {
            "totalTasks": len(tasks),
            "tasksByStatus": _status_counts(task_counts, TaskStatus),
            "totalWorkLogs": len(logs),
            "workLogsByStatus": _status_counts(aggregate_group_counts(logs, "status"), WorkLogStatus),
            "minutesLogged": sum(w.time_spent_min for w in logs),
        }
