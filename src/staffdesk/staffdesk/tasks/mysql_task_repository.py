from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Task, TaskHistoryEntry, TaskNotification
from .repository import TaskRepository

_SELECT = """
    SELECT t.task_id, t.title, t.description, t.status, t.priority, t.task_type,
           t.assigned_to, t.assigned_by, t.due_date, t.completed_at, t.created_at, t.updated_at,
           ua.name AS assignee_name, ub.name AS assigner_name
    FROM tasks t
    LEFT JOIN users ua ON ua.user_id = t.assigned_to
    LEFT JOIN users ub ON ub.user_id = t.assigned_by
"""

_UPDATABLE = frozenset(
    {"title", "description", "status", "priority", "task_type", "assigned_to", "due_date", "completed_at"}
)


def _row_to_task(r: dict) -> Task:
    return Task(
        task_id=str(r["task_id"]),
        title=r["title"],
        description=r.get("description"),
        status=TaskStatus(r["status"]),
        priority=TaskPriority(r["priority"]),
        task_type=r.get("task_type") or "GENERAL",
        assigned_to=str(r["assigned_to"]),
        assigned_by=str(r["assigned_by"]),
        due_date=r.get("due_date"),
        completed_at=r.get("completed_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        assignee_name=r.get("assignee_name"),
        assigner_name=r.get("assigner_name"),
    )


_SELECT_NOTIFICATIONS = """
    SELECT n.notification_id, n.task_id, n.type, n.message, n.recipient_id, n.sender_id, n.is_read, n.created_at,
           ur.name AS recipient_name, us.name AS sender_name
    FROM task_notifications n
    LEFT JOIN users ur ON ur.user_id = n.recipient_id
    LEFT JOIN users us ON us.user_id = n.sender_id
"""


def _row_to_notification(r: dict) -> TaskNotification:
    return TaskNotification(
        notification_id=str(r["notification_id"]),
        task_id=str(r["task_id"]),
        notification_type=r["type"],
        message=r["message"],
        recipient_id=str(r["recipient_id"]),
        sender_id=str(r["sender_id"]),
        is_read=bool(r.get("is_read")),
        created_at=r.get("created_at"),
        recipient_name=r.get("recipient_name"),
        sender_name=r.get("sender_name"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.task_id=%s", (task_id,))
            r = fetchone(cur)
            return _row_to_task(r) if r else None

    def create_task(
        self,
        *,
        title: str,
        description: Optional[str],
        priority: TaskPriority,
        task_type: str,
        assigned_to: str,
        assigned_by: str,
        due_date: Optional[date],
    ) -> str:
        task_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(task_id, title, description, status, priority, task_type,
                                  assigned_to, assigned_by, due_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task_id,
                    title,
                    description,
                    TaskStatus.PENDING.value,
                    priority.value,
                    task_type,
                    assigned_to,
                    assigned_by,
                    due_date,
                ),
            )
        return task_id

    def list_tasks(
        self,
        *,
        involving: Optional[str] = None,
        assigned_to: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Task], int]:
        where: list[str] = []
        params: list = []
        if involving:
            where.append("(t.assigned_to=%s OR t.assigned_by=%s)")
            params.extend([involving, involving])
        if assigned_to:
            where.append("t.assigned_to=%s")
            params.append(assigned_to)
        if status is not None:
            where.append("t.status=%s")
            params.append(status.value)
        if priority is not None:
            where.append("t.priority=%s")
            params.append(priority.value)
        where_sql = (" WHERE " + " AND ".join(where)) if where else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM tasks t" + where_sql, tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                _SELECT + where_sql + " ORDER BY t.created_at DESC LIMIT %s OFFSET %s",
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_task(r) for r in fetchall(cur)], total

    def list_all(self, *, assigned_to: Optional[str] = None) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            if assigned_to:
                cur.execute(_SELECT + " WHERE t.assigned_to=%s ORDER BY t.created_at DESC", (assigned_to,))
            else:
                cur.execute(_SELECT + " ORDER BY t.created_at DESC")
            return [_row_to_task(r) for r in fetchall(cur)]

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown task columns: {sorted(unknown)}")
        if not changes:
            return False

        names = list(changes)
        values = [getattr(changes[n], "value", changes[n]) for n in names]
        assignments = ", ".join(f"{n}=%s" for n in names)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE tasks SET {assignments} WHERE task_id=%s", tuple(values) + (task_id,))
            return cur.rowcount > 0

    def delete_task(self, task_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (task_id,))
            return cur.rowcount > 0

    def add_history(self, *, task_id: str, user_id: str, action: str, details: Optional[str]) -> str:
        history_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO task_history(history_id, task_id, user_id, action, details) VALUES(%s,%s,%s,%s,%s)",
                (history_id, task_id, user_id, action, details),
            )
        return history_id

    def list_history(self, task_id: str, limit: int) -> Sequence[TaskHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT h.history_id, h.task_id, h.user_id, h.action, h.details, h.created_at,
                       u.name AS user_name
                FROM task_history h
                LEFT JOIN users u ON u.user_id = h.user_id
                WHERE h.task_id=%s
                ORDER BY h.created_at DESC
                LIMIT %s
                """,
                (task_id, int(limit)),
            )
            return [
                TaskHistoryEntry(
                    history_id=str(r["history_id"]),
                    task_id=str(r["task_id"]),
                    user_id=str(r["user_id"]),
                    action=r["action"],
                    details=r.get("details"),
                    created_at=r.get("created_at"),
                    user_name=r.get("user_name"),
                )
                for r in fetchall(cur)
            ]

    def add_notification(
        self,
        *,
        task_id: str,
        notification_type: str,
        message: str,
        recipient_id: str,
        sender_id: str,
    ) -> str:
        notification_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_notifications(notification_id, task_id, type, message, recipient_id, sender_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (notification_id, task_id, notification_type, message, recipient_id, sender_id),
            )
        return notification_id

    def get_notification(self, notification_id: str) -> Optional[TaskNotification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_NOTIFICATIONS + " WHERE n.notification_id=%s", (notification_id,))
            r = fetchone(cur)
            return _row_to_notification(r) if r else None

    def list_notifications(self, task_id: str) -> Sequence[TaskNotification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_NOTIFICATIONS + " WHERE n.task_id=%s ORDER BY n.created_at DESC", (task_id,))
            return [_row_to_notification(r) for r in fetchall(cur)]
