from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task, TaskHistoryEntry, TaskNotification


class TaskRepository(Protocol):
    def get_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        """Newest first. ``involving`` matches tasks assigned to or by that user.

        Returns (page of tasks, total matching).
        """

        raise NotImplementedError

    def list_all(self, *, assigned_to: Optional[str] = None) -> Sequence[Task]:
        raise NotImplementedError

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_task(self, task_id: str) -> bool:
        raise NotImplementedError

    def add_history(self, *, task_id: str, user_id: str, action: str, details: Optional[str]) -> str:
        raise NotImplementedError

    def list_history(self, task_id: str, limit: int) -> Sequence[TaskHistoryEntry]:
        raise NotImplementedError

    def add_notification(
        self,
        *,
        task_id: str,
        notification_type: str,
        message: str,
        recipient_id: str,
        sender_id: str,
    ) -> str:
        raise NotImplementedError

    def get_notification(self, notification_id: str) -> Optional[TaskNotification]:
        raise NotImplementedError

    def list_notifications(self, task_id: str) -> Sequence[TaskNotification]:
        """Newest first."""
        raise NotImplementedError
