from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: Task assigned to a user."""

    task_id: str
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    task_type: str
    assigned_to: str
    assigned_by: str
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Read-model extras joined from users
    assignee_name: Optional[str] = None
    assigner_name: Optional[str] = None


@dataclass(frozen=True)
class TaskHistoryEntry:
    history_id: str
    task_id: str
    user_id: str
    action: str
    details: Optional[str] = None
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None


@dataclass(frozen=True)
class TaskNotification:
    notification_id: str
    task_id: str
    notification_type: str
    message: str
    recipient_id: str
    sender_id: str
    is_read: bool = False
    created_at: Optional[datetime] = None
    recipient_name: Optional[str] = None
    sender_name: Optional[str] = None


@dataclass(frozen=True)
class TaskPage:
    tasks: list
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.task_id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "type": task.task_type,
        "assignedTo": task.assigned_to,
        "assignedBy": task.assigned_by,
        "assigneeName": task.assignee_name,
        "assignerName": task.assigner_name,
        "dueDate": isoformat_or_none(task.due_date),
        "completedAt": isoformat_or_none(task.completed_at),
        "createdAt": isoformat_or_none(task.created_at),
        "updatedAt": isoformat_or_none(task.updated_at),
    }


def history_to_dict(entry: TaskHistoryEntry) -> dict:
    return {
        "id": entry.history_id,
        "userId": entry.user_id,
        "userName": entry.user_name,
        "action": entry.action,
        "details": entry.details,
        "createdAt": isoformat_or_none(entry.created_at),
    }


def notification_to_dict(n: TaskNotification) -> dict:
    return {
        "id": n.notification_id,
        "taskId": n.task_id,
        "type": n.notification_type,
        "message": n.message,
        "recipientId": n.recipient_id,
        "recipientName": n.recipient_name,
        "senderId": n.sender_id,
        "senderName": n.sender_name,
        "isRead": n.is_read,
        "createdAt": isoformat_or_none(n.created_at),
    }
