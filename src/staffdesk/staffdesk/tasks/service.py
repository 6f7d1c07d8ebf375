from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PAGE_SIZE
from ..core.enums import Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Task, TaskHistoryEntry, TaskNotification, TaskPage
from .repository import TaskRepository

log = logging.getLogger(__name__)

_MAX_PAGE_SIZE = 100
_EDITOR_ROLES = (Role.ADMIN, Role.STAFF)
_DEFAULT_NOTIFICATION_TYPE = "STATUS_CHANGE"
_DEFAULT_NOTIFICATION_MESSAGE = "Task status has been updated"
_NOTIFICATION_TYPE_MAX = 50


def _parse_status(value) -> Optional[TaskStatus]:
    if value is None or value == "":
        return None
    try:
        return TaskStatus(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid task status")


def _parse_priority(value) -> Optional[TaskPriority]:
    if value is None or value == "":
        return None
    try:
        return TaskPriority(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid task priority")


def can_view(task: Task, *, user_id: str, role: Role) -> bool:
    if role == Role.ADMIN:
        return True
    if role == Role.CLIENT:
        return task.assigned_to == user_id
    return user_id in (task.assigned_to, task.assigned_by)


class TaskService:
    """Use case: create, browse and edit tasks with an audit trail."""

    def __init__(self, tasks: TaskRepository, users: UserRepository):
        self._tasks = tasks
        self._users = users

    def _require_task(self, task_id: str) -> Task:
        task = self._tasks.get_by_id(str(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _require_editor(self, task: Task, *, current_user_id: str, current_role: Role) -> None:
        if current_role not in _EDITOR_ROLES:
            raise AuthorizationError("Only staff and admins can modify tasks")
        if not can_view(task, user_id=current_user_id, role=current_role):
            raise AuthorizationError("You cannot modify this task")

    def create_task(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        title: str,
        assigned_to: str,
        description: Optional[str] = None,
        priority=None,
        task_type: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        if current_role not in _EDITOR_ROLES:
            raise AuthorizationError("Only staff and admins can create tasks")

        title = require_non_empty(title, "Title")
        assigned_to = require_non_empty(assigned_to, "assignedTo")

        assignee = self._users.get_by_id(str(assigned_to))
        if not assignee:
            raise ValidationError("Assigned user not found")

        task_id = self._tasks.create_task(
            title=title,
            description=description,
            priority=_parse_priority(priority) or TaskPriority.MEDIUM,
            task_type=(task_type or "").strip().upper() or "GENERAL",
            assigned_to=assignee.user_id,
            assigned_by=current_user_id,
            due_date=parse_optional_date(due_date, "Due date"),
        )
        self._tasks.add_history(
            task_id=task_id,
            user_id=current_user_id,
            action="Task Created",
            details=f'Task "{title}" created and assigned to {assignee.name}',
        )
        return self._require_task(task_id)

    def list_tasks(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        status=None,
        priority=None,
        assigned_to: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TaskPage:
        page = max(1, int(page))
        limit = max(1, min(int(limit), _MAX_PAGE_SIZE))

        involving = None
        if current_role == Role.CLIENT:
            # Clients only ever see their own assignments.
            assigned_to = current_user_id
        elif current_role == Role.STAFF:
            involving = current_user_id

        tasks, total = self._tasks.list_tasks(
            involving=involving,
            assigned_to=assigned_to or None,
            status=_parse_status(status),
            priority=_parse_priority(priority),
            offset=(page - 1) * limit,
            limit=limit,
        )
        return TaskPage(tasks=list(tasks), page=page, limit=limit, total=total)

    def get_task(
        self, *, current_user_id: str, current_role: Role, task_id: str
    ) -> tuple[Task, Sequence[TaskHistoryEntry]]:
        task = self._require_task(task_id)
        if not can_view(task, user_id=current_user_id, role=current_role):
            raise AuthorizationError("You cannot view this task")
        return task, self._tasks.list_history(task.task_id, DEFAULT_HISTORY_LIMIT)

    def update_task(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status=None,
        priority=None,
        task_type: Optional[str] = None,
        assigned_to: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        task = self._require_task(task_id)
        self._require_editor(task, current_user_id=current_user_id, current_role=current_role)

        changes: dict = {}
        notes: list[str] = []

        if title and title.strip() and title.strip() != task.title:
            changes["title"] = title.strip()
            notes.append(f'Title changed from "{task.title}" to "{title.strip()}"')
        if description is not None and description != task.description:
            changes["description"] = description

        new_status = _parse_status(status)
        if new_status is not None and new_status != task.status:
            changes["status"] = new_status
            notes.append(f"Status changed from {task.status.value} to {new_status.value}")
            if new_status == TaskStatus.COMPLETED:
                changes["completed_at"] = now_local()

        new_priority = _parse_priority(priority)
        if new_priority is not None and new_priority != task.priority:
            changes["priority"] = new_priority
            notes.append(f"Priority changed from {task.priority.value} to {new_priority.value}")

        if task_type and task_type.strip():
            changes["task_type"] = task_type.strip().upper()

        if assigned_to and assigned_to != task.assigned_to:
            assignee = self._users.get_by_id(assigned_to)
            if not assignee:
                raise ValidationError("Assigned user not found")
            changes["assigned_to"] = assignee.user_id
            notes.append(f"Reassigned from {task.assignee_name or task.assigned_to} to {assignee.name}")

        if due_date:
            changes["due_date"] = parse_optional_date(due_date, "Due date")

        if changes:
            self._tasks.update_task(task.task_id, changes)
        if notes:
            self._tasks.add_history(
                task_id=task.task_id,
                user_id=current_user_id,
                action="Task Updated",
                details="; ".join(notes),
            )
        return self._require_task(task.task_id)

    def assign_task(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        task_id: str,
        assigned_to: str,
        reason: Optional[str] = None,
    ) -> Task:
        assigned_to = require_non_empty(assigned_to, "assignedTo")
        task = self._require_task(task_id)
        self._require_editor(task, current_user_id=current_user_id, current_role=current_role)

        assignee = self._users.get_by_id(assigned_to)
        if not assignee:
            raise ValidationError("New assignee not found")
        if task.assigned_to == assignee.user_id:
            raise ValidationError("Task is already assigned to this user")

        old_name = task.assignee_name or task.assigned_to
        self._tasks.update_task(
            task.task_id,
            {"assigned_to": assignee.user_id, "status": TaskStatus.PENDING, "completed_at": None},
        )
        self._tasks.add_history(
            task_id=task.task_id,
            user_id=current_user_id,
            action="Task Reassigned",
            details=reason or f"Task reassigned from {old_name} to {assignee.name}",
        )
        log.info("task %s reassigned to %s by %s", task.task_id, assignee.user_id, current_user_id)
        return self._require_task(task.task_id)

    def delete_task(self, *, current_role: Role, task_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete tasks")

        task = self._require_task(task_id)
        if not self._tasks.delete_task(task.task_id):
            raise ValidationError("Failed to delete task")

    def _require_visible(self, task_id: str, *, current_user_id: str, current_role: Role) -> Task:
        task = self._require_task(task_id)
        if not can_view(task, user_id=current_user_id, role=current_role):
            raise AuthorizationError("You cannot access this task")
        return task

    def notify(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        task_id: str,
        notification_type: Optional[str] = None,
        message: Optional[str] = None,
        recipient_id: Optional[str] = None,
    ) -> TaskNotification:
        """Record an unread notification about a task.

        Type defaults to STATUS_CHANGE and the recipient to the current assignee.
        """
        task = self._require_visible(task_id, current_user_id=current_user_id, current_role=current_role)

        for value, name in ((notification_type, "type"), (message, "message"), (recipient_id, "recipientId")):
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be text")

        kind = (notification_type or "").strip().upper() or _DEFAULT_NOTIFICATION_TYPE
        if len(kind) > _NOTIFICATION_TYPE_MAX:
            raise ValidationError(f"type must be less than {_NOTIFICATION_TYPE_MAX} characters")

        recipient = task.assigned_to
        if (recipient_id or "").strip():
            user = self._users.get_by_id(recipient_id.strip())
            if not user:
                raise ValidationError("Recipient not found")
            recipient = user.user_id

        notification_id = self._tasks.add_notification(
            task_id=task.task_id,
            notification_type=kind,
            message=(message or "").strip() or _DEFAULT_NOTIFICATION_MESSAGE,
            recipient_id=recipient,
            sender_id=current_user_id,
        )
        log.info("task %s notification %s sent to %s by %s", task.task_id, kind, recipient, current_user_id)
        return self._tasks.get_notification(notification_id)

    def list_notifications(
        self, *, current_user_id: str, current_role: Role, task_id: str
    ) -> Sequence[TaskNotification]:
        task = self._require_visible(task_id, current_user_id=current_user_id, current_role=current_role)
        return self._tasks.list_notifications(task.task_id)
