from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import WorkLogStatus


@dataclass(frozen=True)
class WorkLog:
    """Domain entity: a staff member's report of time spent on work."""

    worklog_id: str
    user_id: str
    title: str
    summary: str
    time_spent_min: int
    status: WorkLogStatus
    task_id: Optional[str] = None
    review_note: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    user_name: Optional[str] = None
    user_department: Optional[str] = None
    task_title: Optional[str] = None


def worklog_to_dict(log: WorkLog) -> dict:
    return {
        "id": log.worklog_id,
        "userId": log.user_id,
        "userName": log.user_name,
        "department": log.user_department,
        "taskId": log.task_id,
        "taskTitle": log.task_title,
        "title": log.title,
        "summary": log.summary,
        "timeSpentMin": log.time_spent_min,
        "status": log.status.value,
        "reviewNote": log.review_note,
        "reviewedBy": log.reviewed_by,
        "reviewedAt": isoformat_or_none(log.reviewed_at),
        "createdAt": isoformat_or_none(log.created_at),
    }
