from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from ..analytics.aggregation import aggregate_group_counts, count_for
from ..common.datetime_utils import now_local
from ..common.validators import require_int_between, require_length_between
from ..core.constants import (
    WORKLOG_MINUTES_MAX,
    WORKLOG_MINUTES_MIN,
    WORKLOG_SUMMARY_MAX,
    WORKLOG_SUMMARY_MIN,
    WORKLOG_TITLE_MAX,
    WORKLOG_TITLE_MIN,
)
from ..core.enums import Role, WorkLogStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..tasks.repository import TaskRepository
from .model import WorkLog
from .repository import WorkLogRepository

log = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _parse_status(value) -> Optional[WorkLogStatus]:
    if value is None or value == "" or str(value).upper() == "ALL":
        return None
    try:
        return WorkLogStatus(str(value).upper())
    except ValueError:
        raise ValidationError("Invalid work log status")


def _hours(minutes: int) -> float:
    return round(minutes / 60.0, 1)


class WorkLogService:
    """Use case: submit work logs and review them (admin)."""

    def __init__(self, worklogs: WorkLogRepository, tasks: TaskRepository):
        self._worklogs = worklogs
        self._tasks = tasks

    def submit(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        title: str,
        summary: str,
        time_spent_min,
        task_id: Optional[str] = None,
    ) -> WorkLog:
        if current_role not in (Role.STAFF, Role.ADMIN):
            raise AuthorizationError("Only staff can submit work logs")

        title = require_length_between(title, "Title", WORKLOG_TITLE_MIN, WORKLOG_TITLE_MAX)
        summary = require_length_between(summary, "Summary", WORKLOG_SUMMARY_MIN, WORKLOG_SUMMARY_MAX)
        minutes = require_int_between(time_spent_min, "Time spent", WORKLOG_MINUTES_MIN, WORKLOG_MINUTES_MAX)

        task_id = ("" if task_id is None else str(task_id)).strip() or None
        if task_id and not self._tasks.get_by_id(task_id):
            raise ValidationError("Task not found")

        worklog_id = self._worklogs.create(
            user_id=current_user_id,
            task_id=task_id,
            title=title,
            summary=summary,
            time_spent_min=minutes,
        )
        return self._worklogs.get_by_id(worklog_id)

    def list_for_user(self, *, user_id: str) -> Sequence[WorkLog]:
        return self._worklogs.list_for_user(user_id)

    def list_all(self, *, current_role: Role, status=None) -> Sequence[WorkLog]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can review work logs")
        return self._worklogs.list_all(status=_parse_status(status))

    def _review(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        worklog_id: str,
        status: WorkLogStatus,
        review_note: Optional[str],
    ) -> WorkLog:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can review work logs")

        worklog = self._worklogs.get_by_id(str(worklog_id))
        if not worklog:
            raise NotFoundError("Work log not found")
        if worklog.status != WorkLogStatus.PENDING:
            raise ValidationError("Only pending work logs can be reviewed")

        ok = self._worklogs.set_review(
            worklog.worklog_id,
            status=status,
            review_note=(review_note or "").strip() or None,
            reviewed_by=current_user_id,
            reviewed_at=now_local(),
        )
        if not ok:
            raise ValidationError("Only pending work logs can be reviewed")

        log.info("work log %s %s by %s", worklog.worklog_id, status.value.lower(), current_user_id)
        return self._worklogs.get_by_id(worklog.worklog_id)

    def approve(self, *, current_user_id: str, current_role: Role, worklog_id: str, review_note: Optional[str] = None):
        return self._review(
            current_user_id=current_user_id,
            current_role=current_role,
            worklog_id=worklog_id,
            status=WorkLogStatus.APPROVED,
            review_note=review_note,
        )

    def reject(self, *, current_user_id: str, current_role: Role, worklog_id: str, review_note: Optional[str] = None):
        return self._review(
            current_user_id=current_user_id,
            current_role=current_role,
            worklog_id=worklog_id,
            status=WorkLogStatus.REJECTED,
            review_note=review_note,
        )

    def stats(self, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        logs = self._worklogs.list_all()
        by_status = aggregate_group_counts(logs, "status")

        today = now.date()
        reviewed_today = [w for w in logs if w.reviewed_at is not None and w.reviewed_at.date() == today]
        approved_today = [w for w in reviewed_today if w.status == WorkLogStatus.APPROVED]
        rejected_today = [w for w in reviewed_today if w.status == WorkLogStatus.REJECTED]

        return {
            "total": len(logs),
            "pending": count_for(by_status, WorkLogStatus.PENDING),
            "approved": count_for(by_status, WorkLogStatus.APPROVED),
            "rejected": count_for(by_status, WorkLogStatus.REJECTED),
            "totalHours": _hours(sum(w.time_spent_min for w in logs)),
            "approvedToday": len(approved_today),
            "rejectedToday": len(rejected_today),
            "hoursApprovedToday": _hours(sum(w.time_spent_min for w in approved_today)),
        }

    def export_xlsx(self, *, current_role: Role, status=None) -> bytes:
        """Excel workbook of work logs, built in memory."""
        logs = self.list_all(current_role=current_role, status=status)
        data = [
            {
                "Staff": w.user_name or w.user_id,
                "Department": w.user_department or "",
                "Task": w.task_title or "",
                "Title": w.title,
                "Summary": w.summary,
                "Minutes": w.time_spent_min,
                "Status": w.status.value,
                "Review note": w.review_note or "",
                "Submitted": w.created_at.strftime("%Y-%m-%d %H:%M") if w.created_at else "",
                "Reviewed": w.reviewed_at.strftime("%Y-%m-%d %H:%M") if w.reviewed_at else "",
            }
            for w in logs
        ]
        columns = [
            "Staff",
            "Department",
            "Task",
            "Title",
            "Summary",
            "Minutes",
            "Status",
            "Review note",
            "Submitted",
            "Reviewed",
        ]
        df = pd.DataFrame(data, columns=columns)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="WorkLogs")
        return output.getvalue()
