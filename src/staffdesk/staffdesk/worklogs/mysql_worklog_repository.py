from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import WorkLogStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import WorkLog
from .repository import WorkLogRepository

_SELECT = """
    SELECT w.worklog_id, w.user_id, w.task_id, w.title, w.summary, w.time_spent_min, w.status,
           w.review_note, w.reviewed_by, w.reviewed_at, w.created_at, w.updated_at,
           u.name AS user_name, u.department AS user_department, t.title AS task_title
    FROM work_logs w
    LEFT JOIN users u ON u.user_id = w.user_id
    LEFT JOIN tasks t ON t.task_id = w.task_id
"""


def _row_to_worklog(r: dict) -> WorkLog:
    return WorkLog(
        worklog_id=str(r["worklog_id"]),
        user_id=str(r["user_id"]),
        task_id=r.get("task_id"),
        title=r["title"],
        summary=r["summary"],
        time_spent_min=int(r["time_spent_min"]),
        status=WorkLogStatus(r["status"]),
        review_note=r.get("review_note"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        user_name=r.get("user_name"),
        user_department=r.get("user_department"),
        task_title=r.get("task_title"),
    )


class MySQLWorkLogRepository(WorkLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, worklog_id: str) -> Optional[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE w.worklog_id=%s", (worklog_id,))
            r = fetchone(cur)
            return _row_to_worklog(r) if r else None

    def create(
        self,
        *,
        user_id: str,
        task_id: Optional[str],
        title: str,
        summary: str,
        time_spent_min: int,
    ) -> str:
        worklog_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_logs(worklog_id, user_id, task_id, title, summary, time_spent_min, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (worklog_id, user_id, task_id, title, summary, int(time_spent_min), WorkLogStatus.PENDING.value),
            )
        return worklog_id

    def list_for_user(self, user_id: str) -> Sequence[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE w.user_id=%s ORDER BY w.created_at DESC", (user_id,))
            return [_row_to_worklog(r) for r in fetchall(cur)]

    def list_all(self, *, status: Optional[WorkLogStatus] = None) -> Sequence[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is not None:
                cur.execute(_SELECT + " WHERE w.status=%s ORDER BY w.created_at DESC", (status.value,))
            else:
                cur.execute(_SELECT + " ORDER BY w.created_at DESC")
            return [_row_to_worklog(r) for r in fetchall(cur)]

    def set_review(
        self,
        worklog_id: str,
        *,
        status: WorkLogStatus,
        review_note: Optional[str],
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_logs
                SET status=%s, review_note=%s, reviewed_by=%s, reviewed_at=%s
                WHERE worklog_id=%s AND status=%s
                """,
                (status.value, review_note, reviewed_by, reviewed_at, worklog_id, WorkLogStatus.PENDING.value),
            )
            return cur.rowcount > 0
