from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import WorkLogStatus
from .model import WorkLog


class WorkLogRepository(Protocol):
    def get_by_id(self, worklog_id: str) -> Optional[WorkLog]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: str,
        task_id: Optional[str],
        title: str,
        summary: str,
        time_spent_min: int,
    ) -> str:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[WorkLog]:
        raise NotImplementedError

    def list_all(self, *, status: Optional[WorkLogStatus] = None) -> Sequence[WorkLog]:
        raise NotImplementedError

    def set_review(
        self,
        worklog_id: str,
        *,
        status: WorkLogStatus,
        review_note: Optional[str],
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> bool:
        """Review a PENDING log; returns False when it was already reviewed."""

        raise NotImplementedError
