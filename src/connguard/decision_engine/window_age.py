from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from connguard.ports import JobHistory
from connguard.schemas import REPLICATION_TYPES, JobStatus


class WindowAgeAnalyzer:
    def __init__(self, history: JobHistory) -> None:
        self._history = history

    def fetch_window(self, connection_id: str, now: datetime, lookback_days: int) -> list[JobStatus]:
        since = now - timedelta(days=lookback_days)
        return list(self._history.list_statuses(connection_id, REPLICATION_TYPES, since))

    def first_job_age(self, connection_id: str, now: datetime) -> timedelta | None:
        created_at = self._history.first_job_created_at(connection_id)
        if created_at is None:
            return None
        return now - created_at

    def only_failures_and_old_enough(
        self,
        connection_id: str,
        now: datetime,
        threshold_days: int,
        window: Sequence[JobStatus] | None = None,
    ) -> bool:
        if window is None:
            window = self.fetch_window(connection_id, now, threshold_days)
        if not window:
            return False
        if any(status != JobStatus.FAILED for status in window):
            return False
        age = self.first_job_age(connection_id, now)
        if age is None:
            return False
        return age >= timedelta(days=threshold_days)
