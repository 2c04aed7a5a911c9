"""Collaborator contracts for the auto-disable decision.

The decision engine only talks to these protocols; the SQLite stores and the
notification outbox are the default implementations.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from connguard.schemas import ConnectionStatus, Job, JobConfigType, JobStatus, NotificationKind


class FeatureFlags(Protocol):
    def auto_disables_failing_connections(self) -> bool:
        ...


class JobHistory(Protocol):
    def list_statuses(
        self,
        connection_id: str,
        config_types: Iterable[JobConfigType],
        since: datetime,
    ) -> list[JobStatus]:
        """Statuses of jobs created at or after `since`, most recent first."""
        ...

    def first_job_created_at(self, connection_id: str) -> datetime | None:
        ...

    def last_job(self, connection_id: str) -> Job | None:
        ...


class ConnectionRepository(Protocol):
    def set_status(self, connection_id: str, status: ConnectionStatus) -> None:
        ...


class Notifier(Protocol):
    def send(
        self,
        kind: NotificationKind,
        connection_id: str,
        *,
        job: Job | None = None,
    ) -> None:
        ...
