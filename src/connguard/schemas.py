from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    INCOMPLETE = "incomplete"
    FAILED = "failed"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"


class JobConfigType(str, Enum):
    SYNC = "sync"
    RESET_CONNECTION = "reset_connection"
    CHECK_CONNECTION_SOURCE = "check_connection_source"
    CHECK_CONNECTION_DESTINATION = "check_connection_destination"
    DISCOVER_SCHEMA = "discover_schema"
    GET_SPEC = "get_spec"


REPLICATION_TYPES: frozenset[JobConfigType] = frozenset(
    {JobConfigType.SYNC, JobConfigType.RESET_CONNECTION}
)


class ConnectionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DEPRECATED = "deprecated"


class NotificationKind(str, Enum):
    CONNECTION_DISABLED = "auto_disable_connection"
    CONNECTION_DISABLED_WARNING = "auto_disable_connection_warning"


class DecisionReason(str, Enum):
    FAILURE_STREAK = "failure_streak"
    ONLY_FAILED_JOBS = "only_failed_jobs"


@dataclass(frozen=True)
class Job:
    id: int
    connection_id: str
    status: JobStatus
    created_at: datetime
    config_type: JobConfigType = JobConfigType.SYNC


@dataclass(frozen=True)
class Connection:
    connection_id: str
    name: str = ""
    status: ConnectionStatus = ConnectionStatus.ACTIVE


@dataclass(frozen=True)
class NoOp:
    connection_id: str
    evaluated_at: datetime


@dataclass(frozen=True)
class Warn:
    connection_id: str
    evaluated_at: datetime
    reason: DecisionReason


@dataclass(frozen=True)
class Disable:
    connection_id: str
    evaluated_at: datetime
    reason: DecisionReason


Decision = Union[NoOp, Warn, Disable]


@dataclass(frozen=True)
class AutoDisableInput:
    connection_id: str
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "now", as_utc(self.now))


@dataclass(frozen=True)
class AutoDisableOutput:
    disabled: bool
    decision: Decision | None = None
    notification_error: str = ""


def as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)
