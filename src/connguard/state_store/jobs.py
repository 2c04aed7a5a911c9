from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Final

from connguard.schemas import REPLICATION_TYPES, Job, JobConfigType, JobStatus, as_utc


SCHEMA: Final[str] = """
CREATE TABLE IF NOT EXISTS jobs (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  connection_id TEXT NOT NULL,
  config_type TEXT NOT NULL,
  status TEXT NOT NULL,
  created_at_us INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_jobs_connection_created
ON jobs (connection_id, created_at_us);
"""


class SqliteJobHistoryStore:
    def __init__(self, db_path: str = "data/connguard.db") -> None:
        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def record_job(
        self,
        connection_id: str,
        status: JobStatus,
        created_at: datetime,
        config_type: JobConfigType = JobConfigType.SYNC,
    ) -> Job:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO jobs (connection_id, config_type, status, created_at_us)
                VALUES (?, ?, ?, ?)
                """,
                (connection_id, config_type.value, status.value, _to_epoch_us(created_at)),
            )
            conn.commit()
        return Job(
            id=int(cursor.lastrowid),
            connection_id=connection_id,
            status=status,
            created_at=as_utc(created_at),
            config_type=config_type,
        )

    def list_statuses(
        self,
        connection_id: str,
        config_types: Iterable[JobConfigType],
        since: datetime,
    ) -> list[JobStatus]:
        types = [t.value for t in config_types]
        if not types:
            return []
        placeholders = ",".join("?" for _ in types)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT status FROM jobs
                WHERE connection_id = ?
                  AND config_type IN ({placeholders})
                  AND created_at_us >= ?
                ORDER BY created_at_us DESC, id DESC
                """,
                (connection_id, *types, _to_epoch_us(since)),
            ).fetchall()
        return [JobStatus(row[0]) for row in rows]

    def first_job_created_at(self, connection_id: str) -> datetime | None:
        types = [t.value for t in REPLICATION_TYPES]
        placeholders = ",".join("?" for _ in types)
        with self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT MIN(created_at_us) FROM jobs
                WHERE connection_id = ? AND config_type IN ({placeholders})
                """,
                (connection_id, *types),
            ).fetchone()
        if row is None or row[0] is None:
            return None
        return _from_epoch_us(row[0])

    def last_job(self, connection_id: str) -> Job | None:
        types = [t.value for t in REPLICATION_TYPES]
        placeholders = ",".join("?" for _ in types)
        with self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT id, connection_id, config_type, status, created_at_us FROM jobs
                WHERE connection_id = ? AND config_type IN ({placeholders})
                ORDER BY created_at_us DESC, id DESC
                LIMIT 1
                """,
                (connection_id, *types),
            ).fetchone()
        if row is None:
            return None
        return Job(
            id=row[0],
            connection_id=row[1],
            config_type=JobConfigType(row[2]),
            status=JobStatus(row[3]),
            created_at=_from_epoch_us(row[4]),
        )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn


_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_epoch_us(ts: datetime) -> int:
    return (as_utc(ts) - _EPOCH) // timedelta(microseconds=1)


def _from_epoch_us(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)
