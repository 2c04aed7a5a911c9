from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from connguard.config import NotificationConfig
from connguard.schemas import Job, NotificationKind


class NotificationOutbox:
    """Append-only JSONL hand-off for connection health notifications.

    A delivery worker tails the file and fans each row out to email or
    webhooks; that part lives outside this package.
    """

    def __init__(self, cfg: NotificationConfig = NotificationConfig()) -> None:
        self._path = Path(cfg.out_dir) / cfg.jsonl_name
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def path(self) -> Path:
        return self._path

    def send(
        self,
        kind: NotificationKind,
        connection_id: str,
        *,
        job: Job | None = None,
    ) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "kind": kind.value,
            "connection_id": connection_id,
            **_job_fields(job),
        }
        with self._path.open("a", encoding="utf-8") as fp:
            fp.write(json.dumps(payload, separators=(",", ":")) + "\n")
        self._log.info("notification_queued kind=%s connection_id=%s", kind.value, connection_id)


def _job_fields(job: Job | None) -> dict[str, Any]:
    if job is None:
        return {"job_id": None, "job_status": None, "job_created_at": None}
    return {
        "job_id": job.id,
        "job_status": job.status.value,
        "job_created_at": job.created_at.astimezone(timezone.utc).isoformat(),
    }
