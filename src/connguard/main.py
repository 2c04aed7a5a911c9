from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from connguard.activity import build_activity
from connguard.config import AppConfig, load_config
from connguard.schemas import (
    AutoDisableInput,
    AutoDisableOutput,
    Connection,
    ConnectionStatus,
    JobConfigType,
    JobStatus,
    NoOp,
)
from connguard.state_store.connections import ConnectionNotFoundError, SqliteConnectionStore
from connguard.state_store.jobs import SqliteJobHistoryStore
from connguard.telemetry.logging import setup_logging


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    cfg = load_config()
    log = logging.getLogger("connguard.main")

    if args.command == "add-connection":
        SqliteConnectionStore(cfg.store.db_path).upsert(
            Connection(
                connection_id=args.connection_id,
                name=args.name,
                status=ConnectionStatus(args.status),
            )
        )
        print(json.dumps({"connection_id": args.connection_id, "status": args.status}))
        return 0

    if args.command == "record-job":
        job = SqliteJobHistoryStore(cfg.store.db_path).record_job(
            args.connection_id,
            JobStatus(args.status),
            _parse_ts(args.created_at),
            config_type=JobConfigType(args.config_type),
        )
        print(json.dumps({"job_id": job.id, "status": job.status.value}))
        return 0

    return _evaluate(cfg, args.connection_id, _parse_ts(args.now), log)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Auto-disable connections with failing syncs")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add-connection", help="Register or update a connection")
    add.add_argument("--connection-id", required=True)
    add.add_argument("--name", default="")
    add.add_argument(
        "--status",
        default=ConnectionStatus.ACTIVE.value,
        choices=[s.value for s in ConnectionStatus],
    )

    record = sub.add_parser("record-job", help="Record a finished job for a connection")
    record.add_argument("--connection-id", required=True)
    record.add_argument("--status", required=True, choices=[s.value for s in JobStatus])
    record.add_argument(
        "--config-type",
        default=JobConfigType.SYNC.value,
        choices=[t.value for t in JobConfigType],
    )
    record.add_argument("--created-at", default="")

    evaluate = sub.add_parser("evaluate", help="Run the auto-disable check once")
    evaluate.add_argument("--connection-id", required=True)
    evaluate.add_argument("--now", default="")
    return parser


def _evaluate(cfg: AppConfig, connection_id: str, now: datetime, log: logging.Logger) -> int:
    activity = build_activity(cfg)
    try:
        output = activity.auto_disable_failing_connection(AutoDisableInput(connection_id, now))
    except ConnectionNotFoundError as exc:
        log.error("auto_disable_connection_not_found connection_id=%s", exc.connection_id)
        return 1
    print(json.dumps(_output_row(output)))
    return 0


def _output_row(output: AutoDisableOutput) -> dict[str, Any]:
    decision = output.decision
    return {
        "disabled": output.disabled,
        "decision": type(decision).__name__ if decision is not None else None,
        "reason": (
            decision.reason.value
            if decision is not None and not isinstance(decision, NoOp)
            else None
        ),
        "notification_error": output.notification_error or None,
    }


def _parse_ts(raw: str) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


if __name__ == "__main__":
    sys.exit(main())
