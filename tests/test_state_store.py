from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timedelta, timezone

from connguard.schemas import (
    REPLICATION_TYPES,
    Connection,
    ConnectionStatus,
    JobConfigType,
    JobStatus,
)
from connguard.state_store.connections import ConnectionNotFoundError, SqliteConnectionStore
from connguard.state_store.jobs import SqliteJobHistoryStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class JobHistoryStoreTests(unittest.TestCase):
    def test_statuses_are_most_recent_first_within_lookback(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")
            store.record_job("c1", JobStatus.SUCCEEDED, NOW - timedelta(days=20))
            store.record_job("c1", JobStatus.SUCCEEDED, NOW - timedelta(days=3))
            store.record_job("c1", JobStatus.FAILED, NOW - timedelta(days=2))
            store.record_job("c1", JobStatus.CANCELLED, NOW - timedelta(days=1))
            store.record_job("c2", JobStatus.FAILED, NOW - timedelta(hours=1))

            statuses = store.list_statuses("c1", REPLICATION_TYPES, NOW - timedelta(days=14))

        self.assertEqual(statuses, [JobStatus.CANCELLED, JobStatus.FAILED, JobStatus.SUCCEEDED])

    def test_non_replication_jobs_are_filtered(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")
            store.record_job(
                "c1",
                JobStatus.FAILED,
                NOW - timedelta(days=30),
                config_type=JobConfigType.CHECK_CONNECTION_SOURCE,
            )
            store.record_job(
                "c1",
                JobStatus.FAILED,
                NOW - timedelta(days=2),
                config_type=JobConfigType.RESET_CONNECTION,
            )
            store.record_job("c1", JobStatus.SUCCEEDED, NOW - timedelta(days=1))

            statuses = store.list_statuses("c1", REPLICATION_TYPES, NOW - timedelta(days=40))
            first = store.first_job_created_at("c1")

        self.assertEqual(statuses, [JobStatus.SUCCEEDED, JobStatus.FAILED])
        self.assertEqual(first, NOW - timedelta(days=2))

    def test_last_job_is_most_recent_replication_job(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")
            store.record_job("c1", JobStatus.SUCCEEDED, NOW - timedelta(days=2))
            recorded = store.record_job("c1", JobStatus.FAILED, NOW - timedelta(days=1))

            last = store.last_job("c1")

        self.assertEqual(last, recorded)

    def test_sub_second_timestamps_round_trip(self) -> None:
        created_at = NOW - timedelta(days=14) + timedelta(milliseconds=500, microseconds=7)
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")
            recorded = store.record_job("c1", JobStatus.FAILED, created_at)

            self.assertEqual(store.last_job("c1"), recorded)
            self.assertEqual(store.first_job_created_at("c1"), created_at)
            self.assertEqual(
                store.list_statuses("c1", REPLICATION_TYPES, NOW - timedelta(days=14) + timedelta(milliseconds=501)),
                [],
            )

    def test_naive_timestamps_are_utc(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")
            recorded = store.record_job("c1", JobStatus.FAILED, NOW.replace(tzinfo=None))

            self.assertEqual(recorded.created_at, NOW)
            self.assertEqual(store.first_job_created_at("c1"), NOW)

    def test_unknown_connection_has_no_history(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteJobHistoryStore(f"{tmp}/connguard.db")

            self.assertEqual(store.list_statuses("missing", REPLICATION_TYPES, NOW), [])
            self.assertIsNone(store.first_job_created_at("missing"))
            self.assertIsNone(store.last_job("missing"))


class ConnectionStoreTests(unittest.TestCase):
    def test_set_status_persists_across_restarts(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            db_path = f"{tmp}/connguard.db"
            store = SqliteConnectionStore(db_path)
            store.upsert(Connection(connection_id="c1", name="pg -> warehouse"))
            store.set_status("c1", ConnectionStatus.INACTIVE)

            restarted = SqliteConnectionStore(db_path)
            connection = restarted.get("c1")

        self.assertIsNotNone(connection)
        assert connection is not None
        self.assertEqual(connection.status, ConnectionStatus.INACTIVE)
        self.assertEqual(connection.name, "pg -> warehouse")

    def test_repeat_inactive_write_is_not_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteConnectionStore(f"{tmp}/connguard.db")
            store.upsert(Connection(connection_id="c1", status=ConnectionStatus.INACTIVE))

            store.set_status("c1", ConnectionStatus.INACTIVE)

            self.assertEqual(store.get("c1").status, ConnectionStatus.INACTIVE)

    def test_missing_connection_raises_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = SqliteConnectionStore(f"{tmp}/connguard.db")

            with self.assertRaises(ConnectionNotFoundError) as ctx:
                store.set_status("missing", ConnectionStatus.INACTIVE)
            self.assertIsNone(store.get("missing"))

        self.assertEqual(ctx.exception.connection_id, "missing")


if __name__ == "__main__":
    unittest.main()
