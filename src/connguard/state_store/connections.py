from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Final

from connguard.schemas import Connection, ConnectionStatus


SCHEMA: Final[str] = """
CREATE TABLE IF NOT EXISTS connections (
  connection_id TEXT PRIMARY KEY,
  name TEXT NOT NULL DEFAULT '',
  status TEXT NOT NULL
);
"""


class ConnectionNotFoundError(LookupError):
    def __init__(self, connection_id: str) -> None:
        super().__init__(f"connection not found: {connection_id}")
        self.connection_id = connection_id


class SqliteConnectionStore:
    def __init__(self, db_path: str = "data/connguard.db") -> None:
        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def upsert(self, connection: Connection) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO connections (connection_id, name, status)
                VALUES (?, ?, ?)
                ON CONFLICT(connection_id)
                DO UPDATE SET name = excluded.name, status = excluded.status
                """,
                (connection.connection_id, connection.name, connection.status.value),
            )
            conn.commit()

    def get(self, connection_id: str) -> Connection | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT connection_id, name, status FROM connections WHERE connection_id = ?",
                (connection_id,),
            ).fetchone()
        if row is None:
            return None
        return Connection(connection_id=row[0], name=row[1], status=ConnectionStatus(row[2]))

    def set_status(self, connection_id: str, status: ConnectionStatus) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE connections SET status = ? WHERE connection_id = ?",
                (status.value, connection_id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise ConnectionNotFoundError(connection_id)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn
