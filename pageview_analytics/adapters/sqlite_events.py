"""
SQLite event store adapter.

Implements EventStorePort (ingest) and EventQueryPort (aggregate) over a single
analytics_events table.

Invariants:
- created_at is assigned here at insert time, stored as ISO 8601 UTC
- Every sqlite3 error surfaces as StorageFailure
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import Any

from pageview_analytics.components.ingest import TimePort, ValidatedEvent
from pageview_analytics.core.entities import EventRecord
from pageview_analytics.core.errors import StorageFailure

SCHEMA = """
CREATE TABLE IF NOT EXISTS analytics_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    page_url TEXT NOT NULL,
    page_title TEXT NOT NULL DEFAULT '',
    referrer TEXT NOT NULL DEFAULT '',
    user_agent TEXT NOT NULL DEFAULT '',
    device_type TEXT NOT NULL,
    browser TEXT NOT NULL DEFAULT '',
    browser_version TEXT NOT NULL DEFAULT '',
    os TEXT NOT NULL DEFAULT '',
    session_id TEXT NOT NULL,
    visitor_id TEXT NOT NULL,
    event_type TEXT NOT NULL DEFAULT 'page_view',
    duration_seconds REAL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_analytics_events_created_at
    ON analytics_events (created_at);
"""

COLUMNS = (
    "page_url",
    "page_title",
    "referrer",
    "user_agent",
    "device_type",
    "browser",
    "browser_version",
    "os",
    "session_id",
    "visitor_id",
    "event_type",
    "duration_seconds",
)


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_ts(moment: datetime) -> str:
    # Fixed-width UTC text so string comparison orders chronologically.
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageFailure("connect", str(e)) from e
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


class SQLiteEventStore(SQLiteRepoBase):
    """SQLite implementation of the event store and query ports."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        clock: TimePort | None = None,
    ) -> None:
        super().__init__(db_path, connection)
        if connection is not None:
            connection.row_factory = dict_factory
        if clock is None:
            from pageview_analytics.adapters.clock import SystemClock

            clock = SystemClock()
        self._clock = clock

    def init_schema(self) -> None:
        """Create the events table if it does not exist."""
        conn = self._get_conn()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageFailure("schema", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def insert(self, event: ValidatedEvent) -> EventRecord:
        created_at = self._clock.now_utc()
        values = [getattr(event, name) for name in COLUMNS]

        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"""
                INSERT INTO analytics_events ({", ".join(COLUMNS)}, created_at)
                VALUES ({", ".join("?" for _ in COLUMNS)}, ?)
                """,
                (*values, format_ts(created_at)),
            )
            conn.commit()
            row_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageFailure("insert", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

        return EventRecord(
            id=row_id,
            created_at=created_at,
            **{name: getattr(event, name) for name in COLUMNS},
        )

    def list_since(self, threshold: datetime | None, limit: int) -> list[EventRecord]:
        query = "SELECT * FROM analytics_events"
        params: list[Any] = []
        if threshold is not None:
            query += " WHERE created_at >= ?"
            params.append(format_ts(threshold))
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageFailure("query", str(e)) from e
        finally:
            if self._should_close():
                conn.close()

        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> EventRecord:
        return EventRecord(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            **{name: row[name] for name in COLUMNS},
        )


def create_sqlite_event_store(
    db_path: str,
    *,
    clock: TimePort | None = None,
    init: bool = True,
) -> SQLiteEventStore:
    """Create a SQLiteEventStore, creating the schema unless told not to."""
    store = SQLiteEventStore(db_path, clock=clock)
    if init:
        store.init_schema()
    return store
