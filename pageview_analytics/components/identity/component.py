"""
Identity component - Visitor and session identifiers.

Runs on the visiting client against a durable key-value store.

Key behaviors:
- Visitor id is created once and never expires
- Session id rolls: each read inside the inactivity window extends it
- A session whose last activity is at least the timeout ago is replaced
- Malformed persisted session data counts as "no session"

Invariants:
- Callers never see store or parse errors; the manager falls back to fresh ids
- A replaced session id is never handed out again (ids are random UUID4)
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from uuid import uuid4

from pageview_analytics.core.errors import KeyValueStoreError, MalformedPersistedState

from .models import IdentityConfig, SessionRecord
from .ports import KeyValueStorePort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = IdentityConfig()


# --- Pure Functions ---


def generate_id() -> str:
    """Random 128-bit identifier formatted as a UUID v4 string."""
    return str(uuid4())


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    return int(moment.timestamp() * 1000)


def encode_session_record(record: SessionRecord) -> str:
    """Serialize a session record for the key-value store."""
    return json.dumps({"id": record.id, "timestamp": record.timestamp})


def decode_session_record(raw: str, key: str = "session") -> SessionRecord:
    """
    Parse a persisted session record.

    Raises:
        MalformedPersistedState: if the value is not a JSON object with a
            non-empty string id and a numeric timestamp.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedPersistedState(key, f"not valid JSON ({e})") from e

    if not isinstance(data, dict):
        raise MalformedPersistedState(key, "expected a JSON object")

    session_id = data.get("id")
    if not isinstance(session_id, str) or not session_id:
        raise MalformedPersistedState(key, "missing session id")

    timestamp = data.get("timestamp")
    # bool is an int subclass; reject it explicitly
    if (
        isinstance(timestamp, bool)
        or not isinstance(timestamp, (int, float))
        or not math.isfinite(timestamp)
    ):
        raise MalformedPersistedState(key, "missing or non-numeric timestamp")

    return SessionRecord(id=session_id, timestamp=int(timestamp))


def is_session_active(record: SessionRecord, now_ms: int, timeout_ms: int) -> bool:
    """A session is active while less than the timeout has passed since its last activity."""
    return now_ms - record.timestamp < timeout_ms


# --- Default Implementations ---


class InMemoryKeyValueStore:
    """In-memory key-value store for testing/dev."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        """Get a value."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Set a value."""
        self._values[key] = value

    def snapshot(self) -> dict[str, str]:
        """Copy of all stored values (for testing)."""
        return dict(self._values)


# --- Identity Manager ---


class IdentityManager:
    """
    Visitor and session identifier manager.

    Both operations do one read and at most one write against the store.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        config: IdentityConfig | None = None,
    ) -> None:
        """Initialize manager."""
        self._store = store
        self._config = config or DEFAULT_CONFIG

    def get_visitor_id(self) -> str:
        """
        Return the persisted visitor id, creating it on first use.

        On store failure the id is generated for this call only.
        """
        key = self._config.visitor_key
        try:
            visitor_id = self._store.get(key)
        except KeyValueStoreError as e:
            logger.debug("Visitor id read failed, using ephemeral id: %s", e)
            return generate_id()

        if visitor_id:
            return visitor_id

        visitor_id = generate_id()
        self._write(key, visitor_id)
        return visitor_id

    def get_session_id(self, now: datetime) -> str:
        """
        Return the active session id, extending it to now, or start a new one.
        """
        key = self._config.session_key
        now_ms = to_epoch_ms(now)

        record = self._read_session(key)
        if record is not None and is_session_active(
            record, now_ms, self._config.session_timeout_ms
        ):
            self._write(key, encode_session_record(SessionRecord(id=record.id, timestamp=now_ms)))
            return record.id

        session_id = generate_id()
        self._write(key, encode_session_record(SessionRecord(id=session_id, timestamp=now_ms)))
        return session_id

    def _read_session(self, key: str) -> SessionRecord | None:
        try:
            raw = self._store.get(key)
        except KeyValueStoreError as e:
            logger.debug("Session read failed, starting new session: %s", e)
            return None

        if not raw:
            return None

        try:
            return decode_session_record(raw, key)
        except MalformedPersistedState as e:
            logger.debug("Discarding persisted session: %s", e)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self._store.set(key, value)
        except KeyValueStoreError as e:
            logger.debug("Write of '%s' failed, value kept in memory only: %s", key, e)


# --- Factory ---


def create_identity_manager(
    store: KeyValueStorePort | None = None,
    config: IdentityConfig | None = None,
) -> IdentityManager:
    """Create an IdentityManager (in-memory store when none is given)."""
    return IdentityManager(store=store or InMemoryKeyValueStore(), config=config)
