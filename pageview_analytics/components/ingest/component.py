"""
Ingest component - Event validation and storage.

Key behaviors:
- page_url, visitor_id and session_id are required and must be non-empty strings
- Every optional field is filled with an explicit default before storage
- device_type falls back to the classifier's verdict for the user agent
- Accepted events are inserted once; store failures propagate, no retry

Invariants:
- Rejected input never reaches the store
- No missing fields reach storage
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pageview_analytics.components.classify import DeviceClass, classify_device
from pageview_analytics.core.entities import DEFAULT_EVENT_TYPE, EventRecord

from .models import (
    INVALID_DATA,
    REQUIRED_FIELDS,
    TEXT_FIELDS,
    IngestEventInput,
    IngestOutput,
    IngestValidationError,
    ValidatedEvent,
)
from .ports import EventStorePort, TimePort

logger = logging.getLogger(__name__)

DEVICE_TYPES = frozenset(d.value for d in DeviceClass)


# --- Validation Functions ---


def validate_required_fields(data: Mapping[str, Any]) -> list[IngestValidationError]:
    """Check the fields without which an event is meaningless."""
    errors: list[IngestValidationError] = []

    for field_name in REQUIRED_FIELDS:
        value = data.get(field_name)
        if not isinstance(value, str) or not value:
            errors.append(
                IngestValidationError(
                    code=INVALID_DATA,
                    message=f"Missing required field: {field_name}",
                    field_name=field_name,
                )
            )

    return errors


def validate_duration(value: Any) -> tuple[float | None, list[IngestValidationError]]:
    """Parse optional duration_seconds; absent stays None."""
    if value is None:
        return None, []

    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None, [
            IngestValidationError(
                code=INVALID_DATA,
                message="duration_seconds must be a number",
                field_name="duration_seconds",
            )
        ]

    if value < 0:
        return None, [
            IngestValidationError(
                code=INVALID_DATA,
                message="duration_seconds must not be negative",
                field_name="duration_seconds",
            )
        ]

    return float(value), []


def normalize_text(value: Any) -> str:
    """Optional text field: None becomes empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize_device_type(value: Any, user_agent: str) -> str:
    """Keep a known device class, otherwise classify the user agent."""
    if isinstance(value, str) and value in DEVICE_TYPES:
        return value
    return classify_device(user_agent).value


def validate_event(
    data: Mapping[str, Any],
) -> tuple[ValidatedEvent | None, list[IngestValidationError]]:
    """
    Validate and normalize a raw event.

    Returns:
        Tuple of (event, errors). Event is None if validation fails.
    """
    errors = validate_required_fields(data)

    duration, duration_errors = validate_duration(data.get("duration_seconds"))
    errors.extend(duration_errors)

    if errors:
        return None, errors

    text = {name: normalize_text(data.get(name)) for name in TEXT_FIELDS}
    event_type = normalize_text(data.get("event_type")) or DEFAULT_EVENT_TYPE

    event = ValidatedEvent(
        page_url=data["page_url"],
        visitor_id=data["visitor_id"],
        session_id=data["session_id"],
        device_type=normalize_device_type(data.get("device_type"), text["user_agent"]),
        event_type=event_type,
        duration_seconds=duration,
        **text,
    )
    return event, []


# --- Default Implementations ---


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self, time_port: TimePort | None = None) -> None:
        self._records: list[EventRecord] = []
        self._time_port = time_port
        self._next_id = 1

    def _now(self) -> datetime:
        if self._time_port:
            return self._time_port.now_utc()
        return datetime.now(UTC)

    def insert(self, event: ValidatedEvent) -> EventRecord:
        """Store an event, stamping id and created_at."""
        record = EventRecord(
            id=self._next_id,
            created_at=self._now(),
            page_url=event.page_url,
            page_title=event.page_title,
            referrer=event.referrer,
            user_agent=event.user_agent,
            device_type=event.device_type,
            browser=event.browser,
            browser_version=event.browser_version,
            os=event.os,
            session_id=event.session_id,
            visitor_id=event.visitor_id,
            event_type=event.event_type,
            duration_seconds=event.duration_seconds,
        )
        self._next_id += 1
        self._records.append(record)
        return record

    def add_record(self, record: EventRecord) -> None:
        """Add a pre-built record with its own created_at (for testing)."""
        self._records.append(record)

    def list_since(self, threshold: datetime | None, limit: int) -> list[EventRecord]:
        """Records with created_at >= threshold, newest first."""
        matching = [r for r in self._records if threshold is None or r.created_at >= threshold]
        matching.sort(key=lambda r: (r.created_at, r.id or 0), reverse=True)
        return matching[:limit]

    def get_all(self) -> list[EventRecord]:
        """Get all stored records (for testing)."""
        return list(self._records)


# --- Component Entry Point ---


def run_ingest(
    inp: IngestEventInput,
    *,
    event_store: EventStorePort,
) -> IngestOutput:
    """
    Validate an event and store it if valid.

    Args:
        inp: Input containing the raw event data.
        event_store: Event store port.

    Returns:
        IngestOutput with the stored record or rejection errors.

    Raises:
        StorageFailure: if the store insert fails (not retried).
    """
    event, errors = validate_event(inp.data)

    if event is None:
        return IngestOutput(event=None, accepted=False, errors=errors, success=False)

    record = event_store.insert(event)
    logger.debug(
        "Stored %s for %s (session %s)", record.event_type, record.page_url, record.session_id
    )

    return IngestOutput(event=record, accepted=True)
