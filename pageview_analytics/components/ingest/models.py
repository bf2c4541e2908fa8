"""
Ingest component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pageview_analytics.core.entities import DEFAULT_EVENT_TYPE, EventRecord

INVALID_DATA = "INVALID_DATA"

REQUIRED_FIELDS: tuple[str, ...] = ("page_url", "visitor_id", "session_id")

TEXT_FIELDS: tuple[str, ...] = (
    "page_title",
    "referrer",
    "user_agent",
    "browser",
    "browser_version",
    "os",
)


# --- Validation Error ---


@dataclass(frozen=True)
class IngestValidationError:
    """Ingestion validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Validated Event ---


@dataclass(frozen=True)
class ValidatedEvent:
    """
    Event accepted for storage.

    Every optional field carries an explicit value; created_at is added by the store.
    """

    page_url: str
    visitor_id: str
    session_id: str
    device_type: str
    page_title: str = ""
    referrer: str = ""
    user_agent: str = ""
    browser: str = ""
    browser_version: str = ""
    os: str = ""
    event_type: str = DEFAULT_EVENT_TYPE
    duration_seconds: float | None = None


# --- Input / Output ---


@dataclass(frozen=True)
class IngestEventInput:
    """Input for ingesting a raw event."""

    data: dict[str, Any]


@dataclass(frozen=True)
class IngestOutput:
    """Output for ingestion result."""

    event: EventRecord | None
    accepted: bool
    errors: list[IngestValidationError] = field(default_factory=list)
    success: bool = True
