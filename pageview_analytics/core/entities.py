"""
Domain entities for page-view analytics.

EventRecord is the stored shape of a page-view event: everything the client
sent (after validation filled the defaults) plus the fields the event store
assigns on insert.

Invariants:
- visitor_id and session_id are never empty once an event is accepted
- device_type is always one of mobile/tablet/desktop in storage
- created_at is assigned by the store, never by the client, and is timezone aware
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DeviceType = Literal["mobile", "tablet", "desktop"]

DEFAULT_EVENT_TYPE = "page_view"


class EventRecord(BaseModel):
    """A persisted page-view event."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    visitor_id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    page_url: str = Field(..., min_length=1)
    page_title: str = ""
    referrer: str = ""
    user_agent: str = ""
    device_type: str = "desktop"
    browser: str = ""
    browser_version: str = ""
    os: str = ""
    event_type: str = DEFAULT_EVENT_TYPE
    duration_seconds: float | None = Field(None, ge=0)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from storage are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
