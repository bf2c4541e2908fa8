"""
Aggregate component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pageview_analytics.core.entities import EventRecord


class EventQueryPort(Protocol):
    """Read side of the event store."""

    def list_since(self, threshold: datetime | None, limit: int) -> list[EventRecord]:
        """
        Events with created_at >= threshold (all events when None), newest first.

        Raises:
            StorageFailure: if the query does not succeed
        """
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
