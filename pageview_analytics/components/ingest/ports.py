"""
Ingest component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pageview_analytics.core.entities import EventRecord

from .models import ValidatedEvent


class EventStorePort(Protocol):
    """Event store interface for persisting validated events."""

    def insert(self, event: ValidatedEvent) -> EventRecord:
        """
        Persist an event, assigning id and created_at.

        Raises:
            StorageFailure: if the insert does not succeed
        """
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
