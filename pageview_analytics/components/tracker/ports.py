"""
Tracker component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class TransportPort(Protocol):
    """Delivers an event payload to the ingestion endpoint."""

    def send(self, payload: dict[str, Any]) -> None:
        """
        Send one event.

        Raises:
            TransportError: if the event was not accepted
        """
        ...


class IdentityPort(Protocol):
    """Visitor and session id provider."""

    def get_visitor_id(self) -> str: ...

    def get_session_id(self, now: datetime) -> str: ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
