"""
Tracker component - Client-side page-view reporting.

Key behaviors:
- Visitor and session ids come from the identity manager on every view
- Device, browser and OS are derived from the user agent before sending
- Delivery is fire-and-forget; a failed send is logged at debug and dropped

Invariants:
- track_page_view never raises for transport failures
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pageview_analytics.components.classify import classify_client
from pageview_analytics.core.entities import DEFAULT_EVENT_TYPE
from pageview_analytics.core.errors import TransportError

from .models import PageContext
from .ports import IdentityPort, TimePort, TransportPort

logger = logging.getLogger(__name__)


class PageViewTracker:
    """Assembles page-view events and hands them to a transport."""

    def __init__(
        self,
        identity: IdentityPort,
        transport: TransportPort,
        time_port: TimePort | None = None,
    ) -> None:
        self._identity = identity
        self._transport = transport
        self._time_port = time_port

    def _now(self) -> datetime:
        if self._time_port:
            return self._time_port.now_utc()
        return datetime.now(UTC)

    def build_event(self, context: PageContext) -> dict[str, Any]:
        """Event payload for one page view."""
        visitor_id = self._identity.get_visitor_id()
        session_id = self._identity.get_session_id(self._now())
        client = classify_client(context.user_agent)

        return {
            "page_url": context.url,
            "page_title": context.title,
            "referrer": context.referrer,
            "user_agent": context.user_agent,
            "device_type": client.device_type.value,
            "browser": client.browser.name,
            "browser_version": client.browser.version,
            "os": client.os,
            "session_id": session_id,
            "visitor_id": visitor_id,
            "event_type": DEFAULT_EVENT_TYPE,
        }

    def track_page_view(self, context: PageContext) -> bool:
        """Send a page view; False when delivery failed."""
        payload = self.build_event(context)
        try:
            self._transport.send(payload)
        except TransportError as e:
            logger.debug("Analytics tracking failed: %s", e)
            return False
        return True
