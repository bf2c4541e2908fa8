"""
Identity component models.
"""

from __future__ import annotations

from dataclasses import dataclass

VISITOR_KEY = "pva_visitor_id"
SESSION_KEY = "pva_session"

DEFAULT_SESSION_TIMEOUT_MINUTES = 30


@dataclass(frozen=True)
class SessionRecord:
    """Persisted session: id plus last-activity time in epoch milliseconds."""

    id: str
    timestamp: int


@dataclass(frozen=True)
class IdentityConfig:
    """Identity configuration."""

    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES
    visitor_key: str = VISITOR_KEY
    session_key: str = SESSION_KEY

    @property
    def session_timeout_ms(self) -> int:
        return self.session_timeout_minutes * 60 * 1000
