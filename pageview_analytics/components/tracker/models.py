"""
Tracker component models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageContext:
    """What the host page knows about the current view."""

    url: str
    title: str = ""
    referrer: str = ""
    user_agent: str = ""
