"""
Tracker component - Client-side page-view reporting.
"""

from .component import PageViewTracker
from .models import PageContext
from .ports import IdentityPort, TimePort, TransportPort

__all__ = [
    "PageViewTracker",
    "PageContext",
    "IdentityPort",
    "TimePort",
    "TransportPort",
]
