"""
Aggregate component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pageview_analytics.components.classify import ClassifierConfig

DEFAULT_RANGE = "7d"


# --- Configuration ---


@dataclass(frozen=True)
class ReportConfig:
    """Report limits and classifier rules."""

    top_pages_limit: int = 10
    recent_activity_limit: int = 20

    # Max rows pulled from the store per report
    row_limit: int = 10_000

    default_range: str = DEFAULT_RANGE
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)


# --- Report Rows ---


@dataclass(frozen=True)
class TopPage:
    url: str
    title: str
    views: int
    unique_visitors: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "views": self.views,
            "unique_visitors": self.unique_visitors,
        }


@dataclass(frozen=True)
class SourceCount:
    source: str
    count: int

    def to_payload(self) -> dict[str, Any]:
        return {"source": self.source, "count": self.count}


@dataclass(frozen=True)
class DeviceCount:
    device: str
    count: int

    def to_payload(self) -> dict[str, Any]:
        return {"device": self.device, "count": self.count}


@dataclass(frozen=True)
class BrowserCount:
    browser: str
    count: int

    def to_payload(self) -> dict[str, Any]:
        return {"browser": self.browser, "count": self.count}


@dataclass(frozen=True)
class DailyTraffic:
    """Views for one UTC calendar date (YYYY-MM-DD)."""

    date: str
    views: int
    unique_visitors: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "views": self.views,
            "unique_visitors": self.unique_visitors,
        }


@dataclass(frozen=True)
class RecentActivity:
    timestamp: str
    page_url: str
    page_title: str
    device_type: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "page_url": self.page_url,
            "page_title": self.page_title,
            "device_type": self.device_type,
        }


# --- Report ---


@dataclass(frozen=True)
class MetricsReport:
    """
    Derived metrics for one aggregation window.

    unique_sessions is the denominator for bounce rate and average duration;
    it is not part of the HTTP payload.
    """

    total_page_views: int = 0
    unique_visitors: int = 0
    unique_sessions: int = 0
    avg_session_duration: int = 0
    bounce_rate: float = 0.0
    top_pages: list[TopPage] = field(default_factory=list)
    traffic_sources: list[SourceCount] = field(default_factory=list)
    device_breakdown: list[DeviceCount] = field(default_factory=list)
    browser_breakdown: list[BrowserCount] = field(default_factory=list)
    traffic_over_time: list[DailyTraffic] = field(default_factory=list)
    recent_activity: list[RecentActivity] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Render the query endpoint's data object."""
        return {
            "metrics": {
                "totalPageViews": self.total_page_views,
                "uniqueVisitors": self.unique_visitors,
                "avgSessionDuration": self.avg_session_duration,
                "bounceRate": self.bounce_rate,
            },
            "topPages": [p.to_payload() for p in self.top_pages],
            "trafficSources": [s.to_payload() for s in self.traffic_sources],
            "deviceBreakdown": [d.to_payload() for d in self.device_breakdown],
            "browserBreakdown": [b.to_payload() for b in self.browser_breakdown],
            "trafficOverTime": [t.to_payload() for t in self.traffic_over_time],
            "recentActivity": [a.to_payload() for a in self.recent_activity],
        }


# --- Input ---


@dataclass(frozen=True)
class QueryReportInput:
    """Input for building a report over a named window."""

    range_name: str = DEFAULT_RANGE
