"""
Aggregate component - Metrics over a window of stored page-view events.
"""

from .component import (
    aggregate_events,
    resolve_window_start,
    round_half_up,
    run_report,
)
from .models import (
    DEFAULT_RANGE,
    BrowserCount,
    DailyTraffic,
    DeviceCount,
    MetricsReport,
    QueryReportInput,
    RecentActivity,
    ReportConfig,
    SourceCount,
    TopPage,
)
from .ports import EventQueryPort, TimePort

__all__ = [
    # Entry point
    "run_report",
    # Pure functions
    "aggregate_events",
    "resolve_window_start",
    "round_half_up",
    # Models
    "DEFAULT_RANGE",
    "BrowserCount",
    "DailyTraffic",
    "DeviceCount",
    "MetricsReport",
    "QueryReportInput",
    "RecentActivity",
    "ReportConfig",
    "SourceCount",
    "TopPage",
    # Ports
    "EventQueryPort",
    "TimePort",
]
