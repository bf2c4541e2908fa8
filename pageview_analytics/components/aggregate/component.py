"""
Aggregate component - Metrics over a window of stored page-view events.

Key behaviors:
- Input is already time-filtered and ordered newest first
- Sessions and visitors are distinct ids within the window only
- Rankings sort by count descending; ties keep first-seen order
- Rounding is half-up: one decimal for bounce rate, integer seconds for duration

Invariants:
- unique_visitors <= total_page_views and unique_sessions <= total_page_views
- bounce_rate is 0 with no sessions, otherwise within [0, 100]
- Empty input yields the zero report, never an error
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from pageview_analytics.components.classify import UNKNOWN, classify_traffic_source
from pageview_analytics.core.entities import EventRecord

from .models import (
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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ReportConfig()

RANGE_DAYS = {"7d": 7, "30d": 30}


# --- Rounding Helpers ---


def round_half_up(value: float, places: int = 0) -> Decimal:
    """Round away from zero at .5, unlike round()'s banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def compute_bounce_rate(session_counts: Counter[str]) -> float:
    """Percentage of sessions with exactly one event, one decimal."""
    if not session_counts:
        return 0.0
    bounced = sum(1 for count in session_counts.values() if count == 1)
    return float(round_half_up(bounced / len(session_counts) * 100, 1))


def compute_avg_session_duration(events: Sequence[EventRecord], session_count: int) -> int:
    """Summed duration over sessions in the window; absent durations count as 0."""
    if not events or session_count == 0:
        return 0
    total = sum(e.duration_seconds or 0 for e in events)
    return int(round_half_up(total / session_count))


# --- Breakdown Helpers ---


def ranked(counts: Counter[str]) -> list[tuple[str, int]]:
    """Count descending; sorted() is stable so ties keep first-seen order."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def build_top_pages(events: Iterable[EventRecord], limit: int) -> list[TopPage]:
    views: Counter[str] = Counter()
    titles: dict[str, str] = {}
    visitors: dict[str, set[str]] = {}

    for event in events:
        views[event.page_url] += 1
        if event.page_title and not titles.get(event.page_url):
            titles[event.page_url] = event.page_title
        visitors.setdefault(event.page_url, set()).add(event.visitor_id)

    return [
        TopPage(
            url=url,
            title=titles.get(url) or url,
            views=count,
            unique_visitors=len(visitors[url]),
        )
        for url, count in ranked(views)[:limit]
    ]


def build_traffic_over_time(events: Iterable[EventRecord]) -> list[DailyTraffic]:
    views: Counter[str] = Counter()
    visitors: dict[str, set[str]] = {}

    for event in events:
        day = event.created_at.astimezone(UTC).date().isoformat()
        views[day] += 1
        visitors.setdefault(day, set()).add(event.visitor_id)

    return [
        DailyTraffic(date=day, views=views[day], unique_visitors=len(visitors[day]))
        for day in sorted(views)
    ]


def build_recent_activity(events: Sequence[EventRecord], limit: int) -> list[RecentActivity]:
    return [
        RecentActivity(
            timestamp=event.created_at.isoformat(),
            page_url=event.page_url,
            page_title=event.page_title or event.page_url,
            device_type=event.device_type,
        )
        for event in events[:limit]
    ]


# --- Pure Aggregation ---


def aggregate_events(
    events: Sequence[EventRecord],
    config: ReportConfig = DEFAULT_CONFIG,
) -> MetricsReport:
    """
    Compute every metric for an already-windowed list of events.

    Args:
        events: Stored events, newest first.
        config: Report limits and traffic-source rules.

    Returns:
        MetricsReport; the zero report for empty input.
    """
    if not events:
        return MetricsReport()

    session_counts: Counter[str] = Counter(e.session_id for e in events)
    visitors = {e.visitor_id for e in events}

    sources: Counter[str] = Counter(
        classify_traffic_source(e.referrer, config.classifier) for e in events
    )
    devices: Counter[str] = Counter(e.device_type or UNKNOWN for e in events)
    browsers: Counter[str] = Counter(e.browser or UNKNOWN for e in events)

    return MetricsReport(
        total_page_views=len(events),
        unique_visitors=len(visitors),
        unique_sessions=len(session_counts),
        avg_session_duration=compute_avg_session_duration(events, len(session_counts)),
        bounce_rate=compute_bounce_rate(session_counts),
        top_pages=build_top_pages(events, config.top_pages_limit),
        traffic_sources=[SourceCount(source=s, count=c) for s, c in ranked(sources)],
        device_breakdown=[DeviceCount(device=d, count=c) for d, c in ranked(devices)],
        browser_breakdown=[BrowserCount(browser=b, count=c) for b, c in ranked(browsers)],
        traffic_over_time=build_traffic_over_time(events),
        recent_activity=build_recent_activity(events, config.recent_activity_limit),
    )


# --- Window Resolution ---


def resolve_window_start(range_name: str, now: datetime) -> datetime | None:
    """
    Lower bound of the aggregation window.

    today is UTC midnight of now; 7d and 30d are rolling; any other name
    is unbounded.
    """
    now = now.astimezone(UTC)
    if range_name == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    days = RANGE_DAYS.get(range_name)
    if days is None:
        return None
    return now - timedelta(days=days)


# --- Component Entry Point ---


def run_report(
    inp: QueryReportInput,
    *,
    event_query: EventQueryPort,
    time_port: TimePort,
    config: ReportConfig = DEFAULT_CONFIG,
) -> MetricsReport:
    """
    Build the metrics report for a named window.

    Raises:
        StorageFailure: if the store query fails.
    """
    threshold = resolve_window_start(inp.range_name, time_port.now_utc())
    if threshold is None:
        logger.debug("Unrecognized range %r; reporting over all events", inp.range_name)

    events = event_query.list_since(threshold, limit=config.row_limit)
    return aggregate_events(events, config)
