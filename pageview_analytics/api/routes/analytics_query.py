"""
Analytics query route.

Returns the metrics report for a named window (today, 7d, 30d).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from pageview_analytics.adapters.clock import SystemClock
from pageview_analytics.api.deps import get_clock, get_event_store, get_rules
from pageview_analytics.components.aggregate import (
    EventQueryPort,
    QueryReportInput,
    run_report,
)
from pageview_analytics.core.errors import AnalyticsError, ConfigurationMissing
from pageview_analytics.rules.models import AnalyticsRules

from .analytics_track import error_response

logger = logging.getLogger(__name__)

router = APIRouter()

QUERY_FAILED = "QUERY_FAILED"


@router.get("/query")
def query_metrics(
    range_name: str | None = Query(None, alias="range", description="today, 7d or 30d"),
    event_query: EventQueryPort | None = Depends(get_event_store),
    rules: AnalyticsRules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
) -> JSONResponse:
    """Aggregate stored events over the requested window."""
    config = rules.report_config()
    inp = QueryReportInput(range_name=range_name or config.default_range)

    try:
        if event_query is None:
            raise ConfigurationMissing("PVA_DATABASE_PATH")
        report = run_report(inp, event_query=event_query, time_port=clock, config=config)
    except AnalyticsError as e:
        logger.exception("Analytics query failed")
        return error_response(500, QUERY_FAILED, str(e))

    return JSONResponse(content={"data": report.to_payload()})
