"""
Analytics ingestion route.

Public endpoint the page-view tracker posts to.

Responses:
- 200 {"data": {"success": true}} when the event is stored
- 400 INVALID_DATA when validation rejects the event
- 500 TRACKING_FAILED when the store is missing or the insert fails
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from pageview_analytics.api.deps import get_event_store
from pageview_analytics.components.ingest import (
    REQUIRED_FIELDS,
    EventStorePort,
    IngestEventInput,
    IngestValidationError,
    run_ingest,
)
from pageview_analytics.core.errors import AnalyticsError, ConfigurationMissing

logger = logging.getLogger(__name__)

router = APIRouter()

TRACKING_FAILED = "TRACKING_FAILED"


# --- Request/Response Models ---


class EventRequest(BaseModel):
    """Page-view event request; required fields are checked by the ingest component."""

    page_url: str | None = Field(None, description="Full page URL")
    page_title: str | None = Field(None, description="Document title")
    referrer: str | None = Field(None, description="Referrer URL")
    user_agent: str | None = Field(None, description="Raw user-agent string")
    device_type: str | None = Field(None, description="mobile, tablet or desktop")
    browser: str | None = Field(None, description="Browser name")
    browser_version: str | None = Field(None, description="Browser version")
    os: str | None = Field(None, description="Operating system")
    session_id: str | None = Field(None, description="Rolling session id")
    visitor_id: str | None = Field(None, description="Durable visitor id")
    event_type: str | None = Field(None, description="Event type (page_view)")
    duration_seconds: float | None = Field(None, description="Time on page in seconds")

    model_config = ConfigDict(extra="allow", strict=True)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def format_validation_errors(errors: list[IngestValidationError]) -> str:
    missing = [e.field_name for e in errors if e.field_name in REQUIRED_FIELDS]
    others = [e.message for e in errors if e.field_name not in REQUIRED_FIELDS]

    parts = []
    if missing:
        parts.append(f"Missing required fields: {', '.join(str(name) for name in missing)}")
    parts.extend(others)
    return "; ".join(parts)


# --- Routes ---


@router.post("/track")
def track_event(
    body: EventRequest,
    event_store: EventStorePort | None = Depends(get_event_store),
) -> JSONResponse:
    """Validate and store one page-view event."""
    data: dict[str, Any] = body.model_dump(exclude_none=True)

    try:
        if event_store is None:
            raise ConfigurationMissing("PVA_DATABASE_PATH")
        result = run_ingest(IngestEventInput(data=data), event_store=event_store)
    except AnalyticsError as e:
        logger.exception("Tracking failed")
        return error_response(500, TRACKING_FAILED, str(e))

    if not result.accepted:
        return error_response(400, result.errors[0].code, format_validation_errors(result.errors))

    return JSONResponse(content={"data": {"success": True}})
