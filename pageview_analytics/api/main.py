import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pageview_analytics import __version__
from pageview_analytics.api.deps import get_settings
from pageview_analytics.api.routes import analytics_query, analytics_track
from pageview_analytics.components.ingest import INVALID_DATA
from pageview_analytics.rules.loader import load_rules
from pageview_analytics.rules.models import AnalyticsRules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    if settings.db_path is None:
        logger.warning("PVA_DATABASE_PATH is not set; tracking and queries will fail")

    yield


async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies use the same envelope as rejected events."""
    return JSONResponse(
        status_code=400,
        content={"error": {"code": INVALID_DATA, "message": "Invalid request body"}},
    )


def create_app(rules: AnalyticsRules | None = None) -> FastAPI:
    """Build the API app; CORS origins come from the rules file."""
    rules = rules or AnalyticsRules()

    app = FastAPI(
        title="Page-View Analytics API",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(analytics_track.router, prefix="/api/analytics", tags=["Analytics"])
    app.include_router(analytics_query.router, prefix="/api/analytics", tags=["Analytics"])
    app.add_exception_handler(RequestValidationError, invalid_body_handler)  # type: ignore[arg-type]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=rules.api.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    return app


def _startup_rules() -> AnalyticsRules | None:
    # Invalid or missing rules fall back to defaults here; lifespan rejects them.
    try:
        return load_rules(get_settings().rules_path)
    except (FileNotFoundError, ValueError):
        return None


app = create_app(_startup_rules())
