"""
Tests for the analytics track and query endpoints.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pageview_analytics.api.deps import get_clock, get_event_store, get_rules
from pageview_analytics.api.main import create_app
from pageview_analytics.components.ingest import InMemoryEventStore, ValidatedEvent
from pageview_analytics.core.entities import EventRecord
from pageview_analytics.core.errors import StorageFailure
from pageview_analytics.rules.models import AnalyticsRules
from tests.conftest import NOW, FakeTimePort, make_event

TRACK = "/api/analytics/track"
QUERY = "/api/analytics/query"


class BrokenStore:
    """Store whose every operation fails."""

    def insert(self, event: ValidatedEvent) -> EventRecord:
        raise StorageFailure("insert", "database is locked")

    def list_since(self, threshold: datetime | None, limit: int) -> list[EventRecord]:
        raise StorageFailure("query", "database is locked")


# --- Test Setup ---


@pytest.fixture
def store(clock: FakeTimePort) -> InMemoryEventStore:
    return InMemoryEventStore(time_port=clock)


@pytest.fixture
def rules() -> AnalyticsRules:
    return AnalyticsRules.model_validate({"api": {"cors_origins": ["https://shop.example.com"]}})


@pytest.fixture
def app(store: InMemoryEventStore, clock: FakeTimePort, rules: AnalyticsRules) -> FastAPI:
    app = create_app(rules)
    app.dependency_overrides[get_event_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rules] = lambda: rules
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def valid_body(**overrides: object) -> dict[str, object]:
    body: dict[str, object] = {
        "page_url": "https://example.com/",
        "page_title": "Home",
        "visitor_id": "v1",
        "session_id": "s1",
    }
    body.update(overrides)
    return body


# --- Track ---


class TestTrack:
    def test_accepts_valid_event(self, client: TestClient, store: InMemoryEventStore) -> None:
        response = client.post(TRACK, json=valid_body())

        assert response.status_code == 200
        assert response.json() == {"data": {"success": True}}
        (record,) = store.get_all()
        assert record.page_title == "Home"
        assert record.created_at == NOW

    def test_fills_defaults(self, client: TestClient, store: InMemoryEventStore) -> None:
        client.post(
            TRACK,
            json={
                "page_url": "https://example.com/",
                "visitor_id": "v1",
                "session_id": "s1",
                "user_agent": "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)",
            },
        )

        (record,) = store.get_all()
        assert record.device_type == "tablet"
        assert record.referrer == ""
        assert record.event_type == "page_view"
        assert record.duration_seconds is None

    def test_unknown_fields_ignored(self, client: TestClient) -> None:
        response = client.post(TRACK, json=valid_body(screen_width=1920))
        assert response.status_code == 200

    def test_missing_fields_rejected(self, client: TestClient, store: InMemoryEventStore) -> None:
        response = client.post(TRACK, json={"page_url": "https://example.com/"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_DATA"
        assert "visitor_id" in error["message"]
        assert "session_id" in error["message"]
        assert store.get_all() == []

    def test_empty_visitor_rejected(self, client: TestClient, store: InMemoryEventStore) -> None:
        response = client.post(TRACK, json=valid_body(visitor_id=""))

        assert response.status_code == 400
        assert store.get_all() == []

    def test_negative_duration_rejected(self, client: TestClient) -> None:
        response = client.post(TRACK, json=valid_body(duration_seconds=-3))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_DATA"

    def test_non_object_body_rejected(self, client: TestClient) -> None:
        response = client.post(TRACK, json=["not", "an", "object"])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_DATA"

    def test_wrong_field_type_rejected(self, client: TestClient) -> None:
        response = client.post(TRACK, json=valid_body(page_url=42))

        assert response.status_code == 400

    def test_storage_failure(self, app: FastAPI) -> None:
        app.dependency_overrides[get_event_store] = lambda: BrokenStore()

        response = TestClient(app).post(TRACK, json=valid_body())

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "TRACKING_FAILED"

    def test_unconfigured_store(self, app: FastAPI) -> None:
        app.dependency_overrides[get_event_store] = lambda: None

        response = TestClient(app).post(TRACK, json=valid_body())

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "TRACKING_FAILED"
        assert "PVA_DATABASE_PATH" in response.json()["error"]["message"]


# --- Query ---


class TestQuery:
    def test_empty_store(self, client: TestClient) -> None:
        response = client.get(QUERY)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["metrics"] == {
            "totalPageViews": 0,
            "uniqueVisitors": 0,
            "avgSessionDuration": 0,
            "bounceRate": 0.0,
        }
        assert data["topPages"] == []
        assert data["recentActivity"] == []

    def test_default_range_is_seven_days(
        self, client: TestClient, store: InMemoryEventStore
    ) -> None:
        store.add_record(make_event(id=1, created_at=NOW - timedelta(days=3)))
        store.add_record(make_event(id=2, created_at=NOW - timedelta(days=10)))

        data = client.get(QUERY).json()["data"]

        assert data["metrics"]["totalPageViews"] == 1

    def test_ranges(self, client: TestClient, store: InMemoryEventStore) -> None:
        store.add_record(make_event(id=1, created_at=NOW - timedelta(hours=1)))
        store.add_record(make_event(id=2, created_at=NOW - timedelta(days=1)))
        store.add_record(make_event(id=3, created_at=NOW - timedelta(days=20)))
        store.add_record(make_event(id=4, created_at=NOW - timedelta(days=90)))

        def total(range_name: str) -> int:
            response = client.get(QUERY, params={"range": range_name})
            return response.json()["data"]["metrics"]["totalPageViews"]

        assert total("today") == 1
        assert total("7d") == 2
        assert total("30d") == 3
        assert total("all") == 4

    def test_full_payload(self, client: TestClient) -> None:
        client.post(
            TRACK,
            json=valid_body(
                referrer="https://www.google.com/",
                browser="Chrome",
                device_type="mobile",
                duration_seconds=40,
            ),
        )
        client.post(TRACK, json=valid_body(session_id="s2", page_url="https://example.com/a"))

        data = client.get(QUERY, params={"range": "today"}).json()["data"]

        assert data["metrics"]["uniqueVisitors"] == 1
        assert data["metrics"]["bounceRate"] == 100.0
        assert data["metrics"]["avgSessionDuration"] == 20
        assert {s["source"] for s in data["trafficSources"]} == {"Google", "Direct"}
        assert {d["device"] for d in data["deviceBreakdown"]} == {"mobile", "desktop"}
        assert data["trafficOverTime"] == [
            {"date": "2026-03-10", "views": 2, "unique_visitors": 1}
        ]
        assert data["recentActivity"][0]["page_title"] == "Home"

    def test_storage_failure(self, app: FastAPI) -> None:
        app.dependency_overrides[get_event_store] = lambda: BrokenStore()

        response = TestClient(app).get(QUERY)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "QUERY_FAILED"


# --- CORS / Health ---


class TestCors:
    def test_preflight(self, client: TestClient) -> None:
        response = client.options(
            TRACK,
            headers={
                "Origin": "https://shop.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://shop.example.com"
        assert response.headers["access-control-max-age"] == "86400"

    def test_simple_request_has_origin_header(self, client: TestClient) -> None:
        response = client.get(QUERY, headers={"Origin": "https://shop.example.com"})
        assert response.headers["access-control-allow-origin"] == "https://shop.example.com"


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok", "service": "api"}
