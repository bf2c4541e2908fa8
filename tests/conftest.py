from datetime import UTC, datetime, timedelta

import pytest

from pageview_analytics.core.entities import EventRecord

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=UTC)


class FakeTimePort:
    """Controllable clock for adapters and components."""

    def __init__(self, now: datetime = NOW) -> None:
        self._now = now

    def now_utc(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now

    def advance(self, **delta: float) -> None:
        self._now = self._now + timedelta(**delta)


def make_event(**fields: object) -> EventRecord:
    data: dict[str, object] = {
        "visitor_id": "v1",
        "session_id": "s1",
        "page_url": "https://example.com/",
        "created_at": NOW,
    }
    data.update(fields)
    return EventRecord(**data)  # type: ignore[arg-type]


@pytest.fixture
def clock() -> FakeTimePort:
    return FakeTimePort()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "analytics.db")
