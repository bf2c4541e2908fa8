import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from pageview_analytics.adapters.clock import SystemClock
from pageview_analytics.adapters.sqlite_events import SQLiteEventStore, create_sqlite_event_store
from pageview_analytics.rules.loader import load_rules
from pageview_analytics.rules.models import AnalyticsRules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        # Unset means no event store is configured; requests needing one fail.
        self.db_path: str | None = os.environ.get("PVA_DATABASE_PATH") or None
        self.rules_path = Path(os.environ.get("PVA_RULES_PATH", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> AnalyticsRules:
    return load_rules(settings.rules_path)


# --- Adapters ---
@lru_cache
def _event_store_for(db_path: str) -> SQLiteEventStore:
    return create_sqlite_event_store(db_path)


def get_event_store(settings: Settings = Depends(get_settings)) -> SQLiteEventStore | None:
    """SQLite event store, or None when PVA_DATABASE_PATH is not set."""
    if settings.db_path is None:
        return None
    return _event_store_for(settings.db_path)


def get_clock() -> SystemClock:
    return SystemClock()
