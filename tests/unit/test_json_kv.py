"""
Tests for the JSON file key-value store adapter.
"""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from pageview_analytics.adapters.json_kv import JsonFileKeyValueStore
from pageview_analytics.components.identity import SESSION_KEY, IdentityManager
from pageview_analytics.core.errors import KeyValueStoreError
from tests.conftest import NOW


class TestJsonFileKeyValueStore:
    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        store = JsonFileKeyValueStore(tmp_path / "state.json")
        assert store.get("anything") is None

    def test_set_then_get(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "state.json"
        store = JsonFileKeyValueStore(path)

        store.set("a", "1")
        store.set("b", "2")

        assert JsonFileKeyValueStore(path).get("a") == "1"
        assert JsonFileKeyValueStore(path).get("b") == "2"

    def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(KeyValueStoreError):
            JsonFileKeyValueStore(path).get("a")

    def test_non_object_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(KeyValueStoreError):
            JsonFileKeyValueStore(path).get("a")

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_write_replaces_unreadable_file(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "state.json"
        path.write_text(content, encoding="utf-8")
        store = JsonFileKeyValueStore(path)

        store.set("a", "1")

        assert store.get("a") == "1"
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


class TestIdentityOverJsonFile:
    def test_ids_survive_restart(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"

        first = IdentityManager(store=JsonFileKeyValueStore(path))
        visitor = first.get_visitor_id()
        session = first.get_session_id(NOW)

        second = IdentityManager(store=JsonFileKeyValueStore(path))
        assert second.get_visitor_id() == visitor
        assert second.get_session_id(NOW + timedelta(minutes=5)) == session

    def test_corrupt_state_recovers_on_write(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("garbage", encoding="utf-8")
        manager = IdentityManager(store=JsonFileKeyValueStore(path))

        assert manager.get_visitor_id()
        session = manager.get_session_id(NOW)
        assert session

        # The session write repairs the file, so ids are stable from here on
        assert manager.get_session_id(NOW + timedelta(minutes=1)) == session
        visitor = manager.get_visitor_id()
        assert manager.get_visitor_id() == visitor
        assert IdentityManager(store=JsonFileKeyValueStore(path)).get_visitor_id() == visitor

    def test_malformed_session_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = JsonFileKeyValueStore(path)
        store.set(SESSION_KEY, "not-json")

        session = IdentityManager(store=store).get_session_id(NOW)

        assert session
        assert session in (store.get(SESSION_KEY) or "")
