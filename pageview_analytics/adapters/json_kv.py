"""
JSON file key-value store adapter.

Client-side persistent storage for the identity manager: one JSON object
mapping string keys to string values.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pageview_analytics.core.errors import KeyValueStoreError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore:
    """
    File-backed KeyValueStorePort.

    A missing file reads as empty. Unreadable or corrupt files raise
    KeyValueStoreError, which the identity manager treats as degraded storage.
    A write over a corrupt file replaces it, so storage recovers on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise KeyValueStoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise KeyValueStoreError(f"Cannot read {self.path}: not a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except KeyValueStoreError as e:
            logger.debug("Replacing unreadable state file: %s", e)
            data = {}
        data[key] = value

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise KeyValueStoreError(f"Cannot write {self.path}: {e}") from e
