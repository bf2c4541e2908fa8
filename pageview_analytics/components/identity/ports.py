"""
Identity component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStorePort(Protocol):
    """
    Durable client-side string store.

    Implementations raise KeyValueStoreError when the backing storage is
    unavailable; the identity manager degrades instead of propagating it.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...
