"""
Error kinds shared across components.

Validation problems are returned as values (see ingest.models.IngestValidationError);
everything here is raised by adapters or codecs and carries a stable code so the
HTTP shell can translate it without string matching.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for analytics errors."""

    code = "ANALYTICS_ERROR"


class StorageFailure(AnalyticsError):
    """Raised when the event store cannot insert or query."""

    code = "STORAGE_FAILURE"

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Event store {operation} failed: {reason}")


class ConfigurationMissing(AnalyticsError):
    """Raised when a collaborator endpoint or path is not configured."""

    code = "CONFIGURATION_MISSING"

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Analytics configuration missing: {setting}")


class MalformedPersistedState(AnalyticsError):
    """Raised when client-side persisted state cannot be parsed."""

    code = "MALFORMED_STATE"

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed persisted value for '{key}': {reason}")


class KeyValueStoreError(AnalyticsError):
    """Raised when the client key-value store cannot be read or written."""

    code = "STORE_UNAVAILABLE"


class TransportError(AnalyticsError):
    """Raised when an event cannot be delivered to the ingestion endpoint."""

    code = "TRANSPORT_FAILED"
