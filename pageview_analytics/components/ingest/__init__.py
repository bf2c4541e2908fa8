"""
Ingest component - Event validation and storage.
"""

from .component import (
    InMemoryEventStore,
    normalize_device_type,
    normalize_text,
    run_ingest,
    validate_duration,
    validate_event,
    validate_required_fields,
)
from .models import (
    INVALID_DATA,
    REQUIRED_FIELDS,
    IngestEventInput,
    IngestOutput,
    IngestValidationError,
    ValidatedEvent,
)
from .ports import EventStorePort, TimePort

__all__ = [
    # Entry point
    "run_ingest",
    # Validation
    "normalize_device_type",
    "normalize_text",
    "validate_duration",
    "validate_event",
    "validate_required_fields",
    # Models
    "INVALID_DATA",
    "REQUIRED_FIELDS",
    "IngestEventInput",
    "IngestOutput",
    "IngestValidationError",
    "ValidatedEvent",
    # Ports / defaults
    "EventStorePort",
    "InMemoryEventStore",
    "TimePort",
]
