"""
Identity component - Durable visitor id and rolling session id.
"""

from .component import (
    IdentityManager,
    InMemoryKeyValueStore,
    create_identity_manager,
    decode_session_record,
    encode_session_record,
    generate_id,
    is_session_active,
    to_epoch_ms,
)
from .models import (
    DEFAULT_SESSION_TIMEOUT_MINUTES,
    SESSION_KEY,
    VISITOR_KEY,
    IdentityConfig,
    SessionRecord,
)
from .ports import KeyValueStorePort

__all__ = [
    # Manager
    "IdentityManager",
    "create_identity_manager",
    # Pure functions
    "decode_session_record",
    "encode_session_record",
    "generate_id",
    "is_session_active",
    "to_epoch_ms",
    # Models
    "IdentityConfig",
    "SessionRecord",
    "DEFAULT_SESSION_TIMEOUT_MINUTES",
    "SESSION_KEY",
    "VISITOR_KEY",
    # Ports / defaults
    "KeyValueStorePort",
    "InMemoryKeyValueStore",
]
