"""Key/value record store."""

from storelens.core.store.record_store import (
    DEFAULT_CAPACITY_BYTES,
    DEFAULT_PREFIX,
    InMemoryRecordStore,
    KeyMetadata,
    RecordStore,
    StorageStats,
    validate_table_name,
)

__all__ = [
    "DEFAULT_CAPACITY_BYTES",
    "DEFAULT_PREFIX",
    "InMemoryRecordStore",
    "KeyMetadata",
    "RecordStore",
    "StorageStats",
    "validate_table_name",
]
