"""Key/value record store abstraction."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from storelens.core.types import DataType, infer_type
from storelens.exceptions import InvalidTableNameError, StoreCapacityError
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PREFIX = "lsdb_"
DEFAULT_CAPACITY_BYTES = 5 * 1024 * 1024
MAX_TABLE_NAME_LENGTH = 100
TABLE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class KeyMetadata:
    """Bookkeeping for one stored key."""

    size: int
    last_modified: str
    type: DataType

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "lastModified": self.last_modified,
            "type": self.type.value,
        }


@dataclass
class StorageStats:
    """Storage usage against the store capacity."""

    total_size: int
    used_keys: int
    estimated_limit: int
    used_percent: float
    available_space: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSize": self.total_size,
            "usedKeys": self.used_keys,
            "estimatedLimit": self.estimated_limit,
            "usedPercent": self.used_percent,
            "availableSpace": self.available_space,
        }


class RecordStore(ABC):
    """Read capability the analysis layer needs from a store.

    Implementations hold one JSON-serializable value per string key. A
    value is a scalar, an object, or an array of records.
    """

    @abstractmethod
    def list_table_names(self) -> List[str]:
        """Get sorted list of table names.

        Returns:
            List of table names
        """

    @abstractmethod
    def get_table(self, name: str) -> Any:
        """Get the value stored under ``name``.

        Args:
            name: Table name

        Returns:
            Stored value, or None if the table does not exist
        """

    def get_record_count(self, name: str) -> int:
        """Count records in a table.

        A list holds one record per element, any other present value is a
        single record, and an absent table holds none.
        """
        data = self.get_table(name)
        if data is None:
            return 0
        if isinstance(data, list):
            return len(data)
        return 1

    def has_table(self, name: str) -> bool:
        return self.get_table(name) is not None

    def load_schemas(self) -> Dict[str, Any]:
        """Get persisted schema definitions keyed by table name.

        Stores without schema persistence hold none.
        """
        return {}

    def save_schemas(self, schemas: Dict[str, Any]) -> None:
        """Persist schema definitions keyed by table name.

        Raises:
            NotImplementedError: If the store cannot persist schemas
        """
        raise NotImplementedError(f"{type(self).__name__} does not persist schemas")


def validate_table_name(name: Any) -> Tuple[bool, List[str]]:
    """Validate a table name.

    Args:
        name: Candidate table name

    Returns:
        Tuple of (valid, errors)
    """
    errors = []

    if not name or not isinstance(name, str):
        errors.append("Table name must be a non-empty string")
    else:
        if len(name) > MAX_TABLE_NAME_LENGTH:
            errors.append(
                f"Table name too long (max {MAX_TABLE_NAME_LENGTH} characters)"
            )
        if not TABLE_NAME_PATTERN.match(name):
            errors.append(
                "Table name can only contain letters, numbers, underscores, and hyphens"
            )

    return len(errors) == 0, errors


class InMemoryRecordStore(RecordStore):
    """Record store kept in process memory.

    Values are stored in their serialized JSON form so that size
    accounting matches what a string-valued key/value store would hold,
    and so callers never share mutable state with the store.

    Example:
        >>> store = InMemoryRecordStore()
        >>> store.put("users", [{"id": 1, "name": "Alice"}])
        >>> store.get_record_count("users")
        1
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        capacity_bytes: int = DEFAULT_CAPACITY_BYTES,
        strict_names: bool = False,
    ):
        """Initialize store.

        Args:
            prefix: Prefix of the store's own bookkeeping keys
            capacity_bytes: Maximum total serialized size of all keys
            strict_names: Reject table names that fail validate_table_name
        """
        self.prefix = prefix
        self.capacity_bytes = capacity_bytes
        self.strict_names = strict_names

        self.meta_key = f"{prefix}metadata"
        self.index_key = f"{prefix}index"
        self.schema_key = f"{prefix}schemas"

        self._data: Dict[str, str] = {}
        self._metadata: Dict[str, KeyMetadata] = {}
        self.created_at = _utcnow()
        self.last_modified = self.created_at

    @property
    def reserved_keys(self) -> set:
        return {self.meta_key, self.index_key, self.schema_key}

    @classmethod
    def from_tables(cls, tables: Dict[str, Any], **kwargs) -> InMemoryRecordStore:
        """Create a store pre-populated with tables.

        Args:
            tables: Mapping of table name to value
            **kwargs: Passed to the constructor

        Returns:
            InMemoryRecordStore instance
        """
        store = cls(**kwargs)
        for name, value in tables.items():
            store.put(name, value)
        return store

    def list_table_names(self) -> List[str]:
        return sorted(key for key in self._data if key not in self.reserved_keys)

    def get_table(self, name: str) -> Any:
        raw = self._data.get(name)
        if raw is None:
            return None
        return json.loads(raw)

    def put(self, name: str, value: Any) -> None:
        """Store a value under ``name``, replacing any previous value.

        Args:
            name: Table name
            value: JSON-serializable value

        Raises:
            InvalidTableNameError: If strict_names is set and the name is invalid
            ValueError: If the value is not JSON-serializable
            StoreCapacityError: If the write would exceed capacity
        """
        if self.strict_names:
            valid, errors = validate_table_name(name)
            if not valid:
                raise InvalidTableNameError(name, errors)

        size = self._write(name, value)
        self._metadata[name] = KeyMetadata(
            size=size,
            last_modified=self.last_modified,
            type=infer_type(value),
        )
        logger.debug(f"Stored '{name}' ({size} bytes)")

    def _write(self, key: str, value: Any) -> int:
        try:
            serialized = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Value for '{key}' is not JSON-serializable: {e}") from e

        size = len(serialized)
        used_by_others = self._total_size() - len(self._data.get(key, ""))
        available = self.capacity_bytes - used_by_others
        if size > available:
            raise StoreCapacityError(key, size, max(available, 0))

        self._data[key] = serialized
        self.last_modified = _utcnow()
        return size

    def load_schemas(self) -> Dict[str, Any]:
        raw = self._data.get(self.schema_key)
        if raw is None:
            return {}

        schemas = json.loads(raw)
        if not isinstance(schemas, dict):
            logger.warning(f"Ignoring malformed schema key '{self.schema_key}'")
            return {}
        return schemas

    def save_schemas(self, schemas: Dict[str, Any]) -> None:
        """Write schema definitions under the reserved schema key.

        Raises:
            StoreCapacityError: If the write would exceed capacity
        """
        if not schemas:
            if self._data.pop(self.schema_key, None) is not None:
                self.last_modified = _utcnow()
            return

        size = self._write(self.schema_key, schemas)
        logger.debug(f"Saved {len(schemas)} schemas ({size} bytes)")

    def delete(self, name: str) -> bool:
        """Delete a table.

        Args:
            name: Table name

        Returns:
            True if the table existed
        """
        if name not in self._data or name in self.reserved_keys:
            return False

        del self._data[name]
        self._metadata.pop(name, None)
        self.last_modified = _utcnow()
        logger.debug(f"Deleted '{name}'")
        return True

    def get_metadata(self, name: str) -> Optional[KeyMetadata]:
        return self._metadata.get(name)

    def _total_size(self) -> int:
        return sum(len(raw) for raw in self._data.values())

    def get_storage_stats(self) -> StorageStats:
        """Get storage usage statistics.

        Returns:
            StorageStats for the non-reserved keys
        """
        total_size = 0
        used_keys = 0
        for name in self.list_table_names():
            raw = self._data[name]
            if raw:
                total_size += len(raw)
                used_keys += 1

        used_percent = (total_size / self.capacity_bytes) * 100 if self.capacity_bytes else 100.0

        return StorageStats(
            total_size=total_size,
            used_keys=used_keys,
            estimated_limit=self.capacity_bytes,
            used_percent=min(used_percent, 100.0),
            available_space=max(self.capacity_bytes - total_size, 0),
        )

    def clear_all_tables(self) -> None:
        """Remove every table, keeping the store's reserved keys."""
        for name in self.list_table_names():
            del self._data[name]
            self._metadata.pop(name, None)
        self.last_modified = _utcnow()
        logger.info("Cleared all tables")

    def __len__(self) -> int:
        return len(self.list_table_names())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._data and name not in self.reserved_keys

    def __repr__(self) -> str:
        return (
            f"InMemoryRecordStore(tables={len(self)}, "
            f"size={self._total_size()}/{self.capacity_bytes})"
        )
