"""Exceptions raised by storelens."""

from __future__ import annotations

from typing import List, Optional


class StorelensError(Exception):
    """Base class for storelens errors."""


class InvalidSchemaDefinitionError(StorelensError, ValueError):
    """A user-supplied schema failed structural validation."""

    def __init__(self, table_name: str, errors: List[str]):
        self.table_name = table_name
        self.errors = list(errors)
        super().__init__(
            f"Invalid schema for table '{table_name}': " + "; ".join(self.errors)
        )


class StoreCapacityError(StorelensError):
    """Writing a value would exceed the store capacity."""

    def __init__(self, table_name: str, required: int, available: int):
        self.table_name = table_name
        self.required = required
        self.available = available
        super().__init__(
            f"Cannot store '{table_name}': needs {required} bytes, "
            f"only {available} bytes available"
        )


class InvalidTableNameError(StorelensError, ValueError):
    """Table name is not a valid store key."""

    def __init__(self, table_name: Optional[str], errors: List[str]):
        self.table_name = table_name
        self.errors = list(errors)
        super().__init__(f"Invalid table name {table_name!r}: " + "; ".join(errors))
