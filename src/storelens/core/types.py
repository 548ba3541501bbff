"""Value type inference for JSON-like records.

Every value read from a :class:`~storelens.core.store.RecordStore` is
classified into exactly one :class:`DataType`. Dates are not a storage
type: they are strings that match a known date layout *and* parse to a
real calendar date.
"""

from __future__ import annotations

import json
import numbers
import re
from enum import Enum
from typing import Any, Hashable, Optional, Tuple

import numpy as np
import pandas as pd


class DataType(str, Enum):
    """Primitive kinds a stored value can be classified as."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"
    UNDEFINED = "undefined"

    def __str__(self) -> str:
        return self.value


class _Missing:
    """Marker for a field that is absent from a record."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

# (layout regex, pandas format) pairs; order matters for format naming
DATE_LAYOUTS: Tuple[Tuple[str, "re.Pattern[str]", str], ...] = (
    ("YYYY-MM-DD", re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    ("ISO", re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"), "ISO8601"),
    ("MM/DD/YYYY", re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"), "%m/%d/%Y"),
    ("MM-DD-YYYY", re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"), "%m-%d-%Y"),
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://.+")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{10,}$")
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
NUMERIC_ID_PATTERN = re.compile(r"^\d+$")


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not _is_bool(value)


def match_date_layout(value: str) -> Optional[Tuple[str, str]]:
    """Return ``(layout_name, pandas_format)`` for the first matching layout."""
    for name, pattern, fmt in DATE_LAYOUTS:
        if pattern.match(value):
            return name, fmt
    return None


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse a date string into a UTC timestamp.

    Returns None unless the string matches a known layout and is a valid
    calendar date.
    """
    if not isinstance(value, str):
        return None

    layout = match_date_layout(value)
    if layout is None:
        return None

    try:
        parsed = pd.to_datetime(value, format=layout[1], utc=True)
    except (ValueError, OverflowError):
        return None

    if parsed is pd.NaT:
        return None
    return parsed


def is_date_string(value: Any) -> bool:
    """Check if a string is a date in one of the supported layouts.

    A layout match alone is not enough: ``2024-02-30`` looks like a date
    but is rejected because it does not exist on the calendar.

    Args:
        value: Value to check

    Returns:
        True if the value is a valid date string
    """
    return parse_date(value) is not None


def infer_type(value: Any) -> DataType:
    """Classify a value into a :class:`DataType`.

    Precedence: null, undefined, boolean, number, string/date, array,
    object. Anything else falls back to string.

    Args:
        value: Any JSON-representable value, or :data:`MISSING`

    Returns:
        The inferred data type
    """
    if value is None:
        return DataType.NULL
    if value is MISSING:
        return DataType.UNDEFINED
    if _is_bool(value):
        return DataType.BOOLEAN
    if _is_number(value):
        return DataType.NUMBER
    if isinstance(value, str):
        if is_date_string(value):
            return DataType.DATE
        return DataType.STRING
    if isinstance(value, (list, tuple)):
        return DataType.ARRAY
    if isinstance(value, dict):
        return DataType.OBJECT
    return DataType.STRING


def is_integral(value: Any) -> bool:
    """True for numbers without a fractional part."""
    if not _is_number(value):
        return False
    try:
        return float(value).is_integer()
    except (TypeError, ValueError, OverflowError):
        return False


def stringify_value(value: Any) -> str:
    """Render a value the way it is compared across tables.

    ``1``, ``1.0`` and ``"1"`` all render as ``"1"`` so numeric ids can
    match their string-typed counterparts in another table.
    """
    if _is_bool(value):
        return "true" if value else "false"
    if is_integral(value):
        return str(int(value))
    if _is_number(value):
        return repr(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return str(value)


def value_key(value: Any) -> Hashable:
    """Hashable identity of a value for distinct counting.

    Keeps ``1`` and ``"1"`` apart while treating ``1`` and ``1.0`` as the
    same value.
    """
    if _is_bool(value):
        kind = "boolean"
    elif _is_number(value):
        kind = "number"
    elif isinstance(value, str):
        kind = "string"
    elif isinstance(value, (list, tuple)):
        kind = "array"
    elif isinstance(value, dict):
        kind = "object"
    else:
        kind = type(value).__name__
    return kind, stringify_value(value)
