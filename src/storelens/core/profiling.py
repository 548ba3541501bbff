"""Column profiling shared by schema inference and relationship mapping.

A table is profiled from a bounded sample of its records. Each field
gets a :class:`ColumnAnalysis` holding its majority type, null/unique
flags, how often it is present, its distinct values, name and value
patterns, and type-specific statistics.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from storelens.core.types import (
    EMAIL_PATTERN,
    MISSING,
    NUMERIC_ID_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    UUID_PATTERN,
    DataType,
    infer_type,
    is_integral,
    match_date_layout,
    parse_date,
    stringify_value,
    value_key,
)
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SAMPLE_SIZE = 100
MAX_EXAMPLES = 5
DATE_FORMAT_SAMPLE = 10
PRIMITIVE_FIELD = "value"

FK_PREFIX_PATTERN = re.compile(r"^fk_(.+)$", re.IGNORECASE)
REF_SUFFIX_PATTERN = re.compile(r"^(.+)_ref$", re.IGNORECASE)
ID_SUFFIX_PATTERN = re.compile(r"^(.+)_id$", re.IGNORECASE)
# userId, orderID: a lowercase letter or digit right before "Id"
CAMEL_ID_SUFFIX_PATTERN = re.compile(r"^(.*[a-z0-9])I[dD]$")


@dataclass
class PatternSet:
    """Name and value patterns detected for a column."""

    is_id: bool = False
    is_foreign_key: bool = False
    is_uuid: bool = False
    is_numeric_id: bool = False
    is_email: bool = False
    is_url: bool = False
    is_phone: bool = False
    has_naming_pattern: bool = False

    @property
    def is_id_shaped(self) -> bool:
        return self.is_uuid or self.is_numeric_id

    def to_dict(self) -> Dict[str, bool]:
        return {
            "isId": self.is_id,
            "isForeignKey": self.is_foreign_key,
            "isUuid": self.is_uuid,
            "isNumericId": self.is_numeric_id,
            "isEmail": self.is_email,
            "isUrl": self.is_url,
            "isPhone": self.is_phone,
            "hasNamingPattern": self.has_naming_pattern,
        }


@dataclass
class StringStats:
    min_length: int
    max_length: int
    avg_length: float
    empty_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "avgLength": self.avg_length,
            "emptyCount": self.empty_count,
        }


@dataclass
class NumberStats:
    min: float
    max: float
    avg: float
    median: float
    is_integer: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
            "median": self.median,
            "isInteger": self.is_integer,
        }


@dataclass
class DateStats:
    earliest: str
    latest: str
    span_seconds: float
    format_variants: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "earliest": self.earliest,
            "latest": self.latest,
            "spanSeconds": self.span_seconds,
            "formatVariants": list(self.format_variants),
        }


ColumnStats = Union[StringStats, NumberStats, DateStats]


@dataclass
class ColumnAnalysis:
    """Statistical and type profile of one field in one table."""

    name: str
    type: DataType
    nullable: bool
    unique: bool
    frequency: float
    cardinality: int
    present_count: int
    non_null_count: int
    examples: List[Any] = field(default_factory=list)
    patterns: PatternSet = field(default_factory=PatternSet)
    statistics: Optional[ColumnStats] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "nullable": self.nullable,
            "unique": self.unique,
            "frequency": self.frequency,
            "cardinality": self.cardinality,
            "examples": list(self.examples),
            "patterns": self.patterns.to_dict(),
            "statistics": self.statistics.to_dict() if self.statistics else {},
        }


@dataclass
class RecordSample:
    """Object-shaped records sampled from one table."""

    records: List[Dict[str, Any]]
    total_records: int
    data_type: DataType
    is_primitive: bool = False
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.records)


def sample_records(
    data: Any,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    table_name: str = "",
) -> RecordSample:
    """Take a bounded sample of records from a stored value.

    A list holds one record per element; any other value is a single
    record. When no sampled record is an object the table is primitive
    and each record is wrapped as ``{"value": record}``. Otherwise
    non-object records are skipped and reported as warnings.

    Args:
        data: Stored table value (None when absent)
        sample_size: Maximum number of records to sample
        table_name: Table name used in warning messages

    Returns:
        RecordSample (empty when data is None)
    """
    if data is None:
        return RecordSample(records=[], total_records=0, data_type=DataType.NULL)

    records = data if isinstance(data, list) else [data]
    data_type = DataType.ARRAY if isinstance(data, list) else infer_type(data)
    sample = records[: max(sample_size, 0)]

    if sample and not any(isinstance(r, dict) for r in sample):
        return RecordSample(
            records=[{PRIMITIVE_FIELD: r} for r in sample],
            total_records=len(records),
            data_type=data_type,
            is_primitive=True,
        )

    objects = [r for r in sample if isinstance(r, dict)]
    skipped = len(sample) - len(objects)
    warnings = []
    if skipped:
        message = (
            f"Skipped {skipped} non-object record(s) in table '{table_name}'"
            if table_name
            else f"Skipped {skipped} non-object record(s)"
        )
        warnings.append(message)
        logger.warning(message)

    return RecordSample(
        records=objects,
        total_records=len(records),
        data_type=data_type,
        skipped=skipped,
        warnings=warnings,
    )


def extract_columns(records: List[Dict[str, Any]]) -> List[str]:
    """Union of field names across records, in first-seen order."""
    columns: Dict[str, None] = {}
    for record in records:
        for key in record:
            columns.setdefault(key, None)
    return list(columns)


def majority_type(values: List[Any]) -> DataType:
    """Most frequent type among values; ties go to the first type seen."""
    if not values:
        return DataType.NULL
    tally = Counter(infer_type(v) for v in values)
    return tally.most_common(1)[0][0]


def is_id_name(name: str) -> bool:
    """Column name looks like an identifier (``id``, ``*_id``, ``id_*``)."""
    lowered = name.lower()
    return lowered == "id" or lowered.endswith("_id") or lowered.startswith("id_")


def has_fk_naming(name: str) -> bool:
    """Column name follows a ``fk_*``, ``*_ref``, ``*_id`` or ``*Id`` convention."""
    return bool(
        FK_PREFIX_PATTERN.match(name)
        or REF_SUFFIX_PATTERN.match(name)
        or ID_SUFFIX_PATTERN.match(name)
        or CAMEL_ID_SUFFIX_PATTERN.match(name)
    )


def is_foreign_key_name(name: str) -> bool:
    """FK naming convention, excluding the table's own ``id`` column."""
    return has_fk_naming(name) and name.lower() != "id"


def guess_referenced_table(name: str) -> Optional[str]:
    """Guess the referenced table from a foreign-key column name.

    Strips ``fk_``, ``_ref`` and ``_id``/``Id`` affixes, e.g.
    ``customer_id`` -> ``customer`` and ``fk_user`` -> ``user``.

    Returns:
        Base name, or None if nothing is left after stripping
    """
    base = name
    match = FK_PREFIX_PATTERN.match(base)
    if match:
        base = match.group(1)
    match = REF_SUFFIX_PATTERN.match(base)
    if match:
        base = match.group(1)
    match = ID_SUFFIX_PATTERN.match(base) or CAMEL_ID_SUFFIX_PATTERN.match(base)
    if match:
        base = match.group(1)

    base = base.strip("_")
    if not base or base == name:
        return None
    return base


def detect_patterns(values: List[Any], column_name: str) -> PatternSet:
    """Detect naming and value patterns for a column.

    Value patterns hold only when every non-null value matches.
    """
    patterns = PatternSet(
        is_id=is_id_name(column_name),
        is_foreign_key=is_foreign_key_name(column_name),
        has_naming_pattern=has_fk_naming(column_name),
    )

    if not values:
        return patterns

    rendered = [stringify_value(v) for v in values]
    patterns.is_uuid = all(UUID_PATTERN.match(v) for v in rendered)
    patterns.is_numeric_id = all(NUMERIC_ID_PATTERN.match(v) for v in rendered)
    patterns.is_email = all(EMAIL_PATTERN.match(v) for v in rendered)
    patterns.is_url = all(URL_PATTERN.match(v) for v in rendered)
    patterns.is_phone = all(PHONE_PATTERN.match(v) for v in rendered)
    return patterns


def string_stats(values: List[Any]) -> StringStats:
    lengths = [len(stringify_value(v)) for v in values]
    return StringStats(
        min_length=min(lengths),
        max_length=max(lengths),
        avg_length=sum(lengths) / len(lengths),
        empty_count=sum(1 for v in values if stringify_value(v).strip() == ""),
    )


def to_numbers(values: List[Any]) -> pd.Series:
    """Numeric view of values; non-numeric entries are dropped."""
    candidates = [
        v for v in values if not isinstance(v, (bool, list, tuple, dict))
    ]
    return pd.to_numeric(pd.Series(candidates, dtype=object), errors="coerce").dropna()


def number_stats(values: List[Any]) -> Optional[NumberStats]:
    numbers = to_numbers(values)
    if numbers.empty:
        return None

    ordered = numbers.sort_values(ignore_index=True)
    return NumberStats(
        min=float(ordered.iloc[0]),
        max=float(ordered.iloc[-1]),
        avg=float(ordered.mean()),
        median=float(ordered.iloc[len(ordered) // 2]),
        is_integer=all(is_integral(n) for n in ordered.tolist()),
    )


def detect_date_formats(values: List[Any]) -> List[str]:
    """Date layouts seen among the first few values."""
    formats: Dict[str, None] = {}
    for value in values[:DATE_FORMAT_SAMPLE]:
        layout = match_date_layout(str(value))
        if layout:
            formats.setdefault(layout[0], None)
    return list(formats)


def date_stats(values: List[Any]) -> Optional[DateStats]:
    dates = [d for d in (parse_date(v) for v in values) if d is not None]
    if not dates:
        return None

    dates.sort()
    return DateStats(
        earliest=dates[0].isoformat(),
        latest=dates[-1].isoformat(),
        span_seconds=(dates[-1] - dates[0]).total_seconds(),
        format_variants=detect_date_formats(values),
    )


def column_values(records: List[Dict[str, Any]], column_name: str) -> List[Any]:
    """Values of a field across records, MISSING where absent."""
    return [record.get(column_name, MISSING) for record in records]


def analyze_column(
    records: List[Dict[str, Any]], column_name: str
) -> ColumnAnalysis:
    """Profile one field across sampled records.

    Args:
        records: Object-shaped sampled records
        column_name: Field name

    Returns:
        ColumnAnalysis for the field
    """
    values = [v for v in column_values(records, column_name) if v is not MISSING]
    non_null = [v for v in values if v is not None]

    distinct: Dict[Any, Any] = {}
    for value in non_null:
        distinct.setdefault(value_key(value), value)

    analysis = ColumnAnalysis(
        name=column_name,
        type=majority_type(non_null),
        nullable=len(values) != len(non_null),
        unique=len(distinct) == len(non_null) and len(non_null) > 1,
        frequency=len(values) / len(records) if records else 0.0,
        cardinality=len(distinct),
        present_count=len(values),
        non_null_count=len(non_null),
        examples=list(distinct.values())[:MAX_EXAMPLES],
        patterns=detect_patterns(non_null, column_name),
    )

    if not non_null:
        return analysis

    if analysis.type == DataType.STRING:
        analysis.statistics = string_stats(non_null)
    elif analysis.type == DataType.NUMBER:
        analysis.statistics = number_stats(non_null)
    elif analysis.type == DataType.DATE:
        analysis.statistics = date_stats(non_null)

    return analysis


def profile_columns(records: List[Dict[str, Any]]) -> Dict[str, ColumnAnalysis]:
    """Profile every field found in the records.

    Returns:
        Mapping of field name to ColumnAnalysis, in first-seen order
    """
    return {name: analyze_column(records, name) for name in extract_columns(records)}
