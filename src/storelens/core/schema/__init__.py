"""Schema inference and management."""

from storelens.core.schema.schema import SchemaManager
from storelens.core.schema.types import (
    Constraint,
    ConstraintType,
    IndexSuggestion,
    PropertySchema,
    Schema,
    ValidationResult,
)
from storelens.core.schema.validation import (
    validate_constraint,
    validate_record,
    validate_schema_definition,
)

__all__ = [
    "Constraint",
    "ConstraintType",
    "IndexSuggestion",
    "PropertySchema",
    "Schema",
    "SchemaManager",
    "ValidationResult",
    "validate_constraint",
    "validate_record",
    "validate_schema_definition",
]
