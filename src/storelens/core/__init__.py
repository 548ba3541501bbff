"""Core modules for storelens."""

from storelens.core.facade import AnalysisFacade, AnalysisReport
from storelens.core.relationships import (
    ERD,
    AnalysisResult,
    Relationship,
    RelationshipMapper,
    RelationshipType,
    TableAnalysis,
    to_mermaid,
)
from storelens.core.schema import (
    Constraint,
    ConstraintType,
    Schema,
    SchemaManager,
    ValidationResult,
)
from storelens.core.store import InMemoryRecordStore, RecordStore
from storelens.core.types import DataType, infer_type, is_date_string

__all__ = [
    # Store
    "InMemoryRecordStore",
    "RecordStore",
    # Types
    "DataType",
    "infer_type",
    "is_date_string",
    # Schema
    "Constraint",
    "ConstraintType",
    "Schema",
    "SchemaManager",
    "ValidationResult",
    # Relationships
    "AnalysisResult",
    "ERD",
    "Relationship",
    "RelationshipMapper",
    "RelationshipType",
    "TableAnalysis",
    "to_mermaid",
    # Facade
    "AnalysisFacade",
    "AnalysisReport",
]
