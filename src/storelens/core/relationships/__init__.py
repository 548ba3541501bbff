"""Relationship discovery between tables."""

from storelens.core.relationships.erd import (
    ERD,
    ERDColumn,
    ERDEdge,
    ERDNode,
    build_erd,
    to_mermaid,
)
from storelens.core.relationships.mapper import RelationshipMapper
from storelens.core.relationships.types import (
    AnalysisResult,
    AnalysisStatistics,
    ForeignKeyCandidate,
    Relationship,
    RelationshipType,
    TableAnalysis,
)

__all__ = [
    "AnalysisResult",
    "AnalysisStatistics",
    "ERD",
    "ERDColumn",
    "ERDEdge",
    "ERDNode",
    "ForeignKeyCandidate",
    "Relationship",
    "RelationshipMapper",
    "RelationshipType",
    "TableAnalysis",
    "build_erd",
    "to_mermaid",
]
