"""Relationship data types and models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from storelens.core.profiling import ColumnAnalysis
from storelens.core.schema.types import IndexSuggestion
from storelens.core.types import DataType

# Confidence band lower bounds
CONFIDENCE_HIGH = 0.8
CONFIDENCE_MEDIUM = 0.6
CONFIDENCE_LOW = 0.4


class RelationshipType(str, Enum):
    """Cardinality of a relationship between two tables."""

    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"

    def __str__(self) -> str:
        return self.value


@dataclass
class ForeignKeyCandidate:
    """A column that may reference another table, judged on its own."""

    table_name: str
    column_name: str
    score: int
    referenced_table: Optional[str] = None
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tableName": self.table_name,
            "columnName": self.column_name,
            "score": self.score,
            "referencedTable": self.referenced_table,
            "confidence": self.confidence,
        }

    def __repr__(self) -> str:
        return (
            f"FKCandidate({self.table_name}.{self.column_name}, score={self.score}, "
            f"ref={self.referenced_table})"
        )


@dataclass
class TableAnalysis:
    """Per-table profile used for relationship discovery."""

    table_name: str
    record_count: int
    data_type: DataType
    columns: Dict[str, ColumnAnalysis] = field(default_factory=dict)
    primary_key_candidate: Optional[str] = None
    primary_key_score: int = 0
    foreign_key_candidates: List[ForeignKeyCandidate] = field(default_factory=list)
    index_suggestions: List[IndexSuggestion] = field(default_factory=list)
    sampled_records: int = 0
    is_primitive: bool = False
    warnings: List[str] = field(default_factory=list)

    def is_foreign_key_candidate(self, column_name: str) -> bool:
        return any(c.column_name == column_name for c in self.foreign_key_candidates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tableName": self.table_name,
            "recordCount": self.record_count,
            "dataType": "primitive" if self.is_primitive else self.data_type.value,
            "columns": {name: col.to_dict() for name, col in self.columns.items()},
            "primaryKeyCandidate": self.primary_key_candidate,
            "foreignKeyCandidates": [c.to_dict() for c in self.foreign_key_candidates],
            "indexSuggestions": [s.to_dict() for s in self.index_suggestions],
            "sampledRecords": self.sampled_records,
            "warnings": list(self.warnings),
        }

    def __repr__(self) -> str:
        return (
            f"TableAnalysis({self.table_name}, columns={len(self.columns)}, "
            f"records={self.record_count}, PK={self.primary_key_candidate})"
        )


@dataclass
class Relationship:
    """A scored link from one table's column to another table's column."""

    from_table: str
    from_column: str
    to_table: str
    to_column: str
    type: RelationshipType
    confidence: float
    detected_at: str = field(default="", compare=False)
    fk_candidate_score: int = 0
    referenced_table_guess: Optional[str] = None
    value_overlap: float = 0.0

    @property
    def id(self) -> str:
        return f"{self.from_table}.{self.from_column}->{self.to_table}.{self.to_column}"

    @property
    def endpoint_key(self) -> Tuple[Tuple[str, str], Tuple[str, str]]:
        """Direction-independent identity of the two endpoints."""
        ends = sorted(
            [(self.from_table, self.from_column), (self.to_table, self.to_column)]
        )
        return ends[0], ends[1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fromTable": self.from_table,
            "fromColumn": self.from_column,
            "toTable": self.to_table,
            "toColumn": self.to_column,
            "type": self.type.value,
            "confidence": self.confidence,
            "detectedAt": self.detected_at,
            "metadata": {
                "fkCandidateScore": self.fk_candidate_score,
                "referencedTableGuess": self.referenced_table_guess,
                "valueOverlap": self.value_overlap,
            },
        }

    def __repr__(self) -> str:
        return (
            f"Relationship({self.from_table}.{self.from_column} -> "
            f"{self.to_table}.{self.to_column}, {self.type.value}, "
            f"confidence={self.confidence:.2f})"
        )


@dataclass
class AnalysisStatistics:
    """Summary counts for one analysis pass."""

    total_tables: int = 0
    tables_with_data: int = 0
    relationships_found: int = 0
    confidence_distribution: Dict[str, int] = field(
        default_factory=lambda: {"high": 0, "medium": 0, "low": 0, "veryLow": 0}
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTables": self.total_tables,
            "tablesWithData": self.tables_with_data,
            "relationshipsFound": self.relationships_found,
            "confidenceDistribution": dict(self.confidence_distribution),
        }


@dataclass
class AnalysisResult:
    """Table analyses and the relationships discovered between them."""

    tables: Dict[str, TableAnalysis] = field(default_factory=dict)
    relationships: List[Relationship] = field(default_factory=list)
    statistics: AnalysisStatistics = field(default_factory=AnalysisStatistics)
    warnings: List[str] = field(default_factory=list)

    def get_relationships_for_table(
        self, table_name: str, direction: str = "both"
    ) -> List[Relationship]:
        """Get relationships involving a table.

        Args:
            table_name: Table name
            direction: 'outgoing' (from), 'incoming' (to), or 'both'

        Returns:
            List of Relationship objects
        """
        if direction == "outgoing":
            return [r for r in self.relationships if r.from_table == table_name]
        elif direction == "incoming":
            return [r for r in self.relationships if r.to_table == table_name]
        else:  # both
            return [
                r
                for r in self.relationships
                if r.from_table == table_name or r.to_table == table_name
            ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": {name: t.to_dict() for name, t in self.tables.items()},
            "relationships": [r.to_dict() for r in self.relationships],
            "statistics": self.statistics.to_dict(),
            "warnings": list(self.warnings),
        }
