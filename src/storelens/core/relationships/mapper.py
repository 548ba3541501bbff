"""Relationship discovery between tables of a record store."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from storelens.core.profiling import (
    DEFAULT_SAMPLE_SIZE,
    ColumnAnalysis,
    guess_referenced_table,
    profile_columns,
    sample_records,
)
from storelens.core.relationships.erd import ERD, build_erd
from storelens.core.relationships.types import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    AnalysisResult,
    AnalysisStatistics,
    ForeignKeyCandidate,
    Relationship,
    RelationshipType,
    TableAnalysis,
)
from storelens.core.schema.types import IndexSuggestion
from storelens.core.store import RecordStore
from storelens.core.types import DataType, stringify_value
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = CONFIDENCE_LOW

# Primary key scoring
PK_UNIQUE_NON_NULL = 50
PK_ID_PATTERN = 30
PK_ID_SHAPED = 20
PK_LOW_FREQUENCY_PENALTY = -20
PK_LOW_FREQUENCY = 0.9
PK_LITERAL_ID = 40
PK_LITERAL_PK = 30
PK_MIN_SCORE = 50

# Foreign key candidate scoring
FK_NAMING = 30
FK_REFERENCED_TABLE = 20
FK_ID_SHAPED = 20
FK_REPEATED_REFERENCE = 15
FK_REPEATED_REFERENCE_CAP = 100
FK_MIN_SCORE = 20
FK_SCORE_SCALE = 70

# Cross-table confidence adjustments
NAME_MATCH_BONUS = 0.3
PK_MATCH_BONUS = 0.2
ID_COLUMN_MATCH_BONUS = 0.1
OVERLAP_WEIGHT = 0.3
ONE_TO_MANY_MIN_SCORE = 50
ONE_TO_MANY_MIN_CONFIDENCE = 0.7


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class RelationshipMapper:
    """Detects primary keys, foreign keys and relationships between tables.

    Each table is profiled on its own first: every column gets a
    ColumnAnalysis, the best primary key candidate is chosen and foreign
    key candidates are scored from names and value shapes. Every foreign
    key candidate is then checked against every other table, blending
    naming, key matches and actual value overlap into a confidence.

    Example:
        >>> mapper = RelationshipMapper(store)
        >>> result = mapper.analyze_all_tables()
        >>> result.relationships[0]
        Relationship(orders.userId -> users.id, oneToMany, confidence=1.00)
    """

    def __init__(self, store: RecordStore, config: Optional[Dict] = None):
        """Initialize relationship mapper.

        Args:
            store: Record store to read tables from
            config: Analysis configuration dict (uses global config if None)
        """
        self.store = store
        self.config = config if config is not None else get_config().get("analysis", {})
        self.sample_size = int(self.config.get("sample_size", DEFAULT_SAMPLE_SIZE))
        self._table_analysis: Dict[str, TableAnalysis] = {}

        self.confidence_threshold = DEFAULT_CONFIDENCE_THRESHOLD
        self.set_confidence_threshold(
            self.config.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD)
        )

    def analyze_all_tables(self) -> AnalysisResult:
        """Analyze every table in the store and detect relationships.

        Per-table analyses are reused from the cache when present.

        Returns:
            AnalysisResult with tables, sorted relationships and statistics
        """
        table_names = self.store.list_table_names()
        logger.info(f"Analyzing {len(table_names)} tables")

        analyses: Dict[str, TableAnalysis] = {}
        for table_name in table_names:
            analysis = self.get_table_analysis(table_name)
            if analysis is not None:
                analyses[table_name] = analysis

        return self.build_result(analyses, total_tables=len(table_names))

    def build_result(
        self,
        analyses: Dict[str, TableAnalysis],
        total_tables: Optional[int] = None,
    ) -> AnalysisResult:
        """Detect relationships across already analyzed tables.

        Args:
            analyses: Table analyses keyed by table name
            total_tables: Number of tables considered (defaults to len(analyses))

        Returns:
            AnalysisResult
        """
        relationships = self.detect_relationships(analyses)

        statistics = AnalysisStatistics(
            total_tables=len(analyses) if total_tables is None else total_tables,
            tables_with_data=sum(1 for a in analyses.values() if a.record_count > 0),
            relationships_found=len(relationships),
            confidence_distribution=self.confidence_distribution(relationships),
        )

        warnings = [w for a in analyses.values() for w in a.warnings]

        logger.info(
            f"Found {len(relationships)} relationships across {len(analyses)} tables"
        )
        return AnalysisResult(
            tables=analyses,
            relationships=relationships,
            statistics=statistics,
            warnings=warnings,
        )

    def get_table_analysis(self, table_name: str) -> Optional[TableAnalysis]:
        """Cached analysis of a table, computed on first use."""
        cached = self._table_analysis.get(table_name)
        if cached is not None:
            return cached
        return self.analyze_table(table_name)

    def analyze_table(self, table_name: str) -> Optional[TableAnalysis]:
        """Analyze a single table's structure and data patterns.

        Args:
            table_name: Table to analyze

        Returns:
            TableAnalysis, or None if the table does not exist. A table that
            cannot be read yields an empty analysis carrying the error as a
            warning; it is not cached.
        """
        try:
            data = self.store.get_table(table_name)
        except Exception as e:
            message = f"Could not read table '{table_name}': {e}"
            logger.warning(message)
            return TableAnalysis(
                table_name=table_name,
                record_count=0,
                data_type=DataType.NULL,
                warnings=[message],
            )

        if data is None:
            return None

        sample = sample_records(data, self.sample_size, table_name=table_name)
        analysis = TableAnalysis(
            table_name=table_name,
            record_count=sample.total_records,
            data_type=sample.data_type,
            sampled_records=sample.size,
            is_primitive=sample.is_primitive,
            warnings=list(sample.warnings),
        )

        if not sample.records:
            self._table_analysis[table_name] = analysis
            return analysis

        analysis.columns = profile_columns(sample.records)

        # A list of scalars has no keys to speak of
        if not sample.is_primitive:
            pk, pk_score = self.detect_primary_key(analysis.columns)
            analysis.primary_key_candidate = pk
            analysis.primary_key_score = pk_score
            analysis.foreign_key_candidates = self.detect_foreign_keys(
                table_name, analysis.columns, pk
            )
            analysis.index_suggestions = self.suggest_indexes(analysis.columns)

        logger.debug(
            f"Table {table_name}: {len(analysis.columns)} columns, "
            f"{analysis.record_count} records, PK={analysis.primary_key_candidate}, "
            f"FK candidates={[c.column_name for c in analysis.foreign_key_candidates]}"
        )

        self._table_analysis[table_name] = analysis
        return analysis

    @staticmethod
    def score_primary_key(column_name: str, column: ColumnAnalysis) -> int:
        """Score how likely a column is the table's primary key."""
        score = 0
        lowered = column_name.lower()

        if column.unique and not column.nullable:
            score += PK_UNIQUE_NON_NULL
        if column.patterns.is_id:
            score += PK_ID_PATTERN
        if column.patterns.is_id_shaped:
            score += PK_ID_SHAPED
        if column.frequency < PK_LOW_FREQUENCY:
            score += PK_LOW_FREQUENCY_PENALTY
        if lowered == "id":
            score += PK_LITERAL_ID
        if lowered == "pk":
            score += PK_LITERAL_PK

        return score

    def detect_primary_key(
        self, columns: Dict[str, ColumnAnalysis]
    ) -> Tuple[Optional[str], int]:
        """Pick the primary key candidate.

        The highest scoring column wins (first column on ties), but only
        when its score reaches PK_MIN_SCORE.

        Args:
            columns: Column analyses of one table

        Returns:
            Tuple of (column name or None, best score)
        """
        best_name: Optional[str] = None
        best_score = 0

        for column_name, column in columns.items():
            score = self.score_primary_key(column_name, column)
            if score > best_score:
                best_name, best_score = column_name, score

        if best_name is None or best_score < PK_MIN_SCORE:
            return None, best_score
        return best_name, best_score

    @staticmethod
    def score_foreign_key(
        column_name: str, column: ColumnAnalysis
    ) -> Tuple[int, Optional[str]]:
        """Score how likely a column references another table.

        Returns:
            Tuple of (score, guessed referenced table)
        """
        score = 0
        referenced_table = None

        if column.patterns.is_foreign_key:
            score += FK_NAMING
            referenced_table = guess_referenced_table(column_name)
            if referenced_table:
                score += FK_REFERENCED_TABLE

        if column.patterns.is_id_shaped and column_name.lower() != "id":
            score += FK_ID_SHAPED

        # Repeated values suggest many rows pointing at the same parent
        if column.type in (DataType.STRING, DataType.NUMBER):
            if (
                column.cardinality > 1
                and not column.unique
                and column.cardinality < column.frequency * FK_REPEATED_REFERENCE_CAP
            ):
                score += FK_REPEATED_REFERENCE

        return score, referenced_table

    def detect_foreign_keys(
        self,
        table_name: str,
        columns: Dict[str, ColumnAnalysis],
        primary_key: Optional[str] = None,
    ) -> List[ForeignKeyCandidate]:
        """Score foreign key candidates of one table.

        The table's own primary key candidate is never a foreign key
        candidate.

        Args:
            table_name: Table the columns belong to
            columns: Column analyses of the table
            primary_key: The table's primary key candidate, if any

        Returns:
            Candidates sorted by score, highest first
        """
        candidates = []

        for column_name, column in columns.items():
            if column_name == primary_key:
                continue

            score, referenced_table = self.score_foreign_key(column_name, column)
            if score >= FK_MIN_SCORE:
                candidates.append(
                    ForeignKeyCandidate(
                        table_name=table_name,
                        column_name=column_name,
                        score=score,
                        referenced_table=referenced_table,
                        confidence=min(score / FK_SCORE_SCALE, 1.0),
                    )
                )

        return sorted(candidates, key=lambda c: c.score, reverse=True)

    @staticmethod
    def suggest_indexes(columns: Dict[str, ColumnAnalysis]) -> List[IndexSuggestion]:
        """Suggest indexes for key, reference and search columns."""
        suggestions = []

        for column_name, column in columns.items():
            if column.unique and not column.nullable:
                suggestions.append(
                    IndexSuggestion(
                        name=f"idx_{column_name}_unique",
                        fields=[column_name],
                        unique=True,
                        reason="Unique constraint",
                        priority="high",
                    )
                )

            if column.patterns.is_foreign_key:
                suggestions.append(
                    IndexSuggestion(
                        name=f"idx_{column_name}",
                        fields=[column_name],
                        reason="Foreign key performance",
                        priority="medium",
                    )
                )

            if column.patterns.is_email or "name" in column_name.lower():
                suggestions.append(
                    IndexSuggestion(
                        name=f"idx_{column_name}_search",
                        fields=[column_name],
                        reason="Common search field",
                        priority="low",
                    )
                )

        return suggestions

    def detect_relationships(
        self, analyses: Dict[str, TableAnalysis]
    ) -> List[Relationship]:
        """Evaluate every foreign key candidate against every other table.

        Args:
            analyses: Table analyses keyed by table name

        Returns:
            Deduplicated relationships, highest confidence first
        """
        relationships = []
        value_sets: Dict[Tuple[str, str], Set[str]] = {}

        for from_table, from_analysis in analyses.items():
            for candidate in from_analysis.foreign_key_candidates:
                for to_table, to_analysis in analyses.items():
                    if from_table == to_table:
                        continue

                    relationship = self.evaluate_relationship(
                        from_table, candidate, to_table, to_analysis, value_sets
                    )
                    if relationship is not None:
                        relationships.append(relationship)

        unique_relationships = self.deduplicate_relationships(relationships)
        return sorted(unique_relationships, key=lambda r: r.confidence, reverse=True)

    @staticmethod
    def find_match_column(to_analysis: TableAnalysis) -> Tuple[Optional[str], float]:
        """Column of the target table a foreign key would point at.

        Returns:
            Tuple of (column name or None, confidence bonus)
        """
        if to_analysis.primary_key_candidate:
            return to_analysis.primary_key_candidate, PK_MATCH_BONUS

        for column_name, column in to_analysis.columns.items():
            if column.patterns.is_id:
                return column_name, ID_COLUMN_MATCH_BONUS

        return None, 0.0

    def evaluate_relationship(
        self,
        from_table: str,
        candidate: ForeignKeyCandidate,
        to_table: str,
        to_analysis: TableAnalysis,
        value_sets: Optional[Dict[Tuple[str, str], Set[str]]] = None,
    ) -> Optional[Relationship]:
        """Score a potential relationship from a candidate to another table.

        Args:
            from_table: Source table name
            candidate: Foreign key candidate in the source table
            to_table: Target table name
            to_analysis: Target table analysis
            value_sets: Per-pass cache of column value sets

        Returns:
            Relationship, or None when no target column exists or the
            confidence is below the threshold
        """
        confidence = candidate.confidence or 0.0

        if candidate.referenced_table:
            ref = candidate.referenced_table.lower()
            target = to_table.lower()
            if ref in target or target in ref:
                confidence += NAME_MATCH_BONUS

        match_column, bonus = self.find_match_column(to_analysis)
        if match_column is None:
            return None
        confidence += bonus

        overlap = 0.0
        if to_analysis.record_count > 0:
            overlap = self.calculate_value_overlap(
                from_table, candidate.column_name, to_table, match_column, value_sets
            )
            confidence += overlap * OVERLAP_WEIGHT

        relationship_type = RelationshipType.MANY_TO_ONE
        # Heuristic only: duplicate foreign values are not counted
        if (
            candidate.score > ONE_TO_MANY_MIN_SCORE
            and confidence > ONE_TO_MANY_MIN_CONFIDENCE
        ):
            relationship_type = RelationshipType.ONE_TO_MANY

        confidence = clamp_confidence(confidence)
        if confidence < self.confidence_threshold:
            return None

        return Relationship(
            from_table=from_table,
            from_column=candidate.column_name,
            to_table=to_table,
            to_column=match_column,
            type=relationship_type,
            confidence=confidence,
            detected_at=_utcnow(),
            fk_candidate_score=candidate.score,
            referenced_table_guess=candidate.referenced_table,
            value_overlap=overlap,
        )

    def column_value_set(self, table_name: str, column_name: str) -> Set[str]:
        """Stringified non-null values of a column across the whole table."""
        data = self.store.get_table(table_name)
        if data is None:
            return set()

        records = data if isinstance(data, list) else [data]
        values = pd.Series(
            [r.get(column_name) for r in records if isinstance(r, dict)],
            dtype=object,
        )
        return {stringify_value(v) for v in values.dropna()}

    def calculate_value_overlap(
        self,
        table1: str,
        column1: str,
        table2: str,
        column2: str,
        value_sets: Optional[Dict[Tuple[str, str], Set[str]]] = None,
    ) -> float:
        """Overlap ratio between two columns' distinct values.

        Overlap is the intersection size over the smaller set's size.

        Returns:
            Overlap ratio in [0, 1]; 0 when either column has no values
        """
        cache = value_sets if value_sets is not None else {}
        try:
            for key in ((table1, column1), (table2, column2)):
                if key not in cache:
                    cache[key] = self.column_value_set(*key)
        except Exception as e:
            logger.warning(
                f"Could not compare {table1}.{column1} with {table2}.{column2}: {e}"
            )
            return 0.0

        values1 = cache[(table1, column1)]
        values2 = cache[(table2, column2)]
        if not values1 or not values2:
            return 0.0

        return len(values1 & values2) / min(len(values1), len(values2))

    @staticmethod
    def deduplicate_relationships(
        relationships: List[Relationship],
    ) -> List[Relationship]:
        """Keep the highest-confidence relationship per unordered endpoint pair.

        On equal confidence the first relationship seen is kept.
        """
        seen: Dict[Tuple, Relationship] = {}

        for relationship in relationships:
            key = relationship.endpoint_key
            existing = seen.get(key)
            if existing is None or relationship.confidence > existing.confidence:
                seen[key] = relationship

        return list(seen.values())

    @staticmethod
    def confidence_distribution(relationships: List[Relationship]) -> Dict[str, int]:
        """Count relationships per confidence band."""
        groups = {"high": 0, "medium": 0, "low": 0, "veryLow": 0}
        for relationship in relationships:
            if relationship.confidence >= CONFIDENCE_HIGH:
                groups["high"] += 1
            elif relationship.confidence >= CONFIDENCE_MEDIUM:
                groups["medium"] += 1
            elif relationship.confidence >= CONFIDENCE_LOW:
                groups["low"] += 1
            else:
                groups["veryLow"] += 1
        return groups

    def generate_erd(self, result: Optional[AnalysisResult] = None) -> ERD:
        """Build ERD nodes and edges.

        Args:
            result: Analysis to render (runs analyze_all_tables if None)

        Returns:
            ERD instance
        """
        return build_erd(result if result is not None else self.analyze_all_tables())

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the minimum confidence for retained relationships.

        Out-of-range values are clamped to [0, 1]; non-numbers and NaN are
        ignored with a warning. Cached table analyses are dropped.
        """
        try:
            value = float(threshold)
        except (TypeError, ValueError):
            value = math.nan
        if math.isnan(value):
            logger.warning(f"Ignoring invalid confidence threshold: {threshold!r}")
            return

        value = clamp_confidence(value)

        if value != threshold:
            logger.debug(f"Clamped confidence threshold {threshold} to {value}")
        self.confidence_threshold = value
        self.clear_cache()

    def clear_cache(self) -> None:
        """Drop cached table analyses."""
        self._table_analysis.clear()
