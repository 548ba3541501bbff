"""One-call analysis of every table in a record store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storelens.core.relationships import (
    ERD,
    AnalysisResult,
    AnalysisStatistics,
    Relationship,
    RelationshipMapper,
    TableAnalysis,
)
from storelens.core.schema import Schema, SchemaManager
from storelens.core.store import RecordStore
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AnalysisReport:
    """Combined result of schema inference and relationship discovery."""

    tables: Dict[str, TableAnalysis] = field(default_factory=dict)
    schemas: Dict[str, Schema] = field(default_factory=dict)
    relationships: List[Relationship] = field(default_factory=list)
    statistics: AnalysisStatistics = field(default_factory=AnalysisStatistics)
    warnings: List[str] = field(default_factory=list)
    generated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": {name: t.to_dict() for name, t in self.tables.items()},
            "schemas": {name: s.to_dict() for name, s in self.schemas.items()},
            "relationships": [r.to_dict() for r in self.relationships],
            "statistics": self.statistics.to_dict(),
            "warnings": list(self.warnings),
            "generatedAt": self.generated_at,
        }


class AnalysisFacade:
    """Runs schema inference and relationship mapping over one store.

    Table analyses are memoized per table until ``clear_cache`` or a
    threshold change. Schemas are re-read on every pass so that schemas
    defined in between are picked up.

    Example:
        >>> facade = AnalysisFacade(store)
        >>> report = facade.analyze_all_tables()
        >>> report.statistics.relationships_found
        1
    """

    def __init__(self, store: RecordStore, config: Optional[Dict] = None):
        """Initialize facade.

        Args:
            store: Record store to analyze
            config: Analysis configuration dict (uses global config if None)
        """
        self.store = store
        self.config = config if config is not None else get_config().get("analysis", {})
        self.schema_manager = SchemaManager(store, self.config)
        self.mapper = RelationshipMapper(store, self.config)
        self._analysis_cache: Dict[str, TableAnalysis] = {}

    @property
    def confidence_threshold(self) -> float:
        return self.mapper.confidence_threshold

    def analyze_table(self, table_name: str) -> Optional[TableAnalysis]:
        """Analysis of one table, cached after the first call."""
        cached = self._analysis_cache.get(table_name)
        if cached is not None:
            return cached

        analysis = self.mapper.analyze_table(table_name)
        if analysis is not None:
            self._analysis_cache[table_name] = analysis
        return analysis

    def infer_schema(self, table_name: str) -> Optional[Schema]:
        """Effective schema of a table (a defined schema wins over inference)."""
        return self.schema_manager.get_effective_schema(table_name)

    def analyze_all_tables(self) -> AnalysisReport:
        """Analyze every table: schemas, keys and relationships.

        Returns:
            AnalysisReport
        """
        table_names = self.store.list_table_names()
        logger.info(f"Running full analysis over {len(table_names)} tables")

        analyses: Dict[str, TableAnalysis] = {}
        schemas: Dict[str, Schema] = {}
        schema_errors: List[str] = []
        for table_name in table_names:
            analysis = self.analyze_table(table_name)
            if analysis is not None:
                analyses[table_name] = analysis

            try:
                schema = self.infer_schema(table_name)
            except Exception as e:
                message = f"Could not infer schema for table '{table_name}': {e}"
                logger.warning(message)
                schema_errors.append(message)
                continue
            if schema is not None:
                schemas[table_name] = schema

        result = self.mapper.build_result(analyses, total_tables=len(table_names))

        warnings = list(result.warnings) + schema_errors
        for schema in schemas.values():
            warnings.extend(w for w in schema.warnings if w not in warnings)

        return AnalysisReport(
            tables=result.tables,
            schemas=schemas,
            relationships=result.relationships,
            statistics=result.statistics,
            warnings=warnings,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )

    def generate_erd(self) -> ERD:
        """ERD of the current store contents."""
        report = self.analyze_all_tables()
        return self.mapper.generate_erd(
            AnalysisResult(
                tables=report.tables,
                relationships=report.relationships,
                statistics=report.statistics,
                warnings=report.warnings,
            )
        )

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the relationship confidence threshold and drop cached analyses."""
        self.mapper.set_confidence_threshold(threshold)
        self.clear_cache()

    def clear_cache(self) -> None:
        """Drop cached table analyses."""
        logger.debug(f"Clearing {len(self._analysis_cache)} cached table analyses")
        self._analysis_cache.clear()
        self.mapper.clear_cache()
