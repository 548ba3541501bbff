"""Entity-relationship diagram built from an analysis result."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storelens.core.relationships.types import AnalysisResult, RelationshipType
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

MERMAID_SYMBOLS = {
    RelationshipType.ONE_TO_ONE: "||--||",
    RelationshipType.ONE_TO_MANY: "||--o{",
    RelationshipType.MANY_TO_ONE: "}o--||",
    RelationshipType.MANY_TO_MANY: "}o--o{",
}

_MERMAID_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


@dataclass
class ERDColumn:
    name: str
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_unique: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
            "isUnique": self.is_unique,
        }


@dataclass
class ERDNode:
    id: str
    label: str
    columns: List[ERDColumn] = field(default_factory=list)
    record_count: int = 0
    primary_key: Optional[str] = None
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0, "y": 0})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "type": "table",
            "data": {
                "columns": [c.to_dict() for c in self.columns],
                "recordCount": self.record_count,
                "primaryKey": self.primary_key,
            },
            "position": dict(self.position),
        }


@dataclass
class ERDEdge:
    id: str
    source: str
    target: str
    label: str
    type: RelationshipType
    confidence: float
    from_column: str
    to_column: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "type": self.type.value,
            "data": {
                "confidence": self.confidence,
                "fromColumn": self.from_column,
                "toColumn": self.to_column,
            },
        }


@dataclass
class ERD:
    """Graph of tables (nodes) and relationships (edges)."""

    nodes: List[ERDNode] = field(default_factory=list)
    edges: List[ERDEdge] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def get_node(self, table_name: str) -> Optional[ERDNode]:
        for node in self.nodes:
            if node.id == table_name:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "metadata": dict(self.metadata),
        }


def build_erd(result: AnalysisResult) -> ERD:
    """Build an ERD with one node per analyzed table and one edge per relationship.

    Args:
        result: Output of RelationshipMapper.analyze_all_tables

    Returns:
        ERD instance
    """
    nodes = []
    for table_name, analysis in result.tables.items():
        columns = [
            ERDColumn(
                name=column_name,
                type=column.type.value,
                is_primary_key=column_name == analysis.primary_key_candidate,
                is_foreign_key=analysis.is_foreign_key_candidate(column_name),
                is_unique=column.unique,
            )
            for column_name, column in analysis.columns.items()
        ]
        nodes.append(
            ERDNode(
                id=table_name,
                label=table_name,
                columns=columns,
                record_count=analysis.record_count,
                primary_key=analysis.primary_key_candidate,
            )
        )

    edges = [
        ERDEdge(
            id=rel.id,
            source=rel.from_table,
            target=rel.to_table,
            label=f"{rel.from_column} → {rel.to_column}",
            type=rel.type,
            confidence=rel.confidence,
            from_column=rel.from_column,
            to_column=rel.to_column,
        )
        for rel in result.relationships
    ]

    logger.debug(f"Built ERD with {len(nodes)} nodes and {len(edges)} edges")
    return ERD(
        nodes=nodes,
        edges=edges,
        metadata={
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "statistics": result.statistics.to_dict(),
        },
    )


def _mermaid_id(name: str) -> str:
    return _MERMAID_UNSAFE.sub("_", name) or "_"


def to_mermaid(erd: ERD) -> str:
    """Render an ERD as Mermaid ``erDiagram`` text.

    Columns carry PK/FK/UK annotations; relationship lines use the
    crow's-foot symbol of their relationship type and are labelled with
    the referencing column.
    """
    lines = ["erDiagram"]

    for node in erd.nodes:
        lines.append(f"    {_mermaid_id(node.id)} {{")
        for column in node.columns:
            annotations = []
            if column.is_primary_key:
                annotations.append("PK")
            if column.is_foreign_key:
                annotations.append("FK")
            if column.is_unique:
                annotations.append("UK")
            annot_str = " " + ", ".join(annotations) if annotations else ""
            lines.append(f"        {column.type} {_mermaid_id(column.name)}{annot_str}")
        lines.append("    }")

    for edge in erd.edges:
        symbol = MERMAID_SYMBOLS[edge.type]
        lines.append(
            f"    {_mermaid_id(edge.source)} {symbol} {_mermaid_id(edge.target)} "
            f': "{edge.from_column}"'
        )

    return "\n".join(lines) + "\n"
