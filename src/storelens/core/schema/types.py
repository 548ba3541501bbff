"""Schema data types and models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from storelens.core.types import DataType


class ConstraintType(str, Enum):
    """Kinds of field constraints a schema can carry."""

    REQUIRED = "required"
    UNIQUE = "unique"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN_VALUE = "minValue"
    MAX_VALUE = "maxValue"
    PATTERN = "pattern"
    ENUM = "enum"
    FOREIGN_KEY = "foreignKey"
    DEFAULT = "default"

    def __str__(self) -> str:
        return self.value


@dataclass
class Constraint:
    """A single constraint on a field."""

    type: ConstraintType
    value: Any = None
    values: Optional[List[Any]] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.value is not None:
            data["value"] = self.value
        if self.values is not None:
            data["values"] = list(self.values)
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Constraint:
        return cls(
            type=ConstraintType(data["type"]),
            value=data.get("value"),
            values=data.get("values"),
            description=data.get("description"),
        )


@dataclass
class PropertySchema:
    """Type information for one field."""

    type: DataType
    nullable: bool = False
    format: Optional[str] = None  # email | url | phone
    subtype: Optional[str] = None  # integer

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "nullable": self.nullable}
        if self.format:
            data["format"] = self.format
        if self.subtype:
            data["subtype"] = self.subtype
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PropertySchema:
        return cls(
            type=DataType(data["type"]),
            nullable=bool(data.get("nullable", False)),
            format=data.get("format"),
            subtype=data.get("subtype"),
        )


@dataclass
class IndexSuggestion:
    """Suggested index over one or more fields."""

    name: str
    fields: List[str]
    unique: bool = False
    reason: str = ""
    priority: Optional[str] = None  # high | medium | low

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "fields": list(self.fields),
            "unique": self.unique,
            "reason": self.reason,
        }
        if self.priority:
            data["priority"] = self.priority
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IndexSuggestion:
        return cls(
            name=data["name"],
            fields=list(data.get("fields", [])),
            unique=bool(data.get("unique", False)),
            reason=data.get("reason", ""),
            priority=data.get("priority"),
        )


@dataclass
class Schema:
    """Structural schema of one table."""

    table_name: str
    properties: Dict[str, PropertySchema] = field(default_factory=dict)
    constraints: Dict[str, List[Constraint]] = field(default_factory=dict)
    indexes: List[IndexSuggestion] = field(default_factory=list)
    generated_at: Optional[str] = None
    type: str = "object"
    source: str = "generated"  # generated | defined
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def get_constraints(self, field_name: str) -> List[Constraint]:
        return self.constraints.get(field_name, [])

    def get_constraint(
        self, field_name: str, constraint_type: ConstraintType
    ) -> Optional[Constraint]:
        for constraint in self.get_constraints(field_name):
            if constraint.type == constraint_type:
                return constraint
        return None

    def has_constraint(self, field_name: str, constraint_type: ConstraintType) -> bool:
        return self.get_constraint(field_name, constraint_type) is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {
            "tableName": self.table_name,
            "type": self.type,
            "properties": {
                name: prop.to_dict() for name, prop in self.properties.items()
            },
            "constraints": {
                name: [c.to_dict() for c in constraints]
                for name, constraints in self.constraints.items()
            },
            "indexes": [index.to_dict() for index in self.indexes],
            "generatedAt": self.generated_at,
        }
        if self.source == "defined":
            data["createdAt"] = self.created_at
            data["updatedAt"] = self.updated_at
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], table_name: Optional[str] = None) -> Schema:
        """Create from dictionary.

        Args:
            data: Dictionary in the ``to_dict`` layout
            table_name: Overrides ``tableName`` from the data

        Returns:
            Schema instance
        """
        return cls(
            table_name=table_name or data.get("tableName", ""),
            type=data.get("type", "object"),
            properties={
                name: PropertySchema.from_dict(prop)
                for name, prop in (data.get("properties") or {}).items()
            },
            constraints={
                name: [Constraint.from_dict(c) for c in constraints]
                for name, constraints in (data.get("constraints") or {}).items()
            },
            indexes=[
                IndexSuggestion.from_dict(index) for index in data.get("indexes") or []
            ],
            generated_at=data.get("generatedAt"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def __repr__(self) -> str:
        return (
            f"Schema({self.table_name}, fields={len(self.properties)}, "
            f"source={self.source})"
        )


@dataclass
class ValidationResult:
    """Outcome of validating a schema definition or data against a schema."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }
