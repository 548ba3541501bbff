"""Schema inference and user-defined schema management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storelens.core.profiling import (
    DEFAULT_SAMPLE_SIZE,
    analyze_column,
    column_values,
    date_stats,
    extract_columns,
    number_stats,
    sample_records,
)
from storelens.core.schema.types import (
    Constraint,
    ConstraintType,
    IndexSuggestion,
    PropertySchema,
    Schema,
    ValidationResult,
)
from storelens.core.schema.validation import (
    definition_to_dict,
    validate_records,
    validate_schema_definition,
)
from storelens.core.store import RecordStore
from storelens.core.types import (
    EMAIL_PATTERN,
    MISSING,
    PHONE_PATTERN,
    URL_PATTERN,
    DataType,
    stringify_value,
    value_key,
)
from storelens.exceptions import InvalidSchemaDefinitionError
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

MAX_LENGTH_LIMIT = 1000
ENUM_MAX_DISTINCT = 10
ENUM_DENSITY_RATIO = 2
INDEXED_NAME_HINTS = ("id", "email", "username")

# Checked in order; the first format every value matches wins
STRING_FORMATS = (
    ("email", EMAIL_PATTERN, "Email format"),
    ("url", URL_PATTERN, "URL format"),
    ("phone", PHONE_PATTERN, "Phone format"),
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SchemaManager:
    """Infers table schemas and keeps user-defined ones.

    A schema defined through :meth:`define_schema` always takes precedence
    over an inferred one in :meth:`get_effective_schema`. Defined schemas
    are saved to the store, so a new manager over the same store sees them.

    Example:
        >>> manager = SchemaManager(store)
        >>> schema = manager.infer_schema("users")
        >>> schema.properties["email"].format
        'email'
    """

    def __init__(self, store: RecordStore, config: Optional[Dict] = None):
        """Initialize schema manager.

        Args:
            store: Record store to read tables from
            config: Analysis configuration dict (uses global config if None)
        """
        self.store = store
        self.config = config if config is not None else get_config().get("analysis", {})
        self.sample_size = int(self.config.get("sample_size", DEFAULT_SAMPLE_SIZE))
        self._schemas: Dict[str, Schema] = self._load_schemas()

    def _load_schemas(self) -> Dict[str, Schema]:
        schemas = {}
        for table_name, data in self.store.load_schemas().items():
            schema = Schema.from_dict(data, table_name=table_name)
            schema.source = "defined"
            schemas[table_name] = schema
        if schemas:
            logger.debug(f"Loaded {len(schemas)} defined schemas from store")
        return schemas

    def _save_schemas(self, schemas: Dict[str, Schema]) -> None:
        """Persist defined schemas; raises before anything is kept in memory."""
        try:
            self.store.save_schemas(
                {name: schema.to_dict() for name, schema in schemas.items()}
            )
        except NotImplementedError:
            logger.debug("Store does not persist schemas; keeping them in memory")
        self._schemas = schemas

    def infer_schema(
        self, table_name: str, sample_size: Optional[int] = None
    ) -> Optional[Schema]:
        """Infer a schema from a sample of a table's records.

        Args:
            table_name: Table to analyze
            sample_size: Records to sample (defaults to configured sample size)

        Returns:
            Inferred Schema, or None if the table is absent or empty
        """
        data = self.store.get_table(table_name)
        sample = sample_records(
            data, sample_size or self.sample_size, table_name=table_name
        )

        if not sample.records:
            logger.debug(f"No records to infer schema for table '{table_name}'")
            return None

        schema = Schema(
            table_name=table_name,
            generated_at=_utcnow(),
            warnings=list(sample.warnings),
        )

        for prop_name in extract_columns(sample.records):
            prop, constraints = self._analyze_property(sample.records, prop_name)
            schema.properties[prop_name] = prop
            if constraints:
                schema.constraints[prop_name] = constraints

        schema.indexes = self.suggest_indexes(schema)

        logger.debug(
            f"Inferred schema for '{table_name}': {len(schema.properties)} fields "
            f"from {sample.size} of {sample.total_records} records"
        )
        return schema

    def _analyze_property(
        self, records: List[Dict[str, Any]], prop_name: str
    ) -> tuple[PropertySchema, List[Constraint]]:
        column = analyze_column(records, prop_name)
        prop = PropertySchema(
            type=column.type if column.non_null_count else DataType.STRING,
            nullable=column.nullable,
        )
        constraints: List[Constraint] = []

        if not column.non_null_count:
            return prop, constraints

        non_null = [
            v for v in column_values(records, prop_name) if v is not MISSING and v is not None
        ]

        if column.present_count == len(records) and column.non_null_count == column.present_count:
            constraints.append(Constraint(ConstraintType.REQUIRED))

        if column.unique:
            constraints.append(Constraint(ConstraintType.UNIQUE))

        if prop.type == DataType.STRING:
            self._refine_string(non_null, prop, constraints)
        elif prop.type == DataType.NUMBER:
            self._refine_number(non_null, prop, constraints)
        elif prop.type == DataType.DATE:
            self._refine_date(non_null, constraints)

        distinct: Dict[Any, Any] = {}
        for value in non_null:
            distinct.setdefault(value_key(value), value)
        if (
            len(distinct) <= ENUM_MAX_DISTINCT
            and len(non_null) >= ENUM_DENSITY_RATIO * len(distinct)
        ):
            constraints.append(
                Constraint(ConstraintType.ENUM, values=list(distinct.values()))
            )

        return prop, constraints

    def _refine_string(
        self, values: List[Any], prop: PropertySchema, constraints: List[Constraint]
    ) -> None:
        rendered = [stringify_value(v) for v in values]
        lengths = [len(v) for v in rendered]
        min_length, max_length = min(lengths), max(lengths)

        if min_length > 0:
            constraints.append(Constraint(ConstraintType.MIN_LENGTH, value=min_length))
        if max_length <= MAX_LENGTH_LIMIT:
            constraints.append(Constraint(ConstraintType.MAX_LENGTH, value=max_length))

        for fmt, pattern, description in STRING_FORMATS:
            if all(pattern.match(v) for v in rendered):
                prop.format = fmt
                constraints.append(
                    Constraint(
                        ConstraintType.PATTERN,
                        value=pattern.pattern,
                        description=description,
                    )
                )
                break

    def _refine_number(
        self, values: List[Any], prop: PropertySchema, constraints: List[Constraint]
    ) -> None:
        stats = number_stats(values)
        if stats is None:
            return

        constraints.append(Constraint(ConstraintType.MIN_VALUE, value=stats.min))
        constraints.append(Constraint(ConstraintType.MAX_VALUE, value=stats.max))
        if stats.is_integer:
            prop.subtype = "integer"

    def _refine_date(self, values: List[Any], constraints: List[Constraint]) -> None:
        stats = date_stats(values)
        if stats is None:
            return

        constraints.append(Constraint(ConstraintType.MIN_VALUE, value=stats.earliest))
        constraints.append(Constraint(ConstraintType.MAX_VALUE, value=stats.latest))

    def suggest_indexes(self, schema: Schema) -> List[IndexSuggestion]:
        """Suggest indexes for unique and commonly queried fields.

        Args:
            schema: Schema with properties and constraints filled in

        Returns:
            List of IndexSuggestion
        """
        indexes = []

        for prop_name in schema.properties:
            if schema.has_constraint(prop_name, ConstraintType.UNIQUE):
                indexes.append(
                    IndexSuggestion(
                        name=f"idx_{prop_name}_unique",
                        fields=[prop_name],
                        unique=True,
                        reason="Unique constraint",
                    )
                )

            lowered = prop_name.lower()
            if any(hint in lowered for hint in INDEXED_NAME_HINTS):
                indexes.append(
                    IndexSuggestion(
                        name=f"idx_{prop_name}",
                        fields=[prop_name],
                        reason="Commonly queried field",
                    )
                )

        return indexes

    def define_schema(self, table_name: str, definition: Any) -> Schema:
        """Register an explicit schema for a table.

        Args:
            table_name: Table the schema applies to
            definition: Schema or dict in the ``Schema.to_dict`` layout

        Returns:
            The stored Schema

        Raises:
            InvalidSchemaDefinitionError: If the definition is structurally invalid;
                previously defined schemas are left untouched
            StoreCapacityError: If the store has no room for the schema; previously
                defined schemas are left untouched
        """
        data = definition_to_dict(definition)
        result = validate_schema_definition(data)
        if not result.valid:
            logger.warning(
                f"Rejected schema for '{table_name}': {'; '.join(result.errors)}"
            )
            raise InvalidSchemaDefinitionError(table_name, result.errors)

        now = _utcnow()
        previous = self._schemas.get(table_name)

        schema = Schema.from_dict(data, table_name=table_name)
        schema.source = "defined"
        schema.created_at = previous.created_at if previous else now
        schema.updated_at = now
        self._save_schemas({**self._schemas, table_name: schema})

        logger.info(f"Defined schema for '{table_name}' ({len(schema.properties)} fields)")
        return schema

    def get_schema(self, table_name: str) -> Optional[Schema]:
        """Get the user-defined schema for a table, if any."""
        return self._schemas.get(table_name)

    def remove_schema(self, table_name: str) -> bool:
        """Remove a user-defined schema.

        Returns:
            True if a schema was removed
        """
        if table_name in self._schemas:
            self._save_schemas(
                {name: s for name, s in self._schemas.items() if name != table_name}
            )
            logger.info(f"Removed schema for '{table_name}'")
            return True
        return False

    def get_all_schemas(self) -> Dict[str, Schema]:
        return dict(self._schemas)

    def get_effective_schema(self, table_name: str) -> Optional[Schema]:
        """Defined schema if one exists, otherwise an inferred one."""
        defined = self.get_schema(table_name)
        if defined is not None:
            return defined
        return self.infer_schema(table_name)

    def validate_data(self, table_name: str, data: Any = MISSING) -> ValidationResult:
        """Validate data against a table's defined schema.

        Args:
            table_name: Table whose defined schema to use
            data: Data to validate (defaults to the table's stored value)

        Returns:
            ValidationResult; valid with a warning when no schema is defined
        """
        schema = self.get_schema(table_name)
        if schema is None:
            return ValidationResult(valid=True, warnings=["No schema defined"])

        if data is MISSING:
            data = self.store.get_table(table_name)
            if data is None:
                return ValidationResult(valid=True, warnings=["Table not found"])

        return validate_records(schema, data)
