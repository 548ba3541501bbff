"""Validation of schema definitions and of data against schemas."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from storelens.core.schema.types import (
    Constraint,
    ConstraintType,
    Schema,
    ValidationResult,
)
from storelens.core.types import DataType, infer_type, parse_date, value_key

_DATA_TYPES = {t.value for t in DataType}
_CONSTRAINT_TYPES = {t.value for t in ConstraintType}


def validate_schema_definition(definition: Any) -> ValidationResult:
    """Validate the structure of a user-supplied schema definition.

    Every property must declare a recognized type, constraints must use
    known constraint types and refer to declared properties, and a field
    cannot be both REQUIRED and nullable.

    Args:
        definition: Schema definition dict (``Schema.to_dict`` layout)

    Returns:
        ValidationResult with all errors found
    """
    errors: List[str] = []

    if not isinstance(definition, dict):
        return ValidationResult(valid=False, errors=["Schema must be an object"])

    properties = definition.get("properties")
    if not isinstance(properties, dict):
        errors.append("Schema must have a properties object")
        properties = {}

    for prop_name, prop in properties.items():
        if not isinstance(prop, dict):
            errors.append(f"Property {prop_name}: Definition must be an object")
            continue
        if prop.get("type") not in _DATA_TYPES:
            errors.append(f"Property {prop_name}: Invalid or missing type")

    constraints = definition.get("constraints") or {}
    if not isinstance(constraints, dict):
        errors.append("Schema constraints must be an object")
        constraints = {}

    for prop_name, prop_constraints in constraints.items():
        if prop_name not in properties:
            errors.append(f"Constraint for unknown property {prop_name}")
        if not isinstance(prop_constraints, list):
            errors.append(f"Property {prop_name}: Constraints must be a list")
            continue

        types = []
        for constraint in prop_constraints:
            if not isinstance(constraint, dict) or constraint.get("type") not in _CONSTRAINT_TYPES:
                errors.append(f"Property {prop_name}: Invalid or missing constraint type")
                continue
            types.append(constraint["type"])

        prop = properties.get(prop_name)
        if (
            ConstraintType.REQUIRED.value in types
            and isinstance(prop, dict)
            and prop.get("nullable")
        ):
            errors.append(f"Property {prop_name}: Cannot be both required and nullable")

    indexes = definition.get("indexes")
    if indexes is not None and not isinstance(indexes, list):
        errors.append("Schema indexes must be a list")

    return ValidationResult(valid=not errors, errors=errors)


def _compare_bound(value: Any, bound: Any) -> Optional[float]:
    """Signed difference between value and bound, None if incomparable."""
    if isinstance(bound, str):
        # date bounds are stored as ISO timestamps
        value_date = parse_date(value)
        bound_date = parse_date(bound)
        if value_date is None or bound_date is None:
            return None
        return (value_date - bound_date).total_seconds()

    if isinstance(value, bool):
        return None
    try:
        return float(value) - float(bound)
    except (TypeError, ValueError):
        return None


def validate_constraint(value: Any, constraint: Constraint, context: str) -> Optional[str]:
    """Validate a single non-null value against a constraint.

    Args:
        value: Value to check
        constraint: Constraint to apply
        context: Prefix for the error message

    Returns:
        Error message, or None if the value satisfies the constraint
    """
    ctype = constraint.type

    if ctype == ConstraintType.MIN_LENGTH:
        if len(str(value)) < constraint.value:
            return f"{context}: Minimum length is {constraint.value}"

    elif ctype == ConstraintType.MAX_LENGTH:
        if len(str(value)) > constraint.value:
            return f"{context}: Maximum length is {constraint.value}"

    elif ctype in (ConstraintType.MIN_VALUE, ConstraintType.MAX_VALUE):
        diff = _compare_bound(value, constraint.value)
        if diff is None:
            return f"{context}: Cannot compare with {constraint.value}"
        if ctype == ConstraintType.MIN_VALUE and diff < 0:
            return f"{context}: Minimum value is {constraint.value}"
        if ctype == ConstraintType.MAX_VALUE and diff > 0:
            return f"{context}: Maximum value is {constraint.value}"

    elif ctype == ConstraintType.PATTERN:
        try:
            if not re.search(constraint.value, str(value)):
                return f"{context}: Does not match required pattern"
        except (re.error, TypeError):
            return f"{context}: Invalid pattern constraint"

    elif ctype == ConstraintType.ENUM:
        allowed = {value_key(v) for v in constraint.values or []}
        if value_key(value) not in allowed:
            joined = ", ".join(str(v) for v in constraint.values or [])
            return f"{context}: Must be one of: {joined}"

    return None


def validate_record(schema: Schema, record: Any, context: str = "Record") -> List[str]:
    """Validate a single record against a schema.

    Args:
        schema: Schema to validate against
        record: Record to check
        context: Prefix for error messages

    Returns:
        List of error messages
    """
    if not isinstance(record, dict):
        return [f"{context}: Expected object, got {infer_type(record).value}"]

    errors = []
    for prop_name, prop in schema.properties.items():
        constraints = schema.get_constraints(prop_name)
        value = record.get(prop_name)

        if value is None:
            if any(c.type == ConstraintType.REQUIRED for c in constraints):
                errors.append(f"{context}.{prop_name}: Required field is missing")
            continue

        actual = infer_type(value)
        if actual != prop.type and prop.type != DataType.STRING:
            errors.append(
                f"{context}.{prop_name}: Expected {prop.type.value}, got {actual.value}"
            )

        for constraint in constraints:
            error = validate_constraint(value, constraint, f"{context}.{prop_name}")
            if error:
                errors.append(error)

    return errors


def validate_records(schema: Schema, data: Any) -> ValidationResult:
    """Validate a table value (one record or a list of records)."""
    errors: List[str] = []

    if isinstance(data, list):
        for index, record in enumerate(data):
            errors.extend(validate_record(schema, record, f"Record {index}"))
    else:
        errors.extend(validate_record(schema, data, "Data"))

    return ValidationResult(valid=not errors, errors=errors)


def definition_to_dict(definition: Any) -> Dict[str, Any]:
    """Accept a Schema or a plain dict definition."""
    if isinstance(definition, Schema):
        return definition.to_dict()
    return definition
