"""CLI command modules."""

from . import analyze, erd, schema, store

__all__ = ["analyze", "erd", "schema", "store"]
