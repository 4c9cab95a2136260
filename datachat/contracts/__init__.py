"""Contract checks for the relations the lineage graph is built from."""

from .validator import ValidationError, has_lineage_schema, validate_lineage_schema

__all__ = ["ValidationError", "has_lineage_schema", "validate_lineage_schema"]
