"""
Validate that the working store holds the lineage relations.

The graph builder tolerates missing metadata rows, but it cannot run without
the three relations themselves. This check runs before building so the
caller gets one message listing everything that is missing.
"""

from typing import List, Optional

from ..config import LineageSchemaConfig
from ..store import WorkingStore


class ValidationError(Exception):
    """Raised when the store doesn't hold the lineage relations."""
    pass


def lineage_schema_problems(store: WorkingStore,
                            config: Optional[LineageSchemaConfig] = None) -> List[str]:
    """Describe every missing table or column (empty list when valid)."""
    config = config or LineageSchemaConfig()
    problems = []

    for table, columns in config.required_columns().items():
        if not store.table_exists(table):
            problems.append(f"Missing table: {table}")
            continue

        present = {c.name for c in store.table_columns(table)}
        missing = [c for c in columns if c not in present]
        if missing:
            problems.append(f"Table {table} missing columns: {', '.join(missing)}")

    return problems


def validate_lineage_schema(store: WorkingStore,
                            config: Optional[LineageSchemaConfig] = None) -> bool:
    """
    Validate the lineage relations exist with their configured columns.

    Args:
        store: Working store to inspect
        config: Relation/column names (defaults to the bank_* tables)

    Raises:
        ValidationError: If any table or column is missing

    Returns:
        True if valid
    """
    problems = lineage_schema_problems(store, config)
    if problems:
        raise ValidationError("; ".join(problems))
    return True


def has_lineage_schema(store: WorkingStore,
                       config: Optional[LineageSchemaConfig] = None) -> bool:
    return not lineage_schema_problems(store, config)
