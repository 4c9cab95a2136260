"""
Atomic bulk insertion of decoded rows into the working store.
"""

import logging
import sqlite3
from typing import List

from ..models.dataclasses import LoadResult, Row, TableSchema
from ..store import WorkingStore
from .exceptions import LoadTransactionError
from .schema_synthesizer import SchemaSynthesizer


logger = logging.getLogger(__name__)


class RelationalLoader:
    """Create-if-absent and insert all rows in a single transaction."""

    def __init__(self, store: WorkingStore):
        self.store = store

    def load(self, schema: TableSchema, rows: List[Row]) -> LoadResult:
        """
        Load rows into schema.name.

        The CREATE TABLE IF NOT EXISTS and every INSERT share one
        transaction: on any failure nothing is left behind, not even a
        freshly created empty table. Existing tables are never dropped.

        Raises:
            LoadTransactionError: If any row fails to bind or execute
        """
        existed = self.store.table_exists(schema.name)
        create_sql = schema.create_statement or SchemaSynthesizer.create_statement(schema)
        insert_sql = SchemaSynthesizer.insert_statement(schema)
        columns = schema.column_names

        row_index = None
        try:
            with self.store.transaction() as conn:
                conn.execute(create_sql)
                for row_index, row in enumerate(rows):
                    params = [self._bind(row, column) for column in columns]
                    conn.execute(insert_sql, params)
        except (sqlite3.Error, OverflowError) as e:
            where = f" at row {row_index}" if row_index is not None else ""
            logger.error(f"Rolled back load of {schema.name}{where}: {e}")
            raise LoadTransactionError(
                f"Failed to load table {schema.name}{where}: {e}",
                table_name=schema.name,
                row_index=row_index,
            ) from e

        logger.info(f"Imported table: {schema.name} ({len(rows)} rows)")
        return LoadResult(
            table_name=schema.name,
            rows_loaded=len(rows),
            created=not existed,
        )

    @staticmethod
    def _bind(row: Row, column: str):
        value = row.get(column)
        if value is None:
            return None
        return value.to_storage()
