"""
Derive a table definition from decoded rows.
"""

import re
from pathlib import PurePath
from typing import List

from ..models.dataclasses import ColumnSpec, Row, TableSchema
from ..models.enums import StorageType
from ..store import quote_identifier


INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")


def table_name_from_file(file_name: str) -> str:
    """
    Derive a table name from an uploaded file name.

    Examples:
        "sales 2024.csv" → "sales_2024"
        "bank-lineage.tsv" → "bank_lineage"
    """
    stem = PurePath(file_name).name
    if "." in stem.lstrip("."):
        stem = stem.rsplit(".", 1)[0]
    return INVALID_NAME_CHARS.sub("_", stem)


class SchemaSynthesizer:
    """Build column name → storage type mappings and CREATE statements."""

    def synthesize(self, rows: List[Row], table_name_hint: str) -> TableSchema:
        """
        Synthesize a schema for rows.

        Column order follows the first row. A column's type is decided by
        its first non-null value; later values never change it.
        """
        if not rows:
            raise ValueError(f"Cannot synthesize a schema without rows: {table_name_hint}")

        table_name = INVALID_NAME_CHARS.sub("_", table_name_hint)
        columns = [
            ColumnSpec(name=name, storage_type=self._column_type(rows, name))
            for name in rows[0].keys()
        ]
        schema = TableSchema(name=table_name, columns=columns)
        schema.create_statement = self.create_statement(schema)
        return schema

    @staticmethod
    def _column_type(rows: List[Row], column: str) -> StorageType:
        for row in rows:
            value = row.get(column)
            if value is not None and not value.is_null:
                return StorageType.for_kind(value.kind)
        return StorageType.TEXT

    @staticmethod
    def create_statement(schema: TableSchema) -> str:
        column_defs = ", ".join(
            f"{quote_identifier(c.name)} {c.storage_type.value}" for c in schema.columns
        )
        return f"CREATE TABLE IF NOT EXISTS {quote_identifier(schema.name)} ({column_defs})"

    @staticmethod
    def insert_statement(schema: TableSchema) -> str:
        names = ", ".join(quote_identifier(c.name) for c in schema.columns)
        placeholders = ", ".join("?" for _ in schema.columns)
        return f"INSERT INTO {quote_identifier(schema.name)} ({names}) VALUES ({placeholders})"
