"""
The working store: one in-memory SQLite connection per session.

Every component that reads or writes tables receives this handle explicitly.
The connection runs in autocommit mode; bulk loads open their own
transaction through ``WorkingStore.transaction()`` so that a load is either
fully committed or fully rolled back.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pandas as pd
from sqlglot import exp

from .models.dataclasses import ColumnInfo, TableInfo


logger = logging.getLogger(__name__)

# `_` is a LIKE wildcard, so it is escaped to match internal tables only
USER_TABLES_WHERE = "type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'"


def quote_identifier(name: str) -> str:
    """Quote a table or column name for SQLite (embedded quotes are doubled)."""
    return exp.to_identifier(str(name), quoted=True).sql(dialect="sqlite")


class WorkingStore:
    """Shared mutable relational store for one session."""

    def __init__(self, path: str = ":memory:"):
        self.path = path
        self._conn = sqlite3.connect(path, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        # Bumped after every committed load
        self.generation = 0

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self):
        self._conn.close()

    def __enter__(self) -> "WorkingStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """All-or-nothing unit of work."""
        self._conn.execute("BEGIN")
        try:
            yield self._conn
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")
            self.generation += 1

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, params)

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a query and return rows as dicts (column order preserved)."""
        return [dict(row) for row in self._conn.execute(sql, params).fetchall()]

    def query_df(self, sql: str, params: Optional[Sequence[Any]] = None) -> pd.DataFrame:
        return pd.read_sql_query(sql, self._conn, params=params)

    def table_names(self) -> List[str]:
        rows = self._conn.execute(
            f"SELECT name FROM sqlite_master WHERE {USER_TABLES_WHERE}"
        ).fetchall()
        return [row["name"] for row in rows]

    def table_exists(self, name: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (name,),
        ).fetchone()
        return row is not None

    def row_count(self, name: str) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) FROM {quote_identifier(name)}").fetchone()
        return int(row[0])

    def table_columns(self, name: str) -> List[ColumnInfo]:
        rows = self._conn.execute(
            "SELECT name, type, \"notnull\", dflt_value, pk FROM pragma_table_info(?)",
            (name,),
        ).fetchall()
        return [
            ColumnInfo(
                name=row["name"],
                storage_type=row["type"] or "",
                not_null=bool(row["notnull"]),
                default=row["dflt_value"],
                is_primary_key=bool(row["pk"]),
            )
            for row in rows
        ]

    def current_schema(self) -> List[TableInfo]:
        """Every user table with its DDL and column details, in creation order."""
        rows = self._conn.execute(
            f"SELECT name, sql FROM sqlite_master WHERE {USER_TABLES_WHERE}"
        ).fetchall()
        return [
            TableInfo(
                table_name=row["name"],
                create_statement=row["sql"] or "",
                columns=self.table_columns(row["name"]),
            )
            for row in rows
        ]
