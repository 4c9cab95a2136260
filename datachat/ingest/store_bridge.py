"""
Import an uploaded SQLite database image wholesale into the working store.

Unlike the CSV path this is destructive: a same-named table in the working
store is dropped and recreated from the source DDL.
"""

import logging
import shutil
import sqlite3
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Tuple

from ..models.dataclasses import LoadResult
from ..store import USER_TABLES_WHERE, WorkingStore, quote_identifier
from .exceptions import LoadTransactionError, MalformedSourceDatabaseError


logger = logging.getLogger(__name__)

SQLITE_HEADER = b"SQLite format 3\x00"


@dataclass
class SourceTable:
    """A table read out of the source image."""
    name: str
    ddl: str
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)


class StoreBridge:
    """Replicate tables (DDL + rows) from a database image."""

    def __init__(self, store: WorkingStore):
        self.store = store

    def import_database(self, data: bytes, source_name: str = "upload.sqlite3") -> List[LoadResult]:
        """
        Import every user table of a SQLite image.

        The source is read completely before the working store is touched,
        so a malformed image imports nothing. Each table is then replaced in
        its own transaction.

        Raises:
            MalformedSourceDatabaseError: Image cannot be opened or enumerated
            LoadTransactionError: A table failed to copy (earlier tables stay)
        """
        tables = self.read_source(data, source_name)

        results = []
        for table in tables:
            results.append(self._replace_table(table))

        logger.info(f"Imported SQLite DB: {source_name} ({len(results)} tables)")
        return results

    def read_source(self, data: bytes, source_name: str) -> List[SourceTable]:
        """Read all user tables and rows out of a database image."""
        if not data.startswith(SQLITE_HEADER):
            raise MalformedSourceDatabaseError(f"Not a SQLite database: {source_name}")

        temp_dir = tempfile.mkdtemp(prefix="datachat_")
        try:
            temp_path = Path(temp_dir) / Path(source_name).name
            temp_path.write_bytes(data)
            return self._read_tables(temp_path, source_name)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

    def _read_tables(self, path: Path, source_name: str) -> List[SourceTable]:
        # Private temp copy, so a read-write handle is harmless (WAL images need it)
        try:
            source = sqlite3.connect(str(path))
        except sqlite3.Error as e:
            raise MalformedSourceDatabaseError(f"Cannot open {source_name}: {e}")

        try:
            listing = source.execute(
                f"SELECT name, sql FROM sqlite_master WHERE {USER_TABLES_WHERE}"
            ).fetchall()

            tables = []
            for name, ddl in listing:
                cursor = source.execute(f"SELECT * FROM {quote_identifier(name)}")
                rows = cursor.fetchall()
                columns = [d[0] for d in cursor.description] if rows else []
                tables.append(SourceTable(name=name, ddl=ddl, columns=columns, rows=rows))
                logger.debug(f"Read {len(rows)} rows from {source_name}:{name}")
            return tables
        except sqlite3.Error as e:
            raise MalformedSourceDatabaseError(f"Cannot read {source_name}: {e}")
        finally:
            source.close()

    def _replace_table(self, table: SourceTable) -> LoadResult:
        existed = self.store.table_exists(table.name)
        try:
            with self.store.transaction() as conn:
                conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table.name)}")
                conn.execute(table.ddl)
                # Schema-only tables get their DDL and nothing else
                if table.rows:
                    names = ", ".join(quote_identifier(c) for c in table.columns)
                    placeholders = ", ".join("?" for _ in table.columns)
                    conn.executemany(
                        f"INSERT INTO {quote_identifier(table.name)} ({names}) VALUES ({placeholders})",
                        table.rows,
                    )
        except sqlite3.Error as e:
            logger.error(f"Rolled back import of {table.name}: {e}")
            raise LoadTransactionError(
                f"Failed to import table {table.name}: {e}",
                table_name=table.name,
            ) from e

        logger.debug(f"Replaced {table.name} with {len(table.rows)} rows")
        return LoadResult(
            table_name=table.name,
            rows_loaded=len(table.rows),
            created=not existed,
            replaced=existed,
        )
