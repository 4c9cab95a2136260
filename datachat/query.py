"""
Run ad-hoc read-only SQL against the working store.

SQL usually arrives inside a markdown answer, so ``extract_sql`` pulls the
first fenced block out before it is validated and executed.
"""

import logging
import re

import pandas as pd
import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError

from .config import Config
from .store import WorkingStore


logger = logging.getLogger(__name__)

FENCED_BLOCK = re.compile(r"```.*?\n(.*?)```", re.DOTALL)


class QueryError(Exception):
    """Raised when SQL cannot be parsed, is not read-only, or fails to run."""
    pass


def extract_sql(text: str) -> str:
    """First fenced code block of a markdown answer, else the whole text."""
    match = FENCED_BLOCK.search(text)
    sql = match.group(1) if match else text
    return sql.strip()


def validate_read_only(sql: str) -> exp.Expression:
    """
    Check that sql is exactly one read-only query.

    Raises:
        QueryError: If sql is empty, unparsable, several statements, or
            anything other than SELECT / set operations over SELECTs
    """
    try:
        statements = [s for s in sqlglot.parse(sql, read="sqlite") if s is not None]
    except ParseError as e:
        raise QueryError(f"Cannot parse SQL: {e}")

    if not statements:
        raise QueryError("No SQL statement found")
    if len(statements) > 1:
        raise QueryError(f"Expected one statement, got {len(statements)}")

    statement = statements[0]
    if not isinstance(statement, exp.Query):
        raise QueryError(f"Only read-only queries are allowed, got {statement.key.upper()}")

    return statement


def run_query(store: WorkingStore, sql: str) -> pd.DataFrame:
    """Validate and run a query, returning all rows."""
    validate_read_only(sql)

    try:
        frame = store.query_df(sql)
    except pd.errors.DatabaseError as e:
        raise QueryError(f"Query failed: {e}")

    logger.info(f"Query returned {len(frame)} rows")
    return frame


def preview(frame: pd.DataFrame, limit: int = Config.PREVIEW_ROWS) -> pd.DataFrame:
    return frame.head(limit)


def results_to_csv(frame: pd.DataFrame) -> str:
    """CSV payload for downloading a query result."""
    return frame.to_csv(index=False)
