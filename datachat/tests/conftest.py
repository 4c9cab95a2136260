"""Shared fixtures: in-memory stores and SQLite database images."""

import sqlite3
from pathlib import Path
from typing import Dict, Sequence, Tuple

import pytest

from datachat.store import WorkingStore


@pytest.fixture
def store():
    working_store = WorkingStore()
    yield working_store
    working_store.close()


@pytest.fixture
def sqlite_image(tmp_path: Path):
    """Factory: {table: (ddl, rows)} -> bytes of a SQLite database file."""
    counter = {"n": 0}

    def build(tables: Dict[str, Tuple[str, Sequence[Sequence]]]) -> bytes:
        counter["n"] += 1
        path = tmp_path / f"image_{counter['n']}.sqlite3"
        conn = sqlite3.connect(str(path))
        try:
            for name, (ddl, rows) in tables.items():
                conn.execute(ddl)
                rows = list(rows)
                if rows:
                    placeholders = ", ".join("?" for _ in rows[0])
                    conn.executemany(f'INSERT INTO "{name}" VALUES ({placeholders})', rows)
            conn.commit()
        finally:
            conn.close()
        return path.read_bytes()

    return build
