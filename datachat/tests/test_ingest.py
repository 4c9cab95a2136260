"""
Test suite for CSV/TSV ingestion: schema synthesis, atomic loading and
file-type dispatch.

Run with:
    python -m pytest datachat/tests/test_ingest.py -v
"""

import pytest

from datachat.ingest import Ingestor, RelationalLoader, SchemaSynthesizer, table_name_from_file
from datachat.ingest.exceptions import LoadTransactionError
from datachat.ingest.file_loader import FileLoader, detect_file_kind
from datachat.ingest.value_parser import infer_value
from datachat.models.dataclasses import ColumnSpec, TableSchema, UploadedFile
from datachat.models.enums import FileKind, IngestErrorKind, Severity, StorageType

from .helpers import rows_of


def test_table_name_from_file():
    assert table_name_from_file("sales 2024.csv") == "sales_2024"
    assert table_name_from_file("bank-lineage.tsv") == "bank_lineage"
    assert table_name_from_file("data.v2.csv") == "data_v2", "Only the last extension is stripped"
    assert table_name_from_file("plain") == "plain"


def test_detect_file_kind_case_insensitive():
    assert detect_file_kind("a.CSV") == FileKind.CSV
    assert detect_file_kind("a.tsv") == FileKind.TSV
    for name in ("a.sqlite3", "a.sqlite", "a.DB", "a.s3db", "a.sl3"):
        assert detect_file_kind(name) == FileKind.SQLITE, f"{name} should be SQLite"
    assert detect_file_kind("a.xlsx") is None


def test_column_type_from_first_non_null_value():
    rows = [
        {"a": infer_value(""), "b": infer_value("1"), "c": infer_value(""), "d": infer_value("true")},
        {"a": infer_value("2.5"), "b": infer_value("x"), "c": infer_value(""), "d": infer_value("2024-01-01")},
    ]
    schema = SchemaSynthesizer().synthesize(rows, "t")
    types = {c.name: c.storage_type for c in schema.columns}

    assert types["a"] == StorageType.REAL, "Leading NULL does not decide the type"
    assert types["b"] == StorageType.INTEGER, "Later values never change the type"
    assert types["c"] == StorageType.TEXT, "All-NULL column is TEXT"
    assert types["d"] == StorageType.INTEGER, "BOOLEAN is stored as INTEGER"


def test_create_statement_quotes_identifiers():
    rows = [{"first name": infer_value("Ada"), 'we"ird': infer_value("1")}]
    schema = SchemaSynthesizer().synthesize(rows, "people")

    assert schema.create_statement == (
        'CREATE TABLE IF NOT EXISTS "people" ("first name" TEXT, "we""ird" INTEGER)'
    )


def test_csv_round_trip(store):
    """Test that every row and typed value lands in the store."""
    text = "id,name,score,active,joined\n1,Ada,9.5,true,2024-01-15\n2,Bob,,false,2023-12-31\n"
    result = Ingestor(store).detect_and_ingest(UploadedFile("people.csv", text))

    assert result.ok, f"Ingest failed: {result.error}"
    assert result.summary.table_names == ["people"]
    assert result.summary.total_rows == 2
    assert result.summary.tables[0].created

    assert rows_of(store, "people") == [
        {"id": 1, "name": "Ada", "score": 9.5, "active": 1, "joined": "2024-01-15"},
        {"id": 2, "name": "Bob", "score": None, "active": 0, "joined": "2023-12-31"},
    ]

    columns = {c.name: c.storage_type for c in store.table_columns("people")}
    assert columns == {"id": "INTEGER", "name": "TEXT", "score": "REAL", "active": "INTEGER", "joined": "TEXT"}


def test_tsv_and_bytes_with_bom(store):
    data = "\ufeffa\tb\n1\thello\n".encode("utf-8")
    result = Ingestor(store).detect_and_ingest(UploadedFile("t.tsv", data))

    assert result.ok
    assert rows_of(store, "t") == [{"a": 1, "b": "hello"}], "BOM is not part of the first column name"


def test_sqlite_prefixed_file_name_is_listed(store):
    result = Ingestor(store).detect_and_ingest(UploadedFile("sqlite3_export.csv", "a\n1\n"))

    assert result.ok
    assert store.table_names() == ["sqlite3_export"]
    assert [t.table_name for t in store.current_schema()] == ["sqlite3_export"], \
        "Only sqlite_-prefixed tables are hidden"


def test_repeat_load_appends(store):
    """CSV loads never drop an existing table."""
    ingestor = Ingestor(store)
    ingestor.detect_and_ingest(UploadedFile("t.csv", "a\n1\n"))
    second = ingestor.detect_and_ingest(UploadedFile("t.csv", "a\n2\n"))

    assert second.ok
    assert not second.summary.tables[0].created
    assert [r["a"] for r in rows_of(store, "t")] == [1, 2]


def test_failed_load_leaves_no_new_table(store):
    """Test that a freshly created table is rolled back with its rows."""
    schema = TableSchema(
        name="fresh",
        columns=[ColumnSpec("a", StorageType.INTEGER)],
        create_statement='CREATE TABLE IF NOT EXISTS "fresh" ("a" INTEGER NOT NULL)',
    )
    rows = [{"a": infer_value("1")}, {"a": infer_value("")}]

    with pytest.raises(LoadTransactionError) as info:
        RelationalLoader(store).load(schema, rows)

    assert info.value.table_name == "fresh"
    assert info.value.row_index == 1, "Error names the failing row"
    assert not store.table_exists("fresh"), "CREATE is rolled back together with the inserts"


def test_failed_load_keeps_existing_rows(store):
    store.execute('CREATE TABLE "t" ("a" INTEGER NOT NULL, "b" TEXT)')
    store.execute('INSERT INTO "t" VALUES (10, \'old\')')
    generation = store.generation

    # Second row has no "a": NOT NULL fails after the first insert succeeded
    result = Ingestor(store).detect_and_ingest(UploadedFile("t.csv", "a,b\n1,x\n,y\n"))

    assert not result.ok
    assert result.error.kind == IngestErrorKind.LOAD_TRANSACTION_FAILURE
    assert result.error.table_name == "t"
    assert result.error.severity == Severity.ERROR
    assert rows_of(store, "t") == [{"a": 10, "b": "old"}], "Pre-existing rows survive a rolled back load"
    assert store.generation == generation, "A rolled back load does not bump the generation"


def test_empty_file_is_a_warning(store):
    result = Ingestor(store).detect_and_ingest(UploadedFile("empty.csv", "a,b\n"))

    assert not result.ok
    assert result.error.kind == IngestErrorKind.EMPTY_INPUT
    assert result.error.severity == Severity.WARNING
    assert not store.table_exists("empty")


def test_unknown_extension(store):
    result = Ingestor(store).detect_and_ingest(UploadedFile("book.xlsx", b"PK\x03\x04"))

    assert result.error.kind == IngestErrorKind.UNRECOGNIZED_FILE_TYPE
    assert store.table_names() == []


def test_undecodable_text(store):
    result = Ingestor(store).detect_and_ingest(UploadedFile("bad.csv", b"a\n\xff\xfe\x00\n"))
    assert result.error.kind == IngestErrorKind.MALFORMED_TABULAR_INPUT


def test_batch_continues_after_failure(store):
    """Files load in order; a failing file does not stop the rest."""
    files = [
        UploadedFile("one.csv", "a\n1\n"),
        UploadedFile("two.txt", "a\n2\n"),
        UploadedFile("three.csv", "b\nx\n"),
    ]
    results = Ingestor(store).ingest_all(files)

    assert [r.ok for r in results] == [True, False, True]
    assert store.table_names() == ["one", "three"]


def test_file_loader_directory(tmp_path):
    (tmp_path / "b.csv").write_text("a\n1\n", encoding="utf-8")
    (tmp_path / "a.tsv").write_text("a\n1\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("skip me", encoding="utf-8")

    files = FileLoader().load_directory(tmp_path)

    assert [f.name for f in files] == ["a.tsv", "b.csv"], "Unsupported files are skipped, order is by name"
    assert files[0].as_text() == "a\n1\n"

    with pytest.raises(ValueError):
        FileLoader().load_directory(tmp_path / "b.csv")
