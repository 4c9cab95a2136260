"""Enumerations for ingestion and lineage data types."""

from enum import Enum


class ValueKind(str, Enum):
    """Semantic type inferred for a single raw value."""
    INTEGER = "INTEGER"
    REAL = "REAL"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"       # date or date-time, stored as ISO-8601 text
    TEXT = "TEXT"
    NULL = "NULL"       # empty / missing, never decides a column type


class StorageType(str, Enum):
    """Column storage type used when synthesizing a table."""
    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"

    @classmethod
    def for_kind(cls, kind: ValueKind) -> "StorageType":
        """Map an inferred value kind to the column storage type."""
        if kind == ValueKind.INTEGER or kind == ValueKind.BOOLEAN:
            return cls.INTEGER
        elif kind == ValueKind.REAL:
            return cls.REAL
        else:
            return cls.TEXT


class FileKind(str, Enum):
    """Kind of uploaded file, decided by extension."""
    CSV = "CSV"
    TSV = "TSV"
    SQLITE = "SQLITE"


class Severity(str, Enum):
    """Severity of an ingestion problem."""
    WARNING = "WARNING"   # reported, batch continues, nothing written
    ERROR = "ERROR"


class IngestErrorKind(str, Enum):
    """Error taxonomy for ingestion results."""
    UNRECOGNIZED_FILE_TYPE = "UNRECOGNIZED_FILE_TYPE"
    EMPTY_INPUT = "EMPTY_INPUT"
    LOAD_TRANSACTION_FAILURE = "LOAD_TRANSACTION_FAILURE"
    MALFORMED_SOURCE_DATABASE = "MALFORMED_SOURCE_DATABASE"
    MALFORMED_TABULAR_INPUT = "MALFORMED_TABULAR_INPUT"
    UNREADABLE_INPUT = "UNREADABLE_INPUT"

    @property
    def severity(self) -> Severity:
        if self == IngestErrorKind.EMPTY_INPUT:
            return Severity.WARNING
        return Severity.ERROR
