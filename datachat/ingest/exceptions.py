"""Exceptions raised inside the ingestion engine.

``Ingestor`` converts every ``IngestFailure`` into a structured
``IngestResult`` so callers never see these raised.
"""

from typing import Optional

from ..models.enums import IngestErrorKind


class IngestFailure(Exception):
    """Base class for ingestion failures."""
    kind: IngestErrorKind = IngestErrorKind.LOAD_TRANSACTION_FAILURE

    def __init__(self, message: str, table_name: str = ""):
        super().__init__(message)
        self.table_name = table_name


class UnrecognizedFileTypeError(IngestFailure):
    kind = IngestErrorKind.UNRECOGNIZED_FILE_TYPE


class EmptyInputError(IngestFailure):
    kind = IngestErrorKind.EMPTY_INPUT


class TabularDecodeError(IngestFailure):
    kind = IngestErrorKind.MALFORMED_TABULAR_INPUT


class MalformedSourceDatabaseError(IngestFailure):
    kind = IngestErrorKind.MALFORMED_SOURCE_DATABASE


class LoadTransactionError(IngestFailure):
    """A bulk insert failed and its transaction was rolled back."""
    kind = IngestErrorKind.LOAD_TRANSACTION_FAILURE

    def __init__(self, message: str, table_name: str, row_index: Optional[int] = None):
        super().__init__(message, table_name=table_name)
        self.row_index = row_index


class UnreadableInputError(IngestFailure):
    """A path could not be read from disk."""
    kind = IngestErrorKind.UNREADABLE_INPUT
