"""Ingestion engine: type inference, decoding, schema synthesis and loading."""

from .exceptions import (
    EmptyInputError,
    IngestFailure,
    LoadTransactionError,
    MalformedSourceDatabaseError,
    TabularDecodeError,
    UnreadableInputError,
    UnrecognizedFileTypeError,
)
from .file_loader import FileLoader, detect_file_kind
from .ingestor import Ingestor
from .relational_loader import RelationalLoader
from .schema_synthesizer import SchemaSynthesizer, table_name_from_file
from .store_bridge import StoreBridge
from .tabular_decoder import TabularDecoder
from .value_parser import TypedValueParser, infer_value

__all__ = [
    "EmptyInputError",
    "IngestFailure",
    "LoadTransactionError",
    "MalformedSourceDatabaseError",
    "TabularDecodeError",
    "UnreadableInputError",
    "UnrecognizedFileTypeError",
    "FileLoader",
    "detect_file_kind",
    "Ingestor",
    "RelationalLoader",
    "SchemaSynthesizer",
    "table_name_from_file",
    "StoreBridge",
    "TabularDecoder",
    "TypedValueParser",
    "infer_value",
]
