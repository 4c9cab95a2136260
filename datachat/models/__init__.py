"""Data models and enums for datachat."""

from .enums import FileKind, IngestErrorKind, Severity, StorageType, ValueKind
from .dataclasses import (
    ColumnInfo,
    ColumnSpec,
    GraphLink,
    GraphNode,
    IngestError,
    IngestResult,
    LayoutSnapshot,
    LineageEdge,
    LineageGraph,
    LoadResult,
    LoadSummary,
    NodePosition,
    Row,
    TableInfo,
    TableSchema,
    TypedValue,
    UploadedFile,
)

__all__ = [
    "FileKind",
    "IngestErrorKind",
    "Severity",
    "StorageType",
    "ValueKind",
    "ColumnInfo",
    "ColumnSpec",
    "GraphLink",
    "GraphNode",
    "IngestError",
    "IngestResult",
    "LayoutSnapshot",
    "LineageEdge",
    "LineageGraph",
    "LoadResult",
    "LoadSummary",
    "NodePosition",
    "Row",
    "TableInfo",
    "TableSchema",
    "TypedValue",
    "UploadedFile",
]
