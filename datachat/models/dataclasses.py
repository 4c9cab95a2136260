"""Data classes for ingestion, schema and lineage graph structures."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from .enums import FileKind, IngestErrorKind, Severity, StorageType, ValueKind


@dataclass(frozen=True)
class TypedValue:
    """A raw value tagged with its inferred kind."""
    kind: ValueKind
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    def to_storage(self) -> Any:
        """Convert to the representation bound into the store."""
        if self.kind == ValueKind.NULL:
            return None
        if self.kind == ValueKind.BOOLEAN:
            return 1 if self.value else 0
        if self.kind == ValueKind.DATE and isinstance(self.value, (date, datetime)):
            return self.value.isoformat()
        return self.value


# Ordered column name -> typed value
Row = Dict[str, TypedValue]


@dataclass
class ColumnSpec:
    """Column of a synthesized table."""
    name: str
    storage_type: StorageType = StorageType.TEXT


@dataclass
class TableSchema:
    """Synthesized table definition."""
    name: str
    columns: List[ColumnSpec] = field(default_factory=list)
    create_statement: str = ""

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


@dataclass
class ColumnInfo:
    """Column as reported by the store (PRAGMA table_info)."""
    name: str
    storage_type: str = ""
    not_null: bool = False
    default: Optional[str] = None
    is_primary_key: bool = False

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "storage_type": self.storage_type,
            "not_null": self.not_null,
            "default": self.default,
            "is_primary_key": self.is_primary_key,
        }


@dataclass
class TableInfo:
    """A table currently present in the working store."""
    table_name: str
    create_statement: str = ""
    columns: List[ColumnInfo] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "table_name": self.table_name,
            "create_statement": self.create_statement,
            "columns": [c.to_dict() for c in self.columns],
        }


@dataclass
class UploadedFile:
    """A file handed to the ingestion engine (already read)."""
    name: str
    data: Union[bytes, str]

    def as_text(self) -> str:
        if isinstance(self.data, str):
            return self.data
        return self.data.decode("utf-8-sig")

    def as_bytes(self) -> bytes:
        if isinstance(self.data, bytes):
            return self.data
        return self.data.encode("utf-8")


@dataclass
class LoadResult:
    """Outcome of loading one table."""
    table_name: str
    rows_loaded: int = 0
    created: bool = False     # table did not exist before this load
    replaced: bool = False    # an existing table was dropped first


@dataclass
class LoadSummary:
    """Successful ingestion of one file."""
    file_name: str
    file_kind: FileKind
    tables: List[LoadResult] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(t.rows_loaded for t in self.tables)

    @property
    def table_names(self) -> List[str]:
        return [t.table_name for t in self.tables]


@dataclass
class IngestError:
    """Structured ingestion failure (or warning) for one file."""
    kind: IngestErrorKind
    message: str
    file_name: str = ""
    table_name: str = ""

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.ERROR


@dataclass
class IngestResult:
    """Result<LoadSummary, IngestError> for one file."""
    file_name: str
    summary: Optional[LoadSummary] = None
    error: Optional[IngestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LineageEdge:
    """A single lineage record read from the edge relation."""
    edge_id: Any
    source: Any
    target: Any
    job_id: Any = None


@dataclass
class GraphNode:
    """A dataset node of the lineage graph."""
    id: Any
    name: str
    degree: int = 0

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "degree": self.degree}


@dataclass
class GraphLink:
    """A job link between two dataset nodes."""
    source: Any
    target: Any
    label: str = ""

    def to_dict(self) -> Dict:
        return {"source": self.source, "target": self.target, "label": self.label}


@dataclass
class LineageGraph:
    """Complete {nodes, links} graph description."""
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphLink] = field(default_factory=list)
    store_generation: int = 0

    @property
    def node_ids(self) -> List[Any]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: Any) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }


@dataclass
class NodePosition:
    """Position and rectangle size of a laid-out node."""
    x: float
    y: float
    width: float
    height: float
    pinned: bool = False

    def to_dict(self) -> Dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "pinned": self.pinned,
        }


@dataclass
class LayoutSnapshot:
    """Node positions after one simulation tick."""
    tick: int
    alpha: float
    positions: Dict[Any, NodePosition] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "tick": self.tick,
            "alpha": self.alpha,
            "positions": [
                {"id": node_id, **pos.to_dict()}
                for node_id, pos in self.positions.items()
            ],
        }
