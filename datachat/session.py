"""
One datachat session: a working store plus the engines that use it.

This is the surface the UI glue and the CLI talk to. Requests are served
last-request-wins: files load strictly in order, every graph records the
store generation it was built from, and starting a layout disposes the
previous one.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from .config import AppConfig
from .contracts import has_lineage_schema, validate_lineage_schema
from .ingest import Ingestor
from .layout import ForceLayoutEngine, LayoutHandle
from .lineage import LineageGraphBuilder
from .models.dataclasses import IngestResult, LineageGraph, TableInfo, UploadedFile
from .query import run_query
from .store import WorkingStore


logger = logging.getLogger(__name__)


class DataChatSession:
    """Facade over the ingestion and lineage engines."""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.store = WorkingStore()
        self.ingestor = Ingestor(self.store)
        self.graph_builder = LineageGraphBuilder(self.store, self.config.lineage, self.config.top_n)
        self.layout_engine = ForceLayoutEngine(self.config.layout)

    def close(self):
        if self.layout_engine.current is not None:
            self.layout_engine.current.dispose()
        self.store.close()

    def __enter__(self) -> "DataChatSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Ingestion

    def detect_and_ingest(self, file: UploadedFile) -> IngestResult:
        return self.ingestor.detect_and_ingest(file)

    def ingest_files(self, files: Iterable[UploadedFile]) -> List[IngestResult]:
        """Ingest a batch in submission order."""
        results = self.ingestor.ingest_all(files)
        loaded = sum(1 for r in results if r.ok)
        logger.info(f"Ingested {loaded}/{len(results)} files")
        return results

    def ingest_paths(self, paths: Iterable[Path]) -> List[IngestResult]:
        """Ingest files (or every supported file of a directory) from disk."""
        results = self.ingestor.ingest_paths(paths)
        loaded = sum(1 for r in results if r.ok)
        logger.info(f"Ingested {loaded}/{len(results)} files")
        return results

    def current_schema(self) -> List[TableInfo]:
        return self.store.current_schema()

    # Lineage

    def has_lineage(self) -> bool:
        """True when the three lineage relations are loaded."""
        return has_lineage_schema(self.store, self.config.lineage)

    def list_categories(self) -> List[str]:
        if not self.has_lineage():
            return []
        return self.graph_builder.list_categories()

    def build_lineage_graph(self, category_filter: Optional[Iterable[str]] = None,
                            top10: bool = False) -> LineageGraph:
        """
        Build the lineage graph from the current store contents.

        Raises:
            ValidationError: If the lineage relations are not loaded
        """
        validate_lineage_schema(self.store, self.config.lineage)
        return self.graph_builder.build(category_filter, top10)

    def is_current(self, graph: LineageGraph) -> bool:
        """False once a later load has changed the store."""
        return graph.store_generation == self.store.generation

    # Layout

    def start_layout(self, graph: LineageGraph,
                     canvas_size: Optional[Tuple[float, float]] = None) -> LayoutHandle:
        return self.layout_engine.start_layout(graph.nodes, graph.links, canvas_size)

    def pin(self, node_id: Any, x: float, y: float):
        self.layout_engine.pin(node_id, x, y)

    def unpin(self, node_id: Any):
        self.layout_engine.unpin(node_id)

    # Queries

    def run_query(self, sql: str) -> pd.DataFrame:
        return run_query(self.store, sql)
