"""
Build the dataset lineage graph from the working store.

Three relations are read (edges, dataset metadata, job metadata); edges are
filtered by dataset category, turned into nodes and links, and optionally
cut down to the most connected datasets.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ..config import Config, LineageSchemaConfig
from ..models.dataclasses import GraphLink, GraphNode, LineageEdge, LineageGraph
from ..store import WorkingStore, quote_identifier


logger = logging.getLogger(__name__)


class LineageGraphBuilder:
    """Turn lineage records into a {nodes, links} graph."""

    def __init__(self, store: WorkingStore,
                 config: Optional[LineageSchemaConfig] = None,
                 top_n: int = Config.TOP_N):
        self.store = store
        self.config = config or LineageSchemaConfig()
        self.top_n = top_n

    def build(self, category_filter: Optional[Iterable[str]] = None,
              top10: bool = False) -> LineageGraph:
        """
        Build the lineage graph.

        Args:
            category_filter: Categories to keep; empty or None means no filter
            top10: Keep only the top_n nodes by degree

        Returns:
            LineageGraph tagged with the store generation it was read from
        """
        categories = sorted(set(category_filter or ()))

        edges = self._read_edges()
        dataset_names, allowed = self._read_datasets(categories)
        job_names = self._read_jobs()

        filtered = [e for e in edges if e.source in allowed and e.target in allowed]

        nodes: Dict[Any, GraphNode] = {}
        for edge in filtered:
            for dataset_id in (edge.source, edge.target):
                if dataset_id not in nodes:
                    nodes[dataset_id] = GraphNode(
                        id=dataset_id,
                        name=_display(dataset_names.get(dataset_id), dataset_id),
                    )

        links = [
            GraphLink(
                source=edge.source,
                target=edge.target,
                label=_display(job_names.get(edge.job_id), edge.job_id),
            )
            for edge in filtered
        ]

        # Self-loops count twice
        for link in links:
            nodes[link.source].degree += 1
            nodes[link.target].degree += 1

        node_list = list(nodes.values())
        if top10:
            node_list, links = self._top_nodes(node_list, links)

        logger.debug(
            f"Lineage graph: {len(node_list)} nodes, {len(links)} links "
            f"(categories={categories or 'all'}, top10={top10})"
        )

        return LineageGraph(
            nodes=node_list,
            links=links,
            store_generation=self.store.generation,
        )

    def list_categories(self) -> List[str]:
        """Distinct non-null dataset categories, ordered."""
        c = self.config
        rows = self.store.execute(
            f"SELECT DISTINCT {quote_identifier(c.dataset_category)} "
            f"FROM {quote_identifier(c.dataset_table)} "
            f"WHERE {quote_identifier(c.dataset_category)} IS NOT NULL "
            f"ORDER BY {quote_identifier(c.dataset_category)}"
        ).fetchall()
        return [str(row[0]) for row in rows]

    def _top_nodes(self, nodes: List[GraphNode], links: List[GraphLink]):
        # sorted() is stable, so ties keep first-appearance order
        ranked = sorted(nodes, key=lambda n: n.degree, reverse=True)[:self.top_n]
        kept = {n.id for n in ranked}
        return ranked, [l for l in links if l.source in kept and l.target in kept]

    def _read_edges(self) -> List[LineageEdge]:
        c = self.config
        rows = self.store.execute(
            f"SELECT {quote_identifier(c.edge_id)}, {quote_identifier(c.edge_source)}, "
            f"{quote_identifier(c.edge_target)}, {quote_identifier(c.edge_job)} "
            f"FROM {quote_identifier(c.edge_table)}"
        ).fetchall()
        return [
            LineageEdge(edge_id=row[0], source=row[1], target=row[2], job_id=row[3])
            for row in rows
        ]

    def _read_datasets(self, categories: List[str]):
        """Dataset names plus the allowed id set (every known dataset when unfiltered)."""
        c = self.config
        sql = (
            f"SELECT {quote_identifier(c.dataset_id)}, {quote_identifier(c.dataset_name)} "
            f"FROM {quote_identifier(c.dataset_table)}"
        )
        params: List[str] = []
        if categories:
            placeholders = ", ".join("?" for _ in categories)
            sql += f" WHERE {quote_identifier(c.dataset_category)} IN ({placeholders})"
            params = categories

        rows = self.store.execute(sql, params).fetchall()
        names = {row[0]: row[1] for row in rows}
        allowed: Set[Any] = set(names)
        return names, allowed

    def _read_jobs(self) -> Dict[Any, Any]:
        c = self.config
        rows = self.store.execute(
            f"SELECT {quote_identifier(c.job_id)}, {quote_identifier(c.job_name)} "
            f"FROM {quote_identifier(c.job_table)}"
        ).fetchall()
        return {row[0]: row[1] for row in rows}


def _display(name: Any, raw_id: Any) -> str:
    """Name if present, else the raw id."""
    if name is not None and name != "":
        return str(name)
    return "" if raw_id is None else str(raw_id)
