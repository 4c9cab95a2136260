"""
Excel writer for schema, lineage and query output.

Produces Excel workbooks with:
- Schema (one row per table)
- Columns (one row per column)
- Lineage_nodes / Lineage_links (when a graph is given)
- Layout (final node positions, when a layout snapshot is given)
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..models.dataclasses import LayoutSnapshot, LineageGraph, TableInfo


logger = logging.getLogger(__name__)

SCHEMA_COLUMNS = ["table_name", "column_count", "create_statement"]
COLUMN_COLUMNS = ["table_name", "column_name", "storage_type", "not_null", "default", "is_primary_key"]
NODE_COLUMNS = ["id", "name", "degree"]
LINK_COLUMNS = ["source", "target", "label"]
LAYOUT_COLUMNS = ["id", "x", "y", "width", "height", "pinned"]


class ExcelWriter:
    """Write working store summaries to Excel."""

    def __init__(self, output_dir: Path):
        """
        Initialize the writer.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, schema: List[TableInfo],
              graph: Optional[LineageGraph] = None,
              layout: Optional[LayoutSnapshot] = None,
              name: str = "datachat") -> Path:
        """
        Write schema (and optionally lineage) to an Excel workbook.

        Args:
            schema: Tables currently in the store
            graph: Optional lineage graph
            layout: Optional layout snapshot for the graph
            name: Filename prefix

        Returns:
            Path to written file
        """
        output_path = self._output_path(f"{name}_Schema")

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._build_schema_df(schema).to_excel(writer, sheet_name="Schema", index=False)
            self._build_columns_df(schema).to_excel(writer, sheet_name="Columns", index=False)
            if graph is not None:
                self._build_nodes_df(graph).to_excel(writer, sheet_name="Lineage_nodes", index=False)
                self._build_links_df(graph).to_excel(writer, sheet_name="Lineage_links", index=False)
            if layout is not None:
                self._build_layout_df(layout).to_excel(writer, sheet_name="Layout", index=False)

        logger.info(f"Written: {output_path}")
        return output_path

    def write_query(self, frame: pd.DataFrame, name: str = "query") -> Path:
        """Write a query result to a single-sheet workbook."""
        output_path = self._output_path(f"{name}_Results")

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name="Results", index=False)

        logger.info(f"Written: {output_path} ({len(frame)} rows)")
        return output_path

    def _output_path(self, stem: str) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.output_dir / f"{stem}_{timestamp}.xlsx"

    def _build_schema_df(self, schema: List[TableInfo]) -> pd.DataFrame:
        rows = [
            {
                "table_name": t.table_name,
                "column_count": len(t.columns),
                "create_statement": t.create_statement,
            }
            for t in schema
        ]
        return pd.DataFrame(rows, columns=SCHEMA_COLUMNS)

    def _build_columns_df(self, schema: List[TableInfo]) -> pd.DataFrame:
        rows = []
        for table in schema:
            for col in table.columns:
                rows.append({
                    "table_name": table.table_name,
                    "column_name": col.name,
                    "storage_type": col.storage_type,
                    "not_null": col.not_null,
                    "default": col.default,
                    "is_primary_key": col.is_primary_key,
                })
        return pd.DataFrame(rows, columns=COLUMN_COLUMNS)

    def _build_nodes_df(self, graph: LineageGraph) -> pd.DataFrame:
        df = pd.DataFrame([n.to_dict() for n in graph.nodes], columns=NODE_COLUMNS)
        if df.empty:
            return df
        # Busiest datasets first, ties by name
        return df.sort_values(["degree", "name"], ascending=[False, True]).reset_index(drop=True)

    def _build_links_df(self, graph: LineageGraph) -> pd.DataFrame:
        return pd.DataFrame([l.to_dict() for l in graph.links], columns=LINK_COLUMNS)

    def _build_layout_df(self, layout: LayoutSnapshot) -> pd.DataFrame:
        rows = layout.to_dict()["positions"]
        df = pd.DataFrame(rows, columns=LAYOUT_COLUMNS)
        df["x"] = df["x"].round(2)
        df["y"] = df["y"].round(2)
        return df
