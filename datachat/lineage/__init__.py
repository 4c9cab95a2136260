"""Lineage graph construction from the working store."""

from .graph_builder import LineageGraphBuilder

__all__ = ["LineageGraphBuilder"]
