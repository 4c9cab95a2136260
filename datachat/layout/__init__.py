"""Force-directed layout of the lineage graph."""

from .force_layout import ForceLayoutEngine, LayoutHandle
from .text_metrics import measure_text, rect_width

__all__ = ["ForceLayoutEngine", "LayoutHandle", "measure_text", "rect_width"]
