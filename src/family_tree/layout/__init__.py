"""Hierarchical layout of the family tree diagram."""

from .config import DEFAULT_LAYOUT, LayoutConfig
from .engine import GraphLayout, compute_layout, layout_graph

__all__ = [
    "DEFAULT_LAYOUT",
    "GraphLayout",
    "LayoutConfig",
    "compute_layout",
    "layout_graph",
]
