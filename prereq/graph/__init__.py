"""Dependency graph: edge store and cycle detection."""

from prereq.graph.cycle import MAX_NODES, detect_cycle, format_path
from prereq.graph.store import (
    EdgeStore,
    EdgeStoreError,
    MemoryEdgeStore,
    YamlEdgeStore,
    make_edge_store,
)

__all__ = [
    "MAX_NODES",
    "EdgeStore",
    "EdgeStoreError",
    "MemoryEdgeStore",
    "YamlEdgeStore",
    "detect_cycle",
    "format_path",
    "make_edge_store",
]
