"""Graph transformation module.

Provides:
- Capability hierarchy building (parents, levels, tool instances)
- Depth-bounded neighborhood expansion for highlighting
"""

from capgraph.graph.hierarchy import (
    CapabilityEdge,
    CapabilityTreeNode,
    HierarchyBuilder,
    HierarchyResult,
    HierarchyStats,
    RootNode,
    ToolEdge,
    ToolInstance,
    build_hierarchy,
    get_hyperedges,
)
from capgraph.graph.neighborhood import Neighborhood, NeighborhoodExpander

__all__ = [
    # Hierarchy
    "HierarchyBuilder",
    "HierarchyResult",
    "HierarchyStats",
    "RootNode",
    "CapabilityTreeNode",
    "ToolInstance",
    "CapabilityEdge",
    "ToolEdge",
    "build_hierarchy",
    "get_hyperedges",
    # Neighborhood
    "Neighborhood",
    "NeighborhoodExpander",
]
