"""capgraph data models."""

from capgraph.models.edge import EDGE_TYPES, Edge, EdgeType
from capgraph.models.node import CapabilityNode, Node, NodeKind, ToolNode, parse_datetime
from capgraph.models.snapshot import GraphSnapshot, SnapshotValidationError

__all__ = [
    "CapabilityNode",
    "ToolNode",
    "Node",
    "NodeKind",
    "Edge",
    "EdgeType",
    "EDGE_TYPES",
    "GraphSnapshot",
    "SnapshotValidationError",
    "parse_datetime",
]
