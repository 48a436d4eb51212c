"""capgraph - capability hypergraph transformation and layout engine.

Turns a flat snapshot of tools, capabilities and their edges into a
capability hierarchy, neighborhood highlights, a radial edge-bundling
layout, a recency timeline, fuzzy search rankings and cluster hulls.
"""

from capgraph.models import GraphSnapshot, SnapshotValidationError
from capgraph.pipeline import GraphEngine

__version__ = "0.1.0"

__all__ = [
    "GraphEngine",
    "GraphSnapshot",
    "SnapshotValidationError",
]
