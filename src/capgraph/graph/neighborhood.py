"""Depth-bounded neighborhood expansion for highlight/dim interactions.

The adjacency graph is undirected and ignores edge types: highlighting a
node lights up everything within ``depth`` hops regardless of direction.
"""

import logging
import math
from dataclasses import dataclass, field

import networkx as nx

from capgraph.config import settings
from capgraph.graph.hierarchy import INSTANCE_SEPARATOR
from capgraph.models import Edge

logger = logging.getLogger(__name__)


@dataclass
class Neighborhood:
    """Nodes within reach of a start node, and the edges among them."""

    start_id: str | None
    node_ids: set[str] = field(default_factory=set)  # Excludes the start node
    edges: list[Edge] = field(default_factory=list)
    depth: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.node_ids

    def to_dict(self) -> dict:
        return {
            "startId": self.start_id,
            "nodeIds": sorted(self.node_ids),
            "edges": [e.to_dict() for e in self.edges],
            "depth": self.depth,
        }


class NeighborhoodExpander:
    """
    Breadth-first expansion over the hypergraph edge list.

    Build one expander per data generation; the adjacency graph is computed
    once in the constructor and reused for every hover/click.
    """

    def __init__(self, edges: list[Edge], max_hops: int | None = None) -> None:
        self.max_hops = max_hops if max_hops is not None else settings.neighborhood_max_hops
        self.edges = list(edges)
        self.graph = nx.Graph()
        for edge in self.edges:
            if edge.source == edge.target:
                self.graph.add_node(edge.source)
                continue
            self.graph.add_edge(edge.source, edge.target)

    def resolve(self, node_id: str) -> str | None:
        """Map a node or tool instance id (``tool__cap``) onto a graph node."""
        if node_id in self.graph:
            return node_id
        if INSTANCE_SEPARATOR in node_id:
            tool_id = node_id.split(INSTANCE_SEPARATOR, 1)[0]
            if tool_id in self.graph:
                return tool_id
        return None

    def effective_depth(self, depth: float | None) -> int:
        """Clamp a requested depth; ``None`` or infinity means the whole stack."""
        if depth is None or (isinstance(depth, float) and math.isinf(depth) and depth > 0):
            return self.max_hops
        if depth != depth or depth <= 0:  # NaN or non-positive
            return 0
        return min(int(depth), self.max_hops)

    def expand(self, start_id: str, depth: float | None = 1) -> Neighborhood:
        """
        Collect nodes within ``depth`` hops of ``start_id``.

        Args:
            start_id: Node (or tool instance) to start from
            depth: Hop limit; None/inf means capped full expansion

        Returns:
            Neighborhood excluding the start node; empty when depth <= 0
            or the start node is unknown
        """
        hops = self.effective_depth(depth)
        start = self.resolve(start_id)
        if hops == 0 or start is None:
            return Neighborhood(start_id=start, depth=hops)

        reached = nx.single_source_shortest_path_length(self.graph, start, cutoff=hops)
        node_ids = set(reached) - {start}

        members = node_ids | {start}
        edges = [e for e in self.edges if e.source in members and e.target in members]

        return Neighborhood(start_id=start, node_ids=node_ids, edges=edges, depth=hops)

    def neighbors(self, start_id: str, depth: float | None = 1) -> set[str]:
        """Shortcut for ``expand(...).node_ids``."""
        return self.expand(start_id, depth).node_ids
