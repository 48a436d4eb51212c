"""Raw hypergraph snapshot parsing.

Translates the snake_case payload delivered by the hypergraph API into the
dataclass model. This is the only place where malformed input is rejected;
everything downstream degrades to defaults instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from capgraph.models.edge import Edge
from capgraph.models.node import CapabilityNode, ToolNode

logger = logging.getLogger(__name__)

# Node types emitted by the API that the engine does not lay out
IGNORED_NODE_TYPES = frozenset({"tool_invocation"})


class SnapshotValidationError(ValueError):
    """Raised when a snapshot violates the input contract."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _unwrap(entry: Any, path: str) -> dict:
    """Return the attribute dict of a flat or Cytoscape-style ``{"data": ...}`` entry."""
    if not isinstance(entry, dict):
        raise SnapshotValidationError(
            f"expected an object, got {type(entry).__name__}", path
        )
    data = entry.get("data")
    if isinstance(data, dict):
        return data
    return entry


def _require_str(data: dict, key: str, path: str) -> None:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise SnapshotValidationError(f"missing required field '{key}'", path)
    if not isinstance(value, (str, int)):
        raise SnapshotValidationError(
            f"field '{key}' must be a string, got {type(value).__name__}", path
        )


@dataclass
class GraphSnapshot:
    """One immutable data generation: every node and edge of the hypergraph."""

    tools: list[ToolNode] = field(default_factory=list)
    capabilities: list[CapabilityNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        """All tool and capability ids."""
        return {t.id for t in self.tools} | {c.id for c in self.capabilities}

    @classmethod
    def from_dict(cls, payload: Any) -> "GraphSnapshot":
        """
        Validate and translate a raw ``{nodes, edges}`` payload.

        Args:
            payload: Decoded API response

        Returns:
            GraphSnapshot with parsed nodes and edges

        Raises:
            SnapshotValidationError: If the payload shape is invalid
        """
        if not isinstance(payload, dict):
            raise SnapshotValidationError(
                f"snapshot must be an object, got {type(payload).__name__}"
            )

        raw_nodes = payload.get("nodes") or []
        raw_edges = payload.get("edges") or []
        if not isinstance(raw_nodes, list):
            raise SnapshotValidationError("must be a list", "nodes")
        if not isinstance(raw_edges, list):
            raise SnapshotValidationError("must be a list", "edges")

        # Validate everything before building, so a bad entry leaves no partial state
        node_records: list[dict] = []
        for i, entry in enumerate(raw_nodes):
            path = f"nodes[{i}]"
            data = _unwrap(entry, path)
            _require_str(data, "id", path)
            node_type = data.get("type")
            if node_type in IGNORED_NODE_TYPES:
                continue
            if node_type not in ("tool", "capability"):
                raise SnapshotValidationError(
                    f"unknown node type {node_type!r} (expected 'tool' or 'capability')",
                    path,
                )
            node_records.append(data)

        edge_records: list[dict] = []
        for i, entry in enumerate(raw_edges):
            path = f"edges[{i}]"
            data = _unwrap(entry, path)
            _require_str(data, "source", path)
            _require_str(data, "target", path)
            edge_records.append(data)

        snapshot = cls()
        seen: set[str] = set()
        for data in node_records:
            node_id = str(data["id"])
            if node_id in seen:
                logger.debug(f"Duplicate node id {node_id}, keeping first occurrence")
                continue
            seen.add(node_id)
            if data["type"] == "tool":
                snapshot.tools.append(ToolNode.from_dict(data))
            else:
                snapshot.capabilities.append(CapabilityNode.from_dict(data))

        snapshot.edges = [Edge.from_dict(data) for data in edge_records]

        skipped = len(raw_nodes) - len(node_records)
        if skipped:
            logger.debug(f"Skipped {skipped} non-layout nodes")

        return snapshot

    def to_dict(self) -> dict:
        """Convert back to a camelCase dictionary."""
        return {
            "nodes": [c.to_dict() for c in self.capabilities] + [t.to_dict() for t in self.tools],
            "edges": [e.to_dict() for e in self.edges],
        }
