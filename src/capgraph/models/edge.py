"""Edge model - typed relations between tools and capabilities."""

from dataclasses import dataclass
from typing import Literal, get_args

from capgraph.models.node import as_int, as_optional_float

EdgeType = Literal[
    "contains",
    "sequence",
    "dependency",
    "capability_link",
    "uses",
    "provides",
    "dependsOn",
    "hierarchy",
]

EDGE_TYPES: frozenset[str] = frozenset(get_args(EdgeType))

DEFAULT_EDGE_TYPE: EdgeType = "hierarchy"


def normalize_edge_type(value: object) -> EdgeType:
    """Map a raw edge type onto the known set, defaulting to ``hierarchy``."""
    if isinstance(value, str) and value in EDGE_TYPES:
        return value  # type: ignore[return-value]
    return DEFAULT_EDGE_TYPE


@dataclass(frozen=True)
class Edge:
    """A directed edge between two node ids."""

    source: str
    target: str
    edge_type: EdgeType = DEFAULT_EDGE_TYPE
    weight: float | None = None
    observed_count: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        """Create from an API edge record (``edge_type`` or ``edgeType``)."""
        return cls(
            source=str(data["source"]),
            target=str(data["target"]),
            edge_type=normalize_edge_type(data.get("edge_type") or data.get("edgeType")),
            weight=as_optional_float(data.get("weight")),
            observed_count=as_int(data.get("observed_count")),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for the rendering layer."""
        return {
            "source": self.source,
            "target": self.target,
            "edgeType": self.edge_type,
            "weight": self.weight,
            "observedCount": self.observed_count,
        }
