"""Node models - tools and the capabilities that orchestrate them."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

logger = logging.getLogger(__name__)

NodeKind = Literal["tool", "capability"]

UNKNOWN_SERVER = "unknown"


def parse_datetime(value: Any) -> datetime | None:
    """Parse a timestamp (ISO string or native datetime) into an aware UTC datetime.

    Unparseable values are treated as missing.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Ignoring unparseable timestamp: {value!r}")
            return None
    else:
        logger.debug(f"Ignoring timestamp of type {type(value).__name__}")
        return None
    if parsed.tzinfo is None:
        # Naive timestamps from the API are UTC
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_optional_float(value: Any) -> float | None:
    """Coerce an optional numeric attribute to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce an optional numeric attribute, falling back to ``default``."""
    result = as_optional_float(value)
    return default if result is None else result


def as_int(value: Any) -> int | None:
    """Coerce an optional integer attribute (community ids, counts)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass
class ToolNode:
    """
    A concrete tool exposed by an MCP server.

    Examples: "read_file" on "filesystem", "query" on "postgres"
    """

    id: str
    name: str
    server: str = UNKNOWN_SERVER

    # Externally computed graph metrics
    pagerank: float = 0.0
    degree: int = 0
    community_id: int | None = None

    # Capability ids this tool is used by (hyperedge fan-out)
    parents: list[str] = field(default_factory=list)

    last_used: datetime | None = None

    kind: NodeKind = "tool"

    @classmethod
    def from_dict(cls, data: dict) -> "ToolNode":
        """Create from an API node record (snake_case)."""
        parents = data.get("parents")
        if parents is None:
            parents = [data["parent"]] if data.get("parent") else []

        server = data.get("server") or UNKNOWN_SERVER
        module = data.get("module")
        # Standard-library tools are displayed by module ("database" rather than "std")
        if server == "std" and module:
            server = module

        return cls(
            id=str(data["id"]),
            name=str(data.get("label") or data.get("name") or data["id"]),
            server=str(server),
            pagerank=as_float(data.get("pagerank")),
            degree=int(as_float(data.get("degree"))),
            community_id=as_int(data.get("community_id")),
            parents=[str(p) for p in parents if p],
            last_used=parse_datetime(data.get("last_used")),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for the rendering layer."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind,
            "server": self.server,
            "pagerank": self.pagerank,
            "degree": self.degree,
            "communityId": self.community_id,
            "parents": list(self.parents),
            "lastUsed": self.last_used.isoformat() if self.last_used else None,
        }


@dataclass
class CapabilityNode:
    """
    A learned capability: a reusable composition of tools and other capabilities.

    Capabilities nest through ``contains`` edges; the parent is derived, never read.
    """

    id: str
    name: str

    # Usage statistics
    usage_count: float = 0.0
    success_rate: float = 0.0
    pagerank: float = 0.0
    last_used: datetime | None = None

    community_id: int | None = None

    # Searchable text
    description: str | None = None
    fqdn: str | None = None
    code_snippet: str | None = None

    # Derived from contains edges by the hierarchy builder
    parent_capability_id: str | None = None

    kind: NodeKind = "capability"

    @classmethod
    def from_dict(cls, data: dict) -> "CapabilityNode":
        """Create from an API node record (snake_case)."""
        last_used = parse_datetime(data.get("last_used"))
        traces = data.get("traces")
        if last_used is None and isinstance(traces, list) and traces:
            first = traces[0]
            if isinstance(first, dict):
                last_used = parse_datetime(first.get("executed_at"))

        return cls(
            id=str(data["id"]),
            name=str(data.get("label") or data.get("name") or data["id"]),
            usage_count=as_float(data.get("usage_count")),
            success_rate=as_float(data.get("success_rate")),
            pagerank=as_float(data.get("pagerank")),
            last_used=last_used,
            community_id=as_int(data.get("community_id")),
            description=data.get("description") or data.get("intent"),
            fqdn=data.get("fqdn"),
            code_snippet=data.get("code_snippet"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for the rendering layer."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind,
            "usageCount": self.usage_count,
            "successRate": self.success_rate,
            "pagerank": self.pagerank,
            "lastUsed": self.last_used.isoformat() if self.last_used else None,
            "communityId": self.community_id,
            "description": self.description,
            "fqdn": self.fqdn,
            "parentCapabilityId": self.parent_capability_id,
        }


Node = ToolNode | CapabilityNode
