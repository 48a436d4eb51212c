"""Capability hierarchy construction.

Turns the flat hypergraph snapshot into Root -> Capabilities -> (nested
capabilities, tool instances), and derives a nesting level per capability:

    level(c) = 1                                  if c has no child capabilities
    level(c) = 1 + max(level(child) for children) otherwise

Containment is a tree: a capability's parent is the first ``contains`` edge
that targets it. Cycles are broken rather than rejected.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from capgraph.models import CapabilityNode, Edge, GraphSnapshot, ToolNode

logger = logging.getLogger(__name__)

ROOT_ID = "root"

INSTANCE_SEPARATOR = "__"

# Edge types that attach a tool to a capability when the node carries no parents list
TOOL_MEMBERSHIP_EDGE_TYPES = frozenset({"contains", "hierarchy"})


def instance_id(tool_id: str, parent_id: str, shared: bool) -> str:
    """Visual instance id of a tool inside one of its parent capabilities."""
    return f"{tool_id}{INSTANCE_SEPARATOR}{parent_id}" if shared else tool_id


@dataclass
class ToolInstance:
    """One rendering of a logical tool inside one parent capability."""

    id: str  # tool_id, or tool_id__parent_id when the tool is shared
    tool: ToolNode
    parent_id: str
    valid_parents: list[str] = field(default_factory=list)

    @property
    def tool_id(self) -> str:
        return self.tool.id

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def server(self) -> str:
        return self.tool.server

    @property
    def is_shared(self) -> bool:
        return len(self.valid_parents) > 1

    @property
    def primary_parent(self) -> str:
        return self.valid_parents[0] if self.valid_parents else self.parent_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "toolId": self.tool_id,
            "name": self.name,
            "type": "tool",
            "server": self.server,
            "pagerank": self.tool.pagerank,
            "parentCapabilities": list(self.valid_parents),
            "primaryParent": self.primary_parent,
        }


@dataclass
class CapabilityTreeNode:
    """A capability placed in the hierarchy, with its derived level."""

    capability: CapabilityNode
    level: int = 1
    level_norm: float = 0.5
    children: list["CapabilityTreeNode"] = field(default_factory=list)
    tools: list[ToolInstance] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.capability.id

    @property
    def name(self) -> str:
        return self.capability.name

    @property
    def parent_id(self) -> str | None:
        return self.capability.parent_capability_id

    @property
    def is_empty(self) -> bool:
        """No tools and no child capabilities."""
        return not self.tools and not self.children

    def walk(self) -> Iterator["CapabilityTreeNode"]:
        """Depth-first pre-order traversal of this subtree."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        data = self.capability.to_dict()
        data.update(
            {
                "level": self.level,
                "levelNorm": self.level_norm,
                "children": [c.to_dict() for c in self.children],
                "tools": [t.to_dict() for t in self.tools],
            }
        )
        return data


@dataclass
class RootNode:
    """Synthetic root holding the top-level capabilities."""

    children: list[CapabilityTreeNode] = field(default_factory=list)
    id: str = ROOT_ID
    name: str = "Capabilities"

    def walk(self) -> Iterator[CapabilityTreeNode]:
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": "root",
            "children": [c.to_dict() for c in self.children],
        }


@dataclass
class CapabilityEdge:
    """Edge between two capabilities in the tree (bundled through the hierarchy)."""

    source: str
    target: str
    edge_type: str
    observed_count: int = 1


@dataclass
class ToolEdge:
    """Static data-flow edge between two placed tools."""

    source: str
    target: str
    edge_type: str = "provides"
    weight: float | None = None


@dataclass
class HierarchyStats:
    """Summary counters for one hierarchy build."""

    total_capabilities: int = 0
    total_tools: int = 0
    orphan_count: int = 0
    empty_capability_count: int = 0
    hyperedge_count: int = 0  # Tools with multiple parents
    discarded_capabilities: int = 0  # usage_count <= 0
    max_level: int = 1

    def to_dict(self) -> dict:
        return {
            "totalCapabilities": self.total_capabilities,
            "totalTools": self.total_tools,
            "orphanCount": self.orphan_count,
            "emptyCapabilityCount": self.empty_capability_count,
            "hyperedgeCount": self.hyperedge_count,
            "discardedCapabilities": self.discarded_capabilities,
            "maxLevel": self.max_level,
        }


@dataclass
class HierarchyResult:
    """Result of hierarchy building."""

    root: RootNode
    capability_edges: list[CapabilityEdge]
    tool_edges: list[ToolEdge]
    orphan_tools: list[ToolNode]
    empty_capabilities: list[CapabilityTreeNode]
    stats: HierarchyStats
    levels: dict[str, int] = field(default_factory=dict)
    parents: dict[str, str] = field(default_factory=dict)  # child cap -> parent cap
    capabilities: dict[str, CapabilityTreeNode] = field(default_factory=dict)
    tools: dict[str, ToolNode] = field(default_factory=dict)  # placed tools by logical id
    tool_parents: dict[str, list[str]] = field(default_factory=dict)

    def level_norm(self, capability_id: str) -> float:
        """Level normalized for visual emphasis: level / (max_level + 1)."""
        level = self.levels.get(capability_id, 1)
        return level / (self.stats.max_level + 1)

    def walk(self) -> Iterator[CapabilityTreeNode]:
        """All capabilities in the tree, depth first."""
        return self.root.walk()

    @property
    def top_level(self) -> list[CapabilityTreeNode]:
        return list(self.root.children)

    @property
    def children_by_capability(self) -> dict[str, list[str]]:
        """Capability id -> ids of its nested capabilities."""
        return {node.id: [c.id for c in node.children] for node in self.walk()}

    def instances_of(self, tool_id: str) -> list[ToolInstance]:
        """Every visual instance of a logical tool."""
        return [
            inst
            for cap_id in self.tool_parents.get(tool_id, [])
            for inst in self.capabilities[cap_id].tools
            if inst.tool_id == tool_id
        ]

    def to_dict(self) -> dict:
        return {
            "root": self.root.to_dict(),
            "capabilityEdges": [
                {
                    "source": e.source,
                    "target": e.target,
                    "edgeType": e.edge_type,
                    "observedCount": e.observed_count,
                }
                for e in self.capability_edges
            ],
            "toolEdges": [
                {"source": e.source, "target": e.target, "edgeType": e.edge_type, "weight": e.weight}
                for e in self.tool_edges
            ],
            "orphanTools": [t.to_dict() for t in self.orphan_tools],
            "emptyCapabilities": [c.id for c in self.empty_capabilities],
            "stats": self.stats.to_dict(),
        }


def resolve_parents(edges: list[Edge], capability_ids: set[str]) -> dict[str, str]:
    """First-seen ``contains`` mapping child -> parent between known capabilities.

    Later edges targeting an already-parented child are ignored.
    """
    parent_map: dict[str, str] = {}
    for edge in edges:
        if edge.edge_type != "contains":
            continue
        if edge.source not in capability_ids or edge.target not in capability_ids:
            continue
        if edge.source == edge.target:
            continue
        if edge.target not in parent_map:
            parent_map[edge.target] = edge.source
    return parent_map


def compute_levels(capability_ids: list[str], children: dict[str, list[str]]) -> dict[str, int]:
    """
    Compute the nesting level of every capability.

    Memoized over the whole call; an id revisited on the current recursion
    path counts as level 1, so containment cycles terminate.

    Args:
        capability_ids: Capabilities in deterministic (input) order
        children: Parent id -> child capability ids

    Returns:
        Mapping capability id -> level (>= 1)
    """
    cache: dict[str, int] = {}

    def level_of(cap_id: str, path: set[str]) -> int:
        if cap_id in cache:
            return cache[cap_id]
        if cap_id in path:
            return 1  # Cycle break
        kids = children.get(cap_id)
        if not kids:
            cache[cap_id] = 1
            return 1
        path.add(cap_id)
        level = 1 + max(level_of(child, path) for child in kids)
        path.discard(cap_id)
        cache[cap_id] = level
        return level

    for cap_id in capability_ids:
        level_of(cap_id, set())
    return cache


def _break_cycles(order: list[str], parent_map: dict[str, str]) -> dict[str, str]:
    """Drop the parent link of the first capability (input order) on each containment cycle."""
    tree_parents = dict(parent_map)
    position = {cap_id: i for i, cap_id in enumerate(order)}
    for cap_id in order:
        chain: list[str] = []
        on_chain: set[str] = set()
        current: str | None = cap_id
        while current is not None and current not in on_chain:
            chain.append(current)
            on_chain.add(current)
            current = tree_parents.get(current)
        if current is None:
            continue
        cycle = chain[chain.index(current):]
        breaker = min(cycle, key=lambda c: position[c])
        logger.debug(f"Breaking containment cycle {cycle} at {breaker}")
        del tree_parents[breaker]
    return tree_parents


class HierarchyBuilder:
    """
    Builds the capability tree for one data generation.

    Capabilities that were never used (usage_count <= 0) are discarded and
    tools without any remaining parent capability are reported as orphans.
    """

    def build(self, snapshot: GraphSnapshot) -> HierarchyResult:
        """
        Build the hierarchy from a snapshot.

        Args:
            snapshot: Parsed nodes and edges

        Returns:
            HierarchyResult with the tree, side edges, orphans and stats
        """
        stats = HierarchyStats()

        active = [c for c in snapshot.capabilities if c.usage_count > 0]
        stats.discarded_capabilities = len(snapshot.capabilities) - len(active)
        order = [c.id for c in active]
        capability_ids = set(order)

        parent_map = resolve_parents(snapshot.edges, capability_ids)
        raw_children: dict[str, list[str]] = {}
        for cap_id in order:
            parent = parent_map.get(cap_id)
            if parent is not None:
                raw_children.setdefault(parent, []).append(cap_id)

        levels = compute_levels(order, raw_children)
        max_level = max([1, *levels.values()])
        stats.max_level = max_level

        tree_parents = _break_cycles(order, parent_map)

        nodes: dict[str, CapabilityTreeNode] = {}
        for cap in active:
            level = levels.get(cap.id, 1)
            nodes[cap.id] = CapabilityTreeNode(
                capability=replace(cap, parent_capability_id=tree_parents.get(cap.id)),
                level=level,
                level_norm=level / (max_level + 1),
            )

        root = RootNode()
        for cap_id in order:
            parent = tree_parents.get(cap_id)
            if parent is None:
                root.children.append(nodes[cap_id])
            else:
                nodes[parent].children.append(nodes[cap_id])

        tool_parents = self._tool_parents(snapshot, capability_ids)

        orphan_tools: list[ToolNode] = []
        placed: dict[str, ToolNode] = {}
        for tool in snapshot.tools:
            valid = tool_parents.get(tool.id, [])
            if not valid:
                orphan_tools.append(tool)
                continue
            placed[tool.id] = tool
            shared = len(valid) > 1
            if shared:
                stats.hyperedge_count += 1
            for parent in valid:
                nodes[parent].tools.append(
                    ToolInstance(
                        id=instance_id(tool.id, parent, shared),
                        tool=tool,
                        parent_id=parent,
                        valid_parents=list(valid),
                    )
                )

        capability_edges, tool_edges, dropped = self._side_edges(
            snapshot.edges, capability_ids, placed, tool_parents
        )
        if dropped:
            logger.debug(f"Dropped {dropped} edges with unknown or filtered endpoints")

        empty = [nodes[cap_id] for cap_id in order if nodes[cap_id].is_empty]

        stats.total_capabilities = len(nodes)
        stats.total_tools = len(placed)
        stats.orphan_count = len(orphan_tools)
        stats.empty_capability_count = len(empty)

        logger.debug(
            f"Hierarchy built: {stats.total_capabilities} capabilities, "
            f"{stats.total_tools} tools, {stats.orphan_count} orphans, max level {max_level}"
        )

        return HierarchyResult(
            root=root,
            capability_edges=capability_edges,
            tool_edges=tool_edges,
            orphan_tools=orphan_tools,
            empty_capabilities=empty,
            stats=stats,
            levels=levels,
            parents=tree_parents,
            capabilities=nodes,
            tools=placed,
            tool_parents={tool_id: tool_parents[tool_id] for tool_id in placed},
        )

    def _tool_parents(self, snapshot: GraphSnapshot, capability_ids: set[str]) -> dict[str, list[str]]:
        """Valid parent capabilities per tool, declared parents first, then membership edges."""
        tool_ids = {t.id for t in snapshot.tools}
        result: dict[str, list[str]] = {}
        for tool in snapshot.tools:
            result[tool.id] = []
            for parent in tool.parents:
                if parent in capability_ids and parent not in result[tool.id]:
                    result[tool.id].append(parent)
        for edge in snapshot.edges:
            if edge.edge_type not in TOOL_MEMBERSHIP_EDGE_TYPES:
                continue
            if edge.source in capability_ids and edge.target in tool_ids:
                parents = result[edge.target]
                if edge.source not in parents:
                    parents.append(edge.source)
        return result

    def _side_edges(
        self,
        edges: list[Edge],
        capability_ids: set[str],
        placed: dict[str, ToolNode],
        tool_parents: dict[str, list[str]],
    ) -> tuple[list[CapabilityEdge], list[ToolEdge], int]:
        capability_edges: list[CapabilityEdge] = []
        tool_edges: list[ToolEdge] = []
        dropped = 0
        for edge in edges:
            if edge.source in capability_ids and edge.target in capability_ids:
                capability_edges.append(
                    CapabilityEdge(
                        source=edge.source,
                        target=edge.target,
                        edge_type=edge.edge_type,
                        observed_count=edge.observed_count if edge.observed_count is not None else 1,
                    )
                )
            elif edge.source in placed and edge.target in placed:
                # Sequence edges are execution-time only; static data flow is "provides".
                # Only tools under a common capability are bundled.
                shared = set(tool_parents[edge.source]) & set(tool_parents[edge.target])
                if edge.edge_type == "provides" and shared:
                    tool_edges.append(
                        ToolEdge(source=edge.source, target=edge.target, weight=edge.weight)
                    )
            elif edge.source in capability_ids and edge.target in placed:
                continue  # Membership, already expressed by the tree
            else:
                dropped += 1
        return capability_edges, tool_edges, dropped


def build_hierarchy(snapshot: GraphSnapshot) -> HierarchyResult:
    """Build the capability hierarchy for a snapshot."""
    return HierarchyBuilder().build(snapshot)


def get_hyperedges(result: HierarchyResult) -> list[tuple[str, list[str]]]:
    """
    Tools with more than one parent capability.

    Returns:
        ``(tool_id, capability_ids)`` pairs in tool input order
    """
    return [
        (tool_id, list(parents))
        for tool_id, parents in result.tool_parents.items()
        if len(parents) > 1
    ]
