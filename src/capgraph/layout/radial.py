"""Radial HEB layout - hierarchical edge bundling on concentric rings.

Layout: tools on the outer ring (grouped by server), capabilities on the
inner ring (in tree order). Every edge is routed through the capability
tree up to the lowest common ancestor of its endpoints, the root being the
canvas center, and drawn as a bundled B-spline.

Node placement and path bundling are separate steps: changing the bundle
tension only recomputes paths from the stored positions.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Literal

from capgraph.graph.hierarchy import CapabilityTreeNode, HierarchyResult
from capgraph.layout.config import RadialLayoutConfig
from capgraph.layout.curves import Point, bundled_path, clamp_tension
from capgraph.models import CapabilityNode, ToolNode

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi

PathKind = Literal["hierarchy", "hyperedge", "capability_link", "provides"]


@dataclass
class PositionedNode:
    """A node placed on one of the rings."""

    id: str
    kind: Literal["capability", "tool"]
    x: float  # Canvas coordinates
    y: float
    angle_radians: float  # Arc center, clockwise from 12 o'clock
    radius: float  # Ring radius
    start_angle: float
    end_angle: float
    thickness: float  # Radial extent of the arc
    data: CapabilityNode | ToolNode
    level: int = 0  # Capability nesting level, 0 for tools
    group: str | None = None  # Server for tools

    @property
    def name(self) -> str:
        return self.data.name

    @property
    def inner_radius(self) -> float:
        return self.radius - self.thickness / 2

    @property
    def outer_radius(self) -> float:
        return self.radius + self.thickness / 2

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "angleRadians": self.angle_radians,
            "radius": self.radius,
            "startAngle": self.start_angle,
            "endAngle": self.end_angle,
            "innerRadius": self.inner_radius,
            "outerRadius": self.outer_radius,
            "level": self.level,
            "group": self.group,
            "data": self.data.to_dict(),
        }


@dataclass
class BundledPath:
    """An edge rendered as a bundled curve."""

    id: str
    source_id: str
    target_id: str
    edge_type: PathKind
    path_points: list[Point]  # Straightened control polygon
    path_d: str  # SVG path data
    relation: str | None = None  # Underlying edge type (contains, dependency, ...)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "edgeType": self.edge_type,
            "relation": self.relation,
            "pathPoints": [list(p) for p in self.path_points],
            "pathD": self.path_d,
        }


@dataclass
class RadialLayoutResult:
    """Layout result."""

    center: Point
    capabilities: list[PositionedNode] = field(default_factory=list)
    tools: list[PositionedNode] = field(default_factory=list)
    paths: list[BundledPath] = field(default_factory=list)
    radius_tools: float = 0.0
    radius_capabilities: float = 0.0
    tension: float = 1.0

    @property
    def nodes(self) -> list[PositionedNode]:
        return self.capabilities + self.tools

    def to_dict(self) -> dict:
        return {
            "center": {"x": self.center[0], "y": self.center[1]},
            "capabilities": [n.to_dict() for n in self.capabilities],
            "tools": [n.to_dict() for n in self.tools],
            "paths": [p.to_dict() for p in self.paths],
            "radii": {"tools": self.radius_tools, "capabilities": self.radius_capabilities},
            "tension": self.tension,
        }


def tool_thickness(pagerank: float) -> float:
    """Tool arc thickness: 6px plus up to 10px of pagerank."""
    return 6 + min(max(pagerank, 0.0) * 25, 10)


def capability_thickness(pagerank: float, usage_count: float) -> float:
    """Capability arc thickness: 10px plus capped pagerank and usage contributions."""
    return 10 + min(max(pagerank, 0.0) * 30, 8) + min(max(usage_count, 0.0) * 0.3, 6)


def label_rotation(angle: float) -> tuple[float, str]:
    """
    Rotation (degrees) and text anchor for a radial label at ``angle``.

    Labels on the left half of the circle are flipped to stay readable.
    """
    degrees = math.degrees(angle) - 90
    if math.pi / 2 < angle < 3 * math.pi / 2:
        return degrees + 180, "end"
    return degrees, "start"


def _arc_slots(
    group_sizes: list[int],
    padding: float,
    group_gap: float,
) -> list[tuple[float, float]]:
    """Start/end angles of equal arcs, with an extra gap between groups."""
    count = sum(group_sizes)
    if count == 0:
        return []
    gaps = len(group_sizes) if len(group_sizes) > 1 else 0
    available = TWO_PI - padding * count - group_gap * gaps
    if available <= 0:
        # Too many entities for the requested spacing: drop the spacing
        padding = group_gap = 0.0
        available = TWO_PI
    arc = available / count

    slots: list[tuple[float, float]] = []
    index = 0
    for group_index, size in enumerate(group_sizes):
        for _ in range(size):
            start = index * (arc + padding) + group_index * group_gap
            slots.append((start, start + arc))
            index += 1
    return slots


class RadialBundleLayout:
    """
    Radial hierarchical edge bundling over a capability hierarchy.

    ``compute()`` places nodes and bundles paths at the configured tension;
    ``update_tension()`` re-bundles paths for an existing result without
    touching node positions.
    """

    def __init__(self, hierarchy: HierarchyResult, config: RadialLayoutConfig) -> None:
        self.hierarchy = hierarchy
        self.config = config

        self.center: Point = (config.width / 2, config.height / 2)
        max_radius = max(min(config.width, config.height) / 2 - config.margin, config.min_radius)
        self.radius_tools = config.radius_tools if config.radius_tools is not None else max_radius
        self.radius_capabilities = (
            config.radius_capabilities
            if config.radius_capabilities is not None
            else self.radius_tools * config.capability_ratio
        )

        # Hierarchy used for routing: node id -> parent id (None = root/center)
        self._parent: dict[str, str | None] = {}
        self._positions: dict[str, Point] = {}
        self._capabilities: list[PositionedNode] = []
        self._tools: list[PositionedNode] = []
        self._placed = False

    # ─── Placement ───

    def _capability_order(self) -> list[CapabilityTreeNode]:
        ordered: list[CapabilityTreeNode] = []

        def visit(nodes: list[CapabilityTreeNode]) -> None:
            for node in sorted(nodes, key=lambda n: (n.name, n.id)):
                ordered.append(node)
                visit(node.children)

        visit(self.hierarchy.root.children)
        return ordered

    def _tool_groups(self) -> list[tuple[str, list[ToolNode]]]:
        by_server: dict[str, list[ToolNode]] = defaultdict(list)
        for tool in self.hierarchy.tools.values():
            by_server[tool.server].append(tool)
        if self.config.include_orphans:
            for tool in self.hierarchy.orphan_tools:
                by_server[tool.server].append(tool)
        return [
            (server, sorted(by_server[server], key=lambda t: (t.name, t.id)))
            for server in sorted(by_server)
        ]

    def _polar(self, angle: float, radius: float) -> Point:
        cx, cy = self.center
        return cx + radius * math.sin(angle), cy - radius * math.cos(angle)

    def _place(self) -> None:
        if self._placed:
            return

        capabilities = self._capability_order()
        slots = _arc_slots([len(capabilities)], self.config.capability_padding, 0.0)
        for node, (start, end) in zip(capabilities, slots):
            angle = (start + end) / 2
            x, y = self._polar(angle, self.radius_capabilities)
            cap = node.capability
            self._capabilities.append(
                PositionedNode(
                    id=node.id,
                    kind="capability",
                    x=x,
                    y=y,
                    angle_radians=angle,
                    radius=self.radius_capabilities,
                    start_angle=start,
                    end_angle=end,
                    thickness=capability_thickness(cap.pagerank, cap.usage_count),
                    data=cap,
                    level=node.level,
                )
            )
            self._positions[node.id] = (x, y)
            self._parent[node.id] = node.parent_id

        groups = self._tool_groups()
        slots = _arc_slots([len(tools) for _, tools in groups], self.config.tool_padding, self.config.server_gap)
        flat = [(server, tool) for server, tools in groups for tool in tools]
        for (server, tool), (start, end) in zip(flat, slots):
            angle = (start + end) / 2
            x, y = self._polar(angle, self.radius_tools)
            self._tools.append(
                PositionedNode(
                    id=tool.id,
                    kind="tool",
                    x=x,
                    y=y,
                    angle_radians=angle,
                    radius=self.radius_tools,
                    start_angle=start,
                    end_angle=end,
                    thickness=tool_thickness(tool.pagerank),
                    data=tool,
                    group=server,
                )
            )
            self._positions[tool.id] = (x, y)
            parents = self.hierarchy.tool_parents.get(tool.id)
            self._parent[tool.id] = parents[0] if parents else None

        self._placed = True

    # ─── Bundling ───

    def _chain(self, node_id: str | None) -> list[str | None]:
        chain = [node_id]
        while node_id is not None:
            node_id = self._parent.get(node_id)
            chain.append(node_id)
        return chain

    def route(self, source_id: str, target_id: str) -> list[Point]:
        """Control polygon from source up to the lowest common ancestor and down to target."""
        up = self._chain(source_id)
        down = self._chain(target_id)
        down_index = {node: i for i, node in enumerate(down)}
        for i, node in enumerate(up):
            if node in down_index:
                ids = up[: i + 1] + list(reversed(down[: down_index[node]]))
                break
        else:  # pragma: no cover - both chains end at the root
            ids = [source_id, target_id]
        return [self._positions[n] if n is not None else self.center for n in ids]

    def bundle(self, tension: float) -> list[BundledPath]:
        """Bundle every hierarchy, hyperedge, capability and tool path at ``tension``."""
        self._place()
        tension = clamp_tension(tension)
        paths: list[BundledPath] = []
        used_ids: dict[str, int] = {}

        def add(path_id: str, source: str, target: str, kind: PathKind, relation: str | None) -> None:
            if source not in self._positions or target not in self._positions:
                return
            seen = used_ids.get(path_id, 0)
            used_ids[path_id] = seen + 1
            if seen:
                path_id = f"{path_id}-{seen}"
            points, path_d = bundled_path(self.route(source, target), tension)
            paths.append(
                BundledPath(
                    id=path_id,
                    source_id=source,
                    target_id=target,
                    edge_type=kind,
                    path_points=points,
                    path_d=path_d,
                    relation=relation,
                )
            )

        for node in self._tools:
            parents = self.hierarchy.tool_parents.get(node.id, [])
            if not parents:
                continue
            primary = parents[0]
            add(f"hier-{primary}-{node.id}", primary, node.id, "hierarchy", "contains")
            for cap_id in parents[1:]:
                add(f"hyper-{cap_id}-{node.id}", cap_id, node.id, "hyperedge", "contains")

        for edge in self.hierarchy.capability_edges:
            add(f"cap-{edge.source}-{edge.target}", edge.source, edge.target, "capability_link", edge.edge_type)

        for edge in self.hierarchy.tool_edges:
            add(f"tool-{edge.source}-{edge.target}", edge.source, edge.target, "provides", edge.edge_type)

        return paths

    # ─── Public API ───

    def compute(self) -> RadialLayoutResult:
        """Place nodes and bundle paths at the configured tension."""
        self._place()
        tension = clamp_tension(self.config.tension)
        result = RadialLayoutResult(
            center=self.center,
            capabilities=list(self._capabilities),
            tools=list(self._tools),
            paths=self.bundle(tension),
            radius_tools=self.radius_tools,
            radius_capabilities=self.radius_capabilities,
            tension=tension,
        )
        logger.debug(
            f"Radial layout: {len(result.capabilities)} caps, {len(result.tools)} tools, "
            f"{len(result.paths)} paths"
        )
        return result

    def update_tension(self, result: RadialLayoutResult, tension: float) -> RadialLayoutResult:
        """
        Re-bundle paths for a new tension.

        Node lists are shared with ``result``; only paths are recomputed.
        """
        tension = clamp_tension(tension)
        return RadialLayoutResult(
            center=result.center,
            capabilities=result.capabilities,
            tools=result.tools,
            paths=self.bundle(tension),
            radius_tools=result.radius_tools,
            radius_capabilities=result.radius_capabilities,
            tension=tension,
        )


def create_radial_layout(
    hierarchy: HierarchyResult,
    width: float,
    height: float,
    tension: float | None = None,
) -> RadialLayoutResult:
    """Create a radial HEB layout for a hierarchy on a ``width`` x ``height`` canvas."""
    config = RadialLayoutConfig(width=width, height=height)
    if tension is not None:
        config.tension = tension
    return RadialBundleLayout(hierarchy, config).compute()
