"""Graph engine - one data generation of the capability graph.

Validates a raw snapshot once, builds the hierarchy, and memoizes the
derived structures (neighborhood adjacency, radial layouts per canvas size)
for this generation only. A new snapshot means a new engine.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from capgraph.graph.hierarchy import INSTANCE_SEPARATOR, HierarchyBuilder, HierarchyResult
from capgraph.graph.neighborhood import Neighborhood, NeighborhoodExpander
from capgraph.layout.config import RadialLayoutConfig, TimelineConfig
from capgraph.layout.curves import Point, clamp_tension
from capgraph.layout.hull import HullGroup, hull_overlay, merge_intersecting_hulls
from capgraph.layout.palette import ServerPalette, community_color
from capgraph.layout.radial import RadialBundleLayout, RadialLayoutResult
from capgraph.layout.timeline import TimelineBucketer, TimelineLayout
from capgraph.models import GraphSnapshot
from capgraph.search.fuzzy import FuzzyMatcher, SearchResult

logger = logging.getLogger(__name__)


class GraphEngine:
    """
    Facade over the transformation and layout components.

    Usage:
        engine = GraphEngine.from_payload(payload)
        layout = engine.radial(1200, 900)
        layout = engine.retension(0.3, 1200, 900)
        lit = engine.highlight("cap-a", depth=2)
    """

    def __init__(
        self,
        snapshot: GraphSnapshot,
        max_hops: int | None = None,
        matcher: FuzzyMatcher | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.hierarchy: HierarchyResult = HierarchyBuilder().build(snapshot)
        self.palette = ServerPalette()
        self.matcher = matcher or FuzzyMatcher()
        self._max_hops = max_hops

        self._expander: NeighborhoodExpander | None = None
        self._layouts: dict[tuple[float, float], tuple[RadialBundleLayout, RadialLayoutResult]] = {}

        stats = self.hierarchy.stats
        logger.info(
            f"Graph generation: {stats.total_capabilities} capabilities, "
            f"{stats.total_tools} tools, {len(snapshot.edges)} edges, "
            f"{stats.orphan_count} orphans, {stats.hyperedge_count} hyperedges"
        )

    @classmethod
    def from_payload(cls, payload: Any, **kwargs: Any) -> "GraphEngine":
        """Validate a raw ``{nodes, edges}`` payload and build an engine for it."""
        return cls(GraphSnapshot.from_dict(payload), **kwargs)

    # ─── Neighborhood ───

    @property
    def neighborhood(self) -> NeighborhoodExpander:
        if self._expander is None:
            self._expander = NeighborhoodExpander(self.snapshot.edges, max_hops=self._max_hops)
        return self._expander

    def highlight(self, node_id: str, depth: float | None = 1) -> Neighborhood:
        """Nodes within ``depth`` hops of ``node_id`` (None or inf = whole connected stack)."""
        return self.neighborhood.expand(node_id, depth)

    # ─── Radial layout ───

    def radial(
        self,
        width: float,
        height: float,
        tension: float | None = None,
    ) -> RadialLayoutResult:
        """
        Radial HEB layout for a canvas size.

        Node placement is computed once per size; a different ``tension``
        only re-bundles paths.
        """
        key = (float(width), float(height))
        cached = self._layouts.get(key)
        if cached is None:
            config = RadialLayoutConfig(width=width, height=height)
            if tension is not None:
                config.tension = tension
            layout = RadialBundleLayout(self.hierarchy, config)
            result = layout.compute()
            self._layouts[key] = (layout, result)
            return result

        result = cached[1]
        if tension is None or clamp_tension(tension) == result.tension:
            return result
        return self.retension(tension, width, height)

    def retension(self, tension: float, width: float, height: float) -> RadialLayoutResult:
        """Recompute bundled paths for a new tension, keeping node positions."""
        key = (float(width), float(height))
        if key not in self._layouts:
            return self.radial(width, height, tension)
        layout, result = self._layouts[key]
        updated = layout.update_tension(result, tension)
        self._layouts[key] = (layout, updated)
        return updated

    # ─── Search & timeline ───

    def search(self, query: str) -> list[SearchResult]:
        return self.matcher.rank(self.hierarchy.walk(), query)

    def timeline(
        self,
        container_width: float,
        now: datetime | None = None,
        capability_ids: Iterable[str] | None = None,
        top_level_only: bool = False,
    ) -> TimelineLayout:
        """Recency timeline, optionally restricted to ``capability_ids`` (e.g. search hits)."""
        config = TimelineConfig(container_width=container_width, top_level_only=top_level_only)
        ids = set(capability_ids) if capability_ids is not None else None
        return TimelineBucketer(config).layout(self.hierarchy, now=now, capability_ids=ids)

    # ─── Overlays ───

    @staticmethod
    def _points_for(node_ids: Iterable[str], positions: Mapping[str, Point]) -> list[Point]:
        """Positions of the given nodes, including every instance of a shared tool."""
        wanted = set(node_ids)
        prefixes = tuple(f"{node_id}{INSTANCE_SEPARATOR}" for node_id in wanted)
        return [
            pos
            for key, pos in positions.items()
            if key in wanted or (prefixes and key.startswith(prefixes))
        ]

    def cluster_overlay(
        self,
        node_ids: Iterable[str],
        positions: Mapping[str, Point],
        padding: float | None = None,
        smooth: bool = False,
    ) -> list[Point]:
        """Padded hull outline around the rendered positions of ``node_ids``."""
        return hull_overlay(self._points_for(node_ids, positions), padding=padding, smooth=smooth)

    def community_overlays(
        self,
        positions: Mapping[str, Point],
        padding: float | None = None,
    ) -> list[HullGroup]:
        """
        One hull per capability community, overlapping hulls merged.

        Each community hull covers its capabilities and their tools.
        """
        members: dict[int, list[str]] = defaultdict(list)
        for node in self.hierarchy.walk():
            community = node.capability.community_id
            if community is None:
                continue
            members[community].append(node.id)
            members[community].extend(t.tool_id for t in node.tools)

        hulls: list[HullGroup] = []
        for community in sorted(members):
            outline = self.cluster_overlay(members[community], positions, padding=padding)
            if outline:
                hulls.append(
                    HullGroup(
                        points=outline,
                        color=community_color(community),
                        member_ids=list(dict.fromkeys(members[community])),
                    )
                )
        return merge_intersecting_hulls(hulls)

    def server_colors(self) -> dict[str, str]:
        """Color for every tool server, assigned in server order."""
        servers = sorted({t.server for t in self.hierarchy.tools.values()})
        servers += sorted({t.server for t in self.hierarchy.orphan_tools} - set(servers))
        return {server: self.palette.color(server) for server in servers}
