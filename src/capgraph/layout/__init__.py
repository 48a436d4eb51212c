"""Layout module.

Provides:
- Radial hierarchical edge bundling (two arc rings plus bundled paths)
- Recency timeline bucketing on a card grid
- Convex hull overlays for clusters
- Deterministic server/community colors
"""

from capgraph.layout.config import RadialLayoutConfig, TimelineConfig
from capgraph.layout.curves import basis_path, bundled_path, clamp_tension
from capgraph.layout.hull import (
    HullGroup,
    convex_hull,
    expand_hull,
    hull_overlay,
    hulls_intersect,
    merge_intersecting_hulls,
    point_in_polygon,
    polygon_path,
    smooth_hull,
)
from capgraph.layout.palette import ServerPalette, community_color
from capgraph.layout.radial import (
    BundledPath,
    PositionedNode,
    RadialBundleLayout,
    RadialLayoutResult,
    create_radial_layout,
    label_rotation,
)
from capgraph.layout.timeline import (
    BUCKETS,
    TimelineBucketer,
    TimelineCard,
    TimelineLayout,
    classify,
)

__all__ = [
    # Config
    "RadialLayoutConfig",
    "TimelineConfig",
    # Curves
    "basis_path",
    "bundled_path",
    "clamp_tension",
    # Radial
    "RadialBundleLayout",
    "RadialLayoutResult",
    "PositionedNode",
    "BundledPath",
    "create_radial_layout",
    "label_rotation",
    # Timeline
    "BUCKETS",
    "TimelineBucketer",
    "TimelineCard",
    "TimelineLayout",
    "classify",
    # Hull
    "HullGroup",
    "convex_hull",
    "expand_hull",
    "smooth_hull",
    "hull_overlay",
    "hulls_intersect",
    "merge_intersecting_hulls",
    "point_in_polygon",
    "polygon_path",
    # Palette
    "ServerPalette",
    "community_color",
]
