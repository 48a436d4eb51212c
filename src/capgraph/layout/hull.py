"""Convex hull overlays for cluster visualization.

A cluster is drawn as the convex hull of its members' rendered positions,
pushed outward by a padding distance so the outline encloses the nodes
instead of touching them, and optionally smoothed into a closed spline.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from capgraph.config import settings
from capgraph.layout.curves import Point, format_number

logger = logging.getLogger(__name__)

# Miters longer than this multiple of the padding are beveled
MITER_LIMIT = 4.0

CAPSULE_SEGMENTS = 8  # Samples per half circle


def _cross(o: Point, a: Point, b: Point) -> float:
    """Cross product of OA x OB; positive for a counter-clockwise turn."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _as_points(points: Iterable[Sequence[float]]) -> list[Point]:
    return [(float(p[0]), float(p[1])) for p in points]


def convex_hull(points: Iterable[Sequence[float]]) -> list[Point]:
    """
    Convex hull by Andrew's monotone chain.

    Returns:
        Hull vertices in counter-clockwise order (y up), collinear points
        dropped. Fewer than 3 distinct points are returned as-is, sorted.
    """
    unique = sorted(set(_as_points(points)))
    if len(unique) < 3:
        return unique

    lower: list[Point] = []
    for p in unique:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: list[Point] = []
    for p in reversed(unique):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    hull = lower[:-1] + upper[:-1]
    # All collinear: the chain degenerates to the two extremes
    if len(hull) < 3:
        return [unique[0], unique[-1]]
    return hull


def expand_hull(hull: Sequence[Point], padding: float) -> list[Point]:
    """
    Offset a counter-clockwise convex polygon outward by ``padding``.

    Each edge moves along its outward normal; consecutive offset edges meet
    at a miter, or at a bevel when the miter would exceed MITER_LIMIT.
    """
    if len(hull) < 3:
        return list(hull)
    if padding <= 0:
        return list(hull)

    pts = np.asarray(hull, dtype=float)
    edges = np.roll(pts, -1, axis=0) - pts
    lengths = np.hypot(edges[:, 0], edges[:, 1])
    lengths[lengths == 0] = 1.0
    # Outward normal of a CCW edge (dx, dy) is (dy, -dx)
    normals = np.column_stack((edges[:, 1], -edges[:, 0])) / lengths[:, None]

    expanded: list[Point] = []
    for i in range(len(pts)):
        n_in = normals[i - 1]  # Edge arriving at vertex i
        n_out = normals[i]  # Edge leaving vertex i
        denom = 1.0 + float(np.dot(n_in, n_out))
        miter = (n_in + n_out) / denom if denom > 1e-9 else None
        if miter is None or float(np.hypot(*miter)) > MITER_LIMIT:
            for n in (n_in, n_out):
                p = pts[i] + padding * n
                expanded.append((float(p[0]), float(p[1])))
        else:
            p = pts[i] + padding * miter
            expanded.append((float(p[0]), float(p[1])))
    return expanded


def capsule(a: Point, b: Point, padding: float, segments: int = CAPSULE_SEGMENTS) -> list[Point]:
    """Counter-clockwise padded capsule around the segment a-b."""
    if padding <= 0:
        return [a, b]
    start = np.asarray(a, dtype=float)
    end = np.asarray(b, dtype=float)
    direction = end - start
    length = float(np.hypot(*direction))
    base = float(np.arctan2(direction[1], direction[0])) if length > 0 else 0.0

    # Half circle around b from -90 to +90 degrees of the segment direction, then around a
    half = np.linspace(-np.pi / 2, np.pi / 2, segments + 1)
    around_end = end + padding * np.column_stack((np.cos(base + half), np.sin(base + half)))
    around_start = start + padding * np.column_stack(
        (np.cos(base + np.pi + half), np.sin(base + np.pi + half))
    )
    ring = np.vstack((around_end, around_start))
    return [(float(x), float(y)) for x, y in ring]


def smooth_hull(polygon: Sequence[Point], samples: int | None = None) -> list[Point]:
    """
    Closed Catmull-Rom spline through the polygon vertices.

    Args:
        polygon: Closed polygon (last vertex connects to the first)
        samples: Points per edge (default: settings.hull_smooth_samples)

    Returns:
        Densified closed outline passing through every vertex
    """
    if len(polygon) < 3:
        return list(polygon)
    samples = max(1, samples if samples is not None else settings.hull_smooth_samples)

    p1 = np.asarray(polygon, dtype=float)
    p0 = np.roll(p1, 1, axis=0)
    p2 = np.roll(p1, -1, axis=0)
    p3 = np.roll(p1, -2, axis=0)

    t = np.linspace(0.0, 1.0, samples, endpoint=False)[None, :, None]
    a = 2 * p1[:, None, :]
    b = (p2 - p0)[:, None, :] * t
    c = (2 * p0 - 5 * p1 + 4 * p2 - p3)[:, None, :] * t**2
    d = (-p0 + 3 * p1 - 3 * p2 + p3)[:, None, :] * t**3
    curve = 0.5 * (a + b + c + d)
    return [(float(x), float(y)) for x, y in curve.reshape(-1, 2)]


def hull_overlay(
    points: Iterable[Sequence[float]],
    padding: float | None = None,
    smooth: bool = False,
    samples: int | None = None,
) -> list[Point]:
    """
    Padded (optionally smoothed) outline around a cluster of points.

    0 or 1 distinct points give an empty outline; 2 points or a collinear
    set give a capsule around the segment.
    """
    padding = settings.hull_padding if padding is None else padding
    unique = sorted(set(_as_points(points)))
    if len(unique) < 2:
        return []

    hull = convex_hull(unique)
    if len(hull) < 3:
        outline = capsule(hull[0], hull[-1], padding)
    else:
        outline = expand_hull(hull, padding)

    if smooth:
        outline = smooth_hull(outline, samples)
    return outline


def polygon_path(polygon: Sequence[Point]) -> str:
    """SVG path data of a closed polygon."""
    if not polygon:
        return ""
    head, *rest = polygon
    parts = [f"M{format_number(head[0])},{format_number(head[1])}"]
    parts.extend(f"L{format_number(x)},{format_number(y)}" for x, y in rest)
    parts.append("Z")
    return "".join(parts)


# ─── Hull intersection & merging ───


def _direction(pi: Point, pj: Point, pk: Point) -> float:
    return (pk[0] - pi[0]) * (pj[1] - pi[1]) - (pj[0] - pi[0]) * (pk[1] - pi[1])


def _on_segment(pi: Point, pj: Point, pk: Point) -> bool:
    return (
        min(pi[0], pj[0]) <= pk[0] <= max(pi[0], pj[0])
        and min(pi[1], pj[1]) <= pk[1] <= max(pi[1], pj[1])
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Whether segments p1-p2 and p3-p4 touch or cross."""
    d1 = _direction(p3, p4, p1)
    d2 = _direction(p3, p4, p2)
    d3 = _direction(p1, p2, p3)
    d4 = _direction(p1, p2, p4)

    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True

    return (
        (d1 == 0 and _on_segment(p3, p4, p1))
        or (d2 == 0 and _on_segment(p3, p4, p2))
        or (d3 == 0 and _on_segment(p1, p2, p3))
        or (d4 == 0 and _on_segment(p1, p2, p4))
    )


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting containment test (boundary points may go either way)."""
    if len(polygon) < 3:
        return False
    x, y = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def hulls_intersect(hull1: Sequence[Point], hull2: Sequence[Point]) -> bool:
    """Whether two hull polygons overlap (crossing edges or containment)."""
    if len(hull1) < 3 or len(hull2) < 3:
        return False

    for i in range(len(hull1)):
        a, b = hull1[i], hull1[(i + 1) % len(hull1)]
        for j in range(len(hull2)):
            if segments_intersect(a, b, hull2[j], hull2[(j + 1) % len(hull2)]):
                return True

    return any(point_in_polygon(p, hull2) for p in hull1) or any(
        point_in_polygon(p, hull1) for p in hull2
    )


@dataclass
class HullGroup:
    """A hull to draw, with its display attributes."""

    points: list[Point]
    color: str
    animated: bool = False
    member_ids: list[str] = field(default_factory=list)


def merge_intersecting_hulls(hulls: list[HullGroup]) -> list[HullGroup]:
    """
    Merge overlapping hulls into single hulls.

    Intersecting hulls are grouped by union-find; each group is re-hulled
    over its combined points, keeps the first hull's color and is animated
    if any member was.
    """
    if len(hulls) <= 1:
        return list(hulls)

    parent = list(range(len(hulls)))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    for i in range(len(hulls)):
        for j in range(i + 1, len(hulls)):
            if hulls_intersect(hulls[i].points, hulls[j].points):
                ri, rj = find(i), find(j)
                if ri != rj:
                    parent[ri] = rj

    groups: dict[int, list[int]] = {}
    for i in range(len(hulls)):
        groups.setdefault(find(i), []).append(i)

    merged: list[HullGroup] = []
    for indices in sorted(groups.values()):
        if len(indices) == 1:
            merged.append(hulls[indices[0]])
            continue
        combined = [p for idx in indices for p in hulls[idx].points]
        members = [m for idx in indices for m in hulls[idx].member_ids]
        merged.append(
            HullGroup(
                points=convex_hull(combined),
                color=hulls[indices[0]].color,
                animated=any(hulls[idx].animated for idx in indices),
                member_ids=members,
            )
        )

    if len(merged) < len(hulls):
        logger.debug(f"Merged {len(hulls)} hulls into {len(merged)}")
    return merged
