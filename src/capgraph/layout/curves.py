"""Bundled curve geometry.

Holten's hierarchical edge bundles: the control polygon (the route through
the hierarchy) is straightened towards the chord between its endpoints by
``beta`` and then drawn as a uniform cubic B-spline:

    p'_i = beta * p_i + (1 - beta) * (p_0 + (i / n) * (p_n - p_0))

beta = 1 keeps the polygon (tight bundles), beta = 0 collapses it onto the
straight line between the endpoints.
"""

Point = tuple[float, float]


def clamp_tension(tension: float) -> float:
    """Clamp bundle tension into [0, 1]; NaN falls back to 1."""
    if tension != tension:
        return 1.0
    return min(1.0, max(0.0, float(tension)))


def straighten(points: list[Point], beta: float) -> list[Point]:
    """Pull control points towards the source-target chord."""
    n = len(points) - 1
    if n <= 0:
        return list(points)
    x0, y0 = points[0]
    dx = points[n][0] - x0
    dy = points[n][1] - y0
    out: list[Point] = []
    for i, (x, y) in enumerate(points):
        t = i / n
        out.append(
            (
                beta * x + (1 - beta) * (x0 + t * dx),
                beta * y + (1 - beta) * (y0 + t * dy),
            )
        )
    return out


def format_number(value: float) -> str:
    """Compact, stable number formatting for SVG path data."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _pt(x: float, y: float) -> str:
    return f"{format_number(x)},{format_number(y)}"


def basis_path(points: list[Point]) -> str:
    """
    SVG path data of a uniform cubic B-spline through a control polygon.

    Starts at the first point and ends at the last one; two points give a
    straight segment.
    """
    if not points:
        return ""

    parts: list[str] = []
    state = 0
    x0 = y0 = x1 = y1 = 0.0

    def curve(x: float, y: float) -> None:
        parts.append(
            "C"
            + _pt((2 * x0 + x1) / 3, (2 * y0 + y1) / 3)
            + ","
            + _pt((x0 + 2 * x1) / 3, (y0 + 2 * y1) / 3)
            + ","
            + _pt((x0 + 4 * x1 + x) / 6, (y0 + 4 * y1 + y) / 6)
        )

    for x, y in points:
        if state == 0:
            state = 1
            parts.append("M" + _pt(x, y))
        elif state == 1:
            state = 2
        elif state == 2:
            state = 3
            parts.append("L" + _pt((5 * x0 + x1) / 6, (5 * y0 + y1) / 6))
            curve(x, y)
        else:
            curve(x, y)
        x0, x1 = x1, x
        y0, y1 = y1, y

    if state == 3:
        curve(x1, y1)
        parts.append("L" + _pt(x1, y1))
    elif state == 2:
        parts.append("L" + _pt(x1, y1))

    return "".join(parts)


def bundled_path(points: list[Point], tension: float) -> tuple[list[Point], str]:
    """
    Straighten a hierarchy route by ``tension`` and render it as a B-spline.

    Returns:
        (straightened control points, SVG path data)
    """
    control = straighten(points, clamp_tension(tension))
    return control, basis_path(control)
