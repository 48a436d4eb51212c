"""Deterministic node colors."""

from capgraph.models.node import UNKNOWN_SERVER

SERVER_COLORS: tuple[str, ...] = (
    "#FFB86F",  # orange
    "#FF6B6B",  # coral
    "#4ECDC4",  # teal
    "#FFE66D",  # yellow
    "#95E1D3",  # mint
    "#F38181",  # salmon
    "#AA96DA",  # lavender
    "#FCBAD3",  # light pink
    "#A8D8EA",  # sky blue
    "#FF9F43",  # bright orange
    "#6C5CE7",  # purple
    "#00CEC9",  # cyan
)

UNKNOWN_SERVER_COLOR = "#8a8078"

COMMUNITY_COLORS: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#a855f7",  # purple
)

DEFAULT_CAPABILITY_COLOR = "#8b5cf6"


class ServerPalette:
    """
    Assigns server colors in first-seen order.

    The same palette instance must be reused across renders of one graph so
    a server keeps its color; colors cycle once the list is exhausted.
    """

    def __init__(self, colors: tuple[str, ...] = SERVER_COLORS) -> None:
        if not colors:
            raise ValueError("Palette needs at least one color")
        self.colors = colors
        self._assigned: dict[str, str] = {}

    def color(self, server: str | None) -> str:
        if not server or server == UNKNOWN_SERVER:
            return UNKNOWN_SERVER_COLOR
        if server not in self._assigned:
            self._assigned[server] = self.colors[len(self._assigned) % len(self.colors)]
        return self._assigned[server]

    def assigned(self) -> dict[str, str]:
        """Server -> color for every server seen so far."""
        return dict(self._assigned)


def community_color(community_id: int | None) -> str:
    """Capability color by Louvain community; no community uses the base violet."""
    if community_id is None:
        return DEFAULT_CAPABILITY_COLOR
    return COMMUNITY_COLORS[community_id % len(COMMUNITY_COLORS)]
