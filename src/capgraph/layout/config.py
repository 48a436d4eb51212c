"""Configuration for layout computation."""

from dataclasses import dataclass, field

from capgraph.config import settings


@dataclass
class RadialLayoutConfig:
    """Configuration for the radial hierarchical edge bundling layout."""

    # Canvas size
    width: float
    height: float

    # Ring radii (default: min(width, height) / 2 - margin, and 40% of that)
    radius_tools: float | None = None
    radius_capabilities: float | None = None

    # Bundle beta (1 = follow the hierarchy, 0 = straight lines)
    tension: float = field(default_factory=lambda: settings.radial_tension)

    margin: float = field(default_factory=lambda: settings.radial_margin)
    min_radius: float = field(default_factory=lambda: settings.radial_min_radius)
    capability_ratio: float = field(default_factory=lambda: settings.radial_capability_ratio)

    # Angular spacing in radians
    tool_padding: float = field(default_factory=lambda: settings.radial_tool_padding)
    server_gap: float = field(default_factory=lambda: settings.radial_server_gap)
    capability_padding: float = field(default_factory=lambda: settings.radial_capability_padding)

    include_orphans: bool = False  # Place parentless tools on the outer ring

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.tool_padding < 0 or self.server_gap < 0 or self.capability_padding < 0:
            raise ValueError("Angular padding must be non-negative")


@dataclass
class TimelineConfig:
    """Configuration for the recency timeline grid."""

    container_width: float

    card_width: float = field(default_factory=lambda: settings.timeline_card_width)
    row_height: float = field(default_factory=lambda: settings.timeline_row_height)
    base_y: float = field(default_factory=lambda: settings.timeline_base_y)
    margin_x: float = field(default_factory=lambda: settings.timeline_margin_x)
    group_spacing: float = field(default_factory=lambda: settings.timeline_group_spacing)
    separator_offset: float = field(default_factory=lambda: settings.timeline_separator_offset)

    # Tool sub-grid inside each capability card
    tool_spacing: float = field(default_factory=lambda: settings.timeline_tool_spacing)
    tool_offset_x: float = field(default_factory=lambda: settings.timeline_tool_offset_x)
    tool_offset_y: float = field(default_factory=lambda: settings.timeline_tool_offset_y)

    top_level_only: bool = False  # Nested capabilities render inside their parent card

    def __post_init__(self) -> None:
        if self.card_width <= 0:
            raise ValueError(f"card_width must be positive, got {self.card_width}")
        if self.container_width < 0:
            raise ValueError(f"container_width must be non-negative, got {self.container_width}")

    @property
    def columns(self) -> int:
        """Cards per row: max(1, floor(container_width / card_width))."""
        return max(1, int(self.container_width // self.card_width))
