"""Recency timeline: capabilities grouped by last use and laid out in a card grid."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from capgraph.graph.hierarchy import CapabilityTreeNode, HierarchyResult
from capgraph.layout.config import TimelineConfig

logger = logging.getLogger(__name__)

DAY = timedelta(days=1)


@dataclass(frozen=True)
class TimeBucket:
    """A recency bucket: capabilities with age < threshold (first match wins)."""

    key: str
    label: str
    threshold: timedelta | None  # None = everything else


BUCKETS: tuple[TimeBucket, ...] = (
    TimeBucket("today", "Today", DAY),
    TimeBucket("this_week", "This week", 7 * DAY),
    TimeBucket("this_month", "This month", 30 * DAY),
    TimeBucket("older", "Older", None),
)


@dataclass
class GridPosition:
    """Position of a card (or a tool inside a card)."""

    x: float
    y: float
    col: int
    row: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "col": self.col, "row": self.row}


@dataclass
class Separator:
    """Bucket divider drawn just above the bucket's first row."""

    key: str
    label: str
    y: float

    def to_dict(self) -> dict:
        return {"key": self.key, "label": self.label, "y": self.y}


@dataclass
class TimelineCard:
    """A capability card with its tool sub-grid."""

    capability: CapabilityTreeNode
    bucket: str
    position: GridPosition
    tools: dict[str, GridPosition] = field(default_factory=dict)  # Instance id -> position

    @property
    def id(self) -> str:
        return self.capability.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bucket": self.bucket,
            "position": self.position.to_dict(),
            "children": [c.id for c in self.capability.children],
            "tools": {tool_id: pos.to_dict() for tool_id, pos in self.tools.items()},
        }


@dataclass
class TimelineLayout:
    """Timeline layout result."""

    cards: list[TimelineCard] = field(default_factory=list)
    separators: list[Separator] = field(default_factory=list)
    buckets: dict[str, list[str]] = field(default_factory=dict)  # Bucket key -> capability ids
    height: float = 0.0

    @property
    def positions(self) -> dict[str, tuple[float, float]]:
        """Flat id -> (x, y) map of every capability card and tool instance."""
        flat: dict[str, tuple[float, float]] = {}
        for card in self.cards:
            flat[card.id] = (card.position.x, card.position.y)
            for tool_id, pos in card.tools.items():
                flat[tool_id] = (pos.x, pos.y)
        return flat

    def card(self, capability_id: str) -> TimelineCard | None:
        for card in self.cards:
            if card.id == capability_id:
                return card
        return None

    def to_dict(self) -> dict:
        return {
            "cards": [c.to_dict() for c in self.cards],
            "separators": [s.to_dict() for s in self.separators],
            "buckets": {k: list(v) for k, v in self.buckets.items()},
            "height": self.height,
        }


def classify(last_used: datetime | None, now: datetime) -> TimeBucket:
    """Bucket for a last-use timestamp; missing timestamps are the oldest."""
    if last_used is None:
        return BUCKETS[-1]
    age = now - last_used
    for bucket in BUCKETS:
        if bucket.threshold is None or age < bucket.threshold:
            return bucket
    return BUCKETS[-1]


class TimelineBucketer:
    """Groups capabilities by recency and assigns deterministic grid positions."""

    def __init__(self, config: TimelineConfig) -> None:
        self.config = config

    def _candidates(self, hierarchy: HierarchyResult) -> list[CapabilityTreeNode]:
        if self.config.top_level_only:
            return hierarchy.top_level
        return list(hierarchy.walk())

    def layout(
        self,
        hierarchy: HierarchyResult,
        now: datetime | None = None,
        capability_ids: set[str] | None = None,
    ) -> TimelineLayout:
        """
        Compute bucket membership and positions.

        Args:
            hierarchy: Capability hierarchy of the current generation
            now: Reference time (default: current UTC time)
            capability_ids: Optional filter (e.g. search results)

        Returns:
            TimelineLayout with cards, separators and bucket membership
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        capabilities = self._candidates(hierarchy)
        if capability_ids is not None:
            capabilities = [c for c in capabilities if c.id in capability_ids]

        # Most recent first; never-used last
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        capabilities.sort(key=lambda c: (c.name, c.id))
        capabilities.sort(key=lambda c: c.capability.last_used or epoch, reverse=True)

        grouped: dict[str, list[CapabilityTreeNode]] = {b.key: [] for b in BUCKETS}
        for cap in capabilities:
            grouped[classify(cap.capability.last_used, now).key].append(cap)

        cfg = self.config
        columns = cfg.columns
        result = TimelineLayout()
        current_y = cfg.base_y

        for bucket in BUCKETS:
            members = grouped[bucket.key]
            if not members:
                continue
            result.separators.append(
                Separator(key=bucket.key, label=bucket.label, y=current_y - cfg.separator_offset)
            )
            result.buckets[bucket.key] = [c.id for c in members]

            for index, cap in enumerate(members):
                col = index % columns
                row = index // columns
                x = cfg.margin_x + col * cfg.card_width
                y = current_y + row * cfg.row_height
                card = TimelineCard(
                    capability=cap,
                    bucket=bucket.key,
                    position=GridPosition(x=x, y=y, col=col, row=row),
                )

                per_row = max(1, math.ceil(math.sqrt(len(cap.tools))))
                for j, instance in enumerate(cap.tools):
                    tool_col = j % per_row
                    tool_row = j // per_row
                    card.tools[instance.id] = GridPosition(
                        x=x + cfg.tool_offset_x + tool_col * cfg.tool_spacing,
                        y=y + cfg.tool_offset_y + tool_row * cfg.tool_spacing,
                        col=tool_col,
                        row=tool_row,
                    )
                result.cards.append(card)

            rows = math.ceil(len(members) / columns)
            current_y += rows * cfg.row_height + cfg.group_spacing

        result.height = current_y
        logger.debug(
            f"Timeline: {len(result.cards)} cards in {len(result.separators)} buckets, {columns} columns"
        )
        return result
