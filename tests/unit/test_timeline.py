"""Unit tests for timeline bucketing."""

from datetime import datetime, timedelta

import pytest

from capgraph.graph.hierarchy import HierarchyResult, build_hierarchy
from capgraph.layout.config import TimelineConfig
from capgraph.layout.timeline import TimelineBucketer, classify
from capgraph.models import GraphSnapshot


@pytest.fixture
def bucketer() -> TimelineBucketer:
    """Bucketer for a 1000px container (5 columns)."""
    return TimelineBucketer(TimelineConfig(container_width=1000))


class TestClassify:
    """Tests for recency classification."""

    def test_buckets(self, now: datetime) -> None:
        """Test the bucket thresholds."""
        assert classify(now, now).key == "today"
        assert classify(now - timedelta(hours=23), now).key == "today"
        assert classify(now - timedelta(days=2), now).key == "this_week"
        assert classify(now - timedelta(days=10), now).key == "this_month"
        assert classify(now - timedelta(days=31), now).key == "older"

    def test_missing_is_oldest(self, now: datetime) -> None:
        """Test that a missing timestamp falls into the last bucket."""
        assert classify(None, now).key == "older"

    def test_future_is_today(self, now: datetime) -> None:
        """Test that clock skew does not push items out of today."""
        assert classify(now + timedelta(hours=1), now).key == "today"


class TestTimelineConfig:
    """Tests for grid configuration."""

    def test_columns(self) -> None:
        """Test column count from container width."""
        assert TimelineConfig(container_width=1000).columns == 5
        assert TimelineConfig(container_width=50).columns == 1

    def test_invalid_card_width(self) -> None:
        """Test that a non-positive card width is rejected."""
        with pytest.raises(ValueError):
            TimelineConfig(container_width=1000, card_width=0)


class TestTimelineBucketer:
    """Tests for bucket membership and grid positions."""

    def test_single_capability_today(self, now: datetime) -> None:
        """Test that a capability used now lands at the first grid cell of today."""
        snapshot = GraphSnapshot.from_dict(
            {
                "nodes": [
                    {"id": "cap1", "type": "capability", "usage_count": 1, "last_used": now.isoformat()}
                ]
            }
        )
        timeline = TimelineBucketer(TimelineConfig(container_width=800)).layout(
            build_hierarchy(snapshot), now=now
        )
        card = timeline.card("cap1")
        assert card is not None
        assert card.bucket == "today"
        assert (card.position.col, card.position.row) == (0, 0)

    def test_sample_layout(
        self, bucketer: TimelineBucketer, sample_hierarchy: HierarchyResult, now: datetime
    ) -> None:
        """Test buckets, positions and separators for the sample graph."""
        timeline = bucketer.layout(sample_hierarchy, now=now)
        assert timeline.buckets == {
            "today": ["cap-file-ops"],
            "this_week": ["cap-read-config"],
            "older": ["cap-db-sync"],
        }
        assert timeline.positions["cap-file-ops"] == (100, 80)
        assert timeline.positions["cap-read-config"] == (100, 320)
        assert timeline.positions["cap-db-sync"] == (100, 560)
        assert [(s.key, s.y) for s in timeline.separators] == [
            ("today", 50),
            ("this_week", 290),
            ("older", 530),
        ]
        assert timeline.height == 800

    def test_tool_subgrid(
        self, bucketer: TimelineBucketer, sample_hierarchy: HierarchyResult, now: datetime
    ) -> None:
        """Test tool positions inside a card."""
        card = bucketer.layout(sample_hierarchy, now=now).card("cap-file-ops")
        assert card is not None
        assert card.tools["filesystem:read_file__cap-file-ops"].x == 120
        assert card.tools["filesystem:read_file__cap-file-ops"].y == 120
        assert card.tools["filesystem:write_file"].x == 155

    def test_row_wrapping(self, now: datetime) -> None:
        """Test that cards wrap after the column count."""
        nodes = [
            {"id": f"cap{i}", "type": "capability", "usage_count": 1, "last_used": now.isoformat()}
            for i in range(7)
        ]
        timeline = TimelineBucketer(TimelineConfig(container_width=1000)).layout(
            build_hierarchy(GraphSnapshot.from_dict({"nodes": nodes})), now=now
        )
        rows = [c.position.row for c in timeline.cards]
        cols = [c.position.col for c in timeline.cards]
        assert rows == [0, 0, 0, 0, 0, 1, 1]
        assert cols == [0, 1, 2, 3, 4, 0, 1]

    def test_filter_by_ids(
        self, bucketer: TimelineBucketer, sample_hierarchy: HierarchyResult, now: datetime
    ) -> None:
        """Test restricting the timeline to a set of capabilities."""
        timeline = bucketer.layout(sample_hierarchy, now=now, capability_ids={"cap-db-sync"})
        assert [c.id for c in timeline.cards] == ["cap-db-sync"]
        assert timeline.cards[0].position.row == 0

    def test_top_level_only(self, sample_hierarchy: HierarchyResult, now: datetime) -> None:
        """Test that nested capabilities can be left to their parent card."""
        config = TimelineConfig(container_width=1000, top_level_only=True)
        timeline = TimelineBucketer(config).layout(sample_hierarchy, now=now)
        assert {c.id for c in timeline.cards} == {"cap-file-ops", "cap-db-sync"}

    def test_idempotent(
        self, bucketer: TimelineBucketer, sample_hierarchy: HierarchyResult, now: datetime
    ) -> None:
        """Test that two runs give the same layout."""
        assert bucketer.layout(sample_hierarchy, now=now).to_dict() == (
            bucketer.layout(sample_hierarchy, now=now).to_dict()
        )

    def test_empty(self, bucketer: TimelineBucketer, now: datetime) -> None:
        """Test that no capabilities give an empty timeline."""
        timeline = bucketer.layout(build_hierarchy(GraphSnapshot()), now=now)
        assert timeline.cards == []
        assert timeline.separators == []
