"""Unit tests for neighborhood expansion."""

import pytest

from capgraph.graph.neighborhood import NeighborhoodExpander
from capgraph.models import Edge, GraphSnapshot


@pytest.fixture
def expander(sample_snapshot: GraphSnapshot) -> NeighborhoodExpander:
    """Expander over the sample edges."""
    return NeighborhoodExpander(sample_snapshot.edges)


@pytest.fixture
def chain() -> NeighborhoodExpander:
    """Path graph n0 - n1 - ... - n14."""
    edges = [Edge(f"n{i}", f"n{i + 1}", "sequence") for i in range(14)]
    return NeighborhoodExpander(edges, max_hops=10)


class TestNeighborhoodExpander:
    """Tests for depth-bounded BFS."""

    def test_depth_zero_is_empty(self, expander: NeighborhoodExpander) -> None:
        """Test that depth 0 returns nothing."""
        assert expander.neighbors("filesystem:read_file", 0) == set()
        assert expander.expand("t1", 0).is_empty

    def test_depth_one(self, expander: NeighborhoodExpander) -> None:
        """Test direct neighbors, ignoring edge direction."""
        assert expander.neighbors("filesystem:read_file", 1) == {"std:parse_json", "cap-file-ops"}

    def test_depth_two(self, expander: NeighborhoodExpander) -> None:
        """Test two-hop expansion."""
        assert expander.neighbors("filesystem:read_file", 2) == {
            "std:parse_json",
            "cap-file-ops",
            "cap-read-config",
            "filesystem:write_file",
        }

    def test_start_excluded(self, expander: NeighborhoodExpander) -> None:
        """Test that the start node is never in its own neighborhood."""
        assert "cap-file-ops" not in expander.neighbors("cap-file-ops", 5)

    def test_monotone_in_depth(self, chain: NeighborhoodExpander) -> None:
        """Test that a larger depth never yields fewer nodes."""
        previous: set[str] = set()
        for depth in range(0, 12):
            current = chain.neighbors("n0", depth)
            assert previous <= current
            previous = current

    def test_unknown_start(self, expander: NeighborhoodExpander) -> None:
        """Test that an unknown start node yields an empty result."""
        assert expander.neighbors("missing", 3) == set()

    def test_instance_id_resolves_to_tool(self, expander: NeighborhoodExpander) -> None:
        """Test that a shared tool instance id expands from its tool."""
        lit = expander.expand("filesystem:read_file__cap-file-ops", 1)
        assert lit.start_id == "filesystem:read_file"
        assert lit.node_ids == {"std:parse_json", "cap-file-ops"}

    def test_infinite_depth_capped(self, chain: NeighborhoodExpander) -> None:
        """Test that unbounded depth is capped at max_hops."""
        lit = chain.expand("n0", float("inf"))
        assert lit.depth == 10
        assert lit.node_ids == {f"n{i}" for i in range(1, 11)}
        assert chain.expand("n0", None).node_ids == lit.node_ids

    def test_negative_and_nan_depth(self, chain: NeighborhoodExpander) -> None:
        """Test that invalid depths are treated as zero."""
        assert chain.neighbors("n0", -2) == set()
        assert chain.neighbors("n0", float("nan")) == set()

    def test_edges_within_neighborhood(self, expander: NeighborhoodExpander) -> None:
        """Test that only edges among reached nodes are returned."""
        lit = expander.expand("filesystem:read_file", 1)
        members = lit.node_ids | {"filesystem:read_file"}
        assert lit.edges
        assert all(e.source in members and e.target in members for e in lit.edges)

    def test_empty_graph(self) -> None:
        """Test expansion over no edges."""
        assert NeighborhoodExpander([]).neighbors("t1", 3) == set()
