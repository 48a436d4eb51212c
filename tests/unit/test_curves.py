"""Unit tests for bundle curve construction."""

import math

import pytest

from capgraph.layout.curves import basis_path, bundled_path, clamp_tension, format_number, straighten


class TestTension:
    """Tests for tension clamping."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(-0.5, 0.0), (0.3, 0.3), (1.7, 1.0), (math.nan, 1.0)],
    )
    def test_clamp(self, value: float, expected: float) -> None:
        """Test clamping into [0, 1]."""
        assert clamp_tension(value) == expected


class TestStraighten:
    """Tests for beta straightening."""

    def test_beta_one_keeps_points(self) -> None:
        """Test that beta 1 leaves the control polygon unchanged."""
        points = [(0.0, 0.0), (5.0, 10.0), (10.0, 0.0)]
        assert straighten(points, 1.0) == points

    def test_beta_zero_is_collinear(self) -> None:
        """Test that beta 0 collapses onto the chord."""
        points = [(0.0, 0.0), (5.0, 10.0), (3.0, -4.0), (10.0, 0.0)]
        out = straighten(points, 0.0)
        assert all(abs(y) < 1e-9 for _, y in out)
        assert out[0] == (0.0, 0.0)
        assert out[-1] == (10.0, 0.0)

    def test_endpoints_fixed(self) -> None:
        """Test that endpoints never move."""
        points = [(1.0, 2.0), (50.0, 60.0), (9.0, 3.0)]
        out = straighten(points, 0.4)
        assert out[0] == pytest.approx(points[0])
        assert out[-1] == pytest.approx(points[-1])


class TestBasisPath:
    """Tests for SVG B-spline output."""

    def test_empty(self) -> None:
        """Test that no points give no path."""
        assert basis_path([]) == ""

    def test_two_points_is_line(self) -> None:
        """Test the straight segment case."""
        assert basis_path([(0, 0), (10, 5)]) == "M0,0L10,5"

    def test_three_points(self) -> None:
        """Test the curve shape for three control points."""
        path = basis_path([(0, 0), (6, 6), (12, 0)])
        assert path.startswith("M0,0L1,1C")
        assert path.endswith("L12,0")

    def test_number_format(self) -> None:
        """Test compact number formatting."""
        assert format_number(1.0) == "1"
        assert format_number(1.23456) == "1.235"
        assert format_number(-0.0001) == "0"


class TestBundledPath:
    """Tests for straighten + render."""

    def test_deterministic(self) -> None:
        """Test that identical input yields identical path data."""
        route = [(0.0, 0.0), (50.0, 50.0), (100.0, 0.0)]
        assert bundled_path(route, 0.85) == bundled_path(route, 0.85)

    def test_tension_changes_path(self) -> None:
        """Test that tension affects the curve."""
        route = [(0.0, 0.0), (50.0, 50.0), (100.0, 0.0)]
        assert bundled_path(route, 1.0)[1] != bundled_path(route, 0.0)[1]
