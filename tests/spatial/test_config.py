"""Tests for SpatialConfig validation."""

import pytest

from geodisparity.spatial.config import SpatialConfig


class TestSpatialConfig:
    """Tests for SpatialConfig defaults and validation."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        config = SpatialConfig()
        assert config.max_radius == 30
        assert config.smoothing_radii == [0, 1, 2, 3, 5]
        assert config.exponent == 1.0
        assert config.distance_method == "bfs"

    def test_max_radius_below_one_raises_error(self):
        """Test that M < 1 is fatal."""
        with pytest.raises(ValueError, match="max_radius must be >= 1"):
            SpatialConfig(max_radius=0, smoothing_radii=[0])

    def test_smoothing_radius_above_max_raises_error(self):
        """Test that smoothing radii must not exceed M."""
        with pytest.raises(ValueError, match="smoothing_radii must be in"):
            SpatialConfig(max_radius=3, smoothing_radii=[1, 4])

    def test_negative_exponent_raises_error(self):
        """Test that the exponent must be non-negative."""
        with pytest.raises(ValueError, match="exponent must be non-negative"):
            SpatialConfig(exponent=-0.5)

    def test_invalid_method_raises_error(self):
        """Test that an unknown distance method is rejected."""
        with pytest.raises(ValueError, match="distance_method must be one of"):
            SpatialConfig(distance_method="dijkstra")
