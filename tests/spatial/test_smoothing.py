"""Tests for inverse-distance weighted spatial smoothing."""

import numpy as np
import pandas as pd
import pytest

from geodisparity.spatial.adjacency import AdjacencyGraph
from geodisparity.spatial.config import SpatialConfig
from geodisparity.spatial.smoothing import SmoothingResult, SpatialSmoother

CODES = ["r1", "r2", "r3", "r4", "r5"]


def line_smoother(max_radius: int = 4) -> SpatialSmoother:
    edges = [(CODES[i], CODES[i + 1]) for i in range(len(CODES) - 1)]
    graph = AdjacencyGraph.from_edges(CODES, edges)
    return SpatialSmoother(graph.distance_table(max_radius))


def line_signal() -> pd.Series:
    return pd.Series([10.0, 20.0, 30.0, 40.0, 50.0], index=CODES, name="price")


class TestSmooth:
    """Tests for SpatialSmoother.smooth."""

    def test_line_graph_radius_one(self):
        """Test the worked example: (30 + 0.5*20 + 0.5*40) / 2 = 22.5."""
        result = line_smoother().smooth(line_signal(), radius=1, exponent=1)
        assert result.values["r3"] == pytest.approx(22.5)

    def test_line_graph_endpoint(self):
        """Test an endpoint with a single neighbor."""
        result = line_smoother().smooth(line_signal(), radius=1, exponent=1)
        assert result.values["r1"] == pytest.approx((10 + 0.5 * 20) / 1.5)

    def test_radius_two_weights(self):
        """Test weights 1/(1+d) at radius 2."""
        result = line_smoother().smooth(line_signal(), radius=2, exponent=1)
        expected = (30 + 0.5 * (20 + 40) + (10 + 50) / 3) / (1 + 0.5 * 2 + 2 / 3)
        assert result.values["r3"] == pytest.approx(expected)

    def test_radius_zero_returns_signal(self):
        """Test that m = 0 returns the original signal."""
        signal = line_signal()
        result = line_smoother().smooth(signal, radius=0, exponent=1)
        pd.testing.assert_series_equal(result.values, signal, check_names=False)
        assert (result.support == 1).all()

    def test_missing_signal_excluded(self):
        """Test that missing neighbors are excluded, not treated as zero."""
        signal = line_signal()
        signal["r2"] = np.nan
        result = line_smoother().smooth(signal, radius=1, exponent=1)
        assert result.values["r3"] == pytest.approx((30 + 0.5 * 40) / 1.5)
        assert result.support["r3"] == 2

    def test_region_absent_from_signal_is_missing(self):
        """Test that regions absent from the index count as missing."""
        signal = line_signal().drop("r5")
        result = line_smoother().smooth(signal, radius=1, exponent=1)
        assert result.values["r4"] == pytest.approx((40 + 0.5 * 30) / 1.5)
        assert result.values["r5"] == pytest.approx(40.0)

    def test_no_defined_neighbor_is_reported(self):
        """Test that a target without defined neighbors is flagged missing."""
        signal = pd.Series([10.0, np.nan, np.nan, np.nan, 50.0], index=CODES)
        result = line_smoother().smooth(signal, radius=1, exponent=1)

        assert result.missing == ["r3"]
        assert result.has_missing
        assert np.isnan(result.values["r3"])
        assert result.support["r3"] == 0

    def test_bounds_for_any_exponent(self):
        """Test that smoothed values lie between min and max of the signal."""
        rng = np.random.default_rng(42)
        signal = pd.Series(rng.uniform(0, 100, size=5), index=CODES)
        smoother = line_smoother()
        for p in [0.0, 0.5, 1.0, 2.0, 5.0]:
            for radius in [1, 2, 4]:
                values = smoother.smooth(signal, radius, exponent=p).values
                assert (values >= signal.min() - 1e-9).all()
                assert (values <= signal.max() + 1e-9).all()

    def test_exponent_zero_is_plain_mean(self):
        """Test that p = 0 gives equal weights."""
        result = line_smoother().smooth(line_signal(), radius=1, exponent=0)
        assert result.values["r3"] == pytest.approx(30.0)
        assert result.values["r1"] == pytest.approx(15.0)

    def test_radius_above_max_raises_error(self):
        """Test that m must not exceed M."""
        with pytest.raises(ValueError, match="radius must be in"):
            line_smoother(max_radius=2).smooth(line_signal(), radius=3)

    def test_negative_exponent_raises_error(self):
        """Test that exponents must be non-negative."""
        with pytest.raises(ValueError, match="exponents must be non-negative"):
            line_smoother().smooth(line_signal(), radius=1, exponent=-1)

    def test_default_exponent_from_config(self):
        """Test that the configured exponent is used by default."""
        table = line_smoother().distance_table
        smoother = SpatialSmoother(table, SpatialConfig(max_radius=4, smoothing_radii=[0, 1], exponent=2.0))
        result = smoother.smooth(line_signal(), radius=1)
        assert result.exponent == 2.0
        assert result.values["r3"] == pytest.approx((30 + 0.25 * 60) / 1.5)


class TestCallSites:
    """Tests for the named smoothing call sites."""

    def test_relative_error_asymmetric_exponent(self):
        """Test p=2 numerator weights normalized by the p=1 weight sum."""
        result = line_smoother().smooth_relative_error(line_signal(), radius=1)
        # r4: (40 + 30/4 + 50/4) / (1 + 1/2 + 1/2)
        assert result.values["r4"] == pytest.approx(30.0)
        assert result.exponent == 2.0
        assert result.denominator_exponent == 1.0

    def test_prices_use_unit_exponent(self):
        """Test that price smoothing matches p=1."""
        smoother = line_smoother()
        prices = smoother.smooth_prices(line_signal(), radius=1)
        assert prices.values["r4"] == pytest.approx(40.0)

    def test_counts_fill_missing_regions_with_zero(self):
        """Test that regions without observations count as zero."""
        counts = pd.Series({"r1": 4.0})
        result = line_smoother().smooth_counts(counts, radius=1)
        assert result.values["r2"] == pytest.approx(1.0)
        assert result.values["r4"] == pytest.approx(0.0)
        assert not result.has_missing

    def test_smooth_many(self):
        """Test smoothing at several radii."""
        results = line_smoother().smooth_many(line_signal(), radii=[0, 1, 2])
        assert set(results) == {0, 1, 2}
        assert all(isinstance(r, SmoothingResult) for r in results.values())
        assert results[1].values["r3"] == pytest.approx(22.5)
