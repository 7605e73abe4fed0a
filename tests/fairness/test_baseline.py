"""Tests for the random-predictor baseline."""

import numpy as np
import pytest

from geodisparity.fairness.baseline import random_baseline, random_predictions
from geodisparity.fairness.binning import QuantileBinning


def make_sample(n: int = 20000, seed: int = 42):
    rng = np.random.default_rng(seed)
    observed = rng.lognormal(mean=9.0, sigma=0.3, size=n)
    predicted = observed * rng.normal(1.0, 0.1, size=n)
    in_group = rng.random(n) < 0.5
    return observed, predicted, in_group


class TestRandomPredictions:
    """Tests for uniform random predictions."""

    def test_within_predicted_range(self):
        """Test that draws stay within [min, max] of the predictions."""
        predicted = np.array([3.0, 7.0, 5.0, 4.0])
        draws = random_predictions(predicted, np.random.default_rng(0))
        assert draws.shape == predicted.shape
        assert draws.min() >= 3.0 and draws.max() <= 7.0

    def test_empty_raises_error(self):
        """Test that predictions cannot be empty."""
        with pytest.raises(ValueError, match="cannot be empty"):
            random_predictions([], np.random.default_rng(0))


class TestRandomBaseline:
    """Tests for random_baseline."""

    def test_reproducible_with_seed(self):
        """Test that a fixed seed gives identical draws."""
        observed, predicted, in_group = make_sample(n=500)
        binning = QuantileBinning.fit(observed, 5)
        first = random_baseline(observed, predicted, in_group, binning, n_repeats=3, seed=1)
        second = random_baseline(observed, predicted, in_group, binning, n_repeats=3, seed=1)
        np.testing.assert_array_equal(first.values, second.values)
        assert first.values.shape == (3,)

    def test_dp_noise_floor_is_small(self):
        """Test that the random predictor's DP gap vanishes on large samples."""
        observed, predicted, in_group = make_sample()
        binning = QuantileBinning.fit(observed, 5)
        result = random_baseline(observed, predicted, in_group, binning, seed=0)
        assert 0 <= result.mean < 0.05

    def test_eo_noise_floor_is_small(self):
        """Test that the random predictor's EO gap vanishes on large samples."""
        observed, predicted, in_group = make_sample()
        binning = QuantileBinning.fit(observed, 5)
        result = random_baseline(
            observed, predicted, in_group, binning, criterion="equalized_odds", seed=0
        )
        assert 0 <= result.mean < 0.05

    def test_unknown_criterion_raises_error(self):
        """Test that the criterion must be DP or EO."""
        observed, predicted, in_group = make_sample(n=50)
        binning = QuantileBinning.fit(observed, 2)
        with pytest.raises(ValueError, match="Unknown criterion"):
            random_baseline(observed, predicted, in_group, binning, criterion="accuracy")

    def test_invalid_repeats_raises_error(self):
        """Test that at least one draw is required."""
        observed, predicted, in_group = make_sample(n=50)
        binning = QuantileBinning.fit(observed, 2)
        with pytest.raises(ValueError, match="n_repeats must be >= 1"):
            random_baseline(observed, predicted, in_group, binning, n_repeats=0)
