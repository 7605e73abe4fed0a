"""Tests for the histogram unfairness utility."""

import pytest

from geodisparity.mitigation.unfairness import class_histogram, unfairness


class TestClassHistogram:
    """Tests for class_histogram."""

    def test_padded_range(self):
        """Test that classes without labels get zero frequency."""
        assert class_histogram([1, 3, 3, 3], 1, 4).tolist() == [0.25, 0.0, 0.75, 0.0]


class TestUnfairness:
    """Tests for unfairness."""

    def test_known_value(self):
        """Test [0.5, 0.5] vs [0.25, 0.75] gives 0.25."""
        assert unfairness([1, 1, 2, 2], [1, 2, 2, 2]) == pytest.approx(0.25)

    def test_identical_distributions(self):
        """Test that equal histograms give 0."""
        assert unfairness([1, 2, 3], [3, 2, 1, 1, 2, 3]) == pytest.approx(0.0)

    def test_disjoint_labels_padded(self):
        """Test that histograms cover the union of label ranges."""
        assert unfairness([1, 1], [3, 3]) == pytest.approx(1.0)

    def test_symmetric(self):
        """Test that argument order does not matter."""
        a, b = [1, 2, 2, 4], [2, 3, 3, 3, 4]
        assert unfairness(a, b) == pytest.approx(unfairness(b, a))

    def test_empty_raises_error(self):
        """Test that empty label sequences are rejected."""
        with pytest.raises(ValueError, match="cannot be empty"):
            unfairness([], [1, 2])
