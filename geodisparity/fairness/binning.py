"""Quantile discretization of a continuous outcome into ordered classes."""

from typing import Sequence

import numpy as np


class QuantileBinning:
    """Partition of the outcome range into K classes by empirical quantiles.

    Cutoffs are fitted once on observed values and reused for predicted
    values, so that class k means the same price band on both axes. Intervals
    are closed on the right: a value equal to a cutoff falls in the lower
    class. Classes are numbered 1..K.

    Attributes:
        cutoffs: The K-1 interior cutoffs, strictly increasing.
    """

    def __init__(self, cutoffs: Sequence[float]):
        cutoffs = np.asarray(cutoffs, dtype=np.float64)
        if cutoffs.ndim != 1 or cutoffs.size < 1:
            raise ValueError("at least one cutoff is required (n_classes >= 2)")
        if np.any(np.diff(cutoffs) <= 0):
            raise ValueError(f"cutoffs must be strictly increasing, got {cutoffs}")
        self.cutoffs = cutoffs

    @property
    def n_classes(self) -> int:
        return self.cutoffs.size + 1

    @classmethod
    def fit(cls, observed: Sequence[float], n_classes: int) -> "QuantileBinning":
        """Fit cutoffs at the 1/K, ..., (K-1)/K empirical quantiles.

        Args:
            observed: Observed outcome values. NaN values are ignored.
            n_classes: Number of classes K >= 2.

        Raises:
            ValueError: If K < 2, there are no observed values, or ties make
                two cutoffs equal.
        """
        if n_classes < 2:
            raise ValueError(f"n_classes must be >= 2, got {n_classes}")

        values = np.asarray(observed, dtype=np.float64)
        values = values[~np.isnan(values)]
        if values.size == 0:
            raise ValueError("cannot fit quantile cutoffs on an empty sample")

        probs = np.linspace(0.0, 1.0, n_classes + 1)[1:-1]
        cutoffs = np.quantile(values, probs)
        if np.any(np.diff(cutoffs) <= 0):
            raise ValueError(
                f"quantile cutoffs are not distinct for n_classes={n_classes}: {cutoffs}"
            )
        return cls(cutoffs)

    def transform(self, values: Sequence[float]) -> np.ndarray:
        """Classify values into 1..K with the fitted cutoffs."""
        values = np.asarray(values, dtype=np.float64)
        if np.isnan(values).any():
            raise ValueError("cannot classify NaN values")
        return np.searchsorted(self.cutoffs, values, side="left").astype(np.int64) + 1

    def __repr__(self) -> str:
        return f"QuantileBinning(n_classes={self.n_classes}, cutoffs={self.cutoffs.tolist()})"
