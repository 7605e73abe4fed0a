"""Histogram distance between two label sequences."""

from typing import Sequence

import numpy as np


def class_histogram(labels: Sequence[int], low: int, high: int) -> np.ndarray:
    """Empirical frequency of each integer label in ``low..high``."""
    labels = np.asarray(labels, dtype=np.int64)
    counts = np.bincount(labels - low, minlength=high - low + 1)
    return counts / labels.size


def unfairness(labels_a: Sequence[int], labels_b: Sequence[int]) -> float:
    """Maximum absolute difference between two class-frequency histograms.

    Both histograms cover every class between the smallest and largest label
    found in either sequence.

    Args:
        labels_a: Integer labels of the first group.
        labels_b: Integer labels of the second group.

    Returns:
        max_k |P_a(k) - P_b(k)|.

    Raises:
        ValueError: If either sequence is empty.
    """
    labels_a = np.asarray(labels_a, dtype=np.int64)
    labels_b = np.asarray(labels_b, dtype=np.int64)
    if labels_a.size == 0 or labels_b.size == 0:
        raise ValueError("label sequences cannot be empty")

    low = int(min(labels_a.min(), labels_b.min()))
    high = int(max(labels_a.max(), labels_b.max()))

    hist_a = class_histogram(labels_a, low, high)
    hist_b = class_histogram(labels_b, low, high)
    return float(np.max(np.abs(hist_a - hist_b)))
