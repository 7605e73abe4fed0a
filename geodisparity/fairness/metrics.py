"""Group-conditional fairness discrepancy statistics over quantile classes.

Demographic Parity:

    U_DP = max_{a, k} | P(pred = k | A = a) - P(pred = k) |

Equalized Odds:

    U_EO = max_{a, k', k} | P(pred = k | true = k', A = a) - P(pred = k | true = k') |

A is the protected subset of observations and the reference is the full
population. Each cell is an absolute difference of two empirical proportions
and the statistic is the maximum cell, not an average. An EO cell (k', k)
with no group observation is missing rather than zero and is excluded from the
maximum, as is every cell of a true class absent from the group.

References:
- Hardt et al. (2016). "Equality of Opportunity in Supervised Learning"
  - https://arxiv.org/abs/1610.02413
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger


@dataclass
class DisparityResult:
    """Container for a computed discrepancy statistic.

    Attributes:
        criterion: "demographic_parity" or "equalized_odds".
        statistic: Maximum absolute cell difference, NaN if no cell is defined.
        cells: One row per evaluated cell with the group and population rates.
        n_group: Number of observations in the protected group.
        n_total: Number of observations in the population.
        sparse_cells: (side, true_class, pred_class) cells with no group
            observation, excluded from the maximum. ``pred_class`` is None when
            the whole side or true class is empty; ``true_class`` is None for DP.
    """

    criterion: str
    statistic: float
    cells: pd.DataFrame
    n_group: int
    n_total: int
    sparse_cells: list[tuple[str, Optional[int], Optional[int]]] = field(default_factory=list)

    @property
    def is_defined(self) -> bool:
        return not np.isnan(self.statistic)

    @property
    def worst_cell(self) -> Optional[dict]:
        """Row of the cell reaching the statistic, or None if undefined."""
        if not self.is_defined:
            return None
        return self.cells.loc[self.cells["abs_difference"].idxmax()].to_dict()


def class_distribution(classes: Sequence[int], n_classes: int) -> np.ndarray:
    """Empirical frequency of classes 1..K.

    Returns:
        Array of length K summing to 1, or all NaN if ``classes`` is empty.
    """
    classes = np.asarray(classes, dtype=np.int64)
    if classes.size == 0:
        return np.full(n_classes, np.nan)
    if classes.min() < 1 or classes.max() > n_classes:
        raise ValueError(f"classes must be in 1..{n_classes}")
    counts = np.bincount(classes - 1, minlength=n_classes)
    return counts / classes.size


def as_group_mask(indicator: Sequence, n: int) -> np.ndarray:
    """Normalize a boolean or -1/+1 indicator to a boolean mask (+1 -> True)."""
    indicator = np.asarray(indicator)
    if indicator.shape != (n,):
        raise ValueError(f"group indicator must have shape ({n},), got {indicator.shape}")
    if indicator.dtype == bool:
        return indicator
    values = set(np.unique(indicator).tolist())
    if not values <= {-1, 1} and not values <= {0, 1}:
        raise ValueError(f"group indicator must be boolean, 0/1 or -1/+1, got {sorted(values)}")
    return indicator == 1


def _sides(in_group: np.ndarray, include_complement: bool) -> list[tuple[str, np.ndarray]]:
    sides = [("group", in_group)]
    if include_complement:
        sides.append(("complement", ~in_group))
    return sides


def _finalize(
    criterion: str,
    rows: list[dict],
    n_group: int,
    n_total: int,
    sparse_cells: list,
) -> DisparityResult:
    cells = pd.DataFrame(rows)
    statistic = float(cells["abs_difference"].max()) if not cells.empty else float("nan")

    if sparse_cells:
        logger.warning(
            f"{criterion}: {len(sparse_cells)} cells without group observations "
            f"excluded from the maximum"
        )
    if cells.empty:
        logger.warning(f"{criterion}: no defined cell, statistic is undefined")

    return DisparityResult(
        criterion=criterion,
        statistic=statistic,
        cells=cells,
        n_group=n_group,
        n_total=n_total,
        sparse_cells=sparse_cells,
    )


def demographic_parity(
    pred_classes: Sequence[int],
    in_group: Sequence,
    n_classes: int,
    include_complement: bool = False,
) -> DisparityResult:
    """Compute the Demographic Parity discrepancy U_DP.

    Args:
        pred_classes: Predicted class (1..K) per observation.
        in_group: Protected-group indicator per observation.
        n_classes: Number of classes K.
        include_complement: Also take the max over the complement side.

    Returns:
        DisparityResult with one cell per (side, predicted class).
    """
    pred = np.asarray(pred_classes, dtype=np.int64)
    mask = as_group_mask(in_group, pred.size)
    population = class_distribution(pred, n_classes)

    rows = []
    sparse_cells = []
    for side, side_mask in _sides(mask, include_complement):
        if not side_mask.any():
            sparse_cells.append((side, None, None))
            continue
        group = class_distribution(pred[side_mask], n_classes)
        for k in range(n_classes):
            rows.append({
                "side": side,
                "pred_class": k + 1,
                "group_rate": group[k],
                "population_rate": population[k],
                "abs_difference": abs(group[k] - population[k]),
            })

    return _finalize("demographic_parity", rows, int(mask.sum()), pred.size, sparse_cells)


def equalized_odds(
    true_classes: Sequence[int],
    pred_classes: Sequence[int],
    in_group: Sequence,
    n_classes: int,
    include_complement: bool = False,
) -> DisparityResult:
    """Compute the Equalized Odds discrepancy U_EO.

    Args:
        true_classes: Observed class (1..K) per observation.
        pred_classes: Predicted class (1..K) per observation.
        in_group: Protected-group indicator per observation.
        n_classes: Number of classes K.
        include_complement: Also take the max over the complement side.

    Returns:
        DisparityResult with one cell per (side, true class, predicted class).
        Cells with no group observation are listed in ``sparse_cells``.
    """
    true = np.asarray(true_classes, dtype=np.int64)
    pred = np.asarray(pred_classes, dtype=np.int64)
    if true.shape != pred.shape:
        raise ValueError(
            f"true and predicted classes differ in shape: {true.shape} vs {pred.shape}"
        )
    mask = as_group_mask(in_group, pred.size)

    rows = []
    sparse_cells = []
    for true_class in range(1, n_classes + 1):
        is_true = true == true_class
        population = class_distribution(pred[is_true], n_classes)

        for side, side_mask in _sides(mask, include_complement):
            cell_mask = is_true & side_mask
            if not cell_mask.any():
                sparse_cells.append((side, true_class, None))
                continue
            group = class_distribution(pred[cell_mask], n_classes)
            for k in range(n_classes):
                if group[k] == 0:
                    sparse_cells.append((side, true_class, k + 1))
                    continue
                rows.append({
                    "side": side,
                    "true_class": true_class,
                    "pred_class": k + 1,
                    "group_rate": group[k],
                    "population_rate": population[k],
                    "abs_difference": abs(group[k] - population[k]),
                })

    return _finalize("equalized_odds", rows, int(mask.sum()), pred.size, sparse_cells)
