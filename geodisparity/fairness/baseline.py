"""Random-predictor baseline for the discrepancy statistics.

Predicted values are replaced by uniform draws over the empirical range of
the predicted column, then classified with the cutoffs fitted on the observed
axis. The resulting statistic is the noise floor against which spatial
disparities of the real predictor are read.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from loguru import logger

from .binning import QuantileBinning
from .metrics import demographic_parity, equalized_odds


@dataclass
class BaselineResult:
    """Statistic of the random predictor over repeated draws.

    Attributes:
        criterion: "demographic_parity" or "equalized_odds".
        values: Statistic for each draw (NaN for undefined draws).
        mean: Mean over the defined draws.
    """

    criterion: str
    values: np.ndarray
    mean: float


def random_predictions(
    predicted: Sequence[float],
    rng: np.random.Generator,
) -> np.ndarray:
    """Uniform draws on [min(predicted), max(predicted)], one per observation."""
    predicted = np.asarray(predicted, dtype=np.float64)
    if predicted.size == 0:
        raise ValueError("predicted cannot be empty")
    return rng.uniform(np.nanmin(predicted), np.nanmax(predicted), size=predicted.size)


def random_baseline(
    observed: Sequence[float],
    predicted: Sequence[float],
    in_group: Sequence,
    binning: QuantileBinning,
    criterion: str = "demographic_parity",
    n_repeats: int = 1,
    seed: Optional[int] = None,
    include_complement: bool = False,
) -> BaselineResult:
    """Compute a discrepancy statistic for uniform random predictors.

    Args:
        observed: Observed outcome values (used by Equalized Odds only).
        predicted: Predicted values; only their range is used.
        in_group: Protected-group indicator per observation.
        binning: Cutoffs fitted on the observed axis.
        criterion: "demographic_parity" or "equalized_odds".
        n_repeats: Number of independent draws.
        seed: Seed of the random generator.
        include_complement: Also take the max over the complement side.

    Returns:
        BaselineResult with one value per draw.
    """
    if criterion not in ("demographic_parity", "equalized_odds"):
        raise ValueError(f"Unknown criterion: {criterion}")
    if n_repeats < 1:
        raise ValueError(f"n_repeats must be >= 1, got {n_repeats}")

    rng = np.random.default_rng(seed)
    true_classes = binning.transform(observed) if criterion == "equalized_odds" else None

    values = np.empty(n_repeats)
    for i in range(n_repeats):
        random_classes = binning.transform(random_predictions(predicted, rng))
        if criterion == "demographic_parity":
            result = demographic_parity(
                random_classes, in_group, binning.n_classes, include_complement
            )
        else:
            result = equalized_odds(
                true_classes, random_classes, in_group, binning.n_classes, include_complement
            )
        values[i] = result.statistic

    mean = float(np.nanmean(values)) if not np.isnan(values).all() else float("nan")
    logger.debug(f"Random baseline {criterion}: mean={mean:.4f} over {n_repeats} draws")

    return BaselineResult(criterion=criterion, values=values, mean=mean)
