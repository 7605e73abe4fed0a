"""Group fairness diagnostics over quantile-discretized outcomes.

Key metrics implemented:
- Demographic Parity discrepancy: max gap between group and population
  predicted-class proportions
- Equalized Odds discrepancy: same gap conditional on the true class
- Random baseline: the statistic of a uniform random predictor (noise floor)

References:
- Hardt et al. (2016). "Equality of Opportunity in Supervised Learning"
  - https://arxiv.org/abs/1610.02413
"""

from .config import FairnessConfig
from .binning import QuantileBinning
from .metrics import (
    DisparityResult,
    as_group_mask,
    class_distribution,
    demographic_parity,
    equalized_odds,
)
from .baseline import BaselineResult, random_baseline, random_predictions
from .groups import district_groups, region_membership, ring_indicators
from .evaluator import (
    FairnessEvaluationResult,
    GroupEvaluationResult,
    GroupSpread,
    SpatialFairnessEvaluator,
    compute_group_spread,
)

__all__ = [
    # Config
    "FairnessConfig",
    "QuantileBinning",
    # Metrics
    "DisparityResult",
    "as_group_mask",
    "class_distribution",
    "demographic_parity",
    "equalized_odds",
    # Baseline
    "BaselineResult",
    "random_baseline",
    "random_predictions",
    # Groups
    "district_groups",
    "region_membership",
    "ring_indicators",
    # Evaluator
    "FairnessEvaluationResult",
    "GroupEvaluationResult",
    "GroupSpread",
    "SpatialFairnessEvaluator",
    "compute_group_spread",
]
