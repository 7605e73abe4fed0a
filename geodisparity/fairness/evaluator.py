"""Per-group spatial fairness evaluation.

Applies the Demographic Parity and Equalized Odds statistics with each group
of regions in turn as the protected set: administrative districts,
concentric rings around a region of interest, or any custom mapping.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np
import pandas as pd
from loguru import logger

from geodisparity.data.observations import ObservationSchema
from geodisparity.spatial.adjacency import AdjacencyGraph

from .baseline import BaselineResult, random_baseline
from .binning import QuantileBinning
from .config import FairnessConfig
from .groups import district_groups, region_membership
from .metrics import DisparityResult, demographic_parity, equalized_odds


@dataclass
class GroupEvaluationResult:
    """Evaluation result for a single protected group.

    Attributes:
        group_name: Identifier for the group.
        num_observations: Number of observations in the group.
        num_regions: Number of member regions.
        statistics: Computed DisparityResult per criterion.
        baselines: Random-predictor reference per criterion.
    """

    group_name: str
    num_observations: int
    num_regions: int
    statistics: dict[str, DisparityResult] = field(default_factory=dict)
    baselines: dict[str, BaselineResult] = field(default_factory=dict)


@dataclass
class GroupSpread:
    """Dispersion of one statistic across groups.

    Attributes:
        mean: Mean over groups with a defined statistic.
        std: Standard deviation over those groups.
        gap: Max - min.
        worst_group: Group with the largest statistic.
        worst_value: Largest statistic.
    """

    mean: float
    std: float
    gap: float
    worst_group: str
    worst_value: float


def compute_group_spread(values: dict[str, float]) -> Optional[GroupSpread]:
    """Summarize a statistic across groups, ignoring undefined (NaN) values."""
    defined = {name: v for name, v in values.items() if not np.isnan(v)}
    if not defined:
        return None

    arr = np.array(list(defined.values()), dtype=np.float64)
    worst_group = max(defined, key=defined.get)
    return GroupSpread(
        mean=float(np.mean(arr)),
        std=float(np.std(arr)),
        gap=float(np.max(arr) - np.min(arr)),
        worst_group=worst_group,
        worst_value=defined[worst_group],
    )


@dataclass
class FairnessEvaluationResult:
    """Complete evaluation result over a family of groups.

    Attributes:
        dimension: Kind of grouping ("district", "ring", ...).
        group_results: Per-group evaluation results.
        skipped_groups: Groups below ``min_samples_per_group``.
        degenerate_groups: Groups covering every observation.
    """

    dimension: str
    group_results: dict[str, GroupEvaluationResult]
    skipped_groups: list[str] = field(default_factory=list)
    degenerate_groups: list[str] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """One row per group: sizes, statistics and baseline means."""
        rows = []
        for name, result in self.group_results.items():
            row = {
                "group": name,
                "n_obs": result.num_observations,
                "n_regions": result.num_regions,
            }
            for criterion, stat in result.statistics.items():
                row[criterion] = stat.statistic
            for criterion, baseline in result.baselines.items():
                row[f"baseline_{criterion}"] = baseline.mean
            rows.append(row)
        return pd.DataFrame(rows)

    def spread(self, criterion: str) -> Optional[GroupSpread]:
        return compute_group_spread({
            name: result.statistics[criterion].statistic
            for name, result in self.group_results.items()
            if criterion in result.statistics
        })


class SpatialFairnessEvaluator:
    """Evaluates DP/EO discrepancies for groups of regions."""

    def __init__(
        self,
        config: FairnessConfig,
        binning: Optional[QuantileBinning] = None,
        schema: Optional[ObservationSchema] = None,
    ):
        """Initialize the evaluator.

        Args:
            config: Fairness evaluation configuration.
            binning: Fitted quantile cutoffs. If None, they are fitted on the
                observed column of the first table evaluated.
            schema: Column names of observation tables.
        """
        self.config = config
        self.binning = binning
        self.schema = schema or ObservationSchema()

        if binning is not None and binning.n_classes != config.n_classes:
            raise ValueError(
                f"binning has {binning.n_classes} classes, config expects {config.n_classes}"
            )

    def _ensure_binning(self, observations: pd.DataFrame) -> QuantileBinning:
        if self.binning is None:
            self.binning = QuantileBinning.fit(
                observations[self.schema.observed_column], self.config.n_classes
            )
            logger.info(f"Fitted {self.binning}")
        return self.binning

    def evaluate_indicator(
        self,
        observations: pd.DataFrame,
        in_group: np.ndarray,
        group_name: str,
        num_regions: int = 0,
    ) -> GroupEvaluationResult:
        """Evaluate one protected-group indicator.

        Args:
            observations: Observation table.
            in_group: Boolean indicator aligned with ``observations``.
            group_name: Name of the group.
            num_regions: Number of member regions, for reporting.

        Returns:
            GroupEvaluationResult for this group.
        """
        binning = self._ensure_binning(observations)
        observed = observations[self.schema.observed_column].to_numpy()
        predicted = observations[self.schema.predicted_column].to_numpy()
        true_classes = binning.transform(observed)
        pred_classes = binning.transform(predicted)

        result = GroupEvaluationResult(
            group_name=group_name,
            num_observations=int(np.sum(in_group)),
            num_regions=num_regions,
        )

        for criterion in self.config.metrics:
            if criterion == "demographic_parity":
                stat = demographic_parity(
                    pred_classes, in_group, binning.n_classes,
                    self.config.include_complement,
                )
            else:
                stat = equalized_odds(
                    true_classes, pred_classes, in_group, binning.n_classes,
                    self.config.include_complement,
                )
            result.statistics[criterion] = stat

            if self.config.baseline_repeats > 0:
                result.baselines[criterion] = random_baseline(
                    observed,
                    predicted,
                    in_group,
                    binning,
                    criterion=criterion,
                    n_repeats=self.config.baseline_repeats,
                    seed=self.config.seed,
                    include_complement=self.config.include_complement,
                )

        logger.debug(
            f"Group '{group_name}': n_obs={result.num_observations}, "
            + ", ".join(f"{c}={s.statistic:.4f}" for c, s in result.statistics.items())
        )
        return result

    def evaluate_groups(
        self,
        observations: pd.DataFrame,
        groups: dict[str, Iterable[str]],
        dimension: str = "custom",
    ) -> FairnessEvaluationResult:
        """Evaluate every group of a mapping group name -> member regions.

        Groups with fewer than ``min_samples_per_group`` observations are
        skipped; groups covering every observation are reported as
        degenerate. Both are logged and listed in the result.
        """
        logger.info(f"Evaluating fairness by {dimension} ({len(groups)} groups)...")
        self._ensure_binning(observations)

        evaluation = FairnessEvaluationResult(dimension=dimension, group_results={})

        for name, regions in groups.items():
            regions = set(regions)
            in_group = region_membership(observations, regions, self.schema)
            n_obs = int(in_group.sum())

            if n_obs < self.config.min_samples_per_group:
                logger.warning(
                    f"Group '{name}' has only {n_obs} observations, skipping "
                    f"(min_samples_per_group={self.config.min_samples_per_group})"
                )
                evaluation.skipped_groups.append(name)
                continue

            if n_obs == len(observations):
                logger.warning(f"Group '{name}' covers every observation, skipping")
                evaluation.degenerate_groups.append(name)
                continue

            evaluation.group_results[name] = self.evaluate_indicator(
                observations, in_group, name, num_regions=len(regions)
            )

        for criterion in self.config.metrics:
            spread = evaluation.spread(criterion)
            if spread is not None:
                logger.info(
                    f"{dimension} {criterion}: mean={spread.mean:.4f}, "
                    f"gap={spread.gap:.4f}, worst={spread.worst_group} "
                    f"({spread.worst_value:.4f})"
                )

        return evaluation

    def evaluate_by_district(self, observations: pd.DataFrame) -> FairnessEvaluationResult:
        """Use each administrative group's member regions as the protected set."""
        return self.evaluate_groups(
            observations,
            district_groups(observations, self.schema),
            dimension="district",
        )

    def evaluate_rings(
        self,
        observations: pd.DataFrame,
        graph: AdjacencyGraph,
        center: str,
        radii: Iterable[int],
    ) -> FairnessEvaluationResult:
        """Use concentric neighborhoods of ``center`` as protected sets."""
        rings = graph.rings(center, radii)
        return self.evaluate_groups(
            observations,
            {f"{center}_r{radius}": members for radius, members in rings.items()},
            dimension="ring",
        )
