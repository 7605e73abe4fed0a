"""Configuration for spatial fairness evaluation."""

from dataclasses import dataclass, field


@dataclass
class FairnessConfig:
    """Configuration for Demographic Parity / Equalized Odds evaluation.

    Attributes:
        n_classes: Number K of quantile classes of the outcome.
        metrics: Which discrepancy statistics to compute.
            Options: "demographic_parity", "equalized_odds".
        include_complement: Also take the max over the complement of the
            protected group, not only over the group itself.
        min_samples_per_group: Minimum observations required per group.
        baseline_repeats: Number of uniform random predictors drawn for the
            null-model reference. 0 disables the baseline.
        seed: Seed of the random baseline.
    """

    n_classes: int = 5
    metrics: list[str] = field(
        default_factory=lambda: ["demographic_parity", "equalized_odds"]
    )
    include_complement: bool = False
    min_samples_per_group: int = 1
    baseline_repeats: int = 1
    seed: int = 42

    # Valid options for validation
    VALID_METRICS: tuple[str, ...] = ("demographic_parity", "equalized_odds")

    def __post_init__(self):
        """Validate configuration values."""
        if self.n_classes < 2:
            raise ValueError(f"n_classes must be >= 2, got {self.n_classes}")

        if not self.metrics:
            raise ValueError("metrics cannot be empty")
        for metric in self.metrics:
            if metric not in self.VALID_METRICS:
                raise ValueError(
                    f"metrics must be from {self.VALID_METRICS}, got '{metric}'"
                )

        if self.min_samples_per_group < 1:
            raise ValueError(
                f"min_samples_per_group must be >= 1, got {self.min_samples_per_group}"
            )

        if self.baseline_repeats < 0:
            raise ValueError(
                f"baseline_repeats must be non-negative, got {self.baseline_repeats}"
            )
