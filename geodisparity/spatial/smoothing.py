"""Inverse-distance weighted smoothing of per-region signals.

For a target region i and a radius m, the smoothed value is the weighted mean
of the signal over every region j with hop distance d(i, j) <= m:

    weight(i, j) = 1 / (1 + d(i, j))^p

The target itself has d = 0 and therefore weight 1. Regions with a missing
signal are left out of both sums. A target with no defined signal within m is
reported as missing rather than filled in.

The numerator and denominator may use different exponents. The relative
error call site weights the numerator with p=2 but normalizes by the p=1
weight sum.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np
import pandas as pd
from loguru import logger

from .adjacency import DistanceTable
from .config import SpatialConfig


@dataclass
class SmoothingResult:
    """Output of one smoothing pass.

    Attributes:
        values: Smoothed value per region code, NaN where missing.
        support: Number of regions with a defined signal that contributed.
        missing: Codes of the regions with no defined signal within the radius.
        radius: Radius m used.
        exponent: Exponent of the numerator weights.
        denominator_exponent: Exponent of the denominator weights.
    """

    values: pd.Series
    support: pd.Series
    radius: int
    exponent: float
    denominator_exponent: float
    missing: list[str] = field(default_factory=list)

    @property
    def has_missing(self) -> bool:
        return bool(self.missing)


class SpatialSmoother:
    """Smooths region-indexed signals over a precomputed distance table."""

    def __init__(
        self,
        distance_table: DistanceTable,
        config: Optional[SpatialConfig] = None,
    ):
        """Initialize the smoother.

        Args:
            distance_table: Hop distances between regions.
            config: Spatial configuration. Defaults to ``SpatialConfig()`` with
                ``max_radius`` taken from the distance table.
        """
        self.distance_table = distance_table
        self.config = config or SpatialConfig(
            max_radius=distance_table.max_radius,
            smoothing_radii=[0, 1],
        )

    def smooth(
        self,
        signal: pd.Series,
        radius: int,
        exponent: Optional[float] = None,
        denominator_exponent: Optional[float] = None,
    ) -> SmoothingResult:
        """Smooth a signal within ``radius`` hops.

        Args:
            signal: Values indexed by region code. Regions absent from the
                index, or with NaN values, have a missing signal.
            radius: Radius m, 0 <= m <= max_radius of the distance table.
            exponent: Decay exponent p of the numerator weights. Defaults to
                the configured exponent.
            denominator_exponent: Exponent of the weights summed in the
                denominator. Defaults to ``exponent``.

        Returns:
            SmoothingResult indexed by the distance table's region codes.
        """
        table = self.distance_table
        if not 0 <= radius <= table.max_radius:
            raise ValueError(f"radius must be in [0, {table.max_radius}], got {radius}")

        p = self.config.exponent if exponent is None else exponent
        q = p if denominator_exponent is None else denominator_exponent
        if p < 0 or q < 0:
            raise ValueError(f"exponents must be non-negative, got {p} and {q}")

        unknown = signal.index.difference(pd.Index(table.codes))
        if len(unknown) > 0:
            logger.warning(
                f"Ignoring signal for {len(unknown)} regions absent from the distance table"
            )

        values = signal.reindex(table.codes).to_numpy(dtype=np.float64)
        defined = ~np.isnan(values)

        mask = table.within(radius) & defined[np.newaxis, :]
        hops = np.where(mask, table.matrix, 0).astype(np.float64)
        numerator_weights = np.where(mask, (1.0 + hops) ** -p, 0.0)
        denominator_weights = np.where(mask, (1.0 + hops) ** -q, 0.0)

        numerator = numerator_weights @ np.where(defined, values, 0.0)
        denominator = denominator_weights.sum(axis=1)
        support = mask.sum(axis=1)

        smoothed = np.full(len(table), np.nan)
        has_support = support > 0
        smoothed[has_support] = numerator[has_support] / denominator[has_support]

        missing = [code for code, ok in zip(table.codes, has_support) if not ok]
        if missing:
            logger.warning(
                f"{len(missing)} regions have no defined signal within radius {radius}"
            )

        logger.debug(
            f"Smoothed signal '{signal.name}' at radius {radius} (p={p}, q={q})"
        )

        return SmoothingResult(
            values=pd.Series(smoothed, index=table.codes, name=signal.name),
            support=pd.Series(support, index=table.codes, name="support"),
            radius=radius,
            exponent=p,
            denominator_exponent=q,
            missing=missing,
        )

    def smooth_many(
        self,
        signal: pd.Series,
        radii: Optional[Iterable[int]] = None,
        **kwargs,
    ) -> dict[int, SmoothingResult]:
        """Smooth a signal at several radii (defaults to the configured radii)."""
        radii = self.config.smoothing_radii if radii is None else radii
        return {radius: self.smooth(signal, radius, **kwargs) for radius in radii}

    def smooth_prices(self, prices: pd.Series, radius: int) -> SmoothingResult:
        """Smooth mean price per unit area (p=1, missing regions excluded)."""
        return self.smooth(prices, radius, exponent=1.0)

    def smooth_income(self, income: pd.Series, radius: int) -> SmoothingResult:
        """Smooth income level (p=1, missing regions excluded)."""
        return self.smooth(income, radius, exponent=1.0)

    def smooth_counts(self, counts: pd.Series, radius: int) -> SmoothingResult:
        """Smooth observation counts (p=1).

        Regions without any observation have a count of zero, not a missing
        count, so they are filled with 0 before smoothing.
        """
        counts = counts.reindex(self.distance_table.codes).fillna(0.0)
        return self.smooth(counts, radius, exponent=1.0)

    def smooth_relative_error(self, errors: pd.Series, radius: int) -> SmoothingResult:
        """Smooth relative pricing error.

        Numerator weights use the squared distance decay (p=2) while the
        denominator sums the p=1 weights.
        """
        return self.smooth(errors, radius, exponent=2.0, denominator_exponent=1.0)
