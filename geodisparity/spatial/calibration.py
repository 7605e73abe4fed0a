"""Per-region calibration summaries used as smoothing signals."""

from typing import Optional

import numpy as np
import pandas as pd

from geodisparity.data.observations import ObservationSchema


def relative_error(observations: pd.DataFrame, schema: ObservationSchema) -> pd.Series:
    """Relative pricing error (predicted - observed) / observed per observation.

    Observations with a zero observed value get NaN.
    """
    observed = observations[schema.observed_column].astype(np.float64)
    predicted = observations[schema.predicted_column].astype(np.float64)
    return ((predicted - observed) / observed.replace(0.0, np.nan)).rename("relative_error")


def region_summary(
    observations: pd.DataFrame,
    schema: Optional[ObservationSchema] = None,
    regions: Optional[list[str]] = None,
) -> pd.DataFrame:
    """Aggregate observations per region.

    Args:
        observations: Observation table.
        schema: Column names.
        regions: Regions to report. Regions without observations get
            ``n_obs = 0`` and NaN means. Defaults to the observed regions.

    Returns:
        DataFrame indexed by region code with columns n_obs, mean_observed,
        mean_predicted, mean_relative_error.
    """
    schema = schema or ObservationSchema()
    frame = pd.DataFrame(
        {
            "region": observations[schema.region_column].astype(str),
            "observed": observations[schema.observed_column],
            "predicted": observations[schema.predicted_column],
            "relative_error": relative_error(observations, schema),
        }
    )

    summary = frame.groupby("region").agg(
        n_obs=("observed", "size"),
        mean_observed=("observed", "mean"),
        mean_predicted=("predicted", "mean"),
        mean_relative_error=("relative_error", "mean"),
    )

    if regions is not None:
        summary = summary.reindex([str(r) for r in regions])
        summary["n_obs"] = summary["n_obs"].fillna(0).astype(int)

    summary.index.name = "region"
    return summary
