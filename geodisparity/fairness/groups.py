"""Protected-group indicators derived from region membership."""

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from geodisparity.data.observations import ObservationSchema
from geodisparity.spatial.adjacency import AdjacencyGraph


def region_membership(
    observations: pd.DataFrame,
    regions: Iterable[str],
    schema: Optional[ObservationSchema] = None,
) -> np.ndarray:
    """Boolean indicator of observations located in one of ``regions``."""
    schema = schema or ObservationSchema()
    members = {str(r) for r in regions}
    return observations[schema.region_column].astype(str).isin(members).to_numpy()


def district_groups(
    observations: pd.DataFrame,
    schema: Optional[ObservationSchema] = None,
) -> dict[str, set[str]]:
    """Member regions of every administrative group found in the table."""
    schema = schema or ObservationSchema()
    if schema.group_column not in observations.columns:
        raise ValueError(f"observation table has no '{schema.group_column}' column")

    grouped = observations.groupby(schema.group_column)[schema.region_column]
    return {
        str(group): set(regions.astype(str).unique())
        for group, regions in grouped
    }


def ring_indicators(
    observations: pd.DataFrame,
    graph: AdjacencyGraph,
    center: str,
    radii: Iterable[int],
    schema: Optional[ObservationSchema] = None,
) -> dict[int, np.ndarray]:
    """One indicator per radius: observations within r hops of ``center``."""
    return {
        radius: region_membership(observations, members, schema)
        for radius, members in graph.rings(center, radii).items()
    }
