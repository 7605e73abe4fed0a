"""Observation tables: loading, validation and identifier checks."""

from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Optional, Union

import pandas as pd
from loguru import logger

from geodisparity.errors import IdentifierCollisionError


@dataclass
class ObservationSchema:
    """Column names of an observation table.

    Attributes:
        id_column: Stable observation identifier.
        region_column: Region code of the observation.
        observed_column: Observed outcome (price per unit area).
        predicted_column: Model prediction of the outcome.
        group_column: Optional administrative group (e.g. district).
    """

    id_column: str = "obs_id"
    region_column: str = "region"
    observed_column: str = "observed"
    predicted_column: str = "predicted"
    group_column: str = "district"

    @property
    def required_columns(self) -> tuple[str, ...]:
        return (
            self.id_column,
            self.region_column,
            self.observed_column,
            self.predicted_column,
        )


def validate_observations(
    observations: pd.DataFrame,
    schema: ObservationSchema,
) -> pd.DataFrame:
    """Check that an observation table can be consumed by the core.

    Args:
        observations: Observation table.
        schema: Column names.

    Returns:
        The table with the region column cast to ``str``.

    Raises:
        ValueError: If required columns are missing or identifiers/regions
            are null.
        IdentifierCollisionError: If identifiers are not unique.
    """
    missing = [c for c in schema.required_columns if c not in observations.columns]
    if missing:
        raise ValueError(f"observation table is missing columns: {missing}")

    for column in (schema.id_column, schema.region_column):
        n_null = int(observations[column].isna().sum())
        if n_null:
            raise ValueError(f"column '{column}' has {n_null} null values")

    duplicates = find_duplicate_ids(observations, schema.id_column)
    if duplicates:
        raise IdentifierCollisionError(
            f"{len(duplicates)} duplicate values in '{schema.id_column}'",
            duplicates={"observations": duplicates},
        )

    observations = observations.copy()
    observations[schema.region_column] = observations[schema.region_column].astype(str)
    return observations


def load_observations(
    path: Union[str, Path],
    schema: Optional[ObservationSchema] = None,
) -> pd.DataFrame:
    """Load and validate an observation table from CSV or Parquet.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    schema = schema or ObservationSchema()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Observation file not found: {path}")

    if path.suffix == ".parquet":
        observations = pd.read_parquet(path)
    else:
        observations = pd.read_csv(path, dtype={schema.region_column: str})

    logger.info(f"Loaded {len(observations)} observations from {path}")
    return validate_observations(observations, schema)


def find_duplicate_ids(frame: pd.DataFrame, id_column: str) -> list[Hashable]:
    """Identifiers occurring more than once in ``frame[id_column]``."""
    counts = frame[id_column].value_counts()
    return counts[counts > 1].index.tolist()


def join_mitigation_outputs(
    base: pd.DataFrame,
    scenarios: dict[str, pd.DataFrame],
    id_column: str = "obs_id",
) -> pd.DataFrame:
    """Join per-scenario mitigation outputs back onto the source rows.

    Every scenario frame is keyed on ``id_column``; its other columns are
    suffixed with ``_<scenario>``. Source rows without a match in a scenario
    keep NaN for that scenario's columns.

    Args:
        base: Source observation rows.
        scenarios: Mapping scenario name -> mitigation output.
        id_column: Observation identifier.

    Returns:
        Wide table with one row per source observation.

    Raises:
        IdentifierCollisionError: If the base table or any scenario holds
            duplicate identifiers. All offending keys are reported.
    """
    duplicates = {}
    base_duplicates = find_duplicate_ids(base, id_column)
    if base_duplicates:
        duplicates["base"] = base_duplicates
    for name, frame in scenarios.items():
        scenario_duplicates = find_duplicate_ids(frame, id_column)
        if scenario_duplicates:
            duplicates[name] = scenario_duplicates

    if duplicates:
        summary = ", ".join(f"{name}: {len(keys)}" for name, keys in duplicates.items())
        raise IdentifierCollisionError(
            f"Duplicate identifiers in '{id_column}' ({summary})",
            duplicates=duplicates,
        )

    joined = base
    for name, frame in scenarios.items():
        renamed = frame.rename(
            columns={c: f"{c}_{name}" for c in frame.columns if c != id_column}
        )
        joined = joined.merge(renamed, on=id_column, how="left", validate="one_to_one")
        logger.debug(f"Joined mitigation scenario '{name}' ({len(frame)} rows)")

    return joined


def align_scores(
    observations: pd.DataFrame,
    scores: pd.DataFrame,
    id_column: str = "obs_id",
    prefix: str = "score_",
) -> tuple[pd.DataFrame, list[str]]:
    """Attach per-class scores to observations by identifier.

    Observations without a score row are dropped with a warning.

    Args:
        observations: Validated observation table.
        scores: One row per observation with ``id_column`` and class score
            columns named ``<prefix>1`` .. ``<prefix>K``.
        id_column: Observation identifier.
        prefix: Prefix of the score columns.

    Returns:
        Tuple of (aligned table, score column names in class order).

    Raises:
        ValueError: If ``scores`` has no identifier or score column.
        IdentifierCollisionError: If ``scores`` holds duplicate identifiers.
    """
    if id_column not in scores.columns:
        raise ValueError(f"scores table has no '{id_column}' column")
    score_columns = sorted(
        (c for c in scores.columns if c.startswith(prefix)),
        key=lambda c: int(c[len(prefix):]),
    )
    if not score_columns:
        raise ValueError(f"scores table has no '{prefix}*' columns")

    duplicates = find_duplicate_ids(scores, id_column)
    if duplicates:
        raise IdentifierCollisionError(
            f"{len(duplicates)} duplicate values in '{id_column}' of the scores table",
            duplicates={"scores": duplicates},
        )

    aligned = observations.merge(
        scores[[id_column] + score_columns], on=id_column, how="inner", validate="one_to_one"
    )
    if len(aligned) < len(observations):
        logger.warning(f"{len(observations) - len(aligned)} observations have no scores")
    return aligned, score_columns
