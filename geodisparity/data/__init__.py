"""Observation tables and persisted distance tables."""

from .observations import (
    ObservationSchema,
    align_scores,
    find_duplicate_ids,
    join_mitigation_outputs,
    load_observations,
    validate_observations,
)
from .distances import load_distance_table, load_edges, save_distance_table

__all__ = [
    "ObservationSchema",
    "align_scores",
    "find_duplicate_ids",
    "join_mitigation_outputs",
    "load_observations",
    "validate_observations",
    "load_distance_table",
    "load_edges",
    "save_distance_table",
]
