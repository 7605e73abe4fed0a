"""Neighborhood graphs and spatial smoothing over regions.

This module provides:
- AdjacencyGraph: 1-hop region adjacency and multi-hop neighborhoods
- DistanceTable: minimum hop distances truncated at a maximum radius
- SpatialSmoother: inverse-distance weighted local averages of region signals
- Calibration summaries used as smoothing signals
"""

from .config import SpatialConfig
from .adjacency import UNRELATED, AdjacencyGraph, DistanceTable
from .smoothing import SmoothingResult, SpatialSmoother
from .calibration import region_summary, relative_error

__all__ = [
    # Config
    "SpatialConfig",
    # Graph
    "UNRELATED",
    "AdjacencyGraph",
    "DistanceTable",
    # Smoothing
    "SmoothingResult",
    "SpatialSmoother",
    # Calibration
    "region_summary",
    "relative_error",
]
