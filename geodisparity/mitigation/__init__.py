"""Demographic Parity mitigation of multi-class predictive scores."""

from .config import MitigationConfig
from .dp_mitigator import (
    DPMitigator,
    MitigatedPrediction,
    MitigationResult,
    smooth_max,
    softmax,
)
from .unfairness import class_histogram, unfairness

__all__ = [
    "MitigationConfig",
    "DPMitigator",
    "MitigatedPrediction",
    "MitigationResult",
    "smooth_max",
    "softmax",
    "class_histogram",
    "unfairness",
]
