"""Spatial disparity and fairness diagnostics over geographic micro-regions."""

__version__ = "0.1.0"
