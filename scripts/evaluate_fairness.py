#!/usr/bin/env python3
"""Spatial smoothing and fairness diagnostics for a predictive model.

Writes per-region smoothed signals, per-district DP/EO discrepancies and,
when a center region is given, DP/EO over concentric rings around it.

Usage:
    python scripts/evaluate_fairness.py --observations data/transactions.csv --edges data/iris_edges.csv --output_dir outputs/fairness
    python scripts/evaluate_fairness.py --observations data/transactions.csv --edges data/iris_edges.csv --center 751010101 --radii 1 2 5 10
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd
from loguru import logger

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from geodisparity.data import load_distance_table, load_edges, load_observations
from geodisparity.fairness import SpatialFairnessEvaluator
from geodisparity.pipeline import (
    build_configs,
    load_config,
    record_run_inputs,
    setup_logging,
    setup_output_directory,
)
from geodisparity.spatial import SpatialSmoother, region_summary


def smooth_region_signals(summary, smoother, radii) -> pd.DataFrame:
    """Smoothed price, relative error and count per region at each radius."""
    columns = {}
    for radius in radii:
        columns[f"price_r{radius}"] = smoother.smooth_prices(summary["mean_observed"], radius).values
        columns[f"rel_error_r{radius}"] = smoother.smooth_relative_error(
            summary["mean_relative_error"], radius
        ).values
        columns[f"count_r{radius}"] = smoother.smooth_counts(summary["n_obs"], radius).values
    return pd.DataFrame(columns)


def main():
    parser = argparse.ArgumentParser(description="Evaluate spatial fairness of predictions")
    parser.add_argument(
        "--config",
        type=str,
        default="experiments/configs/paris_default.yaml",
        help="Path to configuration YAML file",
    )
    parser.add_argument("--observations", type=str, required=True, help="Observation CSV/Parquet")
    parser.add_argument("--edges", type=str, required=True, help="Region edge-list CSV")
    parser.add_argument(
        "--distances",
        type=str,
        default=None,
        help="Precomputed distance table (computed from --edges if omitted)",
    )
    parser.add_argument("--output_dir", type=str, default="outputs/fairness")
    parser.add_argument("--center", type=str, default=None, help="Region of interest for rings")
    parser.add_argument("--radii", type=int, nargs="+", default=[1, 2, 3, 5])
    args = parser.parse_args()

    config = load_config(args.config) if Path(args.config).exists() else {}
    configs = build_configs(config)
    output_dir = setup_output_directory(args.output_dir, config=config)
    setup_logging(output_dir, log_prefix="fairness")

    record_run_inputs(output_dir, "Spatial fairness evaluation", {
        "observations": args.observations,
        "max_radius": configs["spatial"].max_radius,
        "n_classes": configs["fairness"].n_classes,
        "center": args.center,
    })

    schema = configs["data"]
    observations = load_observations(args.observations, schema)
    graph = load_edges(args.edges)

    if args.distances:
        table = load_distance_table(args.distances)
    else:
        table = graph.distance_table(
            configs["spatial"].max_radius, method=configs["spatial"].distance_method
        )

    # Smoothed calibration signals
    summary = region_summary(observations, schema, regions=table.codes)
    smoother = SpatialSmoother(table, configs["spatial"])
    smoothed = smooth_region_signals(summary, smoother, configs["spatial"].smoothing_radii)
    summary.join(smoothed).to_csv(output_dir / "region_smoothing.csv")

    # Fairness by district and by ring
    evaluator = SpatialFairnessEvaluator(configs["fairness"], schema=schema)
    results = {}
    if schema.group_column in observations.columns:
        results["district"] = evaluator.evaluate_by_district(observations)
    if args.center is not None:
        results["ring"] = evaluator.evaluate_rings(observations, graph, args.center, args.radii)

    report = {"cutoffs": evaluator.binning.cutoffs.tolist()} if evaluator.binning else {}
    for dimension, result in results.items():
        result.to_frame().to_csv(output_dir / f"{dimension}_fairness.csv", index=False)
        report[dimension] = {
            "skipped_groups": result.skipped_groups,
            "degenerate_groups": result.degenerate_groups,
        }

    with open(output_dir / "fairness_report.json", "w") as f:
        json.dump(report, f, indent=2)

    logger.info(f"Fairness evaluation complete! Results in {output_dir}")


if __name__ == "__main__":
    main()
