#!/usr/bin/env python3
"""Compute the hop-distance table of a region adjacency edge list.

Usage:
    python scripts/compute_distances.py --edges data/iris_edges.csv --output outputs/distances.csv
    python scripts/compute_distances.py --edges data/iris_edges.csv --output outputs/distances.csv --max_radius 10
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from geodisparity.data import load_edges, save_distance_table
from geodisparity.pipeline import build_configs, load_config, merge_config_with_args, setup_logging


def main():
    parser = argparse.ArgumentParser(description="Compute region hop distances")
    parser.add_argument(
        "--config",
        type=str,
        default="experiments/configs/paris_default.yaml",
        help="Path to configuration YAML file",
    )
    parser.add_argument("--edges", type=str, required=True, help="Edge-list CSV")
    parser.add_argument("--output", type=str, required=True, help="Output distance CSV")
    parser.add_argument("--max_radius", type=int, default=None, help="Maximum radius M")
    parser.add_argument(
        "--method",
        type=str,
        choices=["bfs", "compose"],
        default=None,
        help="Distance derivation method",
    )
    args = parser.parse_args()

    output_path = Path(args.output)
    setup_logging(output_path.parent, log_prefix="distances")

    config_path = Path(args.config)
    if config_path.exists():
        config = load_config(str(config_path))
        logger.info(f"Loaded config from {config_path}")
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")
        config = {}

    config = merge_config_with_args(
        config,
        args,
        {"max_radius": "spatial.max_radius", "method": "spatial.distance_method"},
    )
    spatial = build_configs(config)["spatial"]

    graph = load_edges(args.edges)
    table = graph.distance_table(spatial.max_radius, method=spatial.distance_method)
    save_distance_table(table, output_path)

    logger.info("Distance computation complete!")


if __name__ == "__main__":
    main()
