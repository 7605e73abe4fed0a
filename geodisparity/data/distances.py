"""Persistence of adjacency edge lists and distance tables."""

import json
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd
from loguru import logger

from geodisparity.spatial.adjacency import AdjacencyGraph, DistanceTable


def load_edges(
    path: Union[str, Path],
    region_codes: Optional[Sequence[str]] = None,
) -> AdjacencyGraph:
    """Build an adjacency graph from an edge-list CSV.

    The file has one row per touching pair, with columns ``region_a`` and
    ``region_b``. Each pair only needs to be listed once.

    Args:
        path: Edge-list CSV.
        region_codes: All regions, including isolated ones. Defaults to the
            sorted set of codes appearing in the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Edge list not found: {path}")

    edges = pd.read_csv(path, dtype=str)
    missing = {"region_a", "region_b"} - set(edges.columns)
    if missing:
        raise ValueError(f"edge list is missing columns: {sorted(missing)}")

    if region_codes is None:
        region_codes = sorted(set(edges["region_a"]) | set(edges["region_b"]))

    logger.info(f"Loaded {len(edges)} edges over {len(region_codes)} regions from {path}")
    return AdjacencyGraph.from_edges(
        region_codes, zip(edges["region_a"], edges["region_b"])
    )


def save_distance_table(table: DistanceTable, output_path: Union[str, Path]) -> None:
    """Save a distance table as CSV rows (from_region, to_region, distance).

    A JSON sidecar next to the CSV keeps the radius and the full region list,
    so that regions with no relation within the radius survive a round trip.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    table.to_frame().to_csv(output_path, index=False)
    with open(output_path.with_suffix(".json"), "w") as f:
        json.dump({"max_radius": table.max_radius, "codes": table.codes}, f, indent=2)

    logger.info(f"Saved distance table ({len(table)} regions) to {output_path}")


def load_distance_table(
    path: Union[str, Path],
    max_radius: Optional[int] = None,
) -> DistanceTable:
    """Load a distance table saved with ``save_distance_table``.

    Args:
        path: Distance table CSV.
        max_radius: Radius of the table. Required if the JSON sidecar is
            absent; when smaller than the stored radius, further pairs are
            dropped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Distance table not found: {path}")

    codes = None
    stored_radius = None
    sidecar = path.with_suffix(".json")
    if sidecar.exists():
        with open(sidecar, "r") as f:
            meta = json.load(f)
        codes = meta["codes"]
        stored_radius = meta["max_radius"]

    radius = max_radius if max_radius is not None else stored_radius
    if radius is None:
        raise ValueError(f"max_radius is required: no metadata found next to {path}")
    if stored_radius is not None and radius > stored_radius:
        raise ValueError(
            f"requested max_radius={radius} exceeds the stored radius {stored_radius}"
        )

    frame = pd.read_csv(path, dtype={"from_region": str, "to_region": str})
    return DistanceTable.from_frame(frame, max_radius=radius, codes=codes)
