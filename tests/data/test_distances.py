"""Tests for persisted edge lists and distance tables."""

import numpy as np
import pandas as pd
import pytest

from geodisparity.data.distances import load_distance_table, load_edges, save_distance_table
from geodisparity.spatial.adjacency import AdjacencyGraph


def write_edges(path, rows) -> None:
    pd.DataFrame(rows, columns=["region_a", "region_b"]).to_csv(path, index=False)


class TestLoadEdges:
    """Tests for load_edges."""

    def test_load(self, tmp_path):
        """Test building a graph from an edge-list CSV."""
        path = tmp_path / "edges.csv"
        write_edges(path, [("01", "02"), ("02", "03")])

        graph = load_edges(path)
        assert graph.codes == ["01", "02", "03"]
        assert graph.distance_table(2).distance("01", "03") == 2

    def test_isolated_regions(self, tmp_path):
        """Test that isolated regions can be listed explicitly."""
        path = tmp_path / "edges.csv"
        write_edges(path, [("a", "b")])
        graph = load_edges(path, region_codes=["a", "b", "c"])
        assert graph.n_regions == 3

    def test_missing_columns_raise_error(self, tmp_path):
        """Test that both endpoint columns are required."""
        path = tmp_path / "edges.csv"
        pd.DataFrame({"from": ["a"], "to": ["b"]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="missing columns"):
            load_edges(path)


class TestDistanceTablePersistence:
    """Tests for saving and loading distance tables."""

    def test_round_trip(self, tmp_path):
        """Test that a saved table loads back identically, isolated regions included."""
        graph = AdjacencyGraph.from_edges(["a", "b", "c", "d"], [("a", "b"), ("b", "c")])
        table = graph.distance_table(max_radius=3)
        path = tmp_path / "distances.csv"

        save_distance_table(table, path)
        loaded = load_distance_table(path)

        assert loaded.codes == table.codes
        assert loaded.max_radius == 3
        np.testing.assert_array_equal(loaded.matrix, table.matrix)
        assert loaded.distance("a", "d") is None

    def test_file_layout(self, tmp_path):
        """Test one row per related ordered pair."""
        graph = AdjacencyGraph.from_edges(["a", "b", "c"], [("a", "b"), ("b", "c")])
        path = tmp_path / "distances.csv"
        save_distance_table(graph.distance_table(max_radius=2), path)

        frame = pd.read_csv(path)
        assert list(frame.columns) == ["from_region", "to_region", "distance"]
        assert len(frame) == 6

    def test_smaller_radius_on_load(self, tmp_path):
        """Test that loading with a smaller radius drops further pairs."""
        graph = AdjacencyGraph.from_edges(["a", "b", "c"], [("a", "b"), ("b", "c")])
        path = tmp_path / "distances.csv"
        save_distance_table(graph.distance_table(max_radius=2), path)

        loaded = load_distance_table(path, max_radius=1)
        assert loaded.distance("a", "c") is None

    def test_larger_radius_on_load_raises_error(self, tmp_path):
        """Test that a table cannot be loaded beyond its stored radius."""
        graph = AdjacencyGraph.from_edges(["a", "b"], [("a", "b")])
        path = tmp_path / "distances.csv"
        save_distance_table(graph.distance_table(max_radius=2), path)
        with pytest.raises(ValueError, match="exceeds the stored radius"):
            load_distance_table(path, max_radius=5)

    def test_missing_metadata_requires_radius(self, tmp_path):
        """Test that a bare CSV needs an explicit radius."""
        path = tmp_path / "distances.csv"
        pd.DataFrame({
            "from_region": ["a", "b"],
            "to_region": ["b", "a"],
            "distance": [1, 1],
        }).to_csv(path, index=False)

        with pytest.raises(ValueError, match="max_radius is required"):
            load_distance_table(path)
        assert load_distance_table(path, max_radius=1).distance("a", "b") == 1
