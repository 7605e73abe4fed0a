"""Region adjacency graph and multi-hop neighborhood distances.

The graph is built once from a symmetric "do these two regions touch"
relation supplied by the geometry layer. From it we derive, for every pair of
regions, the minimum number of adjacency hops separating them, truncated at a
maximum radius M. Pairs further apart than M are unrelated: they have no
distance at all, which is different from having distance M.

Two equivalent derivations are provided:
- "bfs": a hop-limited breadth-first search from every region.
- "compose": repeated boolean composition of the within-(r-1)-hops relation
  with the 1-hop relation; a pair's distance is the first r relating it.

Self distance is 0 by assertion. The diagonal never takes part in the
composition, otherwise closed walks i -> j -> i would report i at distance 2
from itself.
"""

from typing import Callable, Iterable, Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger
from scipy import sparse


# Marker for pairs with no relation within the configured radius
UNRELATED = -1


class DistanceTable:
    """Minimum hop distances between regions, truncated at ``max_radius``.

    Attributes:
        codes: Region codes, in matrix order.
        max_radius: Radius M the table was computed for.
    """

    def __init__(self, codes: Sequence[str], matrix: np.ndarray, max_radius: int):
        if max_radius < 1:
            raise ValueError(f"max_radius must be >= 1, got {max_radius}")

        matrix = np.asarray(matrix, dtype=np.int32)
        n = len(codes)
        if matrix.shape != (n, n):
            raise ValueError(
                f"distance matrix must have shape ({n}, {n}), got {matrix.shape}"
            )
        if not np.array_equal(matrix, matrix.T):
            raise ValueError("distance matrix must be symmetric")
        if np.any(matrix > max_radius):
            raise ValueError(f"distance matrix has entries beyond max_radius={max_radius}")

        self.codes = list(codes)
        self.max_radius = max_radius
        self._index = {code: i for i, code in enumerate(self.codes)}
        if len(self._index) != n:
            raise ValueError("region codes must be unique")

        self._matrix = matrix.copy()
        np.fill_diagonal(self._matrix, 0)
        self._matrix.setflags(write=False)

    def __len__(self) -> int:
        return len(self.codes)

    def __repr__(self) -> str:
        return f"DistanceTable(n_regions={len(self)}, max_radius={self.max_radius})"

    @property
    def matrix(self) -> np.ndarray:
        """Read-only distance matrix, ``UNRELATED`` (-1) beyond ``max_radius``."""
        return self._matrix

    def index_of(self, code: str) -> int:
        try:
            return self._index[code]
        except KeyError:
            raise KeyError(f"Unknown region code: {code!r}") from None

    def distance(self, region_a: str, region_b: str) -> Optional[int]:
        """Hop distance between two regions, or None if unrelated within M."""
        value = int(self._matrix[self.index_of(region_a), self.index_of(region_b)])
        return None if value == UNRELATED else value

    def within(self, radius: int) -> np.ndarray:
        """Boolean matrix of pairs at distance <= radius (self included)."""
        if radius > self.max_radius:
            raise ValueError(
                f"radius {radius} exceeds the table's max_radius={self.max_radius}"
            )
        return (self._matrix != UNRELATED) & (self._matrix <= radius)

    def to_frame(self) -> pd.DataFrame:
        """Long format: one row per related ordered pair, self pairs excluded."""
        rows, cols = np.nonzero(self._matrix > 0)
        return pd.DataFrame(
            {
                "from_region": [self.codes[i] for i in rows],
                "to_region": [self.codes[j] for j in cols],
                "distance": self._matrix[rows, cols].astype(int),
            }
        )

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        max_radius: int,
        codes: Optional[Sequence[str]] = None,
    ) -> "DistanceTable":
        """Rebuild a table from its long format.

        Args:
            frame: Rows of (from_region, to_region, distance).
            max_radius: Radius M the rows were computed for.
            codes: Full list of regions. Defaults to the sorted set of codes
                appearing in ``frame``; isolated regions must be passed here.

        Returns:
            DistanceTable where pairs absent from ``frame`` are unrelated.
        """
        missing = {"from_region", "to_region", "distance"} - set(frame.columns)
        if missing:
            raise ValueError(f"distance frame is missing columns: {sorted(missing)}")

        if codes is None:
            codes = sorted(set(frame["from_region"]) | set(frame["to_region"]))
        index = {code: i for i, code in enumerate(codes)}

        matrix = np.full((len(codes), len(codes)), UNRELATED, dtype=np.int32)
        kept = frame[frame["distance"] <= max_radius]
        rows = kept["from_region"].map(index)
        cols = kept["to_region"].map(index)
        if rows.isna().any() or cols.isna().any():
            raise ValueError("distance frame references regions not listed in codes")

        matrix[rows.to_numpy(dtype=int), cols.to_numpy(dtype=int)] = kept["distance"].to_numpy()
        np.fill_diagonal(matrix, 0)
        return cls(codes, matrix, max_radius)


class AdjacencyGraph:
    """Undirected 1-hop adjacency between regions.

    Attributes:
        codes: Region codes, in matrix order.
    """

    def __init__(self, region_codes: Sequence[str], adjacency: np.ndarray):
        """Initialize the graph.

        Args:
            region_codes: Unique region codes.
            adjacency: Symmetric n x n boolean matrix. The diagonal is ignored.

        Raises:
            ValueError: If the matrix is not square, not symmetric or codes
                are not unique.
        """
        adjacency = np.asarray(adjacency, dtype=bool)
        n = len(region_codes)
        if adjacency.shape != (n, n):
            raise ValueError(
                f"adjacency must have shape ({n}, {n}), got {adjacency.shape}"
            )
        if not np.array_equal(adjacency, adjacency.T):
            raise ValueError("adjacency relation must be symmetric")

        self.codes = [str(code) for code in region_codes]
        self._index = {code: i for i, code in enumerate(self.codes)}
        if len(self._index) != n:
            raise ValueError("region codes must be unique")

        self._adjacency = adjacency.copy()
        np.fill_diagonal(self._adjacency, False)
        self._csr = sparse.csr_matrix(self._adjacency)

        logger.debug(
            f"AdjacencyGraph: {n} regions, {int(self._adjacency.sum()) // 2} edges"
        )

    @classmethod
    def from_predicate(
        cls,
        region_codes: Sequence[str],
        intersects: Callable[[str, str], bool],
    ) -> "AdjacencyGraph":
        """Build the graph by evaluating ``intersects`` on every unordered pair."""
        n = len(region_codes)
        adjacency = np.zeros((n, n), dtype=bool)
        for i in range(n):
            for j in range(i + 1, n):
                if intersects(region_codes[i], region_codes[j]):
                    adjacency[i, j] = adjacency[j, i] = True
        return cls(region_codes, adjacency)

    @classmethod
    def from_edges(
        cls,
        region_codes: Sequence[str],
        edges: Iterable[tuple[str, str]],
    ) -> "AdjacencyGraph":
        """Build the graph from undirected edges given as pairs of codes."""
        index = {str(code): i for i, code in enumerate(region_codes)}
        adjacency = np.zeros((len(index), len(index)), dtype=bool)
        for code_a, code_b in edges:
            try:
                i, j = index[str(code_a)], index[str(code_b)]
            except KeyError as e:
                raise ValueError(f"Edge references unknown region {e.args[0]!r}") from None
            adjacency[i, j] = adjacency[j, i] = True
        return cls(region_codes, adjacency)

    @classmethod
    def from_geodataframe(cls, gdf, code_column: str) -> "AdjacencyGraph":
        """Build the graph from polygons using the frame's spatial index.

        Args:
            gdf: geopandas GeoDataFrame with one polygon per region.
            code_column: Column holding the region codes.
        """
        codes = gdf[code_column].astype(str).tolist()
        left, right = gdf.sindex.query(gdf.geometry, predicate="intersects")
        edges = [(codes[i], codes[j]) for i, j in zip(left, right) if i != j]
        return cls.from_edges(codes, edges)

    @property
    def n_regions(self) -> int:
        return len(self.codes)

    @property
    def adjacency(self) -> np.ndarray:
        return self._adjacency.copy()

    def _compose(self, relation: np.ndarray) -> np.ndarray:
        """Extend a within-(r-1)-hops relation by one hop, diagonal excluded."""
        step = (relation.astype(np.int64) @ self._adjacency.astype(np.int64)) > 0
        extended = relation | step
        np.fill_diagonal(extended, False)
        return extended

    def hop_relation(self, radius: int) -> np.ndarray:
        """Boolean matrix of pairs related within ``radius`` hops (self excluded).

        Args:
            radius: Number of hops r >= 1.

        Returns:
            n x n boolean matrix; entry (i, j) is True iff 1 <= d(i, j) <= r.
        """
        if radius < 1:
            raise ValueError(f"radius must be >= 1, got {radius}")

        relation = self._adjacency.copy()
        for _ in range(radius - 1):
            relation = self._compose(relation)
        return relation

    def _bfs_from(self, source: int, max_radius: int) -> np.ndarray:
        """Hop distances from one region, ``UNRELATED`` beyond ``max_radius``."""
        row = np.full(self.n_regions, UNRELATED, dtype=np.int32)
        row[source] = 0
        frontier = np.array([source])

        for depth in range(1, max_radius + 1):
            reached = np.unique(self._csr[frontier].indices)
            reached = reached[row[reached] == UNRELATED]
            if reached.size == 0:
                break
            row[reached] = depth
            frontier = reached

        return row

    def _bfs_distances(self, max_radius: int) -> np.ndarray:
        return np.vstack([self._bfs_from(i, max_radius) for i in range(self.n_regions)])

    def _composed_distances(self, max_radius: int) -> np.ndarray:
        matrix = np.full((self.n_regions, self.n_regions), UNRELATED, dtype=np.int32)
        relation = self._adjacency.copy()

        for radius in range(1, max_radius + 1):
            newly_related = relation & (matrix == UNRELATED)
            if radius > 1 and not newly_related.any():
                break
            matrix[newly_related] = radius
            relation = self._compose(relation)

        np.fill_diagonal(matrix, 0)
        return matrix

    def distance_table(self, max_radius: int, method: str = "bfs") -> DistanceTable:
        """Compute minimum hop distances for all pairs up to ``max_radius``.

        Args:
            max_radius: Radius M >= 1.
            method: "bfs" (per-region breadth-first search) or "compose"
                (boolean matrix composition). Results are identical.

        Returns:
            DistanceTable with 0 on the diagonal and ``UNRELATED`` beyond M.
        """
        if max_radius < 1:
            raise ValueError(f"max_radius must be >= 1, got {max_radius}")

        if method == "bfs":
            matrix = self._bfs_distances(max_radius)
        elif method == "compose":
            matrix = self._composed_distances(max_radius)
        else:
            raise ValueError(f"method must be 'bfs' or 'compose', got '{method}'")

        n_related = int(np.count_nonzero(matrix > 0))
        logger.info(
            f"Computed hop distances for {self.n_regions} regions up to radius "
            f"{max_radius} ({method}): {n_related} related ordered pairs"
        )
        return DistanceTable(self.codes, matrix, max_radius)

    def neighbors(self, code: str, radius: int) -> list[str]:
        """Codes of the regions within ``radius`` hops of ``code``, self excluded."""
        if radius < 1:
            raise ValueError(f"radius must be >= 1, got {radius}")
        row = self._bfs_from(self._index_of(code), radius)
        return [self.codes[j] for j in np.flatnonzero(row > 0)]

    def rings(self, center: str, radii: Iterable[int]) -> dict[int, set[str]]:
        """Concentric neighborhoods around ``center``.

        Args:
            center: Region of interest.
            radii: Radii r >= 0 of the rings.

        Returns:
            Mapping radius -> codes within r hops, center included.
        """
        radii = sorted(set(radii))
        if not radii:
            return {}
        if radii[0] < 0:
            raise ValueError(f"radii must be non-negative, got {radii[0]}")

        row = self._bfs_from(self._index_of(center), max(radii[-1], 1))
        return {
            radius: {
                self.codes[j]
                for j in np.flatnonzero((row != UNRELATED) & (row <= radius))
            }
            for radius in radii
        }

    def _index_of(self, code: str) -> int:
        try:
            return self._index[code]
        except KeyError:
            raise KeyError(f"Unknown region code: {code!r}") from None
