"""Configuration for neighborhood graphs and spatial smoothing."""

from dataclasses import dataclass, field


@dataclass
class SpatialConfig:
    """Configuration for the adjacency graph and the spatial smoother.

    Attributes:
        max_radius: Maximum hop radius M for which distances are computed.
            Pairs further apart are treated as unrelated.
        smoothing_radii: Radii m at which signals are smoothed.
        exponent: Default decay exponent p of the inverse-distance weights.
        distance_method: How hop distances are derived ("bfs" or "compose").
    """

    max_radius: int = 30
    smoothing_radii: list[int] = field(default_factory=lambda: [0, 1, 2, 3, 5])
    exponent: float = 1.0
    distance_method: str = "bfs"

    VALID_METHODS: tuple[str, ...] = ("bfs", "compose")

    def __post_init__(self):
        """Validate configuration values."""
        if self.max_radius < 1:
            raise ValueError(f"max_radius must be >= 1, got {self.max_radius}")

        for radius in self.smoothing_radii:
            if not 0 <= radius <= self.max_radius:
                raise ValueError(
                    f"smoothing_radii must be in [0, {self.max_radius}], got {radius}"
                )

        if self.exponent < 0:
            raise ValueError(f"exponent must be non-negative, got {self.exponent}")

        if self.distance_method not in self.VALID_METHODS:
            raise ValueError(
                f"distance_method must be one of {self.VALID_METHODS}, "
                f"got '{self.distance_method}'"
            )
