"""Configuration for Demographic Parity mitigation."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MitigationConfig:
    """Configuration of the DP mitigation solver.

    Attributes:
        temperature: Temperature c of the softmax smooth maximum. Smaller
            values approach the hard arg-max.
        sigma: Upper bound of the uniform jitter added to scores at inference.
        epsilon: Weight of the penalty on the size of the corrections.
        max_iter: Iteration cap of the solver.
        tol: Convergence tolerance of the solver.
        seed: Seed of the inference jitter.
        timeout: Optional wall-clock limit of one solve, in seconds.
    """

    temperature: float = 0.005
    sigma: float = 1e-5
    epsilon: float = 1e-3
    max_iter: int = 1000
    tol: float = 1e-10
    seed: int = 42
    timeout: Optional[float] = None

    def __post_init__(self):
        """Validate configuration values."""
        if self.temperature <= 0:
            raise ValueError(f"temperature must be positive, got {self.temperature}")
        if self.sigma < 0:
            raise ValueError(f"sigma must be non-negative, got {self.sigma}")
        if self.epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {self.epsilon}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        if self.tol <= 0:
            raise ValueError(f"tol must be positive, got {self.tol}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
