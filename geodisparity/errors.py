"""Error types shared across the geodisparity package.

Recoverable conditions (missing smoothing signal, sparse fairness cells,
solver non-convergence) are reported on result objects. The exceptions below
cover the cases that must stop a computation before it produces output.
"""

from typing import Hashable, Sequence


class DegenerateGroupError(ValueError):
    """A protected-group indicator selects none or all of the observations."""

    def __init__(self, message: str, n_in_group: int, n_total: int):
        super().__init__(message)
        self.n_in_group = n_in_group
        self.n_total = n_total


class IdentifierCollisionError(ValueError):
    """Duplicate observation identifiers were found after a join."""

    def __init__(self, message: str, duplicates: dict[str, Sequence[Hashable]]):
        super().__init__(message)
        self.duplicates = duplicates


class SolverNonConvergenceWarning(UserWarning):
    """The mitigation solver stopped before reaching its tolerance."""
