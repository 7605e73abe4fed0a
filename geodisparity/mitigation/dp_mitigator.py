"""Demographic Parity mitigation of multi-class scores.

Each observation carries K class scores and a binary side s (0 or 1) of a
protected-group split with prevalence p_s. We look for non-negative class
corrections (lambda, beta) such that the corrected scores

    val = p_s * score - (2s - 1) * (lambda - beta)

give both sides the same predicted-class proportions. The arg-max defining the
predicted class is replaced by a softmax smooth maximum of temperature c,
which makes the objective differentiable:

    sum_s mean_{i in s} smax_c(val_i) + epsilon * sum(lambda + beta)

The problem is solved with SLSQP under the constraint [lambda, beta] >= 0.

References:
- Denis et al. (2021). "Fairness guarantee in multi-class classification"
  - https://arxiv.org/abs/2109.13642
"""

import time
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger
from scipy.optimize import minimize

from geodisparity.errors import DegenerateGroupError, SolverNonConvergenceWarning
from geodisparity.fairness.metrics import as_group_mask

from .config import MitigationConfig


@dataclass
class MitigationResult:
    """Outcome of one mitigation solve.

    Attributes:
        lambda_: Correction per class (length K), >= 0.
        beta: Correction per class (length K), >= 0.
        prevalence: Empirical prevalence (p_0, p_1) of the two sides.
        converged: Whether the solver reached its tolerance.
        message: Solver termination message.
        n_iter: Number of solver iterations.
        objective: Objective value at the returned iterate.
    """

    lambda_: np.ndarray
    beta: np.ndarray
    prevalence: tuple[float, float]
    converged: bool
    message: str
    n_iter: int
    objective: float

    @property
    def correction(self) -> np.ndarray:
        """lambda - beta."""
        return self.lambda_ - self.beta


@dataclass
class MitigatedPrediction:
    """Fairness-adjusted predictions.

    Attributes:
        classes: Predicted class per observation, 1..K.
        raw_scores: Corrected scores before softmax, shape (n, K).
        probabilities: Row-wise softmax of ``raw_scores``, shape (n, K).
    """

    classes: np.ndarray
    raw_scores: np.ndarray
    probabilities: np.ndarray

    def to_frame(self, ids: Sequence, id_column: str = "obs_id") -> pd.DataFrame:
        """Per-observation rows: id, mitigated_class, prob_1..prob_K."""
        if len(ids) != len(self.classes):
            raise ValueError(
                f"got {len(ids)} identifiers for {len(self.classes)} predictions"
            )
        frame = pd.DataFrame({id_column: list(ids), "mitigated_class": self.classes})
        for k in range(self.probabilities.shape[1]):
            frame[f"prob_{k + 1}"] = self.probabilities[:, k]
        return frame


class _SolveTimeout(Exception):
    def __init__(self, xk: np.ndarray):
        super().__init__("mitigation solve timed out")
        self.xk = xk


def softmax(values: np.ndarray, temperature: float = 1.0) -> np.ndarray:
    """Row-wise softmax of ``values / temperature``."""
    scaled = values / temperature
    scaled = scaled - scaled.max(axis=-1, keepdims=True)
    exp = np.exp(scaled)
    return exp / exp.sum(axis=-1, keepdims=True)


def smooth_max(values: np.ndarray, temperature: float) -> tuple[np.ndarray, np.ndarray]:
    """Softmax-weighted maximum along the last axis and its gradient.

    Returns:
        Tuple of (smooth max per row, gradient with respect to ``values``).
    """
    weights = softmax(values, temperature)
    smax = np.sum(weights * values, axis=-1, keepdims=True)
    grad = weights * (1.0 + (values - smax) / temperature)
    return smax[..., 0], grad


class DPMitigator:
    """Reweights class scores to equalize predicted-class proportions.

    Attributes:
        config: Mitigation configuration.
        result_: Result of the last call to ``fit``.
    """

    def __init__(self, config: Optional[MitigationConfig] = None):
        self.config = config or MitigationConfig()
        self.result_: Optional[MitigationResult] = None

    @staticmethod
    def _check_scores(scores) -> np.ndarray:
        scores = np.asarray(scores, dtype=np.float64)
        if scores.ndim != 2 or scores.shape[1] < 2:
            raise ValueError(f"scores must have shape (n, K) with K >= 2, got {scores.shape}")
        if np.isnan(scores).any():
            raise ValueError("scores contain NaN values")
        if (scores < 0).any():
            raise ValueError("scores must be non-negative")
        return scores

    @classmethod
    def _validate(cls, scores, group) -> tuple[np.ndarray, np.ndarray]:
        scores = cls._check_scores(scores)
        side = as_group_mask(group, scores.shape[0])
        n_in = int(side.sum())
        if n_in == 0 or n_in == side.size:
            raise DegenerateGroupError(
                f"protected-group indicator selects {n_in} of {side.size} observations; "
                f"both sides need at least one member",
                n_in_group=n_in,
                n_total=side.size,
            )
        return scores, side

    def _objective(
        self,
        theta: np.ndarray,
        sides: list[tuple[float, float, np.ndarray]],
        n_classes: int,
    ) -> tuple[float, np.ndarray]:
        lambda_, beta = theta[:n_classes], theta[n_classes:]
        correction = lambda_ - beta

        value = self.config.epsilon * np.sum(theta)
        grad_correction = np.zeros(n_classes)
        for prevalence, sign, side_scores in sides:
            val = prevalence * side_scores - sign * correction
            smax, grad = smooth_max(val, self.config.temperature)
            value += smax.mean()
            grad_correction -= sign * grad.mean(axis=0)

        grad_theta = np.concatenate([grad_correction, -grad_correction])
        grad_theta += self.config.epsilon
        return float(value), grad_theta

    def fit(self, scores, group, timeout: Optional[float] = None) -> MitigationResult:
        """Solve for the class corrections.

        Args:
            scores: Non-negative class scores, shape (n, K).
            group: Protected-group indicator (boolean or -1/+1). Side 1 is
                True/+1, side 0 is False/-1.
            timeout: Wall-clock limit in seconds; overrides the configured one.
                A timed-out solve is reported as not converged.

        Returns:
            MitigationResult. When the solver fails, ``converged`` is False
            and the last iterate is returned.

        Raises:
            DegenerateGroupError: If one side has no member.
        """
        scores, side = self._validate(scores, group)
        n, n_classes = scores.shape
        timeout = self.config.timeout if timeout is None else timeout

        prevalence = (float(np.mean(~side)), float(np.mean(side)))
        sides = [
            (prevalence[0], -1.0, scores[~side]),
            (prevalence[1], 1.0, scores[side]),
        ]

        logger.info(
            f"Fitting DP mitigation: n={n}, K={n_classes}, "
            f"prevalence=({prevalence[0]:.3f}, {prevalence[1]:.3f})"
        )

        theta0 = np.zeros(2 * n_classes)
        constraints = [{
            "type": "ineq",
            "fun": lambda theta: theta,
            "jac": lambda theta: np.eye(theta.size),
        }]

        start = time.monotonic()

        def check_timeout(xk):
            if timeout is not None and time.monotonic() - start > timeout:
                raise _SolveTimeout(np.copy(xk))

        try:
            solution = minimize(
                self._objective,
                theta0,
                args=(sides, n_classes),
                jac=True,
                method="SLSQP",
                constraints=constraints,
                callback=check_timeout,
                options={"maxiter": self.config.max_iter, "ftol": self.config.tol},
            )
            theta = solution.x
            converged = bool(solution.success)
            message = str(solution.message)
            n_iter = int(solution.nit)
        except _SolveTimeout as e:
            theta = e.xk
            converged = False
            message = f"Solve exceeded timeout of {timeout}s"
            n_iter = -1

        objective, _ = self._objective(theta, sides, n_classes)
        result = MitigationResult(
            lambda_=theta[:n_classes].copy(),
            beta=theta[n_classes:].copy(),
            prevalence=prevalence,
            converged=converged,
            message=message,
            n_iter=n_iter,
            objective=objective,
        )

        if converged:
            logger.info(f"DP mitigation converged in {n_iter} iterations (objective={objective:.6f})")
        else:
            logger.warning(f"DP mitigation did not converge: {message}")
            warnings.warn(
                f"DP mitigation did not converge: {message}",
                SolverNonConvergenceWarning,
                stacklevel=2,
            )

        self.result_ = result
        return result

    def predict(
        self,
        scores,
        group,
        result: Optional[MitigationResult] = None,
    ) -> MitigatedPrediction:
        """Apply the fitted corrections and re-derive the predicted class.

        Args:
            scores: Class scores, shape (n, K).
            group: Protected-group indicator aligned with ``scores``.
            result: Corrections to apply. Defaults to the last ``fit``.

        Returns:
            MitigatedPrediction with 1-indexed classes.
        """
        result = result or self.result_
        if result is None:
            raise RuntimeError("DPMitigator must be fitted before predict")

        scores = self._check_scores(scores)
        side = as_group_mask(group, scores.shape[0])
        if scores.shape[1] != result.lambda_.size:
            raise ValueError(
                f"scores have {scores.shape[1]} classes, corrections have {result.lambda_.size}"
            )

        rng = np.random.default_rng(self.config.seed)
        jittered = scores + rng.uniform(0.0, self.config.sigma, size=scores.shape)

        prevalence = np.where(side, result.prevalence[1], result.prevalence[0])
        sign = np.where(side, 1.0, -1.0)
        raw = (
            prevalence[:, np.newaxis] * jittered
            - sign[:, np.newaxis] * result.correction[np.newaxis, :]
        )

        return MitigatedPrediction(
            classes=np.argmax(raw, axis=1) + 1,
            raw_scores=raw,
            probabilities=softmax(raw),
        )

    def fit_predict(self, scores, group, timeout: Optional[float] = None) -> MitigatedPrediction:
        self.fit(scores, group, timeout=timeout)
        return self.predict(scores, group)
