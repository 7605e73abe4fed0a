"""Named mitigation scenarios and a thread-pool runner for them.

A scenario is one protected-group indicator (a district, a ring of radius r
around a region of interest, ...). Scenarios only read the shared score
matrix and write their own outcome, so they run independently.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger

from geodisparity.errors import DegenerateGroupError
from geodisparity.fairness.metrics import as_group_mask
from geodisparity.mitigation.config import MitigationConfig
from geodisparity.mitigation.dp_mitigator import DPMitigator, MitigationResult
from geodisparity.mitigation.unfairness import unfairness


@dataclass
class Scenario:
    """A named protected-group indicator (boolean, 0/1 or -1/+1)."""

    name: str
    indicator: np.ndarray


@dataclass
class ScenarioOutcome:
    """Result of one mitigation scenario.

    Attributes:
        name: Scenario name.
        output: Per-observation mitigation output (id, class, probabilities),
            None if the scenario failed.
        unfairness_before: Histogram gap of arg-max classes before mitigation.
        unfairness_after: Histogram gap of mitigated classes.
        result: Solver result, None if the scenario failed.
        error: Description of the failure, if any.
    """

    name: str
    output: Optional[pd.DataFrame] = None
    unfairness_before: float = float("nan")
    unfairness_after: float = float("nan")
    result: Optional[MitigationResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def run_scenario(
    scenario: Scenario,
    scores: np.ndarray,
    ids: Sequence,
    config: MitigationConfig,
    id_column: str = "obs_id",
) -> ScenarioOutcome:
    """Fit and apply DP mitigation for one scenario.

    A degenerate indicator is reported on the outcome rather than raised.
    """
    indicator = as_group_mask(scenario.indicator, len(scores))
    mitigator = DPMitigator(config)

    try:
        prediction = mitigator.fit_predict(scores, indicator)
    except DegenerateGroupError as e:
        logger.warning(f"Scenario '{scenario.name}' skipped: {e}")
        return ScenarioOutcome(name=scenario.name, error=str(e))

    before = np.argmax(scores, axis=1) + 1
    after = prediction.classes
    outcome = ScenarioOutcome(
        name=scenario.name,
        output=prediction.to_frame(ids, id_column=id_column),
        unfairness_before=unfairness(before[indicator], before[~indicator]),
        unfairness_after=unfairness(after[indicator], after[~indicator]),
        result=mitigator.result_,
    )

    logger.info(
        f"Scenario '{scenario.name}': unfairness {outcome.unfairness_before:.4f} -> "
        f"{outcome.unfairness_after:.4f} (converged={outcome.result.converged})"
    )
    return outcome


def run_scenarios(
    scenarios: Sequence[Scenario],
    scores: np.ndarray,
    ids: Sequence,
    config: MitigationConfig,
    max_workers: int = 4,
    id_column: str = "obs_id",
) -> dict[str, ScenarioOutcome]:
    """Run scenarios in a thread pool.

    Returns:
        Mapping scenario name -> outcome, in the order of ``scenarios``.
    """
    names = [s.name for s in scenarios]
    if len(set(names)) != len(names):
        raise ValueError("scenario names must be unique")

    outcomes: dict[str, ScenarioOutcome] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(run_scenario, scenario, scores, ids, config, id_column): scenario
            for scenario in scenarios
        }
        for future in as_completed(futures):
            outcome = future.result()
            outcomes[outcome.name] = outcome

    n_failed = sum(not o.succeeded for o in outcomes.values())
    logger.info(f"Ran {len(scenarios)} scenarios: {len(scenarios) - n_failed} succeeded")
    return {name: outcomes[name] for name in names}


def summarize_outcomes(outcomes: dict[str, ScenarioOutcome]) -> pd.DataFrame:
    """One row per scenario: unfairness before/after and solver status."""
    return pd.DataFrame([
        {
            "scenario": name,
            "unfairness_before": o.unfairness_before,
            "unfairness_after": o.unfairness_after,
            "converged": o.result.converged if o.result is not None else False,
            "error": o.error,
        }
        for name, o in outcomes.items()
    ])
