"""Tests for the mitigation scenario runner."""

import numpy as np
import pytest

from geodisparity.mitigation.config import MitigationConfig
from geodisparity.pipeline.scenarios import (
    Scenario,
    run_scenario,
    run_scenarios,
    summarize_outcomes,
)


@pytest.fixture
def scores():
    rng = np.random.default_rng(0)
    return rng.uniform(0.0, 1.0, size=(200, 3))


@pytest.fixture
def config():
    return MitigationConfig(temperature=0.05)


def make_ids(n):
    return [f"obs_{i}" for i in range(n)]


class TestRunScenario:
    """Tests for run_scenario."""

    def test_successful_scenario(self, scores, config):
        indicator = np.arange(len(scores)) < 80
        outcome = run_scenario(Scenario("west", indicator), scores, make_ids(len(scores)), config)

        assert outcome.succeeded
        assert outcome.result is not None
        assert list(outcome.output.columns) == [
            "obs_id", "mitigated_class", "prob_1", "prob_2", "prob_3",
        ]
        assert outcome.output["obs_id"].tolist() == make_ids(len(scores))
        assert 0.0 <= outcome.unfairness_after <= 2.0

    def test_signed_indicator(self, scores, config):
        """Test that a -1/+1 indicator splits the observations like a boolean one."""
        n = len(scores)
        signed = np.where(np.arange(n) < 80, 1, -1)
        outcome = run_scenario(Scenario("signed", signed), scores, make_ids(n), config)
        expected = run_scenario(Scenario("boolean", signed == 1), scores, make_ids(n), config)

        assert outcome.succeeded
        assert outcome.result.prevalence == pytest.approx((0.6, 0.4))
        assert outcome.unfairness_before == pytest.approx(expected.unfairness_before)
        np.testing.assert_array_equal(
            outcome.output["mitigated_class"], expected.output["mitigated_class"]
        )

    def test_degenerate_scenario_reported(self, scores, config):
        """Test that a group covering everyone is reported, not raised."""
        indicator = np.ones(len(scores), dtype=bool)
        outcome = run_scenario(Scenario("all", indicator), scores, make_ids(len(scores)), config)

        assert not outcome.succeeded
        assert outcome.output is None
        assert "both sides" in outcome.error
        assert np.isnan(outcome.unfairness_after)


class TestRunScenarios:
    """Tests for run_scenarios and summarize_outcomes."""

    def test_order_and_failures(self, scores, config):
        """Test that outcomes keep input order and one failure does not stop the others."""
        n = len(scores)
        scenarios = [
            Scenario("ring_r2", np.arange(n) < 30),
            Scenario("empty", np.zeros(n, dtype=bool)),
            Scenario("ring_r1", np.arange(n) < 10),
        ]
        outcomes = run_scenarios(scenarios, scores, make_ids(n), config, max_workers=2)

        assert list(outcomes) == ["ring_r2", "empty", "ring_r1"]
        assert outcomes["ring_r2"].succeeded
        assert outcomes["ring_r1"].succeeded
        assert not outcomes["empty"].succeeded

        summary = summarize_outcomes(outcomes)
        assert summary["scenario"].tolist() == ["ring_r2", "empty", "ring_r1"]
        assert summary["converged"].dtype == bool
        assert summary.loc[summary["scenario"] == "empty", "error"].notna().all()

    def test_duplicate_names_raise_error(self, scores, config):
        indicator = np.arange(len(scores)) < 50
        with pytest.raises(ValueError, match="unique"):
            run_scenarios(
                [Scenario("a", indicator), Scenario("a", ~indicator)],
                scores,
                make_ids(len(scores)),
                config,
            )
