"""Configuration, setup and scenario helpers for command-line runs."""

from .config import build_configs, load_config, merge_config_with_args, save_config
from .setup import record_run_inputs, setup_logging, setup_output_directory
from .scenarios import (
    Scenario,
    ScenarioOutcome,
    run_scenario,
    run_scenarios,
    summarize_outcomes,
)

__all__ = [
    "build_configs",
    "load_config",
    "merge_config_with_args",
    "save_config",
    "record_run_inputs",
    "setup_logging",
    "setup_output_directory",
    "Scenario",
    "ScenarioOutcome",
    "run_scenario",
    "run_scenarios",
    "summarize_outcomes",
]
