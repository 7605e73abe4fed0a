"""Tests for run configuration loading and merging."""

from argparse import Namespace
from pathlib import Path

import pytest

from geodisparity.data.observations import ObservationSchema
from geodisparity.fairness.config import FairnessConfig
from geodisparity.mitigation.config import MitigationConfig
from geodisparity.pipeline.config import (
    build_configs,
    load_config,
    merge_config_with_args,
    save_config,
)
from geodisparity.spatial.config import SpatialConfig

DEFAULT_CONFIG = Path(__file__).parents[2] / "experiments" / "configs" / "paris_default.yaml"


class TestLoadConfig:
    """Tests for YAML loading and saving."""

    def test_missing_file_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives an empty configuration."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_save_and_load(self, tmp_path):
        config = {"seed": 7, "spatial": {"max_radius": 4}}
        path = tmp_path / "nested" / "config.yaml"
        save_config(config, str(path))
        assert load_config(str(path)) == config


class TestMergeConfigWithArgs:
    """Tests for merge_config_with_args."""

    def test_cli_overrides_config(self):
        config = {"spatial": {"max_radius": 30}, "seed": 42}
        args = Namespace(max_radius=10, seed=None)
        mappings = {"max_radius": "spatial.max_radius", "seed": "seed"}

        merged = merge_config_with_args(config, args, mappings)
        assert merged == {"spatial": {"max_radius": 10}, "seed": 42}

    def test_base_config_not_modified(self):
        """Test that nested sections are copied before being updated."""
        config = {"spatial": {"max_radius": 30}}
        merge_config_with_args(config, Namespace(max_radius=3), {"max_radius": "spatial.max_radius"})
        assert config["spatial"]["max_radius"] == 30

    def test_creates_missing_section(self):
        merged = merge_config_with_args({}, Namespace(temperature=0.1), {"temperature": "mitigation.temperature"})
        assert merged == {"mitigation": {"temperature": 0.1}}

    def test_deep_path_raises_error(self):
        with pytest.raises(ValueError, match="at most two levels"):
            merge_config_with_args({}, Namespace(x=1), {"x": "a.b.c"})


class TestBuildConfigs:
    """Tests for build_configs."""

    def test_defaults(self):
        """Test that missing sections fall back to defaults."""
        configs = build_configs({})
        assert configs["spatial"] == SpatialConfig()
        assert configs["fairness"] == FairnessConfig()
        assert configs["mitigation"] == MitigationConfig()
        assert configs["data"] == ObservationSchema()

    def test_unknown_key_raises_error(self):
        with pytest.raises(TypeError):
            build_configs({"spatial": {"radius": 3}})

    def test_invalid_value_raises_error(self):
        with pytest.raises(ValueError, match="n_classes"):
            build_configs({"fairness": {"n_classes": 1}})

    def test_default_run_configuration(self):
        """Test that the shipped configuration builds."""
        configs = build_configs(load_config(str(DEFAULT_CONFIG)))
        assert configs["spatial"].max_radius == 30
        assert configs["fairness"].min_samples_per_group == 30
        assert configs["mitigation"].temperature == pytest.approx(0.005)
