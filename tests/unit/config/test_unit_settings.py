# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest

from graphinsight.algorithms.models import BetweennessConfig, LouvainConfig, PageRankConfig
from graphinsight.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_source(self):
        s = Settings(_env_file=None)
        assert s.graph_source_type == "memory"
        assert s.graph_source_path is None
        assert s.snapshot_limit == 10000

    def test_default_algorithms(self):
        s = Settings(_env_file=None)
        assert s.louvain_config() == LouvainConfig()
        assert s.pagerank_config() == PageRankConfig()
        assert s.betweenness_config() == BetweennessConfig()

    def test_default_incremental(self):
        s = Settings(_env_file=None)
        assert s.incremental_min_nodes == 10
        assert s.incremental_max_change_ratio == 0.3
        assert s.bridge_threshold == 0.1

    def test_default_randomness(self):
        assert Settings(_env_file=None).random_seed is None


class TestSettingsValidation:
    def test_json_without_path(self):
        with pytest.raises(ConfigurationError, match="GRAPH_SOURCE_PATH"):
            Settings(_env_file=None, graph_source_type="json")

    @pytest.mark.parametrize("damping", [0.0, 1.0, 1.5, -0.1])
    def test_damping_out_of_range(self, damping):
        with pytest.raises(ConfigurationError, match="PAGERANK_DAMPING_FACTOR"):
            Settings(_env_file=None, pagerank_damping_factor=damping)

    def test_change_ratio_out_of_range(self):
        with pytest.raises(ConfigurationError, match="INCREMENTAL_MAX_CHANGE_RATIO"):
            Settings(_env_file=None, incremental_max_change_ratio=1.5)

    def test_multiple_errors_joined(self):
        with pytest.raises(ConfigurationError, match="; "):
            Settings(
                _env_file=None,
                graph_source_type="json",
                pagerank_damping_factor=2.0,
            )

    def test_zero_iterations(self):
        with pytest.raises(ValueError, match="louvain_max_iterations"):
            Settings(_env_file=None, louvain_max_iterations=0)

    def test_zero_snapshot_limit(self):
        with pytest.raises(ValueError, match="snapshot_limit"):
            Settings(_env_file=None, snapshot_limit=0)

    def test_valid_json_source(self, tmp_path):
        s = Settings(
            _env_file=None,
            graph_source_type="json",
            graph_source_path=tmp_path / "graph.json",
        )
        assert s.graph_source_path.name == "graph.json"


class TestSettingsEnvironment:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("LOUVAIN_RESOLUTION", "0.5")
        monkeypatch.setenv("RANDOM_SEED", "42")
        s = Settings(_env_file=None)
        assert s.louvain_resolution == 0.5
        assert s.random_seed == 42

    def test_reads_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("BETWEENNESS_DIRECTED=false\nBETWEENNESS_SAMPLE_SIZE=50\n")
        s = Settings(_env_file=env)
        assert s.betweenness_config() == BetweennessConfig(directed=False, sample_size=50)


class TestSettingsHelpers:
    def test_louvain_config(self):
        s = Settings(_env_file=None, louvain_resolution=2.0, louvain_max_iterations=7)
        config = s.louvain_config()
        assert config.resolution == 2.0
        assert config.max_iterations == 7

    def test_pagerank_config(self):
        s = Settings(_env_file=None, pagerank_damping_factor=0.5)
        assert s.pagerank_config().damping_factor == 0.5


class TestLoadSettings:
    def test_with_overrides(self):
        s = load_settings(_env_file=None, log_level="DEBUG", snapshot_limit=500)
        assert s.log_level == "DEBUG"
        assert s.snapshot_limit == 500
