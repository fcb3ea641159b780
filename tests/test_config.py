"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from podstats.config import (
    DEFAULT_ANALYTICS_CONFIG,
    MAX_FILE_SIZE_BYTES,
    Config,
    deep_merge,
    load_config,
    load_yaml_file,
)


@pytest.fixture
def config_dir(tmp_path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


class TestDeepMerge:
    """Test deep_merge."""

    def test_nested_override(self):
        base = {"a": {"x": 1, "y": 2}, "b": [1, 2]}

        merged = deep_merge(base, {"a": {"y": 3}, "b": [9]})

        assert merged == {"a": {"x": 1, "y": 3}, "b": [9]}

    def test_inputs_not_modified(self):
        base = {"a": {"x": 1}}
        deep_merge(base, {"a": {"x": 2}})

        assert base == {"a": {"x": 1}}


class TestLoadConfig:
    """Test load_config and YAML handling."""

    def test_defaults_when_file_missing(self, tmp_path):
        config = load_config(tmp_path / "missing", "ingestion")

        assert config["max_file_size_bytes"] == MAX_FILE_SIZE_BYTES
        assert config["allowed_extensions"] == [".csv"]
        assert config["min_fields"] == 10

    def test_yaml_overrides_are_merged(self, config_dir):
        (config_dir / "analytics_config.yaml").write_text(
            "performance_thresholds:\n  good: 1.2\nrecent_window: 10\n"
        )

        config = load_config(config_dir, "analytics")

        assert config["performance_thresholds"] == {"excellent": 1.5, "good": 1.2, "average": 0.9}
        assert config["recent_window"] == 10
        assert config["monthly_window"] == DEFAULT_ANALYTICS_CONFIG["monthly_window"]

    def test_empty_yaml_file(self, config_dir):
        (config_dir / "storage_config.yaml").write_text("")

        assert load_config(config_dir, "storage")["raw_key"] == "podstats.dataset.raw"

    def test_non_mapping_yaml_rejected(self, config_dir):
        path = config_dir / "storage_config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            load_yaml_file(path)

    def test_invalid_config_type(self, config_dir):
        with pytest.raises(ValueError):
            load_config(config_dir, "unknown")

    def test_storage_dir_env_override(self, config_dir, monkeypatch):
        monkeypatch.setenv("PODSTATS_STORAGE_DIR", "/tmp/podstats-test")

        assert load_config(config_dir, "storage")["storage_dir"] == "/tmp/podstats-test"

    def test_max_file_size_env_override(self, config_dir, monkeypatch):
        monkeypatch.setenv("PODSTATS_MAX_FILE_SIZE", "1024")

        assert load_config(config_dir, "ingestion")["max_file_size_bytes"] == 1024

    def test_invalid_max_file_size_env(self, config_dir, monkeypatch):
        monkeypatch.setenv("PODSTATS_MAX_FILE_SIZE", "lots")

        with pytest.raises(ValueError):
            load_config(config_dir, "ingestion")


class TestConfig:
    """Test the Config manager."""

    def test_get_nested_value(self, config_dir):
        config = Config(config_dir)

        assert config.get("analytics", "performance_thresholds", "good") == 1.1
        assert config.get("analytics", "missing", default="x") == "x"
        assert config.get("unknown", "key", default=0) == 0

    def test_storage_dir_expands_user(self, config_dir):
        config = Config(config_dir)

        assert config.storage_dir == Path.home() / ".podstats"

    def test_reload_picks_up_changes(self, config_dir):
        config = Config(config_dir)
        assert config.analytics["recent_window"] == 30

        (config_dir / "analytics_config.yaml").write_text("recent_window: 5\n")
        config.reload()

        assert config.analytics["recent_window"] == 5
