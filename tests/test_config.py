"""
Unit Tests for Configuration Module

Tests configuration loading, validation, environment variable merging,
and error handling.

Author: mirrorkeep Project
License: MIT
"""

import pytest
import yaml

from mirrorkeep.config.config_loader import ConfigLoader, load_config
from mirrorkeep.config.schema import Config, SchedulingConfig, SyncConfig


class TestConfigLoader:
    """Test suite for ConfigLoader class."""

    def test_create_default_config(self):
        """Test default configuration creation."""
        loader = ConfigLoader()
        default_config = loader._create_default_config()

        assert "app" in default_config
        assert "sync" in default_config
        assert "scheduling" in default_config
        assert default_config["app"]["log_level"] == "INFO"
        assert default_config["scheduling"]["interval_seconds"] == 3600

    def test_load_nonexistent_config_uses_defaults(self, tmp_path):
        """Test that loading a missing config file falls back to defaults."""
        loader = ConfigLoader(str(tmp_path / "config.yaml"))

        config = loader.load()

        assert isinstance(config, Config)
        assert config.sync.backup_root == "/srv/mirrorkeep/backup"
        assert config.sync.concurrency is None
        assert loader.config is config

    def test_load_yaml_file(self, tmp_path):
        """Test values read from a YAML file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            "sync": {
                "source_root": "/data/src",
                "backup_root": "/data/backup",
                "tombstone_root": "/data/deleted",
                "concurrency": 8
            },
            "scheduling": {"cron": "0 * * * *"}
        }))

        config = load_config(str(config_path))

        assert config.sync.source_root == "/data/src"
        assert config.sync.concurrency == 8
        assert config.scheduling.cron == "0 * * * *"

    def test_invalid_yaml_raises(self, tmp_path):
        """Test that malformed YAML is reported as ValueError."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("sync: [unclosed")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_config(str(config_path))

    def test_env_var_override(self, tmp_path, monkeypatch):
        """Test environment variable overrides."""
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("SYNC_SOURCE_ROOT", "/env/source")
        monkeypatch.setenv("SYNC_CONCURRENCY", "3")
        monkeypatch.setenv("SCHEDULE_INTERVAL_SECONDS", "60")

        config = ConfigLoader(str(tmp_path / "config.yaml")).load()

        assert config.app.log_level == "DEBUG"
        assert config.sync.source_root == "/env/source"
        assert config.sync.concurrency == 3
        assert config.scheduling.interval_seconds == 60

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        """Test that CONFIG_PATH selects the file when no path is given."""
        config_path = tmp_path / "custom.yaml"
        monkeypatch.setenv("CONFIG_PATH", str(config_path))

        assert ConfigLoader().config_path == str(config_path)

    def test_save_and_reload(self, tmp_path):
        """Test that a saved config loads back with the same values."""
        config_path = tmp_path / "saved" / "config.yaml"
        loader = ConfigLoader(str(config_path))
        config = loader.load()
        config.sync.concurrency = 6

        loader.save(config)
        reloaded = loader.reload()

        assert reloaded.sync.concurrency == 6


class TestConfigSchema:
    """Test suite for configuration schema models."""

    def test_relative_root_rejected(self):
        """Test that relative paths are rejected."""
        with pytest.raises(ValueError):
            SyncConfig(source_root="relative/path")

    def test_overlapping_roots_rejected(self):
        """Test that a tombstone root inside the backup root is rejected."""
        with pytest.raises(ValueError, match="overlap"):
            SyncConfig(
                source_root="/data/src",
                backup_root="/data/backup",
                tombstone_root="/data/backup/deleted"
            )

    def test_roots_overlapping_through_symlink_rejected(self, tmp_path):
        """Test that overlap is detected on resolved paths."""
        backup = tmp_path / "backup"
        (backup / "deleted").mkdir(parents=True)
        link = tmp_path / "deleted-link"
        link.symlink_to(backup / "deleted", target_is_directory=True)

        with pytest.raises(ValueError, match="overlap"):
            SyncConfig(
                source_root=str(tmp_path / "src"),
                backup_root=str(backup),
                tombstone_root=str(link)
            )

    def test_identical_roots_rejected(self):
        """Test that two roots cannot be the same directory."""
        with pytest.raises(ValueError):
            SyncConfig(
                source_root="/data/same",
                backup_root="/data/same",
                tombstone_root="/data/deleted"
            )

    def test_concurrency_must_be_positive(self):
        """Test that zero workers is rejected."""
        with pytest.raises(ValueError):
            SyncConfig(concurrency=0)

    def test_negative_tolerance_rejected(self):
        """Test that a negative mtime tolerance is rejected."""
        with pytest.raises(ValueError):
            SyncConfig(mtime_tolerance_ns=-1)

    def test_invalid_cron_rejected(self):
        """Test that cron expressions need five fields."""
        with pytest.raises(ValueError, match="cron"):
            SchedulingConfig(cron="* * *")

    def test_scheduling_defaults(self):
        """Test SchedulingConfig default values."""
        config = SchedulingConfig()

        assert config.enabled is True
        assert config.interval_seconds == 3600
        assert config.cron is None
        assert config.run_on_start is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
