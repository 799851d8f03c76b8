"""
Configuration Loader

Handles loading, parsing, and merging configuration from YAML files and
environment variables.

Author: mirrorkeep Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config

DEFAULT_CONFIG_PATH = "/etc/mirrorkeep/config.yaml"


class ConfigLoader:
    """
    Configuration loader and manager.

    Loads configuration from YAML file, merges with environment variables,
    and validates the structure.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to the configuration file. If None, uses CONFIG_PATH
                or the default location.
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """
        Load and validate configuration.

        Returns:
            Validated Config object

        Raises:
            ValueError: If YAML parsing or configuration validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)

        self._config = Config(**config_data)
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        config_file = Path(self.config_path)

        if not config_file.exists():
            return self._create_default_config()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_file}")
        return data

    def _create_default_config(self) -> Dict[str, Any]:
        """
        Create default configuration structure.

        Returns:
            Default configuration dictionary
        """
        return {
            "app": {
                "log_level": "INFO",
                "log_to_file": False
            },
            "sync": {
                "source_root": "/srv/mirrorkeep/source",
                "backup_root": "/srv/mirrorkeep/backup",
                "tombstone_root": "/srv/mirrorkeep/deleted",
                "concurrency": None,
                "mtime_tolerance_ns": 0
            },
            "scheduling": {
                "enabled": True,
                "interval_seconds": 3600,
                "cron": None,
                "run_on_start": True
            }
        }

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values.
        Naming convention: SECTION_KEY (e.g., APP_LOG_LEVEL, SYNC_SOURCE_ROOT)

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        # App settings
        if os.getenv("APP_LOG_LEVEL"):
            config_data.setdefault("app", {})["log_level"] = os.getenv("APP_LOG_LEVEL").upper()
        if os.getenv("APP_LOG_TO_FILE"):
            config_data.setdefault("app", {})["log_to_file"] = os.getenv("APP_LOG_TO_FILE").lower() == "true"
        if os.getenv("APP_LOG_FILE_PATH"):
            config_data.setdefault("app", {})["log_file_path"] = os.getenv("APP_LOG_FILE_PATH")
        if os.getenv("APP_JSON_LOGS"):
            config_data.setdefault("app", {})["json_logs"] = os.getenv("APP_JSON_LOGS").lower() == "true"

        # Sync roots
        if os.getenv("SYNC_SOURCE_ROOT"):
            config_data.setdefault("sync", {})["source_root"] = os.getenv("SYNC_SOURCE_ROOT")
        if os.getenv("SYNC_BACKUP_ROOT"):
            config_data.setdefault("sync", {})["backup_root"] = os.getenv("SYNC_BACKUP_ROOT")
        if os.getenv("SYNC_TOMBSTONE_ROOT"):
            config_data.setdefault("sync", {})["tombstone_root"] = os.getenv("SYNC_TOMBSTONE_ROOT")
        if os.getenv("SYNC_CONCURRENCY"):
            config_data.setdefault("sync", {})["concurrency"] = int(os.getenv("SYNC_CONCURRENCY"))
        if os.getenv("SYNC_MTIME_TOLERANCE_NS"):
            config_data.setdefault("sync", {})["mtime_tolerance_ns"] = int(os.getenv("SYNC_MTIME_TOLERANCE_NS"))

        # Scheduling
        if os.getenv("SCHEDULE_INTERVAL_SECONDS"):
            config_data.setdefault("scheduling", {})["interval_seconds"] = int(os.getenv("SCHEDULE_INTERVAL_SECONDS"))
        if os.getenv("SCHEDULE_CRON"):
            config_data.setdefault("scheduling", {})["cron"] = os.getenv("SCHEDULE_CRON")

        return config_data

    def save(self, config: Config, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Config object to save
            path: Path to save to (uses default if None)
        """
        save_path = Path(path or self.config_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.dict()

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def reload(self) -> Config:
        """
        Reload configuration from file.

        Returns:
            Reloaded Config object
        """
        return self.load()

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
