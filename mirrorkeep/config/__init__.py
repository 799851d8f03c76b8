"""
mirrorkeep Configuration Module

Configuration loading, validation, and management. Supports YAML-based
configuration with environment variable overrides.

Author: mirrorkeep Project
License: MIT
"""

from .schema import Config, AppConfig, SyncConfig, SchedulingConfig, LogLevel
from .config_loader import ConfigLoader, load_config

__version__ = "0.1.0"
__all__ = ['Config', 'AppConfig', 'SyncConfig', 'SchedulingConfig', 'LogLevel', 'ConfigLoader', 'load_config']
