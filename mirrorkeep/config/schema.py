"""
Configuration Schema and Models

Defines Pydantic models for the configuration schema, providing validation,
default values, and type checking for all configuration options.

Author: mirrorkeep Project
License: MIT
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, validator
from pathlib import Path


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseModel):
    """Logging and process options."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application logging level"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_file_path: str = Field(
        default="/var/log/mirrorkeep/mirrorkeep.log",
        description="Path of the log file when file logging is enabled"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )
    json_logs: bool = Field(
        default=False,
        description="Emit log records as JSON"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class SyncConfig(BaseModel):
    """The three trees and how they are synced."""

    source_root: str = Field(
        default="/srv/mirrorkeep/source",
        description="Directory to back up"
    )
    backup_root: str = Field(
        default="/srv/mirrorkeep/backup",
        description="Mirror of the source directory"
    )
    tombstone_root: str = Field(
        default="/srv/mirrorkeep/deleted",
        description="Where deleted and overwritten files are kept"
    )
    concurrency: Optional[int] = Field(
        default=None,
        description="Number of parallel file operations (None = CPU count)"
    )
    mtime_tolerance_ns: int = Field(
        default=0,
        description="Timestamp slack before a newer source file counts as modified"
    )

    @validator("source_root", "backup_root", "tombstone_root")
    def validate_absolute(cls, v):
        """Ensure roots are absolute."""
        if not Path(v).is_absolute():
            raise ValueError(f"Sync roots must be absolute: {v}")
        return v

    @validator("tombstone_root")
    def validate_distinct_roots(cls, v, values):
        """Ensure no root lies inside another."""
        roots = [values.get("source_root"), values.get("backup_root"), v]
        paths = [Path(root).resolve() for root in roots if root]
        for path in paths:
            for other in paths:
                if path is not other and (path == other or other in path.parents):
                    raise ValueError(f"Sync roots must not overlap: {path} and {other}")
        return v

    @validator("concurrency")
    def validate_concurrency(cls, v):
        """Ensure at least one worker."""
        if v is not None and v < 1:
            raise ValueError(f"concurrency must be at least 1: {v}")
        return v

    @validator("mtime_tolerance_ns")
    def validate_tolerance(cls, v):
        """Ensure tolerance is not negative."""
        if v < 0:
            raise ValueError(f"mtime_tolerance_ns must not be negative: {v}")
        return v


class SchedulingConfig(BaseModel):
    """Periodic sync scheduling."""

    enabled: bool = Field(
        default=True,
        description="Run sync cycles on a schedule"
    )
    interval_seconds: int = Field(
        default=3600,
        description="Seconds between sync cycles (1 hour default)"
    )
    cron: Optional[str] = Field(
        default=None,
        description="Cron expression, overrides interval_seconds when set"
    )
    run_on_start: bool = Field(
        default=True,
        description="Run a cycle immediately when the service starts"
    )

    @validator("interval_seconds")
    def validate_interval(cls, v):
        """Ensure a positive interval."""
        if v < 1:
            raise ValueError(f"interval_seconds must be positive: {v}")
        return v

    @validator("cron")
    def validate_cron(cls, v):
        """Ensure five-field cron syntax."""
        if v is not None and len(v.split()) != 5:
            raise ValueError(f"Invalid cron expression (expected 5 fields): {v}")
        return v


class Config(BaseModel):
    """
    Root configuration model for mirrorkeep.

    Loaded from config.yaml and overridable by environment variables.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        validate_assignment = True
