"""
Configuration management for the koala tracker.

Handles environment variables, configuration file loading, and provides
default settings with validation for the scanning and polling components.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from koala_tracker.models.exceptions import raise_config_error
from koala_tracker.models.file_record import KeyCollisionPolicy


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def default_probe_workers() -> int:
    """Match the I/O-bound default of concurrent.futures.ThreadPoolExecutor."""
    return min(32, (os.cpu_count() or 1) + 4)


class TrackerConfig(BaseSettings):
    """
    Central configuration class for the koala tracker.

    Every option can be overridden from the environment with the
    KOALA_TRACKER_ prefix or from a local .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KOALA_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Polling Configuration ===
    check_interval_seconds: float = Field(
        default=10.0, gt=0.0, le=86400.0, description="Time between the end of one scan and the next check"
    )
    poll_granularity_seconds: float = Field(
        default=0.1, gt=0.0, lt=1.0, description="How often the idle loop compares the clock to the next check time"
    )
    shutdown_grace_seconds: float = Field(
        default=5.0, ge=0.0, le=300.0, description="How long to wait for an in-flight scan when stopping"
    )

    # === Scanning Configuration ===
    max_probe_workers: int = Field(
        default_factory=default_probe_workers, ge=1, le=256, description="Maximum concurrent file probes per scan"
    )
    read_chunk_size: int = Field(
        default=1024 * 1024, ge=4096, le=64 * 1024 * 1024, description="Bytes read per chunk when counting lines"
    )
    skip_unreadable_files: bool = Field(
        default=False, description="Omit files that fail to probe instead of abandoning the whole scan"
    )
    key_collision_policy: KeyCollisionPolicy = Field(
        default=KeyCollisionPolicy.LAST_WINS, description="Resolution for names that differ only by case"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @model_validator(mode='after')
    def validate_poll_granularity(self):
        """Ensure the idle loop checks the clock more often than scans are due."""
        if self.poll_granularity_seconds >= self.check_interval_seconds:
            raise_config_error(
                "poll_granularity_seconds must be less than check_interval_seconds",
                config_key="poll_granularity_seconds",
                expected_type="float < check_interval_seconds",
                actual_value=self.poll_granularity_seconds,
            )
        return self

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        level = LogLevel(self.log_level).value
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": level,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"koala_tracker": {"handlers": ["default"], "level": level, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global configuration instance
_config: TrackerConfig | None = None


def get_config() -> TrackerConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = TrackerConfig()
    return _config


def set_config(config: TrackerConfig) -> None:
    """
    Set a custom configuration instance.

    The CLI installs the configuration built from its options here; the
    tracker session reads it back through get_config().
    """
    global _config
    _config = config
