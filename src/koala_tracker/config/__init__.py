"""Configuration management and settings."""

from koala_tracker.config.settings import LogLevel, TrackerConfig, get_config, set_config

__all__ = ["TrackerConfig", "LogLevel", "get_config", "set_config"]
