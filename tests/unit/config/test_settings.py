"""Unit tests for tracker configuration."""

import pytest
from koala_tracker.config import LogLevel, TrackerConfig, get_config, set_config
from koala_tracker.models import ConfigurationError, KeyCollisionPolicy
from pydantic import ValidationError


class TestTrackerConfig:
    """Test cases for TrackerConfig."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        monkeypatch.delenv("KOALA_TRACKER_CHECK_INTERVAL_SECONDS", raising=False)
        config = TrackerConfig(_env_file=None)

        assert config.check_interval_seconds == 10.0
        assert config.poll_granularity_seconds == 0.1
        assert config.read_chunk_size == 1024 * 1024
        assert config.skip_unreadable_files is False
        assert config.key_collision_policy == KeyCollisionPolicy.LAST_WINS
        assert config.max_probe_workers >= 1

    def test_environment_override(self, monkeypatch):
        """Test that environment variables with the prefix override defaults."""
        monkeypatch.setenv("KOALA_TRACKER_CHECK_INTERVAL_SECONDS", "30")
        monkeypatch.setenv("KOALA_TRACKER_MAX_PROBE_WORKERS", "3")
        monkeypatch.setenv("KOALA_TRACKER_KEY_COLLISION_POLICY", "reject")

        config = TrackerConfig(_env_file=None)

        assert config.check_interval_seconds == 30.0
        assert config.max_probe_workers == 3
        assert config.key_collision_policy == KeyCollisionPolicy.REJECT

    def test_invalid_worker_count(self):
        """Test that at least one probe worker is required."""
        with pytest.raises(ValidationError):
            TrackerConfig(_env_file=None, max_probe_workers=0)

    def test_granularity_must_be_sub_second(self):
        """Test the upper bound of the idle polling granularity."""
        with pytest.raises(ValidationError):
            TrackerConfig(_env_file=None, poll_granularity_seconds=1.5)

    def test_granularity_below_interval(self):
        """Test that the granularity must be finer than the interval."""
        with pytest.raises(ConfigurationError) as exc_info:
            TrackerConfig(_env_file=None, check_interval_seconds=0.2, poll_granularity_seconds=0.5)

        assert exc_info.value.context["config_key"] == "poll_granularity_seconds"

    def test_log_config_stream(self):
        """Test logging configuration without a log file."""
        config = TrackerConfig(_env_file=None, log_level=LogLevel.DEBUG)
        log_config = config.get_log_config()

        assert log_config["handlers"]["default"]["class"] == "logging.StreamHandler"
        assert log_config["loggers"]["koala_tracker"]["level"] == "DEBUG"

    def test_log_config_file(self, tmp_path):
        """Test logging configuration with a log file."""
        log_file = tmp_path / "tracker.log"
        config = TrackerConfig(_env_file=None, log_file=log_file)
        handler = config.get_log_config()["handlers"]["default"]

        assert handler["class"] == "logging.FileHandler"
        assert handler["filename"] == str(log_file)


class TestGlobalConfig:
    """Test cases for the global configuration accessors."""

    def test_set_and_get(self):
        """Test replacing the global configuration."""
        custom = TrackerConfig(_env_file=None, check_interval_seconds=42)
        set_config(custom)
        try:
            assert get_config() is custom
        finally:
            set_config(None)

    def test_get_config_creates_default_once(self):
        """Test that the global configuration is created lazily and reused."""
        set_config(None)
        try:
            first = get_config()
            assert isinstance(first, TrackerConfig)
            assert get_config() is first
        finally:
            set_config(None)
