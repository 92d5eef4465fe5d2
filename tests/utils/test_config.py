"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from pydantic import ValidationError

from src.config import Settings, get_settings
from src.message_queue import Channel


class TestConfigurationSystem:
    """Test suite for configuration management."""

    def test_default_values(self):
        """Verify all configuration fields have sensible defaults."""
        settings = Settings(_env_file=None)

        # Delivery rules
        assert settings.max_retry_attempts == 3
        assert settings.success_probability == 0.8
        assert settings.processing_delay == 2.0
        assert settings.tick_interval == 1.0

        # Channels
        assert settings.channels == [Channel.EMAIL, Channel.IN_APP, Channel.PUSH]
        assert settings.channel_endpoints[Channel.EMAIL] == "POST /login"
        assert settings.channel_endpoints[Channel.IN_APP] == "POST /post"
        assert settings.channel_endpoints[Channel.PUSH] == "POST /friend-req"

        # Load test and observability
        assert settings.load_test_size == 5
        assert settings.load_test_stagger == 0.2
        assert settings.activity_log_capacity == 10
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

    def test_environment_variable_override(self, monkeypatch):
        """Verify environment variables override defaults."""
        get_settings.cache_clear()

        monkeypatch.setenv("MAX_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("SUCCESS_PROBABILITY", "0.25")
        monkeypatch.setenv("ACTIVITY_LOG_CAPACITY", "20")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CHANNELS", '["email", "push"]')

        try:
            settings = get_settings()

            assert settings.max_retry_attempts == 5
            assert settings.success_probability == 0.25
            assert settings.activity_log_capacity == 20
            assert settings.log_level == "DEBUG"
            assert settings.channels == [Channel.EMAIL, Channel.PUSH]
        finally:
            get_settings.cache_clear()

    def test_settings_singleton(self):
        """get_settings returns the cached instance."""
        get_settings.cache_clear()

        assert get_settings() is get_settings()

        get_settings.cache_clear()

    @pytest.mark.parametrize("field,value", [
        ("success_probability", 1.5),
        ("success_probability", -0.1),
        ("max_retry_attempts", -1),
        ("processing_delay", 0),
        ("tick_interval", -1),
        ("activity_log_capacity", 0),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_channel_without_endpoint_rejected(self):
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                channels=[Channel.EMAIL, Channel.PUSH],
                channel_endpoints={Channel.EMAIL: "POST /login"},
            )

    def test_empty_channel_set_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, channels=[])
