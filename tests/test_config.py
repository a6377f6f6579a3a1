"""Tests for application configuration."""

import os
from unittest.mock import patch

import pytest

from guider.config import (
    ArchiveSettings,
    ContextSettings,
    Environment,
    LLMSettings,
    Settings,
    get_settings,
)
from guider.exceptions import ConfigurationError


class TestLLMSettings:
    """Tests for upstream provider configuration."""

    def test_default_values(self) -> None:
        """Default values point to OpenRouter."""
        settings = LLMSettings()
        assert settings.base_url == "https://openrouter.ai/api/v1"
        assert settings.timeout == 45.0
        assert settings.max_tokens == 1000
        assert settings.temperature == 0.7
        assert settings.use_free_models_only is False

    def test_default_fallback_chain(self) -> None:
        """Default chain is the four free models in order."""
        settings = LLMSettings()
        assert settings.primary_model == "x-ai/grok-4-fast:free"
        assert settings.fallback_model == "z-ai/glm-4.5-air:free"
        assert settings.emergency_fallback_model == "deepseek/deepseek-chat-v3.1:free"
        assert settings.additional_fallback_model == "deepseek/deepseek-r1-0528:free"

    def test_api_key_is_secret(self) -> None:
        """API key should be masked when printed."""
        settings = LLMSettings(api_key="sk-or-secret")
        assert "sk-or-secret" not in str(settings.api_key)
        assert settings.require_api_key() == "sk-or-secret"

    def test_missing_api_key_is_configuration_error(self) -> None:
        """require_api_key fails without a key."""
        with patch.dict(os.environ, {}, clear=True):
            settings = LLMSettings()
        with pytest.raises(ConfigurationError) as exc_info:
            settings.require_api_key()
        assert "OPENROUTER_API_KEY" in exc_info.value.message

    def test_empty_api_key_is_configuration_error(self) -> None:
        """An empty key counts as missing."""
        settings = LLMSettings(api_key="")
        with pytest.raises(ConfigurationError):
            settings.require_api_key()

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(
            os.environ,
            {
                "OPENROUTER_PRIMARY_MODEL": "openai/gpt-4o-mini",
                "OPENROUTER_USE_FREE_MODELS_ONLY": "true",
            },
        ):
            settings = LLMSettings()
            assert settings.primary_model == "openai/gpt-4o-mini"
            assert settings.use_free_models_only is True


class TestContextSettings:
    """Tests for context configuration."""

    def test_default_values(self) -> None:
        """Default history bounds."""
        settings = ContextSettings()
        assert settings.max_history_turns == 20
        assert settings.history_fetch_limit == 50

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"CONTEXT_MAX_HISTORY_TURNS": "6"}):
            settings = ContextSettings()
            assert settings.max_history_turns == 6

    def test_negative_history_rejected(self) -> None:
        """History bound cannot be negative."""
        with pytest.raises(ValueError):
            ContextSettings(max_history_turns=-1)


class TestArchiveSettings:
    """Tests for archive service configuration."""

    def test_default_values(self) -> None:
        """Default values for the archive service."""
        settings = ArchiveSettings()
        assert settings.url == "http://localhost:3002"
        assert settings.timeout == 10.0

    def test_service_key_is_secret(self) -> None:
        """Service key should be masked when set."""
        with patch.dict(os.environ, {"ARCHIVE_SERVICE_KEY": "svc-key"}):
            settings = ArchiveSettings()
            assert "svc-key" not in str(settings.service_key)
            assert settings.service_key.get_secret_value() == "svc-key"


class TestSettings:
    """Tests for main application settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_default_api_settings(self) -> None:
        """Default API host and port."""
        settings = Settings()
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 3006

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.llm, LLMSettings)
        assert isinstance(settings.context, ContextSettings)
        assert isinstance(settings.archive, ArchiveSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.environment == Environment.PRODUCTION


class TestGetSettings:
    """Tests for settings singleton."""

    def test_returns_settings_instance(self) -> None:
        """get_settings returns a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
