"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from guider.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LLMSettings(BaseSettings):
    """Upstream completion provider configuration.

    Targets OpenRouter's OpenAI-compatible API. The four model identifiers
    form the fallback chain, in order.
    """

    model_config = SettingsConfigDict(env_prefix="OPENROUTER_")

    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="Completion API base URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (required at startup)",
    )
    timeout: float = Field(
        default=45.0,
        description="Per-attempt request timeout in seconds",
    )
    max_tokens: int = Field(
        default=1000,
        description="Maximum tokens in response",
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature",
    )
    http_referer: str = Field(
        default="https://atma.chhrone.web.id",
        description="HTTP-Referer header sent for provider attribution",
    )
    x_title: str = Field(
        default="ATMA - AI Talent Mapping Assessment",
        description="X-Title header sent for provider attribution",
    )

    # Fallback chain
    primary_model: str = Field(
        default="x-ai/grok-4-fast:free",
        description="Primary tier model",
    )
    fallback_model: str = Field(
        default="z-ai/glm-4.5-air:free",
        description="First fallback tier model",
    )
    emergency_fallback_model: str = Field(
        default="deepseek/deepseek-chat-v3.1:free",
        description="Second fallback tier model",
    )
    additional_fallback_model: str = Field(
        default="deepseek/deepseek-r1-0528:free",
        description="Third fallback tier model",
    )
    use_free_models_only: bool = Field(
        default=False,
        description="Never call tiers that are not classified free",
    )
    free_model_allowlist: list[str] = Field(
        default_factory=list,
        description="Extra model identifiers treated as free-tier",
    )

    def require_api_key(self) -> str:
        """Return the API key or fail startup.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if self.api_key is None or not self.api_key.get_secret_value():
            raise ConfigurationError(
                "OPENROUTER_API_KEY is required",
                details={"setting": "OPENROUTER_API_KEY"},
            )
        return self.api_key.get_secret_value()


class ContextSettings(BaseSettings):
    """Conversation context configuration."""

    model_config = SettingsConfigDict(env_prefix="CONTEXT_")

    max_history_turns: int = Field(
        default=20,
        ge=0,
        description="Prior turns included in the upstream context",
    )
    history_fetch_limit: int = Field(
        default=50,
        ge=1,
        description="Messages requested from the conversation store",
    )


class ArchiveSettings(BaseSettings):
    """Archive service (persona fallback) configuration."""

    model_config = SettingsConfigDict(env_prefix="ARCHIVE_")

    url: str = Field(
        default="http://localhost:3002",
        description="Archive service base URL",
    )
    service_key: SecretStr = Field(
        default=SecretStr("internal_service_secret_key_change_in_production"),
        description="Internal service key",
    )
    timeout: float = Field(
        default=10.0,
        description="Request timeout in seconds",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=3006,
        description="API server port",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    archive: ArchiveSettings = Field(default_factory=ArchiveSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
