"""Configuration management with pydantic-settings for SmartMark.

Loads from (in order of precedence):
1. Environment variables with the SMARTMARK_ prefix
2. .env file in the working directory
3. Default values

Provider settings are resolved into a ProviderDescriptor once, when a provider
is constructed; nothing downstream looks configuration up by key at call time.
"""

import logging
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import FALLBACK_FOLDER, ProviderDescriptor, ProviderName

logger = logging.getLogger("smartmark.config")

__all__ = [
    "SmartMarkConfig",
    "get_config",
    "reset_config",
]


class SmartMarkConfig(BaseSettings):
    """Configuration for the SmartMark classifier.

    Attributes:
        ai_provider: Active AI backend
        gemini_api_key / openai_api_key / openrouter_api_key / anthropic_api_key:
            Per-backend credentials (SecretStr)
        lmstudio_host / lmstudio_port: Local LM Studio endpoint
        ollama_host / ollama_port: Local Ollama endpoint
        temperature: Sampling temperature sent to every backend
        max_output_tokens: Output token cap sent to every backend
        request_timeout: HTTP timeout in seconds
        max_context_tokens: Token budget for prompt plus folder context
        cache_ttl_seconds: Taxonomy cache time-to-live
        max_suggestions: Maximum suggestions returned per classification
        fallback_folder: Sentinel folder used by the caller fallback policy
        log_level / log_format: Logging controls
    """

    model_config = SettingsConfigDict(
        env_prefix="SMARTMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    ai_provider: ProviderName = Field(
        default=ProviderName.GEMINI, description="Active AI backend"
    )

    # Gemini
    gemini_api_key: SecretStr = Field(default=SecretStr(""))
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    gemini_model: str = Field(default="gemini-1.5-flash-latest")

    # LM Studio (local)
    lmstudio_host: str = Field(default="localhost")
    lmstudio_port: int = Field(default=1234, ge=1, le=65535)
    lmstudio_model: str = Field(default="gemma-3-1b")

    # Ollama (local)
    ollama_host: str = Field(default="localhost")
    ollama_port: int = Field(default=11434, ge=1, le=65535)
    ollama_model: str = Field(default="gemma3:4b")

    # OpenAI
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-4o-mini")

    # OpenRouter
    openrouter_api_key: SecretStr = Field(default=SecretStr(""))
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openrouter_model: str = Field(default="anthropic/claude-3-haiku")
    openrouter_site_url: str = Field(default="https://smartmark-extension.com")
    openrouter_app_name: str = Field(default="SmartMark Extension")

    # Anthropic
    anthropic_api_key: SecretStr = Field(default=SecretStr(""))
    anthropic_base_url: str = Field(default="https://api.anthropic.com")
    anthropic_model: str = Field(default="claude-3-haiku-20240307")

    # Request shaping
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=200, ge=1, le=8192)
    request_timeout: float = Field(
        default=30.0, gt=0, le=600, description="HTTP timeout in seconds"
    )

    # Token budget
    max_context_tokens: int = Field(
        default=50000,
        ge=0,
        description="Token budget for prompt plus folder context (3.5 chars/token estimate)",
    )

    # Taxonomy cache
    cache_ttl_seconds: float = Field(default=3600.0, ge=0)

    # Prompt limits
    prompt_field_max_chars: int = Field(default=300, ge=1)
    main_content_max_chars: int = Field(default=1000, ge=0)

    # Output
    max_suggestions: int = Field(default=5, ge=1, le=20)
    fallback_folder: str = Field(default=FALLBACK_FOLDER, min_length=1, max_length=50)

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("ai_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v):
        """Accept provider names case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def lmstudio_url(self) -> str:
        return f"http://{self.lmstudio_host}:{self.lmstudio_port}"

    @property
    def ollama_url(self) -> str:
        return f"http://{self.ollama_host}:{self.ollama_port}"

    def provider_descriptor(
        self, name: ProviderName | str | None = None
    ) -> ProviderDescriptor:
        """Resolve the descriptor for one backend.

        Args:
            name: Provider name; defaults to the configured ai_provider

        Returns:
            ProviderDescriptor with endpoint, model, credential and limits

        Raises:
            ConfigurationError: If the name is not a supported provider
        """
        raw = self.ai_provider if name is None else name
        if isinstance(raw, ProviderName):
            raw = raw.value
        try:
            provider = ProviderName(str(raw).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unsupported AI provider: {name}", config_key="ai_provider"
            ) from None

        endpoints = {
            ProviderName.GEMINI: (
                self.gemini_base_url,
                self.gemini_model,
                self.gemini_api_key,
            ),
            ProviderName.LMSTUDIO: (self.lmstudio_url, self.lmstudio_model, None),
            ProviderName.OLLAMA: (self.ollama_url, self.ollama_model, None),
            ProviderName.OPENAI: (
                self.openai_base_url,
                self.openai_model,
                self.openai_api_key,
            ),
            ProviderName.OPENROUTER: (
                self.openrouter_base_url,
                self.openrouter_model,
                self.openrouter_api_key,
            ),
            ProviderName.CLAUDE: (
                self.anthropic_base_url,
                self.anthropic_model,
                self.anthropic_api_key,
            ),
        }
        base_url, model, secret = endpoints[provider]

        return ProviderDescriptor(
            name=provider.value,
            base_url=base_url.rstrip("/"),
            model=model,
            api_key=secret.get_secret_value() if secret is not None else "",
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            timeout=self.request_timeout,
        )


@lru_cache(maxsize=1)
def get_config() -> SmartMarkConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        pydantic.ValidationError: If configuration values are invalid.

    Example:
        >>> config = get_config()
        >>> config.ollama_port
        11434
    """
    return SmartMarkConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing."""
    get_config.cache_clear()
