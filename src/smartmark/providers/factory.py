"""Provider factory keyed by ProviderName.

Resolves a provider name plus configuration into a constructed adapter. The
descriptor is resolved once here; adapters never read configuration later.
"""

import logging
from dataclasses import replace
from typing import Optional, Union

from ..config import SmartMarkConfig, get_config
from ..errors import ConfigurationError
from ..models import ProviderName
from .base import BaseProvider
from .claude import ClaudeProvider
from .gemini import GeminiProvider
from .lmstudio import LMStudioProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider
from .openrouter import OpenRouterProvider

logger = logging.getLogger("smartmark.providers.factory")

__all__ = [
    "PROVIDER_CLASSES",
    "create_current_provider",
    "create_provider",
    "get_current_provider_name",
]

PROVIDER_CLASSES: dict[ProviderName, type[BaseProvider]] = {
    ProviderName.GEMINI: GeminiProvider,
    ProviderName.LMSTUDIO: LMStudioProvider,
    ProviderName.OLLAMA: OllamaProvider,
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.OPENROUTER: OpenRouterProvider,
    ProviderName.CLAUDE: ClaudeProvider,
}


def create_provider(
    name: Union[ProviderName, str],
    config: Optional[SmartMarkConfig] = None,
    **overrides,
) -> BaseProvider:
    """Create an adapter for the named backend.

    Args:
        name: Provider name (case-insensitive)
        config: Configuration (default: get_config())
        **overrides: Descriptor field overrides (api_key, base_url, model,
            temperature, max_output_tokens, timeout) plus ``client`` to
            share an httpx.AsyncClient

    Returns:
        Constructed provider

    Raises:
        ConfigurationError: If the name is not a supported provider

    Example:
        >>> provider = create_provider("ollama", model="llama3.2:3b")
    """
    config = config or get_config()
    descriptor = config.provider_descriptor(name)
    client = overrides.pop("client", None)

    unknown = set(overrides) - {
        "api_key",
        "base_url",
        "model",
        "temperature",
        "max_output_tokens",
        "timeout",
    }
    if unknown:
        raise ConfigurationError(
            f"Unknown provider option(s): {', '.join(sorted(unknown))}",
            config_key=sorted(unknown)[0],
        )
    if overrides:
        descriptor = replace(
            descriptor, **{k: v for k, v in overrides.items() if v is not None}
        )

    provider_name = ProviderName(descriptor.name)
    provider_cls = PROVIDER_CLASSES[provider_name]
    kwargs = {"max_suggestions": config.max_suggestions}
    if provider_name is ProviderName.OPENROUTER:
        kwargs["site_url"] = config.openrouter_site_url
        kwargs["app_name"] = config.openrouter_app_name

    logger.info(
        "provider_created",
        extra={"provider": provider_name.value, "model": descriptor.model},
    )
    return provider_cls(descriptor, client, **kwargs)


def get_current_provider_name(config: Optional[SmartMarkConfig] = None) -> ProviderName:
    """Configured provider name (default: gemini)."""
    return (config or get_config()).ai_provider


def create_current_provider(
    config: Optional[SmartMarkConfig] = None, **overrides
) -> BaseProvider:
    """Create an adapter for the configured provider."""
    config = config or get_config()
    return create_provider(get_current_provider_name(config), config, **overrides)
