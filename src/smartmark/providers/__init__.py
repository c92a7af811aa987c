"""AI backend adapters for bookmark classification."""

from ..models import ProviderName
from .base import BaseProvider
from .claude import ClaudeProvider
from .factory import (
    PROVIDER_CLASSES,
    create_current_provider,
    create_provider,
    get_current_provider_name,
)
from .gemini import GeminiProvider
from .lmstudio import LMStudioProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider
from .openrouter import OpenRouterProvider

__all__ = [
    "PROVIDER_CLASSES",
    "BaseProvider",
    "ClaudeProvider",
    "GeminiProvider",
    "LMStudioProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ProviderName",
    "create_current_provider",
    "create_provider",
    "get_current_provider_name",
]
