"""OpenRouter provider.

OpenAI-compatible chat completions, plus the attribution headers OpenRouter
uses for routing and app rankings.
"""

import logging
from typing import Any, Optional

import httpx

from ..models import ProviderDescriptor, ProviderName
from .base import BaseProvider, extract_chat_completion_text

logger = logging.getLogger("smartmark.providers.openrouter")

__all__ = ["OpenRouterProvider"]

DEFAULT_SITE_URL = "https://smartmark-extension.com"
DEFAULT_APP_NAME = "SmartMark Extension"


class OpenRouterProvider(BaseProvider):
    """OpenRouter provider for access to many hosted models."""

    requires_api_key = True

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        client: Optional[httpx.AsyncClient] = None,
        site_url: str = DEFAULT_SITE_URL,
        app_name: str = DEFAULT_APP_NAME,
        **kwargs,
    ):
        """Initialize OpenRouter provider.

        Args:
            descriptor: Resolved endpoint, model, credential and limits
            client: Optional shared AsyncClient
            site_url: Sent as HTTP-Referer
            app_name: Sent as X-Title
        """
        super().__init__(descriptor, client, **kwargs)
        self.site_url = site_url
        self.app_name = app_name

    @property
    def name(self) -> str:
        return ProviderName.OPENROUTER.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/chat/completions"

    def build_headers(self) -> dict[str, str]:
        headers = super().build_headers()
        headers["Authorization"] = f"Bearer {self.descriptor.api_key}"
        # Required OpenRouter headers for proper routing
        headers["HTTP-Referer"] = self.site_url
        headers["X-Title"] = self.app_name
        return headers

    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.descriptor.temperature,
            "max_tokens": self.descriptor.max_output_tokens,
        }

    def extract_text(self, data: dict) -> str:
        return extract_chat_completion_text(data, self.name)
