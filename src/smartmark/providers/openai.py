"""OpenAI chat completions provider."""

import logging
from typing import Any

from ..models import ProviderName
from .base import BaseProvider, extract_chat_completion_text

logger = logging.getLogger("smartmark.providers.openai")

__all__ = ["OpenAIProvider"]


class OpenAIProvider(BaseProvider):
    """OpenAI provider using bearer-token authentication."""

    requires_api_key = True

    @property
    def name(self) -> str:
        return ProviderName.OPENAI.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/chat/completions"

    def build_headers(self) -> dict[str, str]:
        headers = super().build_headers()
        headers["Authorization"] = f"Bearer {self.descriptor.api_key}"
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
