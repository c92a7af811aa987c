"""Ollama provider for local LLM classification.

Wire contract: POST http://host:port/api/generate with format "json" and
streaming disabled; the model's text is under the top-level ``response`` key.
"""

import logging
from typing import Any

from ..errors import APIError
from ..models import ProviderName
from .base import BaseProvider

logger = logging.getLogger("smartmark.providers.ollama")

__all__ = ["OllamaProvider"]


class OllamaProvider(BaseProvider):
    """Ollama provider for free, local classification."""

    @property
    def name(self) -> str:
        return ProviderName.OLLAMA.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/api/generate"

    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "prompt": prompt,
            "format": "json",
            "stream": False,
            "options": {
                "temperature": self.descriptor.temperature,
                "num_predict": self.descriptor.max_output_tokens,
            },
        }

    def extract_text(self, data: dict) -> str:
        text = data.get("response")
        if not isinstance(text, str) or not text.strip():
            raise APIError(
                "Invalid response format or no content returned.", provider=self.name
            )
        return text.strip()
