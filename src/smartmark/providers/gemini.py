"""Google Gemini provider.

Wire contract: POST {base}/models/{model}:generateContent with the key in the
``x-goog-api-key`` header. Text is under
``candidates[0].content.parts[0].text``; a SAFETY finish reason means the
request was blocked and is reported as an APIError.
"""

import logging
from typing import Any

from ..errors import APIError
from ..models import ProviderName
from .base import BaseProvider

logger = logging.getLogger("smartmark.providers.gemini")

__all__ = ["GeminiProvider"]


class GeminiProvider(BaseProvider):
    """Google Gemini generateContent provider."""

    requires_api_key = True

    @property
    def name(self) -> str:
        return ProviderName.GEMINI.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/models/{self.descriptor.model}:generateContent"

    def build_headers(self) -> dict[str, str]:
        headers = super().build_headers()
        headers["x-goog-api-key"] = self.descriptor.api_key
        return headers

    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.descriptor.temperature,
                "maxOutputTokens": self.descriptor.max_output_tokens,
            },
        }

    def extract_text(self, data: dict) -> str:
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise APIError(
                "Invalid response format or no content returned.", provider=self.name
            )

        first = candidates[0] if isinstance(candidates[0], dict) else {}
        if first.get("finishReason") == "SAFETY":
            logger.warning("gemini_safety_block", extra={"model": self.model})
            raise APIError(
                "The request was blocked due to safety concerns.", provider=self.name
            )

        try:
            text = first["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise APIError(
                "Invalid response format or no content returned.", provider=self.name
            ) from e
        if not isinstance(text, str) or not text.strip():
            raise APIError(
                "Invalid response format or no content returned.", provider=self.name
            )
        return text.strip()
