"""LM Studio provider for local classification.

LM Studio serves an OpenAI-compatible chat completions API without
authentication; it answers with whatever model is loaded.
"""

import logging
from typing import Any

from ..models import ProviderName
from .base import BaseProvider, extract_chat_completion_text

logger = logging.getLogger("smartmark.providers.lmstudio")

__all__ = ["LMStudioProvider"]


class LMStudioProvider(BaseProvider):
    """LM Studio local server provider."""

    @property
    def name(self) -> str:
        return ProviderName.LMSTUDIO.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/v1/chat/completions"

    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.descriptor.temperature,
            "max_tokens": self.descriptor.max_output_tokens,
            "stream": False,
        }

    def extract_text(self, data: dict) -> str:
        return extract_chat_completion_text(data, self.name)
