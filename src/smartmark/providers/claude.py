"""Claude (Anthropic) provider.

Uses the Anthropic SDK's AsyncAnthropic client over this provider's pooled
httpx client. SDK retries are disabled; retry policy belongs to the caller
(see smartmark.recovery).
"""

import logging
from typing import Any, Optional

import anthropic
import httpx

from ..errors import APIError, NetworkError
from ..models import ProviderDescriptor, ProviderName
from .base import BaseProvider

logger = logging.getLogger("smartmark.providers.claude")

__all__ = ["ClaudeProvider"]


class ClaudeProvider(BaseProvider):
    """Claude/Anthropic Messages API provider."""

    requires_api_key = True

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        super().__init__(descriptor, client, **kwargs)
        self._anthropic = anthropic.AsyncAnthropic(
            api_key=descriptor.api_key or None,
            base_url=descriptor.base_url or None,
            timeout=descriptor.timeout,
            max_retries=0,
            http_client=self.client,
        )

    @property
    def name(self) -> str:
        return ProviderName.CLAUDE.value

    @property
    def endpoint(self) -> str:
        return f"{self.descriptor.base_url}/v1/messages"

    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.descriptor.model,
            "max_tokens": self.descriptor.max_output_tokens,
            "temperature": self.descriptor.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def make_request(self, prompt: str) -> dict:
        """Send the prompt through the SDK and return the message as a dict.

        Raises:
            NetworkError: On SDK connection failure or timeout
            APIError: On a non-success status from the API
        """
        try:
            message = await self._anthropic.messages.create(
                **self.prepare_request_body(prompt)
            )
        except anthropic.APIConnectionError as e:
            logger.error("claude_connection_error", extra={"error": str(e)})
            raise NetworkError(
                f"Cannot connect to claude: {e}", url=self.endpoint, method="POST"
            ) from e
        except anthropic.APIStatusError as e:
            logger.error(
                "claude_http_error",
                extra={"status_code": e.status_code, "error": str(e)},
            )
            raise APIError(
                f"claude API error: {e.message}",
                provider=self.name,
                status_code=e.status_code,
            ) from e
        return message.model_dump()

    def extract_text(self, data: dict) -> str:
        blocks = data.get("content")
        if isinstance(blocks, list):
            for block in blocks:
                if (
                    isinstance(block, dict)
                    and block.get("type", "text") == "text"
                    and isinstance(block.get("text"), str)
                    and block["text"].strip()
                ):
                    return block["text"].strip()
        raise APIError(
            "Invalid response format or no content returned.", provider=self.name
        )
