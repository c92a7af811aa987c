"""Base provider abstract class for AI folder classification.

Defines the capability set every backend adapter implements and the shared
httpx plumbing that maps transport failures onto the SmartMark error
taxonomy:

    httpx.TimeoutException / httpx.HTTPError  ->  NetworkError
    non-2xx status                            ->  APIError(provider, status)
    non-JSON or non-object success body       ->  APIError(provider, status)
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ..errors import APIError, ConfigurationError, NetworkError, SmartMarkError
from ..models import ProviderDescriptor, Suggestion
from ..validation import MAX_SUGGESTIONS, parse_suggestions

logger = logging.getLogger("smartmark.providers")

__all__ = ["BaseProvider", "build_http_client", "extract_chat_completion_text"]


def build_http_client(timeout: float) -> httpx.AsyncClient:
    """Create a pooled AsyncClient for one provider instance."""
    timeout_config = httpx.Timeout(
        timeout,
        connect=min(timeout, 5.0),  # Connection establishment timeout
    )
    limits = httpx.Limits(
        max_keepalive_connections=10,
        max_connections=20,
        keepalive_expiry=10.0,
    )
    return httpx.AsyncClient(
        timeout=timeout_config,
        limits=limits,
        headers={"Accept": "application/json"},
    )


def extract_chat_completion_text(data: dict, provider: str) -> str:
    """Read choices[0].message.content from an OpenAI-style envelope.

    Raises:
        APIError: If the envelope has no message content
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise APIError(
            "Invalid response format or no content returned.", provider=provider
        ) from e
    if not isinstance(content, str) or not content.strip():
        raise APIError(
            "Invalid response format or no content returned.", provider=provider
        )
    return content.strip()


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from a failed response body."""
    fallback = f"{response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return fallback


class BaseProvider(ABC):
    """Abstract base class for classification backends.

    Subclasses define one wire contract: endpoint, headers, request body and
    response envelope. The shared get_folder_suggestions composes them:
    validate_config -> make_request -> parse_response.

    Example:
        >>> async with OllamaProvider(descriptor) as provider:
        ...     suggestions = await provider.get_folder_suggestions(prompt)
    """

    #: Whether the backend rejects requests without a credential
    requires_api_key = False

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        client: Optional[httpx.AsyncClient] = None,
        max_suggestions: int = MAX_SUGGESTIONS,
    ):
        """Initialize provider.

        Args:
            descriptor: Resolved endpoint, model, credential and limits
            client: Optional shared AsyncClient (created if omitted)
            max_suggestions: Cap on validated suggestions
        """
        self.descriptor = descriptor
        self.max_suggestions = max_suggestions
        self._owns_client = client is None
        self.client = client or build_http_client(descriptor.timeout)

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging, metrics and error codes."""

    @property
    def model(self) -> str:
        return self.descriptor.model

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Full request URL."""

    def build_headers(self) -> dict[str, str]:
        """Request headers, including any authentication."""
        return {"Content-Type": "application/json"}

    @abstractmethod
    def prepare_request_body(self, prompt: str) -> dict[str, Any]:
        """JSON body for one classification request."""

    @abstractmethod
    def extract_text(self, data: dict) -> str:
        """Pull the model's text out of the response envelope.

        Raises:
            APIError: If the envelope is structurally invalid
        """

    def validate_config(self) -> None:
        """Check the descriptor is usable.

        Raises:
            ConfigurationError: If credential, endpoint or model is missing
        """
        if self.requires_api_key and not self.descriptor.api_key:
            raise ConfigurationError(
                f"API key is required for {self.name} provider",
                config_key=f"{self.name}_api_key",
            )
        if not self.descriptor.base_url:
            raise ConfigurationError(
                f"Endpoint is not configured for {self.name} provider",
                config_key=f"{self.name}_base_url",
            )
        if not self.descriptor.model:
            raise ConfigurationError(
                f"Model is not configured for {self.name} provider",
                config_key=f"{self.name}_model",
            )

    async def make_request(self, prompt: str) -> dict:
        """Send the prompt and return the decoded response envelope.

        Raises:
            NetworkError: On timeout or transport failure
            APIError: On non-success status or undecodable body
        """
        return await self._post_json(
            self.endpoint, self.prepare_request_body(prompt), self.build_headers()
        )

    def parse_response(self, data: dict) -> list[Suggestion]:
        """Extract the text and validate it into suggestions.

        A text that contains no parseable array yields an empty list.

        Raises:
            APIError: If the envelope itself is invalid
        """
        text = self.extract_text(data)
        logger.debug(
            "provider_raw_response",
            extra={"provider": self.name, "response_preview": text[:200]},
        )
        return parse_suggestions(text, max_suggestions=self.max_suggestions)

    async def get_folder_suggestions(self, prompt: str) -> list[Suggestion]:
        """Validate configuration, call the backend and parse the result.

        Args:
            prompt: Fully built classification prompt

        Returns:
            0-5 suggestions in model order

        Raises:
            ConfigurationError: If the provider is not usable
            NetworkError: On transport failure
            APIError: On backend failure or any unexpected error
        """
        self.validate_config()
        logger.debug(
            "provider_request",
            extra={"provider": self.name, "model": self.model, "prompt_chars": len(prompt)},
        )

        try:
            data = await self.make_request(prompt)
            suggestions = self.parse_response(data)
        except SmartMarkError:
            raise
        except Exception as e:
            logger.error(
                "provider_unexpected_error",
                extra={"provider": self.name, "error": str(e)},
            )
            raise APIError(f"{self.name} API call failed: {e}", provider=self.name) from e

        logger.debug(
            "provider_suggestions",
            extra={"provider": self.name, "count": len(suggestions)},
        )
        return suggestions

    async def _post_json(
        self, url: str, body: dict[str, Any], headers: dict[str, str]
    ) -> dict:
        try:
            response = await self.client.post(url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(
                "provider_timeout", extra={"provider": self.name, "url": url, "error": str(e)}
            )
            raise NetworkError(
                f"{self.name} request timed out: {e}", url=url, method="POST"
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "provider_connection_error",
                extra={"provider": self.name, "url": url, "error": str(e)},
            )
            raise NetworkError(
                f"Cannot connect to {self.name} at {url}. Please ensure it is running and accessible.",
                url=url,
                method="POST",
            ) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "provider_http_error",
                extra={
                    "provider": self.name,
                    "status_code": response.status_code,
                    "error": message,
                },
            )
            raise APIError(
                f"{self.name} API error: {message}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise APIError(
                f"{self.name} returned a non-JSON response",
                provider=self.name,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise APIError(
                f"{self.name} returned an unexpected response shape",
                provider=self.name,
                status_code=response.status_code,
            )
        return data

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "BaseProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
