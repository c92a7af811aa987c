"""Bookmark classification orchestrator.

Runs one classification end to end:

    TaxonomyCache -> TokenBudgetOptimizer -> build_prompt -> provider -> validator

Typed errors from the provider and validator propagate unchanged. Choosing a
default folder on failure is a caller policy (see smartmark.saver).
"""

import logging
import time
from typing import Optional

from .config import SmartMarkConfig, get_config
from .errors import SmartMarkError
from .metrics import record_classification
from .models import Metadata, Suggestion
from .prompts import build_prompt
from .providers import BaseProvider, create_provider
from .store import BookmarkStore
from .taxonomy import TaxonomyCache
from .tokens import TokenBudgetOptimizer, build_context_section

logger = logging.getLogger("smartmark.classifier")

__all__ = ["ClassificationOrchestrator"]


class ClassificationOrchestrator:
    """Classify bookmarks into folder-path suggestions.

    Stateless between calls apart from the shared TaxonomyCache. Calls may
    be issued concurrently.

    Attributes:
        provider: Backend adapter
        cache: Taxonomy cache (shared with whoever creates folders)
        optimizer: Context fitter
        max_context_tokens: Token budget for prompt plus context
    """

    def __init__(
        self,
        provider: BaseProvider,
        cache: TaxonomyCache,
        optimizer: Optional[TokenBudgetOptimizer] = None,
        max_context_tokens: int = 50000,
        field_max_chars: int = 300,
        content_max_chars: int = 1000,
    ):
        self.provider = provider
        self.cache = cache
        self.optimizer = optimizer or TokenBudgetOptimizer()
        self.max_context_tokens = max_context_tokens
        self.field_max_chars = field_max_chars
        self.content_max_chars = content_max_chars

    @classmethod
    def from_config(
        cls,
        store: BookmarkStore,
        config: Optional[SmartMarkConfig] = None,
        provider: Optional[BaseProvider] = None,
    ) -> "ClassificationOrchestrator":
        """Build the cache and configured provider for a store."""
        config = config or get_config()
        return cls(
            provider=provider or create_provider(config.ai_provider, config),
            cache=TaxonomyCache(store, ttl_seconds=config.cache_ttl_seconds),
            max_context_tokens=config.max_context_tokens,
            field_max_chars=config.prompt_field_max_chars,
            content_max_chars=config.main_content_max_chars,
        )

    def _build_prompt(self, metadata: Metadata, context_section: str = "") -> str:
        return build_prompt(
            metadata,
            context_section,
            field_max_chars=self.field_max_chars,
            content_max_chars=self.content_max_chars,
        )

    async def build_prompt_for(self, metadata: Metadata) -> str:
        """Assemble the prompt for metadata with budget-fitted folder context."""
        folders = await self.cache.get_folders()
        base_prompt = self._build_prompt(metadata)
        result = self.optimizer.optimize(folders, base_prompt, self.max_context_tokens)
        return self._build_prompt(metadata, build_context_section(result.folders))

    async def classify(self, metadata: Metadata) -> list[Suggestion]:
        """Classify one bookmark.

        Args:
            metadata: Page metadata

        Returns:
            0-5 suggestions in model order; empty when the model's text held
            no parseable array

        Raises:
            ConfigurationError: Provider is not usable
            NetworkError: Transport failure
            APIError: Backend failure or malformed envelope
        """
        start_time = time.perf_counter()
        prompt = await self.build_prompt_for(metadata)

        try:
            suggestions = await self.provider.get_folder_suggestions(prompt)
        except SmartMarkError as e:
            record_classification(
                self.provider.name, False, time.perf_counter() - start_time
            )
            logger.error(
                "classification_failed",
                extra={
                    "provider": self.provider.name,
                    "error_code": e.code,
                    "error": e.message,
                },
            )
            raise

        latency = time.perf_counter() - start_time
        record_classification(
            self.provider.name, True, latency, suggestion_count=len(suggestions)
        )
        logger.info(
            "classification_complete",
            extra={
                "provider": self.provider.name,
                "suggestions": len(suggestions),
                "latency_ms": round(latency * 1000, 2),
                "top": str(suggestions[0].folder_path) if suggestions else None,
            },
        )
        return suggestions
