"""Token budget management for the folder-context block of a prompt.

Token counts are estimated at ~1 token per 3.5 characters. The estimate is
deterministic and monotonic in text length, which is all the optimizer relies
on; it does not depend on any model's tokenizer.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from .metrics import record_context_optimization
from .security import sanitize_for_prompt

logger = logging.getLogger("smartmark.tokens")

__all__ = [
    "CHARS_PER_TOKEN",
    "DEFAULT_CEILINGS",
    "OptimizationResult",
    "TokenBudgetOptimizer",
    "build_context_section",
    "estimate_tokens",
    "prioritize_folders",
]

CHARS_PER_TOKEN = 3.5
DEFAULT_CEILINGS = (100, 75, 50, 25, 15, 10)
FOLDER_NAME_MAX_CHARS = 200


def estimate_tokens(text: str) -> int:
    """Estimate token count as ceil(len(text) / 3.5)."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _depth(path: str) -> int:
    return len([part for part in path.split("/") if part])


def prioritize_folders(folders: Sequence[str], max_folders: int) -> list[str]:
    """Select at most max_folders folders, shallowest first.

    Depth-1 folders come first in their original order, then deeper folders
    sorted by ascending depth and then lexicographically.
    """
    if not folders or max_folders <= 0:
        return []
    if len(folders) <= max_folders:
        return list(folders)

    roots = [f for f in folders if _depth(f) == 1]
    deeper = sorted((f for f in folders if _depth(f) > 1), key=lambda f: (_depth(f), f))
    return (roots + deeper)[:max_folders]


def build_context_section(folders: Sequence[str]) -> str:
    """Render the taxonomy block appended to the prompt ("" for no folders)."""
    if not folders:
        return ""

    lines = []
    for path in folders:
        name = sanitize_for_prompt(path, max_length=FOLDER_NAME_MAX_CHARS)
        if name:
            lines.append(f"- {name}")
    if not lines:
        return ""

    listing = "\n".join(lines)
    return (
        "\n\nEXISTING BOOKMARK FOLDER STRUCTURE:\n"
        "The user has organized their bookmarks into the following folders. "
        "Please prioritize suggesting folder paths that align with or logically "
        "extend this existing organization:\n\n"
        f"{listing}\n\n"
        "When suggesting new folder paths, consider:\n"
        "1. Using existing folders if the bookmark fits well\n"
        "2. Creating logical sub-folders within existing categories\n"
        "3. Following the user's established naming conventions and organizational patterns\n"
        "4. Maintaining consistency with the existing folder hierarchy\n\n"
    )


@dataclass(frozen=True)
class OptimizationResult:
    """Outcome of fitting folder context to a token budget.

    Attributes:
        folders: Folders to include in the context block
        token_count: Estimated tokens of template plus context
        truncated: True when fewer than all folders were kept
        original_count: Number of folders offered
    """

    folders: list[str] = field(default_factory=list)
    token_count: int = 0
    truncated: bool = False
    original_count: int = 0


class TokenBudgetOptimizer:
    """Greedy fitter of the folder-context block under a token budget.

    Tries the full context first, then each folder-count ceiling in
    descending order, and finally drops the context altogether. Never raises.
    """

    def __init__(self, ceilings: Sequence[int] = DEFAULT_CEILINGS):
        self.ceilings = tuple(sorted(set(ceilings), reverse=True))

    def optimize(
        self,
        folders: Sequence[str],
        template: str | int,
        max_context_tokens: int,
    ) -> OptimizationResult:
        """Fit the folder context to max_context_tokens.

        Args:
            folders: Flattened folder paths
            template: Base prompt text, or its length in characters
            max_context_tokens: Budget for template plus context

        Returns:
            OptimizationResult; folders is empty when nothing fits
        """
        template_chars = template if isinstance(template, int) else len(template or "")
        folders = list(folders or [])

        def cost(selected: Sequence[str]) -> int:
            context = build_context_section(selected)
            return math.ceil((template_chars + len(context)) / CHARS_PER_TOKEN)

        if not folders:
            record_context_optimization("empty")
            return OptimizationResult(token_count=cost([]))

        full_tokens = cost(folders)
        if full_tokens <= max_context_tokens:
            record_context_optimization("full")
            logger.info(
                "context_full",
                extra={"folders": len(folders), "tokens": full_tokens},
            )
            return OptimizationResult(
                folders=folders,
                token_count=full_tokens,
                truncated=False,
                original_count=len(folders),
            )

        logger.warning(
            "context_over_budget",
            extra={
                "folders": len(folders),
                "tokens": full_tokens,
                "budget": max_context_tokens,
            },
        )
        for ceiling in self.ceilings:
            selected = prioritize_folders(folders, ceiling)
            tokens = cost(selected)
            if tokens <= max_context_tokens:
                record_context_optimization("truncated")
                logger.info(
                    "context_truncated",
                    extra={
                        "included": len(selected),
                        "original": len(folders),
                        "ceiling": ceiling,
                        "tokens": tokens,
                    },
                )
                return OptimizationResult(
                    folders=selected,
                    token_count=tokens,
                    truncated=len(selected) < len(folders),
                    original_count=len(folders),
                )

        record_context_optimization("dropped")
        logger.warning(
            "context_dropped",
            extra={"folders": len(folders), "budget": max_context_tokens},
        )
        return OptimizationResult(
            folders=[],
            token_count=cost([]),
            truncated=True,
            original_count=len(folders),
        )
