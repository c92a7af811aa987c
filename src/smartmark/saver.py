"""Bookmark saving and the classification fallback policy.

The orchestrator propagates errors and may return an empty list; callers that
must always show the user at least one destination apply
classify_with_fallback, which substitutes a single sentinel suggestion.
"""

import logging
from typing import Any, Optional

from .errors import BookmarkError, SmartMarkError
from .models import DEFAULT_CONFIDENCE, FALLBACK_FOLDER, Metadata, Suggestion
from .store import BOOKMARKS_BAR_ID, BookmarkNode, BookmarkStore, find_or_create_folder
from .validation import sanitize_folder_path

logger = logging.getLogger("smartmark.saver")

__all__ = ["BookmarkSaver", "classify_with_fallback", "validate_save_data"]


async def classify_with_fallback(
    orchestrator: Any,
    metadata: Metadata,
    fallback_folder: str = FALLBACK_FOLDER,
) -> list[Suggestion]:
    """Classify, substituting the sentinel folder on error or empty result.

    Args:
        orchestrator: ClassificationOrchestrator (anything with classify())
        metadata: Page metadata
        fallback_folder: Sentinel folder name

    Returns:
        1-5 suggestions
    """
    try:
        suggestions = await orchestrator.classify(metadata)
    except SmartMarkError as e:
        logger.warning(
            "classification_fallback",
            extra={"reason": e.code, "error": e.message, "folder": fallback_folder},
        )
        return [Suggestion(sanitize_folder_path(fallback_folder), DEFAULT_CONFIDENCE)]

    if not suggestions:
        logger.warning(
            "classification_fallback",
            extra={"reason": "no_suggestions", "folder": fallback_folder},
        )
        return [Suggestion(sanitize_folder_path(fallback_folder), DEFAULT_CONFIDENCE)]
    return suggestions


def validate_save_data(folder_path: Any, metadata: Optional[Metadata]) -> list[str]:
    """List the problems with a save request (empty when valid)."""
    errors = []
    if not folder_path or (isinstance(folder_path, str) and not folder_path.strip()):
        errors.append("No folder path specified")
    if metadata is None:
        errors.append("No metadata provided")
    else:
        if not metadata.url:
            errors.append("No URL in metadata")
        if not metadata.title:
            errors.append("No title in metadata")
    return errors


class BookmarkSaver:
    """Saves bookmarks into (possibly new) folders.

    Folder creation invalidates the shared TaxonomyCache so the next
    classification sees the new folder.
    """

    def __init__(
        self,
        store: BookmarkStore,
        cache: Optional[Any] = None,
        start_parent_id: str = BOOKMARKS_BAR_ID,
    ):
        self.store = store
        self.cache = cache
        self.start_parent_id = start_parent_id

    async def save_bookmark(self, folder_path: Any, metadata: Metadata) -> BookmarkNode:
        """Save a bookmark under folder_path, avoiding duplicates.

        A bookmark with the same URL already in the target folder is reused
        (its title is updated if it changed).

        Args:
            folder_path: FolderPath or path string (sanitized here)
            metadata: Page metadata providing title and URL

        Returns:
            The created or existing bookmark node

        Raises:
            ValueError: If the request is incomplete
            BookmarkError: If the store rejects an operation
        """
        problems = validate_save_data(folder_path, metadata)
        if problems:
            raise ValueError("; ".join(problems))

        path = sanitize_folder_path(str(folder_path))
        try:
            folder_id = await find_or_create_folder(
                self.store, path, self.start_parent_id, cache=self.cache
            )
            children = await self.store.get_children(folder_id)
            existing = next(
                (child for child in children if child.url == metadata.url), None
            )
            if existing is not None:
                logger.info(
                    "bookmark_exists",
                    extra={"folder": str(path), "bookmark_id": existing.id},
                )
                if existing.title != metadata.title:
                    return await self.store.update(existing.id, metadata.title)
                return existing

            node = await self.store.create(folder_id, metadata.title, metadata.url)
        except SmartMarkError:
            raise
        except Exception as e:
            raise BookmarkError(
                f"Failed to save bookmark: {e}",
                operation="save",
                folder_path=str(path),
            ) from e

        logger.info(
            "bookmark_saved", extra={"folder": str(path), "bookmark_id": node.id}
        )
        return node
