"""Taxonomy cache: flattened folder paths of the user's bookmark tree.

The folder taxonomy is expensive to fetch and changes rarely, so it is kept in
memory with a TTL. A fetch failure never propagates: the last snapshot is
served (even if expired) and otherwise an empty list.
"""

import logging
import time
from collections.abc import Callable, Iterable
from typing import Optional

from .metrics import record_cache_event
from .models import CacheEntry
from .store import ROOT_ID, BookmarkNode, BookmarkStore, is_root_container

logger = logging.getLogger("smartmark.taxonomy")

__all__ = ["DEFAULT_TTL_SECONDS", "TaxonomyCache", "flatten_folder_paths"]

DEFAULT_TTL_SECONDS = 3600.0


def flatten_folder_paths(tree: Iterable[BookmarkNode]) -> list[str]:
    """Flatten a bookmark tree into '/'-joined folder paths, depth-first.

    The unnamed root is skipped, and first-level root containers ("Bookmarks
    bar", "Other bookmarks", ...) are traversed without appearing in paths.
    Bookmarks (nodes with a URL) are ignored.

    Example:
        Bookmarks bar > Tech > Python  =>  ["Tech", "Tech/Python"]
    """
    paths: list[str] = []

    def traverse(nodes: Iterable[BookmarkNode], current: str) -> None:
        for node in nodes:
            if not node.is_folder:
                continue
            title = (node.title or "").strip()
            if node.id == ROOT_ID or not title:
                traverse(node.children, current)
                continue
            if not current and is_root_container(title):
                traverse(node.children, "")
                continue
            path = f"{current}/{title}" if current else title
            paths.append(path)
            traverse(node.children, path)

    traverse(tree or [], "")
    return paths


class TaxonomyCache:
    """TTL cache of the flattened folder taxonomy.

    Owns exactly one CacheEntry. Concurrent callers may both miss and both
    refetch; the later write wins, which is harmless because the result is
    idempotent.

    Attributes:
        store: Item store providing get_tree()
        ttl_seconds: Snapshot lifetime
    """

    def __init__(
        self,
        store: BookmarkStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    async def get_folders(self, force_refresh: bool = False) -> list[str]:
        """Return the folder taxonomy, refetching when missing or stale.

        Args:
            force_refresh: Bypass a fresh cache entry

        Returns:
            List of folder paths (a copy; callers may mutate it)
        """
        now = self._clock()
        if (
            not force_refresh
            and self._entry is not None
            and not self._entry.is_expired(now)
        ):
            record_cache_event("hit")
            return list(self._entry.folders)

        record_cache_event("miss")
        try:
            tree = await self.store.get_tree()
            folders = flatten_folder_paths(tree)
        except Exception as e:
            # Store failures degrade to the last known snapshot
            if self._entry is not None and self._entry.folders:
                record_cache_event("stale_fallback")
                logger.warning(
                    "taxonomy_fetch_failed_using_stale",
                    extra={"error": str(e), "folders": len(self._entry.folders)},
                )
                return list(self._entry.folders)
            record_cache_event("empty_fallback")
            logger.warning("taxonomy_fetch_failed_empty", extra={"error": str(e)})
            return []

        self._entry = CacheEntry(
            folders=tuple(folders), expires_at=self._clock() + self.ttl_seconds
        )
        logger.info(
            "taxonomy_refreshed",
            extra={"folders": len(folders), "ttl_seconds": self.ttl_seconds},
        )
        return list(folders)

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read refetches."""
        self._entry = None
        record_cache_event("invalidate")
        logger.debug("taxonomy_invalidated")
