"""Bookmark item store interface and in-memory reference store.

The classifier never touches a browser directly; it talks to a BookmarkStore,
an async collaborator exposing the hierarchical item tree. Folders are nodes
without a URL.

InMemoryBookmarkStore mirrors the browser layout:
    "0"  unnamed root
    "1"  Bookmarks bar
    "2"  Other bookmarks
"""

import copy
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from .errors import BookmarkError

logger = logging.getLogger("smartmark.store")

__all__ = [
    "BOOKMARKS_BAR_ID",
    "OTHER_BOOKMARKS_ID",
    "ROOT_CONTAINERS",
    "ROOT_ID",
    "BookmarkNode",
    "BookmarkStore",
    "InMemoryBookmarkStore",
    "find_or_create_folder",
    "is_root_container",
]

ROOT_ID = "0"
BOOKMARKS_BAR_ID = "1"
OTHER_BOOKMARKS_ID = "2"

# Browser-provided top-level containers; never part of a folder path
ROOT_CONTAINERS = (
    "Bookmarks bar",
    "Favorites bar",
    "Other bookmarks",
    "Other favorites",
    "Mobile bookmarks",
    "Bookmarks Menu",
)

_ROOT_CONTAINERS_LOWER = {name.lower() for name in ROOT_CONTAINERS}


def is_root_container(title: Optional[str]) -> bool:
    """Check whether a folder title is a browser root container."""
    if not title:
        return False
    return title.strip().lower() in _ROOT_CONTAINERS_LOWER


@dataclass
class BookmarkNode:
    """Node of the bookmark tree; folders have no URL."""

    id: str
    title: str
    url: Optional[str] = None
    parent_id: Optional[str] = None
    children: list["BookmarkNode"] = field(default_factory=list)

    @property
    def is_folder(self) -> bool:
        return self.url is None


@runtime_checkable
class BookmarkStore(Protocol):
    """Async hierarchical item store."""

    async def get_tree(self) -> list[BookmarkNode]:
        """Return the full tree as a list of top-level nodes."""
        ...

    async def get_children(self, folder_id: str) -> list[BookmarkNode]:
        ...

    async def create(
        self, parent_id: str, title: str, url: Optional[str] = None
    ) -> BookmarkNode:
        ...

    async def move(self, item_id: str, new_parent_id: str) -> BookmarkNode:
        ...

    async def update(self, item_id: str, title: str) -> BookmarkNode:
        ...

    async def search(self, url: str) -> list[BookmarkNode]:
        ...


class InMemoryBookmarkStore:
    """Dict-backed BookmarkStore with the browser's root layout.

    Example:
        >>> store = InMemoryBookmarkStore.from_tree(
        ...     {"Bookmarks bar": {"Tech": {"Python": {}}}}
        ... )
    """

    def __init__(self):
        self._ids = itertools.count(3)
        self._nodes: dict[str, BookmarkNode] = {}
        root = BookmarkNode(id=ROOT_ID, title="")
        self._nodes[ROOT_ID] = root
        for node_id, title in (
            (BOOKMARKS_BAR_ID, "Bookmarks bar"),
            (OTHER_BOOKMARKS_ID, "Other bookmarks"),
        ):
            node = BookmarkNode(id=node_id, title=title, parent_id=ROOT_ID)
            root.children.append(node)
            self._nodes[node_id] = node

    @classmethod
    def from_tree(cls, tree: dict[str, Any]) -> "InMemoryBookmarkStore":
        """Build a store from a nested dict.

        Top-level keys name root containers ("Bookmarks bar", "Other bookmarks").
        Dict values are folders; string values are bookmark URLs.
        """
        store = cls()
        containers = {
            node.title.lower(): node.id for node in store._nodes[ROOT_ID].children
        }
        for container, contents in tree.items():
            parent_id = containers.get(container.lower())
            if parent_id is None:
                node = store._add(ROOT_ID, container)
                parent_id = node.id
            store._load(parent_id, contents or {})
        return store

    def _load(self, parent_id: str, contents: dict[str, Any]) -> None:
        for title, value in contents.items():
            if isinstance(value, str):
                self._add(parent_id, title, value)
            else:
                node = self._add(parent_id, title)
                self._load(node.id, value or {})

    def _add(self, parent_id: str, title: str, url: Optional[str] = None) -> BookmarkNode:
        parent = self._get(parent_id, "create")
        if not parent.is_folder:
            raise BookmarkError(
                f"Parent {parent_id} is not a folder", operation="create"
            )
        node = BookmarkNode(
            id=str(next(self._ids)), title=title, url=url, parent_id=parent_id
        )
        parent.children.append(node)
        self._nodes[node.id] = node
        return node

    def _get(self, item_id: str, operation: str) -> BookmarkNode:
        try:
            return self._nodes[item_id]
        except KeyError:
            raise BookmarkError(
                f"Bookmark node not found: {item_id}", operation=operation
            ) from None

    async def get_tree(self) -> list[BookmarkNode]:
        return [copy.deepcopy(self._nodes[ROOT_ID])]

    async def get_children(self, folder_id: str) -> list[BookmarkNode]:
        folder = self._get(folder_id, "get_children")
        return [copy.deepcopy(child) for child in folder.children]

    async def create(
        self, parent_id: str, title: str, url: Optional[str] = None
    ) -> BookmarkNode:
        node = self._add(parent_id, title, url)
        logger.debug(
            "bookmark_node_created",
            extra={"id": node.id, "parent_id": parent_id, "is_folder": node.is_folder},
        )
        return copy.deepcopy(node)

    async def move(self, item_id: str, new_parent_id: str) -> BookmarkNode:
        node = self._get(item_id, "move")
        new_parent = self._get(new_parent_id, "move")
        if not new_parent.is_folder:
            raise BookmarkError(
                f"Target {new_parent_id} is not a folder", operation="move"
            )
        ancestor: Optional[BookmarkNode] = new_parent
        while ancestor is not None:
            if ancestor.id == item_id:
                raise BookmarkError(
                    "Cannot move a folder into itself", operation="move"
                )
            ancestor = self._nodes.get(ancestor.parent_id) if ancestor.parent_id else None
        if node.parent_id is not None:
            old_parent = self._nodes[node.parent_id]
            old_parent.children = [c for c in old_parent.children if c.id != item_id]
        node.parent_id = new_parent_id
        new_parent.children.append(node)
        return copy.deepcopy(node)

    async def update(self, item_id: str, title: str) -> BookmarkNode:
        node = self._get(item_id, "update")
        node.title = title
        return copy.deepcopy(node)

    async def search(self, url: str) -> list[BookmarkNode]:
        return [
            copy.deepcopy(node)
            for node in self._nodes.values()
            if node.url is not None and node.url == url
        ]

    def path_of(self, item_id: str) -> str:
        """Folder path of an item's parent, root containers excluded."""
        node = self._get(item_id, "path_of")
        parts = []
        parent_id = node.parent_id
        while parent_id is not None:
            parent = self._nodes[parent_id]
            if parent.id == ROOT_ID or (
                parent.parent_id == ROOT_ID and is_root_container(parent.title)
            ):
                break
            parts.append(parent.title)
            parent_id = parent.parent_id
        return "/".join(reversed(parts))


async def find_or_create_folder(
    store: BookmarkStore,
    path: Any,
    start_parent_id: str = BOOKMARKS_BAR_ID,
    cache: Optional[Any] = None,
) -> str:
    """Resolve a folder path under start_parent_id, creating missing segments.

    Idempotent: an existing folder whose title matches case-insensitively is
    reused. Invalidates ``cache`` (a TaxonomyCache) whenever a folder is
    created.

    Args:
        store: Item store
        path: FolderPath, segment sequence or '/'-separated string
        start_parent_id: Folder to resolve under (default: Bookmarks bar)
        cache: Optional TaxonomyCache to invalidate on creation

    Returns:
        Id of the final folder in the path

    Raises:
        BookmarkError: If the store rejects a lookup or creation
    """
    if hasattr(path, "segments"):
        segments = list(path.segments)
    elif isinstance(path, str):
        segments = [part.strip() for part in path.split("/") if part.strip()]
    else:
        segments = [str(part).strip() for part in path if str(part).strip()]

    parent_id = start_parent_id
    created = False
    try:
        for segment in segments:
            children = await store.get_children(parent_id)
            existing = next(
                (
                    child
                    for child in children
                    if child.is_folder and child.title.lower() == segment.lower()
                ),
                None,
            )
            if existing is not None:
                parent_id = existing.id
                continue
            folder = await store.create(parent_id, segment)
            parent_id = folder.id
            created = True
            logger.info(
                "folder_created",
                extra={"folder": segment, "parent_id": folder.parent_id, "id": folder.id},
            )
    finally:
        # Also on partial failure; earlier segments may already exist
        if created and cache is not None:
            cache.invalidate()
    return parent_id
