"""Tests for the in-memory bookmark store and folder resolution."""

from unittest.mock import AsyncMock, Mock

import pytest

from smartmark.errors import BookmarkError
from smartmark.models import FolderPath
from smartmark.store import (
    BOOKMARKS_BAR_ID,
    OTHER_BOOKMARKS_ID,
    BookmarkStore,
    InMemoryBookmarkStore,
    find_or_create_folder,
    is_root_container,
)


async def _child_titles(store, folder_id):
    return [child.title for child in await store.get_children(folder_id)]


# =============================================================================
# InMemoryBookmarkStore
# =============================================================================


class TestInMemoryBookmarkStore:
    """Store operations and error surfaces."""

    def test_satisfies_protocol(self, store):
        assert isinstance(store, BookmarkStore)

    @pytest.mark.asyncio
    async def test_root_layout(self):
        store = InMemoryBookmarkStore()
        tree = await store.get_tree()
        assert tree[0].id == "0"
        assert [c.title for c in tree[0].children] == ["Bookmarks bar", "Other bookmarks"]

    @pytest.mark.asyncio
    async def test_from_tree(self, store):
        assert await _child_titles(store, BOOKMARKS_BAR_ID) == ["Tech", "AI", "News"]
        assert await _child_titles(store, OTHER_BOOKMARKS_ID) == ["Recipes"]

    @pytest.mark.asyncio
    async def test_reads_are_copies(self, store):
        tree = await store.get_tree()
        tree[0].children.clear()
        assert (await store.get_tree())[0].children

    @pytest.mark.asyncio
    async def test_create_and_search(self, store):
        node = await store.create(BOOKMARKS_BAR_ID, "Example", "https://example.com")
        assert node.parent_id == BOOKMARKS_BAR_ID
        assert not node.is_folder
        found = await store.search("https://example.com")
        assert [n.id for n in found] == [node.id]

    @pytest.mark.asyncio
    async def test_create_under_bookmark_fails(self, store):
        bookmark = (await store.search("https://docs.python.org"))[0]
        with pytest.raises(BookmarkError):
            await store.create(bookmark.id, "Nested")

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        with pytest.raises(BookmarkError) as exc_info:
            await store.get_children("999")
        assert exc_info.value.operation == "get_children"

    @pytest.mark.asyncio
    async def test_move(self, store):
        bookmark = (await store.search("https://docs.python.org"))[0]
        moved = await store.move(bookmark.id, OTHER_BOOKMARKS_ID)
        assert moved.parent_id == OTHER_BOOKMARKS_ID
        assert store.path_of(bookmark.id) == ""
        assert "Docs" in await _child_titles(store, OTHER_BOOKMARKS_ID)

    @pytest.mark.asyncio
    async def test_move_folder_into_itself_fails(self, store):
        tech = next(
            c for c in await store.get_children(BOOKMARKS_BAR_ID) if c.title == "Tech"
        )
        python = next(c for c in await store.get_children(tech.id) if c.title == "Python")
        with pytest.raises(BookmarkError):
            await store.move(tech.id, python.id)

    @pytest.mark.asyncio
    async def test_update_title(self, store):
        bookmark = (await store.search("https://docs.python.org"))[0]
        updated = await store.update(bookmark.id, "Python Docs")
        assert updated.title == "Python Docs"

    @pytest.mark.asyncio
    async def test_path_of(self, store):
        bookmark = (await store.search("https://docs.python.org"))[0]
        assert store.path_of(bookmark.id) == "Tech/Python"


class TestIsRootContainer:
    @pytest.mark.parametrize("title", ["Bookmarks bar", "other bookmarks", " Favorites bar "])
    def test_root_containers(self, title):
        assert is_root_container(title)

    @pytest.mark.parametrize("title", ["Tech", "", None])
    def test_regular_folders(self, title):
        assert not is_root_container(title)


# =============================================================================
# find_or_create_folder
# =============================================================================


class TestFindOrCreateFolder:
    """Idempotent, case-insensitive folder resolution."""

    @pytest.mark.asyncio
    async def test_existing_path_reused(self, store):
        cache = Mock()
        folder_id = await find_or_create_folder(store, "tech/PYTHON", cache=cache)
        bookmark = (await store.search("https://docs.python.org"))[0]
        assert folder_id == bookmark.parent_id
        cache.invalidate.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_segments_created(self, store):
        cache = Mock()
        folder_id = await find_or_create_folder(
            store, FolderPath.parse("Tech/Python/Async"), cache=cache
        )
        children = await store.get_children(folder_id)
        assert children == []
        assert await _child_titles(store, BOOKMARKS_BAR_ID) == ["Tech", "AI", "News"]
        cache.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_idempotent(self, store):
        first = await find_or_create_folder(store, ["Gaming", "Retro"])
        second = await find_or_create_folder(store, "gaming/retro")
        assert first == second
        assert (await _child_titles(store, BOOKMARKS_BAR_ID)).count("Gaming") == 1

    @pytest.mark.asyncio
    async def test_bookmark_with_same_title_is_not_a_folder(self):
        store = InMemoryBookmarkStore.from_tree(
            {"Bookmarks bar": {"Gaming": "https://games.example.com"}}
        )
        folder_id = await find_or_create_folder(store, "Gaming")
        children = await store.get_children(BOOKMARKS_BAR_ID)
        assert [c.is_folder for c in children] == [False, True]
        assert children[1].id == folder_id

    @pytest.mark.asyncio
    async def test_custom_start_parent(self, store):
        folder_id = await find_or_create_folder(
            store, "Recipes/Italian", start_parent_id=OTHER_BOOKMARKS_ID
        )
        assert store.path_of(folder_id) == "Recipes"

    @pytest.mark.asyncio
    async def test_partial_creation_still_invalidates(self):
        class FailingSecondCreate(InMemoryBookmarkStore):
            creates = 0

            async def create(self, parent_id, title, url=None):
                self.creates += 1
                if self.creates == 2:
                    raise BookmarkError("quota exceeded", operation="create")
                return await super().create(parent_id, title, url)

        failing = FailingSecondCreate()
        cache = Mock()
        with pytest.raises(BookmarkError):
            await find_or_create_folder(failing, "Science/Physics", cache=cache)

        assert await _child_titles(failing, BOOKMARKS_BAR_ID) == ["Science"]
        cache.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_first_create_does_not_invalidate(self):
        store = Mock()
        store.get_children = AsyncMock(return_value=[])
        store.create = AsyncMock(side_effect=BookmarkError("denied", operation="create"))
        cache = Mock()
        with pytest.raises(BookmarkError):
            await find_or_create_folder(store, "Science", cache=cache)
        cache.invalidate.assert_not_called()
