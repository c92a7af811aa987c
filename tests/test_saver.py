"""Tests for bookmark saving and the classification fallback policy."""

from unittest.mock import AsyncMock, Mock

import pytest

from smartmark.errors import APIError, BookmarkError
from smartmark.models import Metadata
from smartmark.saver import BookmarkSaver, classify_with_fallback, validate_save_data
from smartmark.store import OTHER_BOOKMARKS_ID

from conftest import make_suggestions


def _orchestrator(return_value=None, side_effect=None):
    orchestrator = Mock()
    orchestrator.classify = AsyncMock(return_value=return_value, side_effect=side_effect)
    return orchestrator


# =============================================================================
# Fallback policy
# =============================================================================


class TestClassifyWithFallback:
    """At least one destination is always offered."""

    @pytest.mark.asyncio
    async def test_passthrough(self, sample_metadata):
        suggestions = make_suggestions("AI/Machine Learning")
        result = await classify_with_fallback(_orchestrator(suggestions), sample_metadata)
        assert result == suggestions

    @pytest.mark.asyncio
    async def test_error_becomes_sentinel(self, sample_metadata):
        orchestrator = _orchestrator(side_effect=APIError("boom", provider="gemini", status_code=500))
        result = await classify_with_fallback(orchestrator, sample_metadata)
        assert [s.to_dict() for s in result] == [
            {"folderPath": "Uncategorized", "confidence": 0.5}
        ]

    @pytest.mark.asyncio
    async def test_empty_becomes_custom_sentinel(self, sample_metadata):
        result = await classify_with_fallback(_orchestrator([]), sample_metadata, "Inbox")
        assert str(result[0].folder_path) == "Inbox"

    @pytest.mark.asyncio
    async def test_nested_sentinel_split_into_segments(self, sample_metadata):
        result = await classify_with_fallback(_orchestrator([]), sample_metadata, "Inbox/Later")
        assert result[0].folder_path.segments == ("Inbox", "Later")
        assert result[0].folder_path.depth == 2

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self, sample_metadata):
        orchestrator = _orchestrator(side_effect=TypeError("bug"))
        with pytest.raises(TypeError):
            await classify_with_fallback(orchestrator, sample_metadata)


# =============================================================================
# Saving
# =============================================================================


class TestValidateSaveData:
    def test_valid(self, sample_metadata):
        assert validate_save_data("Tech", sample_metadata) == []

    def test_all_problems(self):
        assert validate_save_data("  ", None) == [
            "No folder path specified",
            "No metadata provided",
        ]

    def test_missing_url_and_title(self):
        assert validate_save_data("Tech", Metadata(title="", url="")) == [
            "No URL in metadata",
            "No title in metadata",
        ]


class TestBookmarkSaver:
    """Folder creation, duplicate handling and error wrapping."""

    @pytest.mark.asyncio
    async def test_saves_into_new_folder(self, store, sample_metadata):
        cache = Mock()
        saver = BookmarkSaver(store, cache=cache)

        node = await saver.save_bookmark("AI/Machine Learning", sample_metadata)

        assert node.url == "https://x.com/ml"
        assert store.path_of(node.id) == "AI/Machine Learning"
        cache.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_path_is_sanitized(self, store, sample_metadata):
        node = await BookmarkSaver(store).save_bookmark("../Tech//Python", sample_metadata)
        assert store.path_of(node.id) == "Tech/Python"

    @pytest.mark.asyncio
    async def test_duplicate_url_reused(self, store, sample_metadata):
        saver = BookmarkSaver(store)
        first = await saver.save_bookmark("Tech", sample_metadata)
        second = await saver.save_bookmark("Tech", sample_metadata)
        assert first.id == second.id
        assert len(await store.search(sample_metadata.url)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_title_updated(self, store):
        saver = BookmarkSaver(store)
        first = await saver.save_bookmark("Tech", Metadata(title="Old", url="https://a.example"))
        second = await saver.save_bookmark("Tech", Metadata(title="New", url="https://a.example"))
        assert second.id == first.id
        assert second.title == "New"

    @pytest.mark.asyncio
    async def test_incomplete_request(self, store):
        with pytest.raises(ValueError, match="No URL in metadata"):
            await BookmarkSaver(store).save_bookmark("Tech", Metadata(title="x", url=""))

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, store, sample_metadata):
        store.create = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        with pytest.raises(BookmarkError) as exc_info:
            await BookmarkSaver(store).save_bookmark("Brand New", sample_metadata)
        assert exc_info.value.operation == "save"
        assert exc_info.value.folder_path == "Brand New"

    @pytest.mark.asyncio
    async def test_custom_start_parent(self, store, sample_metadata):
        saver = BookmarkSaver(store, start_parent_id=OTHER_BOOKMARKS_ID)
        node = await saver.save_bookmark("Reading", sample_metadata)
        parent = next(
            c for c in await store.get_children(OTHER_BOOKMARKS_ID) if c.title == "Reading"
        )
        assert node.parent_id == parent.id
        assert parent.parent_id == OTHER_BOOKMARKS_ID
