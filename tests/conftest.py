"""Shared pytest fixtures for SmartMark tests.

Fixture Organization:
    - Environment isolation: SMARTMARK_* variables cleared, config singleton reset
    - Sample data fixtures: metadata, bookmark trees, provider descriptors
    - HTTP helpers: real httpx.Response objects for patched client calls
"""

import os
from typing import Any
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from smartmark.config import SmartMarkConfig, reset_config
from smartmark.models import FolderPath, Metadata, ProviderDescriptor, Suggestion
from smartmark.store import InMemoryBookmarkStore


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep host SMARTMARK_* variables and cached config out of tests."""
    for key in list(os.environ):
        if key.startswith("SMARTMARK_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> SmartMarkConfig:
    """Configuration built from defaults only (no .env file)."""
    return SmartMarkConfig(_env_file=None)


@pytest.fixture
def sample_metadata() -> Metadata:
    return Metadata(
        title="ML Tutorial",
        url="https://x.com/ml",
        domain="x.com",
        description="Learn machine learning basics",
        heading="Introduction to Machine Learning",
        url_path=("ml",),
        main_content="This tutorial covers supervised learning.",
    )


@pytest.fixture
def sample_tree() -> dict[str, Any]:
    return {
        "Bookmarks bar": {
            "Tech": {
                "Python": {"Docs": "https://docs.python.org"},
                "Rust": {},
            },
            "AI": {
                "GPT paper": "https://arxiv.org/abs/2005.14165",
                "Attention": "https://arxiv.org/abs/1706.03762",
            },
            "News": {},
        },
        "Other bookmarks": {
            "Recipes": {"Pasta": "https://food.example.com/pasta"},
        },
    }


@pytest.fixture
def store(sample_tree) -> InMemoryBookmarkStore:
    return InMemoryBookmarkStore.from_tree(sample_tree)


def make_descriptor(**overrides) -> ProviderDescriptor:
    values = {
        "name": "ollama",
        "base_url": "http://localhost:11434",
        "model": "gemma3:4b",
        "api_key": "",
        "temperature": 0.7,
        "max_output_tokens": 200,
        "timeout": 5.0,
    }
    values.update(overrides)
    return ProviderDescriptor(**values)


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    text: str | None = None,
    url: str = "http://test/api",
) -> httpx.Response:
    """Real httpx.Response for patching AsyncClient.post."""
    request = httpx.Request("POST", url)
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, json=json_body, request=request)


def make_suggestions(*paths: str, confidence: float = 0.9) -> list[Suggestion]:
    return [Suggestion(FolderPath.parse(p), confidence) for p in paths]


def make_mock_provider(suggestions=None, side_effect=None, name: str = "test-provider"):
    """Mock provider exposing name and get_folder_suggestions."""
    provider = Mock()
    provider.name = name
    provider.get_folder_suggestions = AsyncMock(
        return_value=suggestions if suggestions is not None else [],
        side_effect=side_effect,
    )
    return provider
