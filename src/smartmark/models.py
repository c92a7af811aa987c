"""Data models for bookmark classification and migration.

Defines the immutable value types that flow through the classification
pipeline. None of these are persisted by this package.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse

from .errors import ValidationError

__all__ = [
    "DEFAULT_CONFIDENCE",
    "FALLBACK_FOLDER",
    "MAX_PATH_DEPTH",
    "MAX_SEGMENT_LENGTH",
    "RESERVED_CHARS",
    "CacheEntry",
    "FolderPath",
    "Metadata",
    "MigrationProposal",
    "MigrationResult",
    "ProviderDescriptor",
    "ProviderName",
    "Suggestion",
]

MAX_PATH_DEPTH = 3
MAX_SEGMENT_LENGTH = 50

# Filesystem-reserved characters and control characters
RESERVED_CHARS = re.compile(r'[<>:"|?*\\\x00-\x1f\x7f]')

DEFAULT_CONFIDENCE = 0.5
FALLBACK_FOLDER = "Uncategorized"


class ProviderName(str, Enum):
    """Supported AI backends."""

    GEMINI = "gemini"
    LMSTUDIO = "lmstudio"
    OLLAMA = "ollama"
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    CLAUDE = "claude"


@dataclass(frozen=True)
class Metadata:
    """Page metadata used as classification input.

    Supplied by an external metadata extractor; treated as opaque input.

    Attributes:
        title: Page title
        url: Full URL
        domain: Hostname of the URL
        description: Meta description
        heading: Main heading (h1)
        author: Optional author
        published_date: Optional publication date
        url_path: Ordered URL path segments
        keywords: Optional keywords string
        main_content: Optional main content snippet
    """

    title: str
    url: str
    domain: str = ""
    description: str = ""
    heading: str = ""
    author: str | None = None
    published_date: str | None = None
    url_path: tuple[str, ...] = ()
    keywords: str | None = None
    main_content: str | None = None

    @classmethod
    def from_bookmark(
        cls, title: str, url: str, main_content: str | None = None
    ) -> "Metadata":
        """Build metadata for an already-stored bookmark.

        Only title and URL are known; domain and path segments are derived
        from the URL.
        """
        parsed = urlparse(url or "")
        segments = tuple(part for part in parsed.path.split("/") if part)
        return cls(
            title=title or "",
            url=url or "",
            domain=parsed.hostname or "",
            url_path=segments,
            main_content=main_content,
        )


@dataclass(frozen=True)
class FolderPath:
    """Ordered sequence of 1-3 non-empty category segments."""

    segments: tuple[str, ...]

    def __post_init__(self):
        if not 1 <= len(self.segments) <= MAX_PATH_DEPTH:
            raise ValidationError(
                f"Folder path must have 1-{MAX_PATH_DEPTH} segments, got {len(self.segments)}",
                field="segments",
                value=self.segments,
            )
        for segment in self.segments:
            if not segment or not segment.strip():
                raise ValidationError(
                    "Folder path segments must be non-empty",
                    field="segments",
                    value=self.segments,
                )
            if len(segment) > MAX_SEGMENT_LENGTH:
                raise ValidationError(
                    f"Folder name too long (max {MAX_SEGMENT_LENGTH} characters)",
                    field="segments",
                    value=segment,
                )
            if "/" in segment or ".." in segment:
                raise ValidationError(
                    "Separator or traversal sequence in folder segment",
                    field="segments",
                    value=segment,
                )
            if RESERVED_CHARS.search(segment):
                raise ValidationError(
                    "Reserved character in folder segment",
                    field="segments",
                    value=segment,
                )

    @classmethod
    def parse(cls, text: str) -> "FolderPath":
        """Split an already-clean canonical path on '/'."""
        return cls(tuple(part.strip() for part in text.split("/") if part.strip()))

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def root(self) -> str:
        return self.segments[0]

    def __str__(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True)
class Suggestion:
    """Candidate folder path with confidence clamped to [0, 1]."""

    folder_path: FolderPath
    confidence: float = DEFAULT_CONFIDENCE

    def __post_init__(self):
        object.__setattr__(
            self, "confidence", min(1.0, max(0.0, float(self.confidence)))
        )

    def to_dict(self) -> dict:
        return {"folderPath": str(self.folder_path), "confidence": self.confidence}


@dataclass(frozen=True)
class CacheEntry:
    """Flattened taxonomy snapshot with its expiry (monotonic seconds)."""

    folders: tuple[str, ...]
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class ProviderDescriptor:
    """Resolved configuration for one AI backend.

    Attributes:
        name: Provider name (ProviderName value)
        base_url: Endpoint root (host/port already resolved)
        model: Model identifier
        api_key: Credential, empty when the backend needs none
        temperature: Sampling temperature
        max_output_tokens: Output token cap sent with each request
        timeout: Request timeout in seconds
    """

    name: str
    base_url: str
    model: str
    api_key: str = ""
    temperature: float = 0.7
    max_output_tokens: int = 200
    timeout: float = 30.0

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return (
            f"ProviderDescriptor(name={self.name!r}, base_url={self.base_url!r}, "
            f"model={self.model!r}, api_key={masked!r})"
        )


@dataclass(frozen=True)
class MigrationProposal:
    """Candidate move of a stored bookmark to a more specific folder."""

    item_id: str
    title: str
    url: str
    original_path: FolderPath
    suggested_path: FolderPath
    confidence: float


@dataclass
class MigrationResult:
    """Outcome of executing approved migration moves."""

    successful: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.successful + self.failed
