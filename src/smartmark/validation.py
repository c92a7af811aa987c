"""Validation of untrusted model output into folder-path suggestions.

Models often wrap the JSON array in prose ("Sure! [...] Hope that helps"), so
the array is located by its first '[' and last ']' before strict parsing.
Malformed items are dropped individually; only a fully unparseable response
degrades to an empty suggestion list.
"""

import json
import logging
import math
import re
from typing import Any

from .errors import ValidationError
from .models import (
    DEFAULT_CONFIDENCE,
    FALLBACK_FOLDER,
    MAX_PATH_DEPTH,
    MAX_SEGMENT_LENGTH,
    RESERVED_CHARS,
    FolderPath,
    Suggestion,
)

logger = logging.getLogger("smartmark.validation")

__all__ = [
    "MAX_FOLDER_PATH_LENGTH",
    "MAX_SUGGESTIONS",
    "build_category_path",
    "extract_json_array",
    "normalize_category_path",
    "parse_category_path",
    "parse_suggestions",
    "sanitize_folder_path",
    "validate_suggestions",
]

MAX_SUGGESTIONS = 5
MAX_FOLDER_PATH_LENGTH = 200

_LEADING_SEPARATORS = re.compile(r"^[/\\\s]+")


def extract_json_array(raw: Any) -> list:
    """Extract and strictly parse the JSON array embedded in model text.

    Args:
        raw: Text returned by the model

    Returns:
        The parsed list (items not yet validated)

    Raises:
        ValidationError: If no JSON array can be found or parsed
    """
    if not isinstance(raw, str):
        raise ValidationError("Model response is not text", field="response", value=raw)

    first = raw.find("[")
    last = raw.rfind("]")
    if first == -1 or last <= first:
        raise ValidationError(
            "No JSON array found in model response",
            field="response",
            value=raw[:200],
        )
    text = raw[first : last + 1]

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Failed to parse JSON array: {e.msg}", field="response", value=raw[:200]
        ) from e

    if not isinstance(parsed, list):
        raise ValidationError(
            "Response is not an array", field="response", value=raw[:200]
        )
    return parsed


def sanitize_folder_path(path: Any) -> FolderPath:
    """Make a model-suggested folder path safe to create.

    Removes reserved characters and '..' sequences, strips leading
    separators, trims and caps each segment at 50 characters, drops empty and
    dot-leading segments, and keeps at most 3 segments. Short paths are never
    padded. Returns the single-segment sentinel when nothing survives.

    Example:
        >>> str(sanitize_folder_path("../../etc/passwd"))
        'etc/passwd'
    """
    if not isinstance(path, str):
        return FolderPath((FALLBACK_FOLDER,))

    cleaned = RESERVED_CHARS.sub("", path)
    # Repeat until stable so "...." style inputs cannot reassemble a ".."
    while ".." in cleaned:
        cleaned = cleaned.replace("..", "")
    cleaned = _LEADING_SEPARATORS.sub("", cleaned)

    segments = []
    for part in cleaned.split("/"):
        part = part.strip()[:MAX_SEGMENT_LENGTH].strip()
        if part and not part.startswith("."):
            segments.append(part)

    if not segments:
        return FolderPath((FALLBACK_FOLDER,))
    return FolderPath(tuple(segments[:MAX_PATH_DEPTH]))


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_CONFIDENCE
    if not isinstance(value, (int, float)) or math.isnan(value):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, float(value)))


def validate_suggestions(
    items: Any, max_suggestions: int = MAX_SUGGESTIONS
) -> list[Suggestion]:
    """Keep well-formed suggestion items, in order, up to max_suggestions.

    An item is kept when it is an object with a non-empty string
    ``folderPath`` of at most 200 characters. Confidence is clamped to
    [0, 1]; missing or non-numeric confidence becomes 0.5. Kept paths are
    passed through sanitize_folder_path.

    Args:
        items: Parsed JSON array
        max_suggestions: Output cap (never above 5)

    Returns:
        List of Suggestion
    """
    if not isinstance(items, list):
        return []

    limit = min(max_suggestions, MAX_SUGGESTIONS)
    suggestions: list[Suggestion] = []
    dropped = 0
    for item in items:
        if len(suggestions) >= limit:
            break
        if not isinstance(item, dict):
            dropped += 1
            continue
        folder_path = item.get("folderPath")
        if (
            not isinstance(folder_path, str)
            or not folder_path.strip()
            or len(folder_path) > MAX_FOLDER_PATH_LENGTH
        ):
            dropped += 1
            continue
        suggestions.append(
            Suggestion(
                folder_path=sanitize_folder_path(folder_path),
                confidence=_coerce_confidence(item.get("confidence", DEFAULT_CONFIDENCE)),
            )
        )

    if dropped:
        logger.debug("suggestions_dropped", extra={"dropped": dropped})
    return suggestions


def parse_suggestions(raw: Any, max_suggestions: int = MAX_SUGGESTIONS) -> list[Suggestion]:
    """Extract and validate suggestions from model text.

    A fully unparseable response returns an empty list; callers treat an
    empty list the same as a failure for fallback purposes.
    """
    try:
        items = extract_json_array(raw)
    except ValidationError as e:
        logger.warning(
            "response_unparseable",
            extra={"error": e.message, "response_preview": str(raw)[:200]},
        )
        return []
    return validate_suggestions(items, max_suggestions=max_suggestions)


def _capitalize(part: str) -> str:
    return part[:1].upper() + part[1:]


def parse_category_path(path: Any) -> list[str]:
    """Split a category path, capitalizing the first letter of each part.

    Example:
        >>> parse_category_path("tech/ai/llms")
        ['Tech', 'Ai', 'Llms']
    """
    if not isinstance(path, str):
        return []
    return [_capitalize(part) for part in path.split("/") if part.strip()]


def build_category_path(parts: Any) -> str:
    """Join category parts with '/', capitalizing each."""
    if not isinstance(parts, (list, tuple)):
        return ""
    return "/".join(
        _capitalize(part) for part in parts if isinstance(part, str) and part.strip()
    )


def normalize_category_path(path: Any) -> str:
    """Canonical form of a category path; build(parse(p)) == normalize(p)."""
    return build_category_path(parse_category_path(path))
