"""Tests for model-output validation and folder path sanitization."""

import pytest

from smartmark.errors import ValidationError
from smartmark.validation import (
    build_category_path,
    extract_json_array,
    normalize_category_path,
    parse_category_path,
    parse_suggestions,
    sanitize_folder_path,
    validate_suggestions,
)

# =============================================================================
# JSON array extraction
# =============================================================================


class TestExtractJsonArray:
    """Locate the array between the first '[' and the last ']'."""

    def test_plain_array(self):
        assert extract_json_array('[{"folderPath":"Tech"}]') == [{"folderPath": "Tech"}]

    def test_array_wrapped_in_prose(self):
        raw = 'Sure! [{"folderPath":"Tech/AI","confidence":0.9}] Hope that helps'
        assert extract_json_array(raw) == [{"folderPath": "Tech/AI", "confidence": 0.9}]

    def test_leading_array_followed_by_prose(self):
        raw = '[{"folderPath":"Tech/AI/ML","confidence":0.9}] Hope that helps'
        assert extract_json_array(raw) == [{"folderPath": "Tech/AI/ML", "confidence": 0.9}]

    @pytest.mark.parametrize("raw", ["no json here", "] backwards [", "[not json]", None, 42])
    def test_unparseable_raises(self, raw):
        with pytest.raises(ValidationError):
            extract_json_array(raw)

    def test_non_array_json_raises(self):
        with pytest.raises(ValidationError):
            extract_json_array('{"folderPath": "Tech"}')


# =============================================================================
# Folder path sanitization
# =============================================================================


class TestSanitizeFolderPath:
    """Paths from the model are made safe to create."""

    def test_traversal_removed(self):
        assert str(sanitize_folder_path("../../etc/passwd")) == "etc/passwd"

    def test_repeated_dots_cannot_reassemble(self):
        assert ".." not in str(sanitize_folder_path("Tech/..../AI"))

    def test_reserved_characters_removed(self):
        assert str(sanitize_folder_path('Tech<>:"|?*/AI')) == "Tech/AI"

    def test_segments_trimmed_and_capped(self):
        path = sanitize_folder_path("  Tech / " + "x" * 80 + " / Deep / Deeper")
        assert path.depth == 3
        assert path.segments[0] == "Tech"
        assert len(path.segments[1]) == 50

    def test_dot_leading_segments_dropped(self):
        assert str(sanitize_folder_path("Tech/.hidden/AI")) == "Tech/AI"

    def test_short_paths_not_padded(self):
        assert str(sanitize_folder_path("Recipes")) == "Recipes"

    @pytest.mark.parametrize("raw", ["", "///", "..", None, "<>"])
    def test_empty_result_becomes_sentinel(self, raw):
        assert str(sanitize_folder_path(raw)) == "Uncategorized"


# =============================================================================
# Suggestion validation
# =============================================================================


class TestValidateSuggestions:
    """Malformed items are dropped individually; confidence is coerced."""

    def test_mixed_items(self):
        items = [
            {"folderPath": "Tech/AI", "confidence": 0.9},
            {"confidence": 0.8},
            "Tech",
            {"folderPath": "", "confidence": 0.7},
            {"folderPath": "News/World", "confidence": "0.6"},
            {"folderPath": "Misc", "confidence": "high"},
        ]
        suggestions = validate_suggestions(items)
        assert [str(s.folder_path) for s in suggestions] == [
            "Tech/AI",
            "News/World",
            "Misc",
        ]
        assert [s.confidence for s in suggestions] == [0.9, 0.6, 0.5]

    def test_over_long_path_dropped(self):
        assert validate_suggestions([{"folderPath": "a" * 201}]) == []

    @pytest.mark.parametrize(
        "raw, expected",
        [(1.5, 1.0), (-1, 0.0), (True, 0.5), (None, 0.5), (float("nan"), 0.5)],
    )
    def test_confidence_coercion(self, raw, expected):
        suggestion = validate_suggestions([{"folderPath": "Tech", "confidence": raw}])[0]
        assert suggestion.confidence == expected

    def test_missing_confidence_defaults(self):
        assert validate_suggestions([{"folderPath": "Tech"}])[0].confidence == 0.5

    def test_capped_at_five(self):
        items = [{"folderPath": f"Topic{i}"} for i in range(8)]
        assert len(validate_suggestions(items)) == 5
        assert len(validate_suggestions(items, max_suggestions=2)) == 2

    def test_paths_are_sanitized(self):
        suggestion = validate_suggestions([{"folderPath": "../Tech/AI"}])[0]
        assert str(suggestion.folder_path) == "Tech/AI"


class TestParseSuggestions:
    def test_prose_wrapped_response(self):
        suggestions = parse_suggestions(
            'Here you go: [{"folderPath":"AI/Machine Learning","confidence":0.92}]'
        )
        assert len(suggestions) == 1
        assert str(suggestions[0].folder_path) == "AI/Machine Learning"

    def test_trailing_note_after_array(self):
        raw = '[{"folderPath":"Tech/AI/ML","confidence":0.9}]\n\nNote: chosen for ML.'
        assert [str(s.folder_path) for s in parse_suggestions(raw)] == ["Tech/AI/ML"]

    def test_unparseable_returns_empty(self):
        assert parse_suggestions("I cannot help with that.") == []


# =============================================================================
# Category path helpers
# =============================================================================


class TestCategoryPath:
    def test_parse_capitalizes(self):
        assert parse_category_path("tech/ai/llms") == ["Tech", "Ai", "Llms"]

    def test_parse_non_string(self):
        assert parse_category_path(None) == []

    def test_build(self):
        assert build_category_path(["tech", "", "ai"]) == "Tech/Ai"
        assert build_category_path("tech") == ""

    def test_normalize_is_build_of_parse(self):
        raw = "programming//javaScript/react"
        assert normalize_category_path(raw) == build_category_path(parse_category_path(raw))
        assert normalize_category_path(raw) == "Programming/JavaScript/React"
