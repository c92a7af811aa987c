"""Classification prompt template for bookmark folder suggestions."""

from .models import Metadata
from .security import DEFAULT_MAX_LENGTH, sanitize_for_prompt

__all__ = ["CLASSIFICATION_PROMPT", "build_prompt"]

CLASSIFICATION_PROMPT = """Classify the following bookmark and return the top 5 most likely folder paths for this bookmark, in order of confidence, as a JSON array. Aim for 2 to 3 levels of depth (e.g., 'Category/SubCategory' or 'Category/SubCategory/SpecificTopic') where appropriate. Each item should have 'folderPath' and 'confidence' fields. Example: [{{"folderPath":"Tech/AI/LLMs","confidence":0.92}},{{"folderPath":"Programming/JavaScript/Frameworks","confidence":0.85}},{{"folderPath":"Business/Startups/Funding","confidence":0.70}}].

IMPORTANT: Avoid suggesting overly broad, single-level categories (e.g., 'AI', 'Programming', 'Tech') if a more specific multi-level folder path (e.g., 'AI/Machine Learning', 'Programming/JavaScript/React', 'Tech/Gadgets/Smartphones') would be more appropriate for the content. A single-level category should only be used if the bookmark is a very general, top-level resource about that broad topic itself. Return ONLY the JSON array.{context_section}

BOOKMARK TO CLASSIFY:
Title: {title}
Domain: {domain}
URL: {url}
Description: {description}
Heading: {heading}
Author: {author}
Published Date: {published_date}
URL Path: {url_path}
Keywords: {keywords}
Main Content Snippet: {main_content}..."""


def build_prompt(
    metadata: Metadata,
    context_section: str = "",
    *,
    field_max_chars: int = DEFAULT_MAX_LENGTH,
    content_max_chars: int = 1000,
) -> str:
    """Build the classification prompt for one bookmark.

    Every metadata field is passed through sanitize_for_prompt. The context
    section is produced by build_context_section, which sanitizes folder
    names itself, so it is embedded as-is.

    Args:
        metadata: Page metadata to classify
        context_section: Taxonomy block ("" for none)
        field_max_chars: Per-field length cap
        content_max_chars: Length cap for the main content snippet

    Returns:
        Formatted prompt string
    """

    def clean(value, default: str = "") -> str:
        return sanitize_for_prompt(value, max_length=field_max_chars) or default

    url_path = "/".join(
        sanitize_for_prompt(segment, max_length=field_max_chars)
        for segment in metadata.url_path
    )

    return CLASSIFICATION_PROMPT.format(
        context_section=context_section or "",
        title=clean(metadata.title),
        domain=clean(metadata.domain),
        url=clean(metadata.url),
        description=clean(metadata.description),
        heading=clean(metadata.heading),
        author=clean(metadata.author, "N/A"),
        published_date=clean(metadata.published_date, "N/A"),
        url_path=url_path,
        keywords=clean(metadata.keywords, "N/A"),
        main_content=sanitize_for_prompt(
            metadata.main_content, max_length=content_max_chars
        ),
    )
