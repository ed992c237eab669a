"""
Spoken message builders for the viewer commands.

Pure functions of the viewer state and config, so the same state always
yields the same words.
"""

from typing import Optional, Sequence

from core.page.models import PageText
from reader.config import ReaderConfig
from reader.viewer.models import ViewerState

TRUNCATION_MARKER = "... content truncated"

NO_TEXT_MESSAGE = "No text could be extracted from this PDF. Press L to try reloading."

KEY_HELP = (
    "Press R to read content, E to extract text, D to describe PDF, "
    "F to focus PDF, or L to reload."
)

# Element tag → spoken type for generic focus narration
_ELEMENT_TYPES = {
    "button": "Button",
    "input": "Input",
    "a": "Link",
}
_ELEMENT_FALLBACK_TEXT = {
    "button": "button",
    "input": "input",
    "a": "link",
}


def truncate_page(text: str, limit: int) -> str:
    """Cap *text* at *limit* characters, marking the cut."""
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def build_reading(pages: Sequence[PageText], config: ReaderConfig) -> str:
    """
    Bounded narration for the Read command.

    At most ``config.read_page_limit`` pages, each capped at
    ``config.page_char_limit`` characters, followed by a count of the
    pages left out.
    """
    if not pages:
        return "No text content found in PDF"

    parts = [f"PDF document with {len(pages)} pages. "]
    to_read = min(len(pages), config.read_page_limit)

    for page in pages[:to_read]:
        if page.text:
            parts.append(
                f"Page {page.page_number}: "
                f"{truncate_page(page.text, config.page_char_limit)}. "
            )

    remaining = len(pages) - to_read
    if remaining > 0:
        parts.append(
            f"And {remaining} more pages. Use extract text to see all content."
        )
    return "".join(parts)


def build_description(state: ViewerState, config: ReaderConfig) -> str:
    """One-paragraph summary for the Describe command."""
    description = "PDF document. "

    if state.is_loaded and state.cached_pages is not None:
        description += (
            f"Successfully loaded with {state.page_count} pages and approximately "
            f"{state.char_count} characters of text. "
        )
        if state.total_pages is not None and state.total_pages > config.max_pages:
            description += (
                f"Only the first {config.max_pages} of {state.total_pages} pages "
                f"were extracted. "
            )
        if state.cached_pages:
            preview = state.cached_pages[0].text[: config.preview_chars].strip()
            if preview:
                description += f"Preview: {preview}..."
    else:
        description += (
            "Loading in progress. Text content not yet available. "
            "Try again in a moment or press L to reload."
        )
    return description.strip()


def build_focus_announcement(state: Optional[ViewerState], config: ReaderConfig) -> str:
    """What to say when a viewer receives focus; never reads content."""
    if state is not None and state.is_loaded:
        if not state.page_count:
            return f"PDF document loaded but no readable text was found. {KEY_HELP}"
        return f"PDF document loaded with {state.page_count} pages. {KEY_HELP}"
    if state is not None and config.is_document_source(state.source_location):
        if state.run_attempted:
            return f"PDF document could not be loaded yet. {KEY_HELP}"
        return f"PDF document is loading. Please wait. {KEY_HELP}"
    return "PDF viewer - no document loaded."


def element_type(tag: str) -> str:
    tag = tag.lower()
    if len(tag) == 2 and tag[0] == "h" and tag[1] in "123456":
        return f"Heading level {tag[1]}"
    return _ELEMENT_TYPES.get(tag, "Element")


def describe_element(tag: str, text: str = "", label: str = "") -> str:
    """
    Narration for a generic focused element, e.g. ``"Button: Sign in"``.

    Returns an empty string when there is nothing to say.
    """
    content = (text or "").strip() or _ELEMENT_FALLBACK_TEXT.get(tag.lower(), "") or label
    if not content:
        return ""
    return f"{element_type(tag)}: {content}"
