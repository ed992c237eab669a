"""
Text structure data models for PDF pages.
Span / line / block hierarchy plus the flat per-page text the reader caches.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(fragments: Iterable[str]) -> str:
    """
    Join text fragments with single spaces, collapse whitespace runs and trim.

    Args:
        fragments: Ordered text fragments of one page.

    Returns:
        Normalised page text (may be empty).
    """
    joined = " ".join(fragments)
    return _WHITESPACE_RE.sub(" ", joined).strip()


@dataclass(frozen=True)
class PageText:
    """Extracted text for one page (1-based page number)."""

    page_number: int
    text: str

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {self.page_number}")

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass
class SpanInfo:
    """A run of text PyMuPDF reports with one font."""

    text: str = ""


@dataclass
class LineInfo:
    """A line of text containing multiple spans."""

    spans: List[SpanInfo] = field(default_factory=list)


@dataclass
class BlockInfo:
    """A block of text (paragraph or text region)."""

    lines: List[LineInfo] = field(default_factory=list)

    @property
    def fragments(self) -> List[str]:
        """Span texts of this block in reading order."""
        return [span.text for line in self.lines for span in line.spans]
