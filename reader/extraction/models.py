"""
Data models for extraction runs.
"""

from dataclasses import dataclass, field
from typing import List

from core.page.models import PageText


@dataclass
class ExtractionResult:
    """
    Product of one pipeline run.

    ``pages`` holds only the pages that produced text, in ascending page
    order; ``total_pages`` is the document's full page count, so callers can
    see how much was skipped or cut off.
    """

    pages: List[PageText] = field(default_factory=list)
    total_pages: int = 0
    page_limit: int = 50
    strategy: str = ""

    @property
    def extracted_count(self) -> int:
        return len(self.pages)

    @property
    def truncated(self) -> bool:
        """True when the document has more pages than the run walked."""
        return self.total_pages > self.page_limit

    @property
    def char_count(self) -> int:
        return sum(p.char_count for p in self.pages)

    def summary(self) -> str:
        return (
            f"{self.extracted_count} pages with text "
            f"(document has {self.total_pages}"
            f"{', truncated' if self.truncated else ''}) "
            f"via {self.strategy or 'unknown'}"
        )
