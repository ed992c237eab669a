"""
Span-level text extraction for PDF pages.
"""

import logging
from typing import List

import fitz

from .models import BlockInfo, LineInfo, SpanInfo

logger = logging.getLogger(__name__)


class PageTextLayer:
    """
    Extracts the text structure of a PDF page as blocks, lines and spans.

    Spans are the smallest text fragments PyMuPDF reports with consistent
    formatting; :attr:`fragments` flattens them in reading order, which is
    what the extraction pipeline joins into page text.
    """

    def __init__(self, page: fitz.Page):
        self.page = page
        self.blocks: List[BlockInfo] = []

        self._extract_text_structure()

    def _extract_text_structure(self):
        """Build the block / line / span hierarchy from ``page.get_text("dict")``.

        Errors propagate so the caller can skip the page.
        """
        flags = fitz.TEXT_PRESERVE_WHITESPACE | fitz.TEXT_PRESERVE_LIGATURES
        text_dict = self.page.get_text("dict", flags=flags, sort=True)

        for block_data in text_dict.get("blocks", []):
            # Skip image blocks
            if block_data.get("type") != 0:
                continue

            block = BlockInfo()

            for line_data in block_data.get("lines", []):
                line = LineInfo()

                for span_data in line_data.get("spans", []):
                    text = span_data.get("text", "")
                    if text:
                        line.spans.append(SpanInfo(text=text))

                if line.spans:
                    block.lines.append(line)

            if block.lines:
                self.blocks.append(block)

        logger.debug(
            "Page %d: %d text blocks", self.page.number + 1, len(self.blocks)
        )

    @property
    def fragments(self) -> List[str]:
        """All span texts on the page in reading order."""
        return [frag for block in self.blocks for frag in block.fragments]

    def __len__(self) -> int:
        return sum(len(frag) for frag in self.fragments)
