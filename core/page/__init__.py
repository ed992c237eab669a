"""
Page text extraction for PDF documents.
"""

from .models import BlockInfo, LineInfo, PageText, SpanInfo, normalize_text
from .text_layer import PageTextLayer

__all__ = [
    "PageTextLayer",
    "PageText",
    "SpanInfo",
    "LineInfo",
    "BlockInfo",
    "normalize_text",
]
