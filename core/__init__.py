"""
Core backend for the viewer narrator.
PDF loading and page text extraction only; no rendering, no speech.
"""

from .document import PDFDocumentReader
from .page import BlockInfo, LineInfo, PageText, PageTextLayer, SpanInfo, normalize_text

__all__ = [
    "PDFDocumentReader",
    "PageText",
    "PageTextLayer",
    "SpanInfo",
    "LineInfo",
    "BlockInfo",
    "normalize_text",
]
