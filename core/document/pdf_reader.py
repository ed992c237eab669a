"""
PDF document reading for the viewer narrator.

Opens a document from a local path or from an in-memory byte buffer and
hands out per-page text fragments.  No rendering.
"""

import logging
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from core.page.text_layer import PageTextLayer

logger = logging.getLogger(__name__)


class PDFDocumentReader:
    """Handles PDF document loading and text extraction."""

    def __init__(self):
        self.doc: Optional[fitz.Document] = None
        self.total_pages: int = 0
        self.current_file_path: Optional[str] = None

    def load_pdf(self, file_path: str) -> Tuple[bool, int]:
        """
        Load a PDF document from the filesystem.

        Args:
            file_path: Path to the PDF file

        Returns:
            Tuple of (success flag, number of pages)
        """
        try:
            if self.doc:
                self.close_document()

            self.doc = fitz.open(file_path)
            if not self.doc.is_pdf:
                raise ValueError("not a PDF document")
            self.total_pages = self.doc.page_count
            self.current_file_path = file_path

            return True, self.total_pages

        except Exception as e:
            logger.info("Error loading PDF %s: %s", file_path, e)
            self.close_document()
            return False, 0

    def load_stream(self, data: bytes, label: str = "<stream>") -> Tuple[bool, int]:
        """
        Load a PDF document from an in-memory byte buffer.

        Args:
            data:  Raw PDF bytes
            label: Name used in log messages (usually the source URL)

        Returns:
            Tuple of (success flag, number of pages)
        """
        try:
            if self.doc:
                self.close_document()

            if not data:
                raise ValueError("empty buffer")

            self.doc = fitz.open(stream=data, filetype="pdf")
            self.total_pages = self.doc.page_count
            self.current_file_path = None

            return True, self.total_pages

        except Exception as e:
            logger.info("Error loading PDF from %s (%d bytes): %s", label, len(data or b""), e)
            self.close_document()
            return False, 0

    def close_document(self) -> None:
        """Close the current PDF document and clear all state."""
        if self.doc:
            self.doc.close()
            self.doc = None

        self.total_pages = 0
        self.current_file_path = None

    def get_page(self, page_index: int) -> Optional[fitz.Page]:
        """
        Get a page object for direct operations.

        Args:
            page_index: 0-based index of the page

        Returns:
            PyMuPDF page object, or None if the index is out of range
        """
        if not self.doc or page_index < 0 or page_index >= self.total_pages:
            return None
        return self.doc.load_page(page_index)

    def get_text_fragments(self, page_index: int) -> List[str]:
        """
        Ordered text fragments (spans) of one page.

        Parse errors are raised to the caller so the page can be skipped.

        Args:
            page_index: 0-based index of the page

        Returns:
            List of span texts, empty for pages without a text layer
        """
        page = self.get_page(page_index)
        if page is None:
            raise IndexError(
                f"Page index {page_index} out of range "
                f"(document has {self.total_pages} pages)"
            )
        return PageTextLayer(page).fragments

    def is_loaded(self) -> bool:
        """Check if a document is currently loaded."""
        return self.doc is not None

    def get_file_path(self) -> Optional[str]:
        """Get the path of the currently loaded file."""
        return self.current_file_path

    def get_page_count(self) -> int:
        """Get the total number of pages."""
        return self.total_pages

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close document on context exit."""
        self.close_document()
        return False
