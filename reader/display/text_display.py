"""
Text display: a single modal surface showing extracted document text.

Only one display can be open at a time; :meth:`TextDisplay.show` refuses
while one is open.  The surface itself belongs to the host UI, which
receives the title and body through the *renderer* callback and reports
user actions back through :meth:`close`, :meth:`handle_key`,
:meth:`click`, :meth:`copy` and :meth:`read_aloud`.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

from core.page.models import PageText
from reader.speech.session import SpeechSession

logger = logging.getLogger(__name__)

Renderer = Callable[[str, str], None]
Clipboard = Callable[[str], None]

CLOSE_KEY = "Escape"


def render_pages(pages: Sequence[PageText]) -> str:
    """Concatenate pages with ``Page N:`` headers."""
    return "".join(f"Page {p.page_number}:\n{p.text}\n\n" for p in pages)


class TextDisplay:
    """Singleton modal for extracted text."""

    def __init__(
        self,
        session: SpeechSession,
        renderer: Optional[Renderer] = None,
        clipboard: Optional[Clipboard] = None,
        grace_period: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.renderer = renderer
        self.clipboard = clipboard
        self.grace_period = grace_period
        self._clock = clock

        self.title: str = ""
        self.text: str = ""
        self._pages: List[PageText] = []
        self._open = False
        self._suppress_until = 0.0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def selection_suppressed(self) -> bool:
        """True during the grace window right after opening."""
        return self._open and self._clock() < self._suppress_until

    def show(self, pages: Sequence[PageText], automatic: bool = False) -> bool:
        """
        Open the display with *pages*.

        Returns:
            False if a display is already open (nothing changes).
        """
        if self._open:
            logger.info("Text display already open, not opening another")
            return False

        self._pages = list(pages)
        self.text = render_pages(self._pages)
        self.title = f"Extracted PDF Text ({len(self._pages)} pages)"
        if automatic:
            self.title += " (Auto-opened)"

        self._open = True
        self._suppress_until = self._clock() + self.grace_period

        if self.renderer is not None:
            self.renderer(self.title, self.text)
        logger.info("Text display opened (%s)", "automatically" if automatic else "manually")
        return True

    def close(self) -> bool:
        if not self._open:
            return False
        self._open = False
        self._suppress_until = 0.0
        logger.debug("Text display closed")
        return True

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Close on Escape; returns whether the key was consumed."""
        if self._open and key == CLOSE_KEY:
            return self.close()
        return False

    def click(self, inside_content: bool) -> bool:
        """A click on the backdrop (outside the content) closes the display."""
        if self._open and not inside_content:
            return self.close()
        return False

    def copy(self) -> bool:
        if not self._open:
            return False
        if self.clipboard is None:
            logger.error("Copy failed: no clipboard available")
            self.session.speak("Failed to copy text")
            return False
        try:
            self.clipboard(self.text)
        except Exception as e:
            logger.error("Copy failed: %s", e)
            self.session.speak("Failed to copy text")
            return False
        self.session.speak("Text copied to clipboard")
        return True

    def read_aloud(self) -> bool:
        if not self._open:
            return False
        return self.session.speak(self.text)

    def __repr__(self) -> str:
        return f"TextDisplay(open={self._open}, pages={len(self._pages)})"
