"""
Command dispatcher: single-key viewer commands → registry, loader,
speech and display operations.

Everything here is a no-op while the assistant is disabled.  Commands
never raise into the caller: pipeline failures are spoken, with a hint to
reload, and the dispatcher stays usable for every other viewer.
"""

import logging
from enum import Enum
from typing import Optional

from reader.commands.narration import (
    NO_TEXT_MESSAGE,
    build_description,
    build_focus_announcement,
    build_reading,
    describe_element,
)
from reader.config import ReaderConfig
from reader.display.text_display import TextDisplay
from reader.speech.session import SpeechSession
from reader.viewer.loader import ViewerLoader
from reader.viewer.models import ViewerHandle, ViewerState
from reader.viewer.registry import ViewerRegistry
from reader.viewer.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class Command(Enum):
    """Viewer commands, keyed by their shortcut."""

    READ = "r"
    EXTRACT = "e"
    DESCRIBE = "d"
    FOCUS = "f"
    RELOAD = "l"

    @classmethod
    def from_key(cls, key: str) -> Optional["Command"]:
        try:
            return cls(key.lower())
        except ValueError:
            return None


class CommandDispatcher:
    """Routes user commands for focused viewers."""

    def __init__(
        self,
        session: SpeechSession,
        registry: ViewerRegistry,
        loader: ViewerLoader,
        watcher: ChangeWatcher,
        display: TextDisplay,
        config: Optional[ReaderConfig] = None,
    ):
        self.session = session
        self.registry = registry
        self.loader = loader
        self.watcher = watcher
        self.display = display
        self.config = config or ReaderConfig()

        self.loader.add_listener(self._on_loaded)

    @property
    def enabled(self) -> bool:
        return self.session.enabled

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    async def handle_key(self, handle: ViewerHandle, key: str) -> bool:
        """
        Run the command bound to *key* for *handle*.

        Returns:
            True if a command ran.
        """
        if not self.enabled:
            return False
        command = Command.from_key(key)
        if command is None:
            return False

        logger.debug("Viewer %r key: %s -> %s", handle, key, command.name)
        if command is Command.READ:
            await self.read(handle)
        elif command is Command.EXTRACT:
            await self.extract(handle)
        elif command is Command.DESCRIBE:
            self.describe(handle)
        elif command is Command.FOCUS:
            self.focus(handle)
        elif command is Command.RELOAD:
            await self.reload(handle)
        return True

    def toggle_shortcut(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """Ctrl+Shift+S toggles the assistant while it is enabled."""
        if not self.enabled:
            return False
        if ctrl and shift and key.upper() == "S":
            self.session.toggle()
            return True
        return False

    def on_viewer_focus(self, handle: ViewerHandle) -> None:
        """Announce a focused viewer and its commands without reading it."""
        if not self.enabled:
            return
        self.session.speak(build_focus_announcement(self.registry.get(handle), self.config))

    def on_element_focus(self, tag: str, text: str = "", label: str = "") -> None:
        if not self.enabled:
            return
        narration = describe_element(tag, text, label)
        if narration:
            self.session.speak(narration)

    def on_selection(self, text: str) -> None:
        """Read selected text aloud, except right after the display opened."""
        if not self.enabled:
            return
        if self.display.selection_suppressed:
            logger.debug("Text display opening, skipping selection reading")
            return
        self.session.speak(text.strip())

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def read(self, handle: ViewerHandle) -> None:
        state = self.registry.get(handle)
        if state is None:
            self.session.speak("No PDF viewer found")
            return

        if state.is_loaded:
            self.session.speak(build_reading(state.cached_pages or [], self.config))
            return

        if not self.config.is_document_source(state.source_location):
            self.session.speak("No PDF loaded to read")
            return

        self.session.speak("PDF is still loading. Attempting to read now...")
        state = await self.loader.load(handle)
        if not self.enabled:
            return
        if state is not None and state.is_loaded:
            self.session.speak(build_reading(state.cached_pages or [], self.config))
        else:
            self.session.speak(
                "Could not extract text from PDF. The PDF may be image-based, "
                "protected, or there may be access restrictions. "
                "Press L to try reloading."
            )

    async def extract(self, handle: ViewerHandle) -> None:
        state = self.registry.get(handle)
        if state is None:
            self.session.speak("No PDF viewer found")
            return

        if not state.is_loaded:
            if not self.config.is_document_source(state.source_location):
                self.session.speak("No PDF loaded to extract text from")
                return

            self.session.speak("Extracting text...")
            state = await self.loader.load(handle)
            if not self.enabled:
                return
            if state is not None and state.is_loaded and state.cached_pages:
                self._show_text(state, "Text extracted and displayed")
                return
        elif state.cached_pages:
            self._show_text(state, "Text displayed")
            return

        self.session.speak(NO_TEXT_MESSAGE)

    def _show_text(self, state: ViewerState, message: str) -> None:
        if self.display.show(state.cached_pages or []):
            self.session.speak(message)
        else:
            self.session.speak("Text display is already open. Press Escape to close it.")

    def describe(self, handle: ViewerHandle) -> None:
        state = self.registry.get(handle)
        if state is None or not self.config.is_document_source(state.source_location):
            self.session.speak("No PDF loaded to describe")
            return
        self.session.speak(build_description(state, self.config))

    def focus(self, handle: ViewerHandle) -> None:
        element = self.watcher.element_for(handle)
        if element is None:
            self.session.speak("No PDF viewer found")
            return
        element.focus()
        self.session.speak("PDF focused")

    async def reload(self, handle: ViewerHandle) -> None:
        state = self.registry.get(handle)
        if state is None or not self.config.is_document_source(state.source_location):
            self.session.speak("No PDF to reload")
            return

        self.session.speak("Reloading PDF...")
        self.registry.reset(handle)
        state = await self.loader.load(handle)
        if not self.enabled:
            return
        if state is None or not state.is_loaded:
            self.session.speak("Reload failed. Could not extract text from PDF.")

    # ------------------------------------------------------------------
    # Loader events
    # ------------------------------------------------------------------

    def _on_loaded(self, handle: ViewerHandle, state: ViewerState) -> None:
        if self.enabled and self.config.auto_display and state.cached_pages:
            self.display.show(state.cached_pages, automatic=True)
