"""
Change watcher: reacts to attribute changes on viewer elements.

The host page (or whatever stands in for it) pushes
``(element, attribute)`` events; only :data:`SOURCE_ATTRIBUTE` and
:data:`VISIBILITY_ATTRIBUTE` are acted on.  Every reaction that needs an
extraction run goes through :meth:`ViewerLoader.schedule` with the
configured settle delay, so the viewer's own load sequence finishes first.

Sources equal to the "no document" sentinel never trigger anything.
"""

import logging
from typing import Dict, Iterable, List, Optional

from reader.config import ReaderConfig
from reader.display.text_display import TextDisplay
from reader.viewer.loader import ViewerLoader
from reader.viewer.models import ViewerElement, ViewerHandle
from reader.viewer.registry import ViewerRegistry

logger = logging.getLogger(__name__)

SOURCE_ATTRIBUTE = "src"
VISIBILITY_ATTRIBUTE = "visible"

WATCHED_ATTRIBUTES = (SOURCE_ATTRIBUTE, VISIBILITY_ATTRIBUTE)


class ChangeWatcher:
    """
    Maps viewer elements to handles and turns attribute events into
    registry updates and scheduled extraction runs.
    """

    def __init__(
        self,
        registry: ViewerRegistry,
        loader: ViewerLoader,
        config: Optional[ReaderConfig] = None,
        display: Optional[TextDisplay] = None,
    ):
        self.registry = registry
        self.loader = loader
        self.config = config or ReaderConfig()
        self.display = display

        self._handles: Dict[int, ViewerHandle] = {}
        self._elements: Dict[ViewerHandle, ViewerElement] = {}
        self._visible: Dict[ViewerHandle, bool] = {}

    # ------------------------------------------------------------------
    # Element ↔ handle
    # ------------------------------------------------------------------

    def attach(self, element: ViewerElement) -> ViewerHandle:
        """Return the handle of *element*, allocating one on first sight."""
        handle = self._handles.get(id(element))
        if handle is None:
            handle = ViewerHandle.allocate()
            self._handles[id(element)] = handle
            self._elements[handle] = element
            logger.debug("Attached %r", handle)
        return handle

    def handle_for(self, element: ViewerElement) -> Optional[ViewerHandle]:
        return self._handles.get(id(element))

    def element_for(self, handle: ViewerHandle) -> Optional[ViewerElement]:
        return self._elements.get(handle)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def watch(self, element: ViewerElement) -> ViewerHandle:
        """Start watching *element*; register it now if it is eligible."""
        handle = self.attach(element)
        self._visible[handle] = bool(element.visible)
        self._first_encounter(handle, element)
        return handle

    def scan(self, elements: Iterable[ViewerElement]) -> List[ViewerHandle]:
        return [self.watch(element) for element in elements]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_attribute_changed(self, element: ViewerElement, attribute: str) -> None:
        """Entry point for the host's attribute-change feed."""
        if attribute not in WATCHED_ATTRIBUTES:
            return

        handle = self.attach(element)
        if attribute == SOURCE_ATTRIBUTE:
            self._on_source_changed(handle, element)
        else:
            self._on_visibility_changed(handle, element)

    def _on_source_changed(self, handle: ViewerHandle, element: ViewerElement) -> None:
        source = element.source
        if not self.config.is_document_source(source):
            logger.debug("%r source set to placeholder, ignoring", handle)
            return

        state = self.registry.get(handle)
        if state is None:
            self._first_encounter(handle, element)
        elif source != state.source_location:
            logger.info("New PDF URL detected for %r, reprocessing", handle)
            self._reprocess(handle, source)

    def _on_visibility_changed(self, handle: ViewerHandle, element: ViewerElement) -> None:
        was_visible = self._visible.get(handle, False)
        now_visible = bool(element.visible)
        self._visible[handle] = now_visible
        if was_visible or not now_visible:
            return

        source = element.source
        if not self.config.is_document_source(source):
            return

        state = self.registry.get(handle)
        if state is None:
            self._first_encounter(handle, element)
        elif source != state.source_location:
            logger.info("%r became visible with a new URL, reprocessing", handle)
            self._reprocess(handle, source)
        elif not state.is_loaded:
            logger.info("%r visible but not loaded, processing", handle)
            self.loader.schedule(handle, self.config.settle_delay)

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    def _reprocess(self, handle: ViewerHandle, source: str) -> None:
        if self.display is not None and self.display.is_open:
            self.display.close()
        self.registry.update_source(handle, source)
        self.loader.schedule(handle, self.config.settle_delay)

    def _first_encounter(self, handle: ViewerHandle, element: ViewerElement) -> None:
        if handle in self.registry:
            return
        if not element.visible or not self.config.is_document_source(element.source):
            logger.debug("%r not ready for setup", handle)
            return

        self.registry.register(handle, element.source)
        logger.info("Set up PDF viewer %r: %s", handle, element.source)
        self.loader.schedule(handle, self.config.settle_delay)

    def __repr__(self) -> str:
        return f"ChangeWatcher(elements={len(self._elements)})"
