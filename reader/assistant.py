"""
Screen reader assistant: wires the components together.

Data flows watcher → registry → pipeline (through the loader) → command
dispatcher → speech session / text display.

Usage::

    assistant = ScreenReader(engine=ConsoleSpeechEngine())
    viewer = StaticViewer("https://example.org/brochure.pdf")
    handle = assistant.watcher.watch(viewer)
    await assistant.loader.wait_idle()
    await assistant.dispatcher.handle_key(handle, "r")
"""

import logging
from typing import Optional

from reader.commands.dispatcher import CommandDispatcher
from reader.config import ReaderConfig
from reader.display.text_display import Clipboard, Renderer, TextDisplay
from reader.extraction.fetch import HttpFetcher
from reader.extraction.pipeline import ExtractionPipeline
from reader.speech.base_engine import BaseSpeechEngine
from reader.speech.session import SpeechSession
from reader.storage import KeyValueStore
from reader.viewer.loader import ViewerLoader
from reader.viewer.registry import ViewerRegistry
from reader.viewer.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class ScreenReader:
    """
    The assembled assistant.

    Every collaborator can be injected; anything left out is built from
    *config* with the production implementation.
    """

    def __init__(
        self,
        engine: BaseSpeechEngine,
        config: Optional[ReaderConfig] = None,
        store: Optional[KeyValueStore] = None,
        pipeline: Optional[ExtractionPipeline] = None,
        fetcher: Optional[HttpFetcher] = None,
        renderer: Optional[Renderer] = None,
        clipboard: Optional[Clipboard] = None,
    ):
        self.config = config or ReaderConfig()

        self.session = SpeechSession(engine, store)
        self.display = TextDisplay(
            self.session,
            renderer=renderer,
            clipboard=clipboard,
            grace_period=self.config.display_grace_period,
        )
        self.registry = ViewerRegistry()
        self.pipeline = pipeline or ExtractionPipeline.from_config(self.config, fetcher=fetcher)
        self.loader = ViewerLoader(self.registry, self.pipeline, self.config)
        self.watcher = ChangeWatcher(
            self.registry, self.loader, self.config, display=self.display
        )
        self.dispatcher = CommandDispatcher(
            self.session,
            self.registry,
            self.loader,
            self.watcher,
            self.display,
            self.config,
        )
        logger.debug("Assistant ready: %r, %r", self.session, self.pipeline)

    @property
    def enabled(self) -> bool:
        return self.session.enabled

    def toggle(self) -> bool:
        return self.session.toggle()

    def __repr__(self) -> str:
        return f"ScreenReader({self.session!r}, {self.registry!r})"
