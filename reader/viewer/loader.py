"""
Viewer loader: runs the extraction pipeline for a viewer and writes the
result into the registry.

At most one run is in flight per viewer.  A trigger that arrives while a
run is in flight does not start a second one; it waits for the current
run instead.  When that run settles, the loader checks whether its result
was stale (the viewer moved to another document meanwhile) and, if so,
runs once more for the current document, unless a scheduled trigger for
that viewer is still waiting out its settle delay.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Set

from reader.config import ReaderConfig
from reader.extraction.models import ExtractionResult
from reader.extraction.pipeline import ExtractionError, ExtractionPipeline
from reader.viewer.models import ViewerHandle, ViewerState
from reader.viewer.registry import ViewerRegistry

logger = logging.getLogger(__name__)

LoadListener = Callable[[ViewerHandle, ViewerState], None]


class ViewerLoader:
    """Schedules and serialises extraction runs per viewer."""

    def __init__(
        self,
        registry: ViewerRegistry,
        pipeline: ExtractionPipeline,
        config: Optional[ReaderConfig] = None,
    ):
        self.registry = registry
        self.pipeline = pipeline
        self.config = config or ReaderConfig()
        self._inflight: Dict[ViewerHandle, "asyncio.Task[None]"] = {}
        self._scheduled: Set["asyncio.Task[None]"] = set()
        self._waiting: Dict[ViewerHandle, Set["asyncio.Task[None]"]] = {}
        self._listeners: List[LoadListener] = []

    def add_listener(self, listener: LoadListener) -> None:
        """Call *listener* after a successful result has been applied."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def load(self, handle: ViewerHandle) -> Optional[ViewerState]:
        """
        Extract the current document of *handle*, or wait for the run
        already in flight.

        Returns:
            The viewer state after the run settled, or ``None`` for an
            unknown handle.
        """
        if handle not in self.registry:
            return None

        task = self._inflight.get(handle)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._run(handle))
            self._inflight[handle] = task
            task.add_done_callback(lambda t, h=handle: self._forget(h, t))
        else:
            logger.debug("Run already in flight for %r, waiting for it", handle)

        await asyncio.shield(task)
        return self.registry.get(handle)

    def _forget(self, handle: ViewerHandle, task: "asyncio.Task[None]") -> None:
        if self._inflight.get(handle) is task:
            del self._inflight[handle]

    async def _run(self, handle: ViewerHandle) -> None:
        while True:
            state = self.registry.get(handle)
            if state is None or not self.config.is_document_source(state.source_location):
                return

            source = self.registry.begin_run(handle)
            if source is None:
                return

            result: Optional[ExtractionResult] = None
            try:
                result = await self.pipeline.extract(source)
            except ExtractionError as e:
                logger.warning("%s", e)
            finally:
                applied = self.registry.finish_run(handle, source, result)

            if applied:
                if result is not None:
                    self._notify(handle)
                return

            state = self.registry.get(handle)
            if state is None or state.source_location == source:
                return
            if self._waiting.get(handle):
                logger.debug(
                    "%r moved to %s during extraction, left to the scheduled run",
                    handle,
                    state.source_location,
                )
                return
            logger.info(
                "%r moved to %s during extraction, processing the new document",
                handle,
                state.source_location,
            )

    def _notify(self, handle: ViewerHandle) -> None:
        state = self.registry.get(handle)
        if state is None:
            return
        for listener in self._listeners:
            try:
                listener(handle, state)
            except Exception as e:
                logger.error("Load listener %r failed for %r: %s", listener, handle, e)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self, handle: ViewerHandle, delay: float = 0.0) -> "asyncio.Task[None]":
        """
        Run :meth:`load` for *handle* after *delay* seconds.

        Until the delay has passed, a run that finishes stale for *handle*
        does not pick up the new document itself.
        """
        task = asyncio.get_running_loop().create_task(self._delayed_load(handle, delay))
        self._scheduled.add(task)
        self._waiting.setdefault(handle, set()).add(task)
        task.add_done_callback(lambda t, h=handle: self._scheduled_done(h, t))
        return task

    async def _delayed_load(self, handle: ViewerHandle, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        self._release(handle, asyncio.current_task())
        await self.load(handle)

    def _release(self, handle: ViewerHandle, task: Optional["asyncio.Task[None]"]) -> None:
        waiting = self._waiting.get(handle)
        if waiting is None:
            return
        waiting.discard(task)
        if not waiting:
            del self._waiting[handle]

    def _scheduled_done(self, handle: ViewerHandle, task: "asyncio.Task[None]") -> None:
        self._scheduled.discard(task)
        self._release(handle, task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled extraction failed: %r", exc)

    async def wait_idle(self) -> None:
        """Wait until no run is scheduled or in flight."""
        while True:
            pending = [
                t for t in (*self._scheduled, *self._inflight.values()) if not t.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    @property
    def busy(self) -> bool:
        return bool(self._inflight) or bool(self._scheduled)

    def __repr__(self) -> str:
        return (
            f"ViewerLoader(inflight={len(self._inflight)}, "
            f"scheduled={len(self._scheduled)})"
        )
