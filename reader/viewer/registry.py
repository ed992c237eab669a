"""
Viewer registry: per-handle extraction state.

All operations are synchronous dictionary operations keyed by handle
identity.  Two handles pointing at the same URL keep independent state.

The registry also carries the per-handle in-flight flag.  A run is
bracketed by :meth:`ViewerRegistry.begin_run` and
:meth:`ViewerRegistry.finish_run`; the latter applies the result only if
the viewer still points at the source the run was started for.
"""

import logging
from typing import Dict, Iterator, List, Optional, Set

from reader.extraction.models import ExtractionResult
from reader.viewer.models import ViewerHandle, ViewerState

logger = logging.getLogger(__name__)


class ViewerRegistry:
    """Maps :class:`ViewerHandle` → :class:`ViewerState`."""

    def __init__(self):
        self._states: Dict[ViewerHandle, ViewerState] = {}
        self._running: Set[ViewerHandle] = set()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def register(self, handle: ViewerHandle, initial_source: str) -> ViewerState:
        """Create the state for *handle* if absent; return the existing one otherwise."""
        state = self._states.get(handle)
        if state is None:
            state = ViewerState(source_location=initial_source)
            self._states[handle] = state
            logger.debug("Registered %r for %s", handle, initial_source)
        return state

    def get(self, handle: ViewerHandle) -> Optional[ViewerState]:
        return self._states.get(handle)

    def update_source(self, handle: ViewerHandle, new_source: str) -> bool:
        """
        Point *handle* at *new_source*.

        Returns:
            True if the source changed (cache cleared, reprocessing
            required), False if it was already current.

        Raises:
            KeyError: If *handle* was never registered.
        """
        state = self._states[handle]
        if new_source == state.source_location:
            return False

        logger.info(
            "%r source changed: %s -> %s", handle, state.source_location, new_source
        )
        state.source_location = new_source
        state.clear()
        state.run_attempted = False
        return True

    def reset(self, handle: ViewerHandle) -> None:
        """Drop the cached text of *handle* but keep its source."""
        state = self._states[handle]
        state.clear()

    # ------------------------------------------------------------------
    # In-flight guard
    # ------------------------------------------------------------------

    def is_running(self, handle: ViewerHandle) -> bool:
        return handle in self._running

    def begin_run(self, handle: ViewerHandle) -> Optional[str]:
        """
        Mark a run as in flight for *handle*.

        Returns:
            The source location the run is for, or ``None`` if a run is
            already in flight or the handle is unknown.
        """
        state = self._states.get(handle)
        if state is None or handle in self._running:
            return None
        self._running.add(handle)
        return state.source_location

    def finish_run(
        self,
        handle: ViewerHandle,
        started_source: str,
        result: Optional[ExtractionResult],
    ) -> bool:
        """
        Settle a run started with :meth:`begin_run`.

        ``result=None`` records a failed run.  Results for a source the
        viewer no longer points at are discarded.

        Returns:
            True if the outcome was applied to the state.
        """
        self._running.discard(handle)
        state = self._states.get(handle)
        if state is None:
            return False

        if state.source_location != started_source:
            logger.debug(
                "Discarding stale result for %r: run was for %s, viewer now shows %s",
                handle,
                started_source,
                state.source_location,
            )
            return False

        state.run_attempted = True
        if result is None:
            state.clear()
            return True

        state.cached_pages = list(result.pages)
        state.total_pages = result.total_pages
        state.is_loaded = True
        return True

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def handles(self) -> List[ViewerHandle]:
        return list(self._states)

    def __contains__(self, handle: object) -> bool:
        return handle in self._states

    def __iter__(self) -> Iterator[ViewerHandle]:
        return iter(list(self._states))

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        loaded = sum(1 for s in self._states.values() if s.is_loaded)
        return f"ViewerRegistry(viewers={len(self)}, loaded={loaded}, running={len(self._running)})"
