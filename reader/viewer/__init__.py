"""Viewer tracking: registry, loader and change watcher."""

from .loader import ViewerLoader
from .models import StaticViewer, ViewerElement, ViewerHandle, ViewerState
from .registry import ViewerRegistry
from .watcher import SOURCE_ATTRIBUTE, VISIBILITY_ATTRIBUTE, ChangeWatcher

__all__ = [
    "ChangeWatcher",
    "SOURCE_ATTRIBUTE",
    "StaticViewer",
    "VISIBILITY_ATTRIBUTE",
    "ViewerElement",
    "ViewerHandle",
    "ViewerLoader",
    "ViewerRegistry",
    "ViewerState",
]
