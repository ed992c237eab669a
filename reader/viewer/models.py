"""
Data models for embedded document viewers.
"""

import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable

from core.page.models import PageText

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class ViewerHandle:
    """Opaque identity of one embedded viewer; compare by ``viewer_id`` only."""

    viewer_id: int

    @classmethod
    def allocate(cls) -> "ViewerHandle":
        return cls(next(_handle_ids))

    def __repr__(self) -> str:
        return f"ViewerHandle(#{self.viewer_id})"


@dataclass
class ViewerState:
    """
    Extraction state of one viewer.

    ``is_loaded`` is only ever True for the document named by
    ``source_location``; changing the source clears the cache in the
    same step.
    """

    source_location: str
    cached_pages: Optional[List[PageText]] = None
    is_loaded: bool = False
    total_pages: Optional[int] = None
    run_attempted: bool = False

    def clear(self) -> None:
        self.cached_pages = None
        self.is_loaded = False
        self.total_pages = None

    @property
    def page_count(self) -> int:
        return len(self.cached_pages) if self.cached_pages else 0

    @property
    def char_count(self) -> int:
        return sum(p.char_count for p in self.cached_pages or [])


@runtime_checkable
class ViewerElement(Protocol):
    """What the assistant needs from a viewer element in the host page."""

    source: str
    visible: bool

    def focus(self) -> None:
        ...


@dataclass(eq=False)
class StaticViewer:
    """
    Plain viewer element for headless use.

    Identity-compared, like the page elements it stands in for.
    """

    source: str
    visible: bool = True
    label: str = "PDF Document"
    focused: bool = field(default=False, repr=False)

    def focus(self) -> None:
        self.focused = True
