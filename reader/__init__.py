"""
Screen-reading assistant for embedded PDF viewers.

Watches viewers for document changes, extracts their text through a
fallback chain of strategies, and narrates it on request.
"""

from .assistant import ScreenReader
from .config import ReaderConfig, SpeechSettings

__all__ = [
    "ReaderConfig",
    "ScreenReader",
    "SpeechSettings",
]
