"""User commands for viewers and the messages they speak."""

from .dispatcher import Command, CommandDispatcher
from .narration import (
    NO_TEXT_MESSAGE,
    TRUNCATION_MARKER,
    build_description,
    build_focus_announcement,
    build_reading,
    describe_element,
)

__all__ = [
    "Command",
    "CommandDispatcher",
    "NO_TEXT_MESSAGE",
    "TRUNCATION_MARKER",
    "build_description",
    "build_focus_announcement",
    "build_reading",
    "describe_element",
]
