"""
Configuration for the viewer narrator.

:class:`ReaderConfig` holds the tuneables of the extraction and command
layers; :class:`SpeechSettings` is the single process-wide settings object
that is persisted in a :class:`~reader.storage.KeyValueStore`.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from reader.storage import KeyValueStore

logger = logging.getLogger(__name__)

# Placeholder URL the host site assigns to viewers with no document
DEFAULT_SENTINEL_SOURCE = "https://filler-link.co.uk"

# Relay used by the last extraction strategy
DEFAULT_PROXY_TEMPLATE = "https://api.allorigins.win/raw?url={url}"

_KEY_PREFIX = "screen_reader."


@dataclass
class ReaderConfig:
    """
    All tuneable parameters of the assistant.

    Attributes:
        max_pages:             Page cap for one extraction run.
        settle_delay:          Seconds to wait after a viewer change before
                               extracting.
        read_page_limit:       Pages narrated by the Read command.
        page_char_limit:       Characters narrated per page by Read.
        preview_chars:         Characters of page 1 used by Describe.
        sentinel_source:       Source value meaning "no document".
        proxy_template:        Relay URL template with a ``{url}`` field.
        fetch_timeout:         Seconds before a download attempt fails.
        display_grace_period:  Seconds after opening the text display during
                               which selection read-aloud is suppressed.
        auto_display:          Open the text display when a background run
                               finishes while the assistant is enabled.
        disable_tqdm:          Suppress the per-page progress bar.
    """

    max_pages: int = 50
    settle_delay: float = 1.0

    read_page_limit: int = 3
    page_char_limit: int = 1000
    preview_chars: int = 200

    sentinel_source: str = DEFAULT_SENTINEL_SOURCE
    proxy_template: str = DEFAULT_PROXY_TEMPLATE
    fetch_timeout: float = 30.0

    display_grace_period: float = 0.5
    auto_display: bool = True

    disable_tqdm: bool = True

    def is_document_source(self, source: Optional[str]) -> bool:
        """True when *source* names a real document (not empty, not the sentinel)."""
        return bool(source) and source != self.sentinel_source


def decode_setting(raw: Optional[str]) -> Optional[Union[bool, float, str]]:
    """
    Best-effort decode of a stored string.

    ``"true"``/``"false"`` become booleans, numeric strings become floats,
    anything else is returned unchanged.
    """
    if raw is None:
        return None
    if raw == "true":
        return True
    if raw == "false":
        return False
    try:
        return float(raw)
    except ValueError:
        return raw


def encode_setting(value: Union[bool, int, float, str]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class SpeechSettings:
    """
    Persisted assistant settings.

    Loaded once with :meth:`load`; every setter on
    :class:`~reader.speech.session.SpeechSession` calls :meth:`save`.
    """

    enabled: bool = False
    rate: float = 1.0
    voice_index: Optional[int] = None

    @classmethod
    def load(cls, store: KeyValueStore) -> "SpeechSettings":
        settings = cls()

        enabled = decode_setting(store.get(_KEY_PREFIX + "enabled"))
        if isinstance(enabled, bool):
            settings.enabled = enabled

        rate = decode_setting(store.get(_KEY_PREFIX + "rate"))
        if isinstance(rate, float) and math.isfinite(rate) and rate > 0:
            settings.rate = rate

        voice_index = decode_setting(store.get(_KEY_PREFIX + "voice_index"))
        if isinstance(voice_index, float) and math.isfinite(voice_index) and voice_index >= 0:
            settings.voice_index = int(voice_index)

        logger.debug("Loaded settings: %s", settings)
        return settings

    def save(self, store: KeyValueStore, field_name: str) -> None:
        """Write one field to *store*."""
        value = getattr(self, field_name)
        if value is None:
            return
        store.set(_KEY_PREFIX + field_name, encode_setting(value))
        logger.debug("Saved setting: %s = %s", field_name, value)
