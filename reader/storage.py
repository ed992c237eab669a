"""
Persistent key-value storage for assistant settings.

Strings only, last write wins.  Callers encode numbers and booleans as
their string form and decode them on load.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

# Default settings file
_DEFAULT_STORE_PATH = (
    Path.home() / ".local" / "share" / "ViewerNarrator" / "settings.json"
)


class KeyValueStore(ABC):
    """Minimal string key-value store interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string for *key*, or ``None`` if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*."""


class MemoryStore(KeyValueStore):
    """In-process store; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def __repr__(self) -> str:
        return f"MemoryStore(keys={sorted(self._data)})"


class JsonFileStore(KeyValueStore):
    """
    Store backed by a flat JSON object on disk.

    The file is read once on construction and rewritten on every
    :meth:`set`.  A missing or corrupt file loads as empty.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else _DEFAULT_STORE_PATH
        self._data: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Could not read settings from %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.error("Ignoring settings file %s: not a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8"
            )
        except OSError as e:
            logger.error("Error saving setting %s to %s: %s", key, self.path, e)

    def __repr__(self) -> str:
        return f"JsonFileStore('{self.path}')"
