"""
Abstract base class for speech engines.

Provides a unified interface so the speech session can swap between
different TTS backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Voice:
    """A selectable voice."""

    name: str
    lang: str

    def __str__(self) -> str:
        return f"{self.name} ({self.lang})"


class BaseSpeechEngine(ABC):
    """
    Common interface for all speech engines used by the session.

    Subclasses must implement :meth:`speak`, :meth:`cancel`,
    :meth:`list_voices` and the ``is_speaking`` / ``engine_name``
    properties.  :meth:`speak` starts an utterance and returns without
    waiting for it to finish.
    """

    @abstractmethod
    def speak(self, text: str, voice: Voice, rate: float = 1.0) -> None:
        """
        Start speaking *text*.

        Args:
            text:  Text to speak.
            voice: Voice to use.
            rate:  Speed multiplier (>1 = faster, <1 = slower).
        """

    @abstractmethod
    def cancel(self) -> None:
        """Stop the utterance in progress, if any."""

    @abstractmethod
    def list_voices(self) -> List[Voice]:
        """Voices this engine can speak with."""

    @property
    @abstractmethod
    def is_speaking(self) -> bool:
        """True while an utterance is playing."""

    @property
    @abstractmethod
    def engine_name(self) -> str:
        """Human-readable engine identifier."""

    def wait(self) -> None:
        """Block until the current utterance has finished."""
