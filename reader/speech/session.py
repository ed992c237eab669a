"""
Speech session: the one place speech is started.

Holds the current voice and rate, the enabled flag, and guarantees that
at most one utterance is active: every :meth:`SpeechSession.speak`
cancels the previous utterance before starting the next.
"""

import logging
from typing import List, Optional

from reader.config import SpeechSettings
from reader.speech.base_engine import BaseSpeechEngine, Voice
from reader.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

ACTIVATED_MESSAGE = "Screen reader activated"


class SpeechSession:
    """
    Wraps a :class:`BaseSpeechEngine` with persisted voice/rate settings.

    Settings are read from *store* once here and written back on every
    change.
    """

    def __init__(self, engine: BaseSpeechEngine, store: Optional[KeyValueStore] = None):
        self.engine = engine
        self.store = store if store is not None else MemoryStore()
        self.settings = SpeechSettings.load(self.store)
        self.voices: List[Voice] = []
        self.voice: Optional[Voice] = None
        self.reload_voices()

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    def reload_voices(self) -> None:
        """Refresh the voice list and pick the saved voice or an English default."""
        self.voices = list(self.engine.list_voices())
        index = self.settings.voice_index
        if index is not None and 0 <= index < len(self.voices):
            self.voice = self.voices[index]
            logger.debug("Loaded saved voice: %s", self.voice)
            return

        english = next((v for v in self.voices if v.lang.lower().startswith("en")), None)
        self.voice = english or (self.voices[0] if self.voices else None)

    def set_voice(self, index: int) -> Voice:
        """
        Select voice *index* and persist it; applies from the next utterance.

        Raises:
            IndexError: If *index* is out of range.
        """
        if not 0 <= index < len(self.voices):
            raise IndexError(f"Voice index {index} out of range (0..{len(self.voices) - 1})")
        self.voice = self.voices[index]
        self.settings.voice_index = index
        self.settings.save(self.store, "voice_index")
        logger.info("Voice changed: %s", self.voice)
        return self.voice

    # ------------------------------------------------------------------
    # Rate / enabled
    # ------------------------------------------------------------------

    @property
    def rate(self) -> float:
        return self.settings.rate

    def set_rate(self, rate: float) -> None:
        """Persist a new speech rate; applies from the next utterance."""
        if rate <= 0:
            raise ValueError(f"Speech rate must be positive, got {rate}")
        self.settings.rate = float(rate)
        self.settings.save(self.store, "rate")

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def toggle(self) -> bool:
        """
        Flip the assistant on or off and persist the flag.

        Returns:
            The new enabled state.
        """
        self.settings.enabled = not self.settings.enabled
        self.settings.save(self.store, "enabled")

        if self.settings.enabled:
            logger.info("Screen reader activated")
            self._speak(ACTIVATED_MESSAGE)
        else:
            logger.info("Screen reader deactivated")
            self.cancel()
        return self.settings.enabled

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    @property
    def is_speaking(self) -> bool:
        return self.engine.is_speaking

    def speak(self, text: Optional[str]) -> bool:
        """
        Speak *text*, replacing any utterance in progress.

        Nothing is spoken while the assistant is disabled.

        Returns:
            False if nothing was spoken.
        """
        if not self.settings.enabled:
            return False
        return self._speak(text)

    def _speak(self, text: Optional[str]) -> bool:
        if not text or not text.strip():
            return False
        if self.voice is None:
            logger.warning("No voice available, cannot speak")
            return False

        preview = text[:100].replace("\n", " ")
        logger.debug("Speaking: %s%s", preview, "..." if len(text) > 100 else "")
        self.engine.cancel()
        self.engine.speak(text, self.voice, self.rate)
        return True

    def cancel(self) -> None:
        self.engine.cancel()

    def __repr__(self) -> str:
        return (
            f"SpeechSession(engine={self.engine.engine_name}, voice={self.voice}, "
            f"rate={self.rate}, enabled={self.enabled})"
        )
