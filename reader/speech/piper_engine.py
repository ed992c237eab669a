"""
Piper TTS speech engine.

Synthesises text with piper-tts and plays it through sounddevice.
Playback is asynchronous: :meth:`PiperSpeechEngine.speak` returns as soon
as the audio has been handed to the output stream.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from reader.speech.base_engine import BaseSpeechEngine, Voice
from reader.speech.model_manager import ModelManager

logger = logging.getLogger(__name__)


class PiperSpeechEngine(BaseSpeechEngine):
    """
    Speaks through piper-tts voices.

    Usage::

        engine = PiperSpeechEngine()
        voice = engine.list_voices()[0]
        engine.speak("Hello world", voice, rate=1.1)

    Voice models are downloaded on first use and kept loaded afterwards.
    """

    def __init__(self, voice_dir: Optional[Path] = None, disable_progress: bool = True):
        try:
            import sounddevice
            from piper import PiperVoice
        except ImportError:
            raise ImportError(
                "piper-tts and sounddevice are required.  "
                "Install with: pip install piper-tts sounddevice"
            )

        self._sd = sounddevice
        self._voice_cls = PiperVoice
        self._models = ModelManager(voice_dir=voice_dir, disable_progress=disable_progress)
        self._loaded: Dict[str, object] = {}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def engine_name(self) -> str:
        return "piper"

    @property
    def is_speaking(self) -> bool:
        try:
            return bool(self._sd.get_stream().active)
        except RuntimeError:
            # No stream has been opened yet
            return False

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    def list_voices(self) -> List[Voice]:
        return self._models.list_known_voices()

    def _load_voice(self, voice: Voice):
        piper_voice = self._loaded.get(voice.name)
        if piper_voice is None:
            path = self._models.ensure_voice_available(voice.name)
            logger.info("Loading Piper voice: %s", voice.name)
            piper_voice = self._voice_cls.load(str(path))
            self._loaded[voice.name] = piper_voice
        return piper_voice

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    def synthesize(self, text: str, voice: Voice, rate: float = 1.0) -> np.ndarray:
        """
        Synthesise *text* to 16-bit mono samples.

        Returns:
            ``int16`` array at the voice's sample rate (empty for blank text).
        """
        if not text or not text.strip():
            return np.zeros(0, dtype=np.int16)

        piper_voice = self._load_voice(voice)
        # Piper length_scale: >1 = slower, <1 = faster
        piper_voice.config.length_scale = 1.0 / max(rate, 0.1)

        pcm_parts = [chunk.audio_int16_bytes for chunk in piper_voice.synthesize(text)]
        if not pcm_parts:
            return np.zeros(0, dtype=np.int16)
        return np.frombuffer(b"".join(pcm_parts), dtype=np.int16)

    def speak(self, text: str, voice: Voice, rate: float = 1.0) -> None:
        samples = self.synthesize(text, voice, rate)
        if samples.size == 0:
            return
        sample_rate = self._load_voice(voice).config.sample_rate
        logger.debug(
            "Playing %.1fs of speech (%s, %.2fx)", samples.size / sample_rate, voice.name, rate
        )
        self._sd.play(samples, samplerate=sample_rate)

    def cancel(self) -> None:
        self._sd.stop()

    def wait(self) -> None:
        self._sd.wait()

    def __repr__(self) -> str:
        return f"PiperSpeechEngine(voices_loaded={len(self._loaded)})"
