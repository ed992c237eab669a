"""Speech output: engines, voice models and the speech session."""

from .base_engine import BaseSpeechEngine, Voice
from .console_engine import ConsoleSpeechEngine
from .model_manager import ModelManager
from .piper_engine import PiperSpeechEngine
from .session import SpeechSession

__all__ = [
    "BaseSpeechEngine",
    "ConsoleSpeechEngine",
    "ModelManager",
    "PiperSpeechEngine",
    "SpeechSession",
    "Voice",
]
