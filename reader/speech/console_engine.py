"""
Speech engine that writes utterances to a text stream.

Useful on machines without audio output and for piping the narration
into another program.
"""

import sys
from typing import List, Optional, TextIO

from reader.speech.base_engine import BaseSpeechEngine, Voice

CONSOLE_VOICES = [Voice(name="console", lang="en-US")]


class ConsoleSpeechEngine(BaseSpeechEngine):
    """Prints each utterance on its own line."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.spoken: List[str] = []

    @property
    def engine_name(self) -> str:
        return "console"

    @property
    def is_speaking(self) -> bool:
        # Printing completes synchronously
        return False

    def list_voices(self) -> List[Voice]:
        return list(CONSOLE_VOICES)

    def speak(self, text: str, voice: Voice, rate: float = 1.0) -> None:
        self.spoken.append(text)
        print(f"[{voice.name} {rate:.2f}x] {text}", file=self.stream, flush=True)

    def cancel(self) -> None:
        pass
