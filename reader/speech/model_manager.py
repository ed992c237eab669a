"""
Piper voice catalogue for the speech session.

Maps the voices the assistant offers onto Piper model files, downloads a
voice the first time it is spoken with, and keeps it under
~/.local/share/ViewerNarrator/voices/<voice>/.
"""

import logging
import urllib.request
from pathlib import Path
from typing import List, Optional, Tuple, Union

from tqdm import tqdm

from reader.speech.base_engine import Voice

logger = logging.getLogger(__name__)

_PIPER_VOICES_BASE = "https://huggingface.co/rhasspy/piper-voices/resolve/main"

_DEFAULT_VOICE_DIR = Path.home() / ".local" / "share" / "ViewerNarrator" / "voices"

# Offered in this order; the session falls back to the first English one.
KNOWN_VOICES = (
    "en_US-lessac-medium",
    "en_US-amy-medium",
    "en_US-ryan-medium",
    "en_GB-alan-medium",
    "de_DE-thorsten-medium",
    "fr_FR-siwis-medium",
)

# Model weights, then the JSON config PiperVoice.load() reads beside them
_MODEL_SUFFIXES = (".onnx", ".onnx.json")


def parse_voice_name(name: str) -> Tuple[str, str, str]:
    """
    Split a Piper voice name into ``(locale, speaker, quality)``.

    ``"en_GB-alan-medium"`` → ``("en_GB", "alan", "medium")``.

    Raises:
        ValueError: If *name* is not ``<locale>-<speaker>-<quality>``.
    """
    parts = name.split("-")
    if len(parts) != 3 or "_" not in parts[0] or not all(parts):
        raise ValueError(f"Not a Piper voice name: '{name}'")
    return parts[0], parts[1], parts[2]


def voice_from_name(name: str) -> Voice:
    locale, _, _ = parse_voice_name(name)
    return Voice(name=name, lang=locale.replace("_", "-"))


def voice_url(name: str, suffix: str) -> str:
    """Download URL of one model file of voice *name*."""
    locale, speaker, quality = parse_voice_name(name)
    language = locale.split("_")[0]
    return f"{_PIPER_VOICES_BASE}/{language}/{locale}/{speaker}/{quality}/{name}{suffix}"


class ModelManager:
    """
    Locates and fetches the Piper models behind :class:`Voice` entries.

    Usage::

        mgr = ModelManager()
        voice = mgr.list_known_voices()[0]
        path = mgr.ensure_voice_available(voice)
    """

    def __init__(self, voice_dir: Optional[Path] = None, disable_progress: bool = True):
        self.voice_dir = Path(voice_dir) if voice_dir else _DEFAULT_VOICE_DIR
        self.disable_progress = disable_progress

    def get_voice_path(self, voice: Union[str, Voice]) -> Path:
        """Expected ``.onnx`` path of *voice*; the file may not exist yet."""
        name = voice.name if isinstance(voice, Voice) else voice
        return self.voice_dir / name / f"{name}.onnx"

    def is_voice_available(self, voice: Union[str, Voice]) -> bool:
        onnx = self.get_voice_path(voice)
        return onnx.exists() and onnx.with_suffix(".onnx.json").exists()

    def ensure_voice_available(self, voice: Union[str, Voice]) -> Path:
        """
        Download *voice* unless it is cached.

        Returns:
            Path to the ``.onnx`` model file.

        Raises:
            ValueError: If the voice is not in :data:`KNOWN_VOICES`.
            RuntimeError: If a download fails.
        """
        name = voice.name if isinstance(voice, Voice) else voice
        onnx_path = self.get_voice_path(name)
        if self.is_voice_available(name):
            return onnx_path

        if name not in KNOWN_VOICES:
            raise ValueError(f"Unknown voice '{name}'. Available: {list(KNOWN_VOICES)}")

        onnx_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Voice %s is not cached, downloading it before speaking", name)
        for suffix in _MODEL_SUFFIXES:
            self._download(voice_url(name, suffix), onnx_path.with_suffix(suffix))

        logger.info("Voice ready: %s", onnx_path)
        return onnx_path

    def list_known_voices(self) -> List[Voice]:
        return [voice_from_name(name) for name in KNOWN_VOICES]

    def list_available_voices(self) -> List[Voice]:
        """Voices whose model files are already on disk."""
        return [voice for voice in self.list_known_voices() if self.is_voice_available(voice)]

    def _download(self, url: str, dest: Path) -> None:
        """Fetch *url* into *dest* through a ``.part`` file, with a progress bar."""
        partial = dest.with_name(dest.name + ".part")
        logger.debug("Fetching %s", url)

        with tqdm(
            desc=dest.name,
            unit="B",
            unit_scale=True,
            disable=self.disable_progress,
        ) as bar:

            def report(blocks: int, block_size: int, total: int) -> None:
                if total > 0:
                    bar.total = total
                bar.update(blocks * block_size - bar.n)

            try:
                urllib.request.urlretrieve(url, str(partial), reporthook=report)
            except Exception as e:
                if partial.exists():
                    partial.unlink()
                raise RuntimeError(f"Failed to download voice file {url}: {e}") from e

        partial.replace(dest)
        logger.info("Downloaded %s (%.1f MB)", dest.name, dest.stat().st_size / 1e6)

    def __repr__(self) -> str:
        return (
            f"ModelManager(dir='{self.voice_dir}', "
            f"cached={len(self.list_available_voices())})"
        )
