"""
Speech session, persisted settings and the bundled engines.
"""

import io

import pytest

from reader.speech.base_engine import Voice
from reader.speech.console_engine import ConsoleSpeechEngine
from reader.speech import model_manager
from reader.speech.model_manager import KNOWN_VOICES, ModelManager, parse_voice_name, voice_url
from reader.speech.session import ACTIVATED_MESSAGE, SpeechSession
from reader.storage import MemoryStore
from tests.fakes import FakeEngine


def test_default_voice_prefers_english(session) -> None:
    assert session.voice == Voice("amy", "en-US")
    assert session.rate == 1.0
    assert session.enabled is False


def test_saved_voice_is_restored(engine) -> None:
    store = MemoryStore({"screen_reader.voice_index": "2", "screen_reader.rate": "1.5"})
    session = SpeechSession(engine, store)
    assert session.voice.name == "alan"
    assert session.rate == 1.5


def test_unusable_saved_values_fall_back_to_defaults(engine) -> None:
    store = MemoryStore(
        {
            "screen_reader.enabled": "yes",
            "screen_reader.rate": "nan",
            "screen_reader.voice_index": "7",
        }
    )
    session = SpeechSession(engine, store)
    assert session.enabled is False
    assert session.rate == 1.0
    assert session.voice.name == "amy"


def test_only_one_utterance_at_a_time(active_session, engine) -> None:
    active_session.speak("First message")
    active_session.speak("Second message")

    assert engine.overlaps == 0
    assert engine.active == "Second message"
    assert engine.cancel_count == 2


def test_empty_text_is_not_spoken(active_session, engine) -> None:
    assert active_session.speak("") is False
    assert active_session.speak("   \n") is False
    assert active_session.speak(None) is False
    assert engine.spoken == []


def test_voice_and_rate_changes_persist_and_apply(active_session, engine, store) -> None:
    active_session.set_voice(0)
    active_session.set_rate(1.25)
    active_session.speak("Hallo")

    assert store.get("screen_reader.voice_index") == "0"
    assert store.get("screen_reader.rate") == "1.25"
    assert engine.spoken[-1] == ("Hallo", Voice("thorsten", "de-DE"), 1.25)

    restored = SpeechSession(FakeEngine(), store)
    assert restored.voice.name == "thorsten"
    assert restored.rate == 1.25


def test_invalid_voice_and_rate_are_rejected(session) -> None:
    with pytest.raises(IndexError):
        session.set_voice(3)
    with pytest.raises(ValueError):
        session.set_rate(0)


def test_toggle_announces_and_persists(session, engine, store) -> None:
    assert session.toggle() is True
    assert engine.last == ACTIVATED_MESSAGE
    assert store.get("screen_reader.enabled") == "true"

    spoken_before = len(engine.spoken)
    assert session.toggle() is False
    assert store.get("screen_reader.enabled") == "false"
    assert engine.is_speaking is False
    assert len(engine.spoken) == spoken_before


def test_disabled_session_stays_silent(session, engine) -> None:
    assert session.speak("PDF focused") is False
    assert engine.spoken == []
    assert engine.cancel_count == 0

    session.toggle()
    assert engine.texts == [ACTIVATED_MESSAGE]
    assert session.speak("PDF focused") is True


def test_console_engine_prints_utterances() -> None:
    out = io.StringIO()
    engine = ConsoleSpeechEngine(stream=out)
    session = SpeechSession(engine, MemoryStore({"screen_reader.enabled": "true"}))

    session.speak("PDF focused")

    assert engine.spoken == ["PDF focused"]
    assert out.getvalue() == "[console 1.00x] PDF focused\n"


def test_voice_names_are_parsed_into_download_urls() -> None:
    assert parse_voice_name("en_GB-alan-medium") == ("en_GB", "alan", "medium")
    assert voice_url("de_DE-thorsten-medium", ".onnx.json") == (
        "https://huggingface.co/rhasspy/piper-voices/resolve/main/"
        "de/de_DE/thorsten/medium/de_DE-thorsten-medium.onnx.json"
    )
    for name in ("alan", "en-alan-medium", "en_GB-alan", "en_GB--medium"):
        with pytest.raises(ValueError):
            parse_voice_name(name)


def test_model_manager_lists_known_and_cached_voices(tmp_path) -> None:
    manager = ModelManager(voice_dir=tmp_path)
    known = manager.list_known_voices()

    assert [v.name for v in known] == list(KNOWN_VOICES)
    assert Voice("en_GB-alan-medium", "en-GB") in known
    assert manager.list_available_voices() == []

    voice_dir = tmp_path / "en_US-amy-medium"
    voice_dir.mkdir()
    (voice_dir / "en_US-amy-medium.onnx").write_bytes(b"")
    (voice_dir / "en_US-amy-medium.onnx.json").write_text("{}")

    amy = Voice("en_US-amy-medium", "en-US")
    assert manager.list_available_voices() == [amy]
    assert manager.is_voice_available(amy) is True
    assert manager.ensure_voice_available("en_US-amy-medium") == manager.get_voice_path(amy)


def test_model_manager_downloads_missing_voice(tmp_path, monkeypatch) -> None:
    fetched = []

    def fake_urlretrieve(url, filename, reporthook=None):
        fetched.append(url)
        reporthook(1, 4, 8)
        reporthook(2, 4, 8)
        with open(filename, "wb") as f:
            f.write(b"model")

    monkeypatch.setattr(model_manager.urllib.request, "urlretrieve", fake_urlretrieve)
    manager = ModelManager(voice_dir=tmp_path)

    path = manager.ensure_voice_available("fr_FR-siwis-medium")

    assert path == tmp_path / "fr_FR-siwis-medium" / "fr_FR-siwis-medium.onnx"
    assert [url.rsplit("/", 1)[-1] for url in fetched] == [
        "fr_FR-siwis-medium.onnx",
        "fr_FR-siwis-medium.onnx.json",
    ]
    assert manager.is_voice_available("fr_FR-siwis-medium") is True
    assert list(path.parent.glob("*.part")) == []


def test_failed_download_leaves_no_partial_file(tmp_path, monkeypatch) -> None:
    def broken_urlretrieve(url, filename, reporthook=None):
        with open(filename, "wb") as f:
            f.write(b"half")
        raise OSError("connection reset")

    monkeypatch.setattr(model_manager.urllib.request, "urlretrieve", broken_urlretrieve)
    manager = ModelManager(voice_dir=tmp_path)

    with pytest.raises(RuntimeError, match="connection reset"):
        manager.ensure_voice_available("en_US-ryan-medium")
    assert list((tmp_path / "en_US-ryan-medium").iterdir()) == []


def test_model_manager_rejects_unknown_voices(tmp_path) -> None:
    with pytest.raises(ValueError):
        ModelManager(voice_dir=tmp_path).ensure_voice_available("xx_XX-nobody-low")
