"""
Config helpers and the key-value stores.
"""

import json

from reader.config import ReaderConfig, SpeechSettings, decode_setting, encode_setting
from reader.storage import JsonFileStore, MemoryStore


def test_document_source_check() -> None:
    config = ReaderConfig()
    assert config.is_document_source("https://example.org/a.pdf") is True
    assert config.is_document_source("https://filler-link.co.uk") is False
    assert config.is_document_source("") is False
    assert config.is_document_source(None) is False


def test_setting_codec() -> None:
    assert decode_setting("true") is True
    assert decode_setting("false") is False
    assert decode_setting("1.5") == 1.5
    assert decode_setting("fast") == "fast"
    assert decode_setting(None) is None
    assert encode_setting(True) == "true"
    assert encode_setting(2) == "2"


def test_settings_round_trip_through_store() -> None:
    store = MemoryStore()
    settings = SpeechSettings(enabled=True, rate=0.8, voice_index=None)
    settings.save(store, "enabled")
    settings.save(store, "rate")
    settings.save(store, "voice_index")

    assert store.get("screen_reader.voice_index") is None
    loaded = SpeechSettings.load(store)
    assert loaded == SpeechSettings(enabled=True, rate=0.8, voice_index=None)


def test_json_store_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = JsonFileStore(path)
    store.set("screen_reader.rate", "1.2")

    assert json.loads(path.read_text()) == {"screen_reader.rate": "1.2"}
    assert JsonFileStore(path).get("screen_reader.rate") == "1.2"


def test_json_store_ignores_corrupt_files(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert JsonFileStore(path).get("screen_reader.rate") is None

    path.write_text("[1, 2, 3]")
    store = JsonFileStore(path)
    assert store.get("screen_reader.rate") is None

    store.set("screen_reader.enabled", "true")
    assert JsonFileStore(path).get("screen_reader.enabled") == "true"
