import pytest

from reader.assistant import ScreenReader
from reader.config import ReaderConfig
from reader.speech.session import SpeechSession
from reader.storage import MemoryStore
from tests.fakes import FakeEngine, FakePipeline


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session(engine, store) -> SpeechSession:
    return SpeechSession(engine, store)


@pytest.fixture
def active_session(engine, store) -> SpeechSession:
    """Session over the same engine and store with the assistant switched on."""
    store.set("screen_reader.enabled", "true")
    return SpeechSession(engine, store)


@pytest.fixture
def config() -> ReaderConfig:
    return ReaderConfig(settle_delay=0.0, auto_display=False)


@pytest.fixture
def pipeline() -> FakePipeline:
    return FakePipeline()


@pytest.fixture
def assistant(engine, config, pipeline) -> ScreenReader:
    """Enabled assistant wired to the fake engine and pipeline."""
    return ScreenReader(
        engine,
        config=config,
        store=MemoryStore({"screen_reader.enabled": "true"}),
        pipeline=pipeline,
    )
