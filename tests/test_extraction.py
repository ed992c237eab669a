"""
Page walk, strategies and the fallback pipeline, using a fake document
reader and fetcher.
"""

import asyncio

import pytest

from core.page.models import PageText, normalize_text
from reader.config import ReaderConfig
from reader.extraction.models import ExtractionResult
from reader.extraction.pipeline import ExtractionError, ExtractionPipeline
from reader.extraction.strategies import (
    BufferedDownloadStrategy,
    DirectParseStrategy,
    ProxiedDownloadStrategy,
    extract_pages,
)
from tests.fakes import FakeDocumentReader, FakeFetcher

URL = "https://example.org/brochure.pdf"


class ScriptedStrategy:
    """Returns a canned outcome and records that it ran."""

    def __init__(self, name, outcome, log):
        self.name = name
        self.outcome = outcome
        self.log = log

    async def attempt(self, source):
        self.log.append(self.name)
        return self.outcome


def _loaded_reader(pages) -> FakeDocumentReader:
    reader = FakeDocumentReader(pages)
    reader.load_stream(b"%PDF")
    return reader


# ----------------------------------------------------------------------
# Text models
# ----------------------------------------------------------------------


def test_normalize_text_collapses_whitespace() -> None:
    assert normalize_text(["  Hello", "\n\tworld  ", "again "]) == "Hello world again"
    assert normalize_text([]) == ""
    assert normalize_text(["   ", "\n"]) == ""


def test_page_numbers_are_one_based() -> None:
    with pytest.raises(ValueError):
        PageText(page_number=0, text="x")
    assert PageText(page_number=1, text="abc").char_count == 3


# ----------------------------------------------------------------------
# Page walk
# ----------------------------------------------------------------------


def test_extract_pages_keeps_order_and_skips_failures() -> None:
    reader = _loaded_reader(
        [
            ["Intro", "  text"],
            RuntimeError("broken content stream"),
            [],
            ["Closing\n", "words"],
        ]
    )

    result = asyncio.run(extract_pages(reader, page_limit=50, strategy="direct"))

    assert [p.page_number for p in result.pages] == [1, 4]
    assert [p.text for p in result.pages] == ["Intro text", "Closing words"]
    assert result.total_pages == 4
    assert result.truncated is False
    assert result.strategy == "direct"


def test_extract_pages_stops_at_page_limit() -> None:
    reader = _loaded_reader([[f"page {n}"] for n in range(1, 121)])

    result = asyncio.run(extract_pages(reader, page_limit=50))

    assert result.extracted_count == 50
    assert result.total_pages == 120
    assert result.truncated is True
    assert result.pages[-1].page_number == 50
    assert max(reader.requested) == 50


def test_result_summary_mentions_truncation() -> None:
    result = ExtractionResult(
        pages=[PageText(1, "a")], total_pages=80, page_limit=50, strategy="proxy"
    )
    assert "truncated" in result.summary()
    assert "proxy" in result.summary()


# ----------------------------------------------------------------------
# Strategies
# ----------------------------------------------------------------------


def test_strategy_closes_reader_even_when_it_declines() -> None:
    reader = FakeDocumentReader([["x"]], accept=False)
    strategy = DirectParseStrategy(reader_factory=lambda: reader)

    assert asyncio.run(strategy.attempt("/tmp/missing.pdf")) is None
    assert reader.closed is True


def test_buffered_download_parses_fetched_bytes() -> None:
    reader = FakeDocumentReader([["Downloaded", "text"]])
    fetcher = FakeFetcher({URL: b"%PDF-1.7"})
    strategy = BufferedDownloadStrategy(fetcher=fetcher, reader_factory=lambda: reader)

    result = asyncio.run(strategy.attempt(URL))

    assert result is not None
    assert result.strategy == "download"
    assert result.pages[0].text == "Downloaded text"
    assert fetcher.requested == [URL]
    assert reader.opened == [URL]


def test_buffered_download_declines_on_http_error() -> None:
    fetcher = FakeFetcher({URL: 403})
    strategy = BufferedDownloadStrategy(
        fetcher=fetcher, reader_factory=lambda: FakeDocumentReader([["x"]])
    )
    assert asyncio.run(strategy.attempt(URL)) is None


def test_download_strategies_skip_local_files() -> None:
    fetcher = FakeFetcher()
    buffered = BufferedDownloadStrategy(fetcher=fetcher)
    proxied = ProxiedDownloadStrategy("https://relay.test/?u={url}", fetcher=fetcher)

    assert asyncio.run(buffered.attempt("/srv/docs/a.pdf")) is None
    assert asyncio.run(proxied.attempt("file:///srv/docs/a.pdf")) is None
    assert fetcher.requested == []


def test_proxy_url_encodes_the_source() -> None:
    strategy = ProxiedDownloadStrategy("https://relay.test/raw?url={url}")
    assert (
        strategy.proxy_url("https://example.org/a b.pdf?x=1")
        == "https://relay.test/raw?url=https%3A%2F%2Fexample.org%2Fa%20b.pdf%3Fx%3D1"
    )


def test_proxy_template_requires_url_field() -> None:
    with pytest.raises(ValueError):
        ProxiedDownloadStrategy("https://relay.test/raw")


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------


def test_pipeline_stops_at_first_success() -> None:
    log = []
    success = ExtractionResult(pages=[PageText(1, "ok")], total_pages=1)
    pipeline = ExtractionPipeline(
        [
            ScriptedStrategy("direct", None, log),
            ScriptedStrategy("download", success, log),
            ScriptedStrategy("proxy", success, log),
        ]
    )

    assert asyncio.run(pipeline.extract(URL)) is success
    assert log == ["direct", "download"]


def test_pipeline_raises_when_every_strategy_declines() -> None:
    log = []
    pipeline = ExtractionPipeline(
        [ScriptedStrategy(name, None, log) for name in ("direct", "download", "proxy")]
    )

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(pipeline.extract(URL))

    assert excinfo.value.tried == ["direct", "download", "proxy"]
    assert excinfo.value.source == URL


def test_pipeline_falls_back_to_proxy() -> None:
    reader = FakeDocumentReader([["Relayed"]])
    proxy_template = "https://relay.test/raw?url={url}"
    fetcher = FakeFetcher({URL: 403})
    config = ReaderConfig(proxy_template=proxy_template)
    pipeline = ExtractionPipeline.from_config(
        config, fetcher=fetcher, reader_factory=lambda: reader
    )
    fetcher.responses[pipeline.strategies[2].proxy_url(URL)] = b"%PDF"

    result = asyncio.run(pipeline.extract(URL))

    assert result.strategy == "proxy"
    assert result.pages[0].text == "Relayed"
    assert fetcher.requested[0] == URL


def test_zero_text_document_is_a_successful_empty_result() -> None:
    reader = FakeDocumentReader([[], ["   "]])
    pipeline = ExtractionPipeline(
        [DirectParseStrategy(reader_factory=lambda: reader)]
    )

    result = asyncio.run(pipeline.extract("/srv/docs/scan.pdf"))

    assert result.pages == []
    assert result.total_pages == 2


def test_from_config_builds_the_standard_chain() -> None:
    pipeline = ExtractionPipeline.from_config(ReaderConfig(max_pages=10))
    assert [s.name for s in pipeline.strategies] == ["direct", "download", "proxy"]
    assert all(s.page_limit == 10 for s in pipeline.strategies)


def test_pipeline_needs_strategies() -> None:
    with pytest.raises(ValueError):
        ExtractionPipeline([])
