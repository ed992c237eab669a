"""
Extraction pipeline: source location → page-indexed text.

Strategies run strictly in priority order and the first one that returns
a result ends the run.  Only when every strategy declines does the run
fail, with :class:`ExtractionError`.

Usage::

    pipeline = ExtractionPipeline.from_config(ReaderConfig())
    result = await pipeline.extract("https://example.org/brochure.pdf")
    print(result.summary())
"""

import logging
import time
from typing import List, Optional, Sequence

from core.document.pdf_reader import PDFDocumentReader
from reader.config import ReaderConfig
from reader.extraction.fetch import HttpFetcher
from reader.extraction.models import ExtractionResult
from reader.extraction.strategies import (
    BufferedDownloadStrategy,
    DirectParseStrategy,
    ExtractionStrategy,
    ProxiedDownloadStrategy,
    ReaderFactory,
)

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Every strategy failed for a source."""

    def __init__(self, source: str, tried: Sequence[str]):
        self.source = source
        self.tried = list(tried)
        super().__init__(
            f"Could not extract text from {source} "
            f"(tried: {', '.join(self.tried) or 'nothing'})"
        )


class ExtractionPipeline:
    """Ordered fallback chain of :class:`ExtractionStrategy` objects."""

    def __init__(self, strategies: Sequence[ExtractionStrategy]):
        if not strategies:
            raise ValueError("ExtractionPipeline needs at least one strategy")
        self.strategies: List[ExtractionStrategy] = list(strategies)

    @classmethod
    def from_config(
        cls,
        config: ReaderConfig,
        fetcher: Optional[HttpFetcher] = None,
        reader_factory: ReaderFactory = PDFDocumentReader,
    ) -> "ExtractionPipeline":
        """Build the standard direct → download → proxy chain."""
        fetcher = fetcher or HttpFetcher(timeout=config.fetch_timeout)
        common = dict(
            reader_factory=reader_factory,
            page_limit=config.max_pages,
            disable_progress=config.disable_tqdm,
        )
        return cls(
            [
                DirectParseStrategy(**common),
                BufferedDownloadStrategy(fetcher=fetcher, **common),
                ProxiedDownloadStrategy(
                    config.proxy_template, fetcher=fetcher, **common
                ),
            ]
        )

    async def extract(self, source: str) -> ExtractionResult:
        """
        Run the strategies in order until one produces a result.

        Raises:
            ExtractionError: If all strategies return ``None``.
        """
        t0 = time.perf_counter()
        tried: List[str] = []

        for strategy in self.strategies:
            tried.append(strategy.name)
            result = await strategy.attempt(source)
            if result is None:
                logger.debug("Strategy %s produced nothing for %s", strategy.name, source)
                continue

            logger.info(
                "Extracted %s: %s in %.2fs",
                source,
                result.summary(),
                time.perf_counter() - t0,
            )
            return result

        raise ExtractionError(source, tried)

    def __repr__(self) -> str:
        names = " → ".join(s.name for s in self.strategies)
        return f"ExtractionPipeline({names})"
