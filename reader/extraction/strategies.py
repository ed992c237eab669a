"""
Extraction strategies: ways of getting a document in front of the parser.

Each strategy either returns an :class:`ExtractionResult` or ``None``
("try the next one").  Network errors, bad status codes and parser
rejections are logged and turned into ``None`` here; only the pipeline
decides that a run has failed.

1. :class:`DirectParseStrategy` — hand the location straight to PyMuPDF.
2. :class:`BufferedDownloadStrategy` — download the bytes, parse the buffer.
3. :class:`ProxiedDownloadStrategy` — download through a relay, parse the
   buffer.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import quote, unquote, urlparse
from urllib.request import url2pathname

from tqdm import tqdm

from core.document.pdf_reader import PDFDocumentReader
from core.page.models import PageText, normalize_text
from reader.extraction.fetch import HttpFetcher
from reader.extraction.models import ExtractionResult

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[], PDFDocumentReader]

_REMOTE_SCHEMES = ("http", "https")


def local_path(source: str) -> Optional[Path]:
    """
    Resolve *source* to a filesystem path if it names a local file.

    Accepts plain paths and ``file://`` URLs; returns ``None`` for
    anything with a network scheme.
    """
    parsed = urlparse(source)
    if parsed.scheme == "file":
        return Path(url2pathname(unquote(parsed.path)))
    # Windows drive letters parse as one-letter schemes
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(source)
    return None


def is_remote(source: str) -> bool:
    return urlparse(source).scheme in _REMOTE_SCHEMES


async def extract_pages(
    reader: PDFDocumentReader,
    page_limit: int = 50,
    strategy: str = "",
    disable_progress: bool = True,
) -> ExtractionResult:
    """
    Walk pages ``1..min(total, page_limit)`` of an open document in order.

    A page whose parse raises is logged and left out; pages without text
    are left out as well.  Control returns to the event loop between pages.
    """
    total_pages = reader.get_page_count()
    last_page = min(total_pages, page_limit)
    pages: List[PageText] = []

    logger.info("Extracting text from PDF: %d pages", total_pages)

    for page_number in tqdm(
        range(1, last_page + 1),
        desc="Extracting text",
        unit="page",
        disable=disable_progress,
    ):
        try:
            fragments = reader.get_text_fragments(page_number - 1)
        except Exception as e:
            logger.warning("Error extracting page %d: %s", page_number, e)
            continue

        text = normalize_text(fragments)
        if text:
            pages.append(PageText(page_number=page_number, text=text))
            logger.debug("Page %d extracted: %d characters", page_number, len(text))

        await asyncio.sleep(0)

    if total_pages > last_page:
        logger.info(
            "Only extracted first %d of %d pages", last_page, total_pages
        )

    return ExtractionResult(
        pages=pages,
        total_pages=total_pages,
        page_limit=page_limit,
        strategy=strategy,
    )


class ExtractionStrategy(ABC):
    """
    Common shape of all strategies.

    Subclasses implement :meth:`_open`, which loads the document into a
    fresh reader; the page walk and the error policy live here.
    """

    name = "strategy"

    def __init__(
        self,
        reader_factory: ReaderFactory = PDFDocumentReader,
        page_limit: int = 50,
        disable_progress: bool = True,
    ):
        self.reader_factory = reader_factory
        self.page_limit = page_limit
        self.disable_progress = disable_progress

    async def attempt(self, source: str) -> Optional[ExtractionResult]:
        """
        Try to extract *source*.

        Returns:
            The extraction result, or ``None`` if this strategy could not
            open the document.
        """
        reader = self.reader_factory()
        try:
            if not await self._open(reader, source):
                return None
            return await extract_pages(
                reader,
                page_limit=self.page_limit,
                strategy=self.name,
                disable_progress=self.disable_progress,
            )
        except Exception as e:
            logger.info("%s failed for %s: %s", self.name, source, e)
            return None
        finally:
            reader.close_document()

    @abstractmethod
    async def _open(self, reader: PDFDocumentReader, source: str) -> bool:
        """Load *source* into *reader*; return whether it opened."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DirectParseStrategy(ExtractionStrategy):
    """
    Let the parser open the location itself.

    PyMuPDF only reads from the filesystem, so this covers local paths and
    ``file://`` URLs and declines remote ones.
    """

    name = "direct"

    async def _open(self, reader: PDFDocumentReader, source: str) -> bool:
        path = local_path(source)
        if path is None:
            logger.debug("Direct parse skipped: parser cannot fetch %s", source)
            return False

        logger.info("Attempting direct PDF extraction: %s", path)
        ok, _ = reader.load_pdf(str(path))
        return ok


class BufferedDownloadStrategy(ExtractionStrategy):
    """Download the raw bytes anonymously and parse the buffer."""

    name = "download"

    def __init__(self, fetcher: Optional[HttpFetcher] = None, **kwargs):
        super().__init__(**kwargs)
        self.fetcher = fetcher or HttpFetcher()

    async def _open(self, reader: PDFDocumentReader, source: str) -> bool:
        if not is_remote(source):
            return False

        logger.info("Downloading PDF: %s", source)
        data = await self.fetcher.fetch(source)
        logger.debug("PDF downloaded, size: %d", len(data))
        ok, _ = reader.load_stream(data, label=source)
        return ok


class ProxiedDownloadStrategy(ExtractionStrategy):
    """
    Download through a third-party relay, the last resort when the
    document host refuses direct requests.
    """

    name = "proxy"

    def __init__(
        self,
        proxy_template: str,
        fetcher: Optional[HttpFetcher] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if "{url}" not in proxy_template:
            raise ValueError(f"Proxy template needs a {{url}} field: {proxy_template}")
        self.proxy_template = proxy_template
        self.fetcher = fetcher or HttpFetcher()

    def proxy_url(self, source: str) -> str:
        return self.proxy_template.format(url=quote(source, safe=""))

    async def _open(self, reader: PDFDocumentReader, source: str) -> bool:
        if not is_remote(source):
            return False

        url = self.proxy_url(source)
        logger.info("Trying PDF download through proxy: %s", url)
        data = await self.fetcher.fetch(url)
        ok, _ = reader.load_stream(data, label=url)
        if ok:
            logger.info("PDF loaded via proxy")
        return ok
