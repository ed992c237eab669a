"""Document acquisition: fetch, strategies and the fallback pipeline."""

from .fetch import FetchError, HttpFetcher
from .models import ExtractionResult
from .pipeline import ExtractionError, ExtractionPipeline
from .strategies import (
    BufferedDownloadStrategy,
    DirectParseStrategy,
    ExtractionStrategy,
    ProxiedDownloadStrategy,
    extract_pages,
)

__all__ = [
    "BufferedDownloadStrategy",
    "DirectParseStrategy",
    "ExtractionError",
    "ExtractionPipeline",
    "ExtractionResult",
    "ExtractionStrategy",
    "FetchError",
    "HttpFetcher",
    "ProxiedDownloadStrategy",
    "extract_pages",
]
