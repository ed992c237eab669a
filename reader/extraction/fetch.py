"""
Binary document download over HTTP.
"""

import logging
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)

_USER_AGENT = "ViewerNarrator/0.1 (+accessibility)"


class FetchError(RuntimeError):
    """A download failed with a non-success status or a transport error."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        detail = f"HTTP {status}" if status is not None else reason or "transport error"
        super().__init__(f"Fetching {url} failed: {detail}")


class HttpFetcher:
    """
    Fetches raw bytes with an anonymous, uncached GET.

    No cookies or credentials are sent, redirects are followed.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "User-Agent": _USER_AGENT,
            "Cache-Control": "no-cache",
            "Accept": "application/pdf,*/*;q=0.8",
        }
        if headers:
            self.headers.update(headers)

    async def fetch(self, url: str) -> bytes:
        """
        Download *url* and return its body.

        Raises:
            FetchError: On a transport error or a non-2xx status.
        """
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                max_redirects=5,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=self.headers)
        except httpx.HTTPError as e:
            raise FetchError(url, reason=str(e) or type(e).__name__) from e

        if not response.is_success:
            raise FetchError(url, status=response.status_code)

        logger.debug("Downloaded %s: %d bytes", url, len(response.content))
        return response.content

    def __repr__(self) -> str:
        return f"HttpFetcher(timeout={self.timeout})"
