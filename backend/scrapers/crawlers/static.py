"""
HTTP-mode fetcher for job board result pages.

Uses a pooled httpx AsyncClient with a browser-like header set and
classifies non-2xx responses into FetchError kinds.
"""

import asyncio
from typing import Optional, Dict
import httpx
import logging

from ..errors import FetchError, FetchErrorKind, classify_status

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
    'Cache-Control': 'max-age=0',
}


class HttpFetcher:
    """
    Fetches raw HTML with plain HTTP requests.

    Retries are bounded and use a fixed delay. Only transient failures
    (rate limiting, 5xx, network errors) are retried.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 0,
        retry_delay: float = 2.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the HTTP fetcher.

        Args:
            timeout: Request timeout in seconds
            max_retries: Extra attempts after the first failure
            retry_delay: Seconds to wait between attempts
            headers: Custom HTTP headers
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self.headers = headers or dict(DEFAULT_HEADERS)
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def open(self):
        """Create the pooled client if needed."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.timeout,
                headers=self.headers,
                transport=self.transport,
                limits=httpx.Limits(
                    max_keepalive_connections=5,
                    max_connections=10,
                    keepalive_expiry=30.0
                )
            )
        return self

    async def close(self):
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _fetch_once(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            # Transport failures and timeouts, redirect loops, undecodable bodies
            raise FetchError(FetchErrorKind.NETWORK_ERROR, url, cause=e)

        kind = classify_status(response.status_code)
        if kind is not None:
            raise FetchError(kind, url, status_code=response.status_code)
        return response.text

    async def fetch(self, url: str) -> str:
        """
        Fetch a URL and return its HTML.

        Raises:
            FetchError: On a non-2xx response or network failure, after retries
        """
        logger.debug(f"HttpFetcher fetching: {url}")
        await self.open()

        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                return await self._fetch_once(url)
            except FetchError as e:
                if not e.retryable or attempt == attempts - 1:
                    raise
                logger.warning(f"Attempt {attempt + 1}/{attempts} failed for {url}: {e}")
                await asyncio.sleep(self.retry_delay)

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
