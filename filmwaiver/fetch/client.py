"""HTTP client with retries and error handling."""
import asyncio
import logging
from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from filmwaiver.config import config

logger = logging.getLogger(__name__)

# The discounts page is served to browsers only
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Upgrade-Insecure-Requests": "1",
}


def is_retryable_status(response: httpx.Response) -> bool:
    """Check if status code is retryable."""
    return response.status_code in (429, 500, 502, 503, 504)


def is_retryable_error(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return is_retryable_status(exc.response)
    return False


class FetchClient:
    """Async HTTP client for the discounts page."""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout or config.TIMEOUT
        self.client = httpx.AsyncClient(
            http2=transport is None,
            headers=BROWSER_HEADERS,
            timeout=self.timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(config.MAX_RETRIES + 1),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception(is_retryable_error),
        reraise=True,
    )
    async def fetch(self, url: str) -> httpx.Response:
        """GET a URL; raises httpx.HTTPStatusError on any non-2xx answer."""
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP {e.response.status_code} for {url}")
            raise
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning(f"Network error for {url}: {e!r}")
            raise
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch a page and return its decoded body.

        The timeout bounds the whole fetch, retries and backoff included.
        """
        try:
            response = await asyncio.wait_for(self.fetch(url), self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Gave up on {url} after {self.timeout}s")
            raise httpx.TimeoutException(f"Fetching {url} took longer than {self.timeout}s") from e
        logger.info(f"Fetched {url} ({len(response.content)} bytes)")
        return response.text
