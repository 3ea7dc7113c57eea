"""
Web page fetcher built on an aiohttp client session.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout, ClientError


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    error: Optional[str] = None
    fetch_time: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class WebFetcher:
    """
    Issues GET requests and returns the decoded body or an error message.

    Failures never raise: they are reported through ``FetchResult.error``
    so the caller decides whether a failed page is fatal.
    """

    def __init__(self, user_agent: str, request_timeout: float = 30,
                 max_concurrent_requests: int = 3):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_concurrent_requests = max_concurrent_requests

        self.logger = logging.getLogger(__name__)

        self.session: Optional[ClientSession] = None
        self.semaphore = asyncio.Semaphore(max_concurrent_requests)

        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                connector=aiohttp.TCPConnector(limit=self.max_concurrent_requests * 2)
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult with the decoded body, or with ``error`` set on a
            transport failure or any status other than 200
        """
        if self.session is None:
            raise RuntimeError("WebFetcher.start() must be called before fetch()")

        start_time = time.time()

        async with self.semaphore:
            self.stats['total_requests'] += 1
            try:
                async with self.session.get(url) as response:
                    if response.status != 200:
                        self.stats['failed_requests'] += 1
                        if response.status == 429:
                            error_msg = "too many requests"
                        else:
                            error_msg = f"bad response from server: {response.status} {response.reason}"
                        return FetchResult(
                            url=url,
                            status_code=response.status,
                            error=error_msg,
                            fetch_time=time.time() - start_time
                        )

                    body = await response.read()
                    content = self._decode(body, response.charset)

                    self.stats['successful_requests'] += 1
                    self.stats['total_bytes_downloaded'] += len(body)
                    self.logger.debug(f"Fetched {url}: {response.status} ({len(body)} bytes)")

                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        content=content,
                        fetch_time=time.time() - start_time
                    )

            except asyncio.TimeoutError:
                error_msg = f"could not get request {url}: request timed out"

            except ClientError as e:
                error_msg = f"could not get request {url}: {e}"

            self.stats['failed_requests'] += 1
            return FetchResult(
                url=url,
                status_code=0,
                error=error_msg,
                fetch_time=time.time() - start_time
            )

    def _decode(self, body: bytes, charset: Optional[str]) -> str:
        """Decode a response body, falling back through common encodings."""
        encoding = charset or 'utf-8'
        try:
            return body.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            for fallback_encoding in ['utf-8', 'cp1252']:
                try:
                    return body.decode(fallback_encoding)
                except UnicodeDecodeError:
                    continue
            return body.decode('latin-1')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
