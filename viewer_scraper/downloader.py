"""Async HTTP layer: text/binary fetches and streamed downloads to disk."""

import logging
import os
from typing import Optional

import httpx

from .config import HttpConfig
from .errors import NetworkError

logger = logging.getLogger("viewer_scraper")

CHUNK_SIZE = 65536


class Downloader:
    def __init__(self, config: HttpConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout),
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
                transport=self._transport,
            )
        return self._client

    async def aclose(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "Downloader":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def _get(self, url: str) -> httpx.Response:
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"GET {url} failed: {e}", url=url) from e
        return resp

    async def fetch_text(self, url: str) -> str:
        """Fetch text/HTML from a URL."""
        logger.info(f"Fetching {url}")
        resp = await self._get(url)
        return resp.text

    async def download_file(self, url: str, local_path: str) -> int:
        """Stream ``url`` into ``local_path``, overwriting it. Returns the byte count.

        OSError from the write propagates as is; HTTP failures become NetworkError.
        """
        logger.info(f"Downloading {url}")
        size = 0
        try:
            async with self.client.stream("GET", url) as resp:
                resp.raise_for_status()

                # Error pages and login walls come back as HTML
                ct = resp.headers.get("content-type", "")
                if "text/html" in ct:
                    raise NetworkError(f"Expected an image but got HTML (content-type: {ct})", url=url)

                content_length = resp.headers.get("content-length")
                if content_length and int(content_length) > self.config.max_file_size:
                    raise NetworkError(f"File too large: {content_length} bytes", url=url)

                with open(local_path, "wb") as f:
                    async for chunk in resp.aiter_bytes(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        size += len(chunk)
                        if size > self.config.max_file_size:
                            raise NetworkError(
                                f"File exceeded max size during download: {size} bytes", url=url
                            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"GET {url} failed: {e}", url=url) from e

        logger.debug(f"Saved {size:,} bytes to {os.path.basename(local_path)}")
        return size
