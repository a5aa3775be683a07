"""Resolve per-page descriptor URLs to the image URLs they point at."""

import logging
from typing import List, Sequence

from .concurrency import run_bounded
from .downloader import Downloader
from .extractor import extract_image_url

logger = logging.getLogger("viewer_scraper")


async def resolve_image_urls(downloader: Downloader, descriptor_urls: Sequence[str],
                             limit: int = 3) -> List[str]:
    async def _resolve(url: str) -> str:
        body = await downloader.fetch_text(url)
        image_url = extract_image_url(body, base_url=url)
        logger.debug(f"{url} -> {image_url}")
        return image_url

    image_urls = await run_bounded(descriptor_urls, limit, _resolve)
    logger.info(f"Resolved {len(image_urls)} image URLs")
    return image_urls
