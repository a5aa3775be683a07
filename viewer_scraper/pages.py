"""Download page images into a working directory, one numbered file per page."""

import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from .concurrency import run_bounded
from .downloader import Downloader
from .errors import DownloadError, FilesystemError, NetworkError

logger = logging.getLogger("viewer_scraper")


def page_filename(index: int) -> str:
    """``0`` -> ``0000.jpg``; wider indexes keep all their digits."""
    return f"{index:04d}.jpg"


async def download_pages(downloader: Downloader, base_dir: Union[str, Path],
                         image_urls: Sequence[str], limit: int = 3) -> List[Path]:
    """Download every image URL into ``base_dir``; paths come back in page order."""
    base_dir = Path(base_dir)
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create {base_dir}: {e}", path=str(base_dir)) from e

    async def _download(job: Tuple[int, str]) -> Path:
        index, url = job
        local_path = base_dir / page_filename(index)
        try:
            size = await downloader.download_file(url, str(local_path))
        except (NetworkError, OSError) as e:
            raise DownloadError(f"Page {index} failed: {e}", index=index, url=url,
                                path=str(local_path)) from e
        logger.info(f"Saved page {index + 1}/{len(image_urls)} to {local_path} ({size:,} bytes)")
        return local_path

    return await run_bounded(list(enumerate(image_urls)), limit, _download)
