"""Pipeline orchestration: viewer page in, PDF out.

Stages run strictly in order and the first error ends the run::

    IDLE -> FETCHED_ENTRY -> DISCOVERED_DESCRIPTORS -> RESOLVED_IMAGE_URLS
         -> DOWNLOADED_PAGES -> COMPUTED_GEOMETRY -> WRITTEN_DOCUMENT
         -> CLEANED_UP -> DONE

Each bounded phase finishes completely before the next one starts.
"""

import enum
import logging
import shutil
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .document import DocumentFactory, new_document
from .downloader import Downloader
from .errors import DescriptorParseError, FilesystemError
from .extractor import extract_descriptor_urls
from .jpeg import read_geometry
from .models import PipelineResult
from .pages import download_pages, page_filename
from .resolver import resolve_image_urls

logger = logging.getLogger("viewer_scraper")


class Stage(enum.Enum):
    IDLE = "idle"
    FETCHED_ENTRY = "fetched entry page"
    DISCOVERED_DESCRIPTORS = "discovered descriptors"
    RESOLVED_IMAGE_URLS = "resolved image URLs"
    DOWNLOADED_PAGES = "downloaded pages"
    COMPUTED_GEOMETRY = "computed geometry"
    WRITTEN_DOCUMENT = "wrote document"
    CLEANED_UP = "cleaned up"
    DONE = "done"


def remove_pages_dir(pages_dir: Path):
    """Delete the page directory recursively; a missing directory is fine."""
    try:
        shutil.rmtree(pages_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FilesystemError(f"Cannot remove {pages_dir}: {e}", path=str(pages_dir)) from e


def remove_pages(pages_dir: Path, page_count: int, owns_dir: bool):
    """Remove the page files of one run.

    The directory itself goes only when the run created it; a directory that
    was already there keeps everything except the numbered page files.
    """
    if owns_dir:
        remove_pages_dir(pages_dir)
        return
    for index in range(page_count):
        path = pages_dir / page_filename(index)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot remove {path}: {e}", path=str(path)) from e


class Pipeline:
    def __init__(self, config: AppConfig, downloader: Optional[Downloader] = None,
                 document_factory: DocumentFactory = new_document):
        self.config = config
        self.downloader = downloader
        self.document_factory = document_factory
        self.stage = Stage.IDLE

    def _advance(self, stage: Stage):
        self.stage = stage
        logger.info(f"Stage: {stage.value}")

    async def run(self, entry_url: str, title: str) -> PipelineResult:
        """Turn the viewer at ``entry_url`` into ``<output_dir>/<title>.pdf``.

        ``title`` must already be sanitized for the target platform.
        """
        self.stage = Stage.IDLE
        if self.downloader is not None:
            return await self._run(self.downloader, entry_url, title)
        async with Downloader(self.config.http) as downloader:
            return await self._run(downloader, entry_url, title)

    async def _run(self, downloader: Downloader, entry_url: str, title: str) -> PipelineResult:
        limit = self.config.http.concurrency
        output_root = Path(self.config.output_dir)
        pages_dir = output_root / title
        output_path = output_root / f"{title}.pdf"

        body = await downloader.fetch_text(entry_url)
        self._advance(Stage.FETCHED_ENTRY)

        descriptor_urls = extract_descriptor_urls(body, base_url=entry_url)
        if not descriptor_urls:
            raise DescriptorParseError("No page descriptors found in entry page", url=entry_url)
        logger.info(f"Found {len(descriptor_urls)} pages")
        self._advance(Stage.DISCOVERED_DESCRIPTORS)

        image_urls = await resolve_image_urls(downloader, descriptor_urls, limit=limit)
        self._advance(Stage.RESOLVED_IMAGE_URLS)

        owns_dir = not pages_dir.exists()
        try:
            pages = await download_pages(downloader, pages_dir, image_urls, limit=limit)
            self._advance(Stage.DOWNLOADED_PAGES)

            # Every page gets the first page's size.
            geometry = read_geometry(pages[0])
            logger.info(f"Page size: {geometry.width}x{geometry.height}")
            self._advance(Stage.COMPUTED_GEOMETRY)

            doc = self.document_factory()
            for page in pages:
                doc.add_page(geometry.width, geometry.height)
                doc.place_image(page, 0, 0)
            doc.finalize(output_path)
            self._advance(Stage.WRITTEN_DOCUMENT)
        except Exception:
            if self.config.cleanup_on_failure:
                self._cleanup_after_failure(pages_dir, len(image_urls), owns_dir)
            else:
                logger.warning(f"Leaving downloaded pages in {pages_dir}")
            raise

        remove_pages(pages_dir, len(pages), owns_dir)
        self._advance(Stage.CLEANED_UP)

        self._advance(Stage.DONE)
        return PipelineResult(output_path=output_path, page_count=len(pages), geometry=geometry)

    @staticmethod
    def _cleanup_after_failure(pages_dir: Path, page_count: int, owns_dir: bool):
        try:
            remove_pages(pages_dir, page_count, owns_dir)
        except FilesystemError as e:
            logger.error(f"Cleanup after failure did not complete: {e}")


async def run_pipeline(config: AppConfig, entry_url: str, title: str,
                       downloader: Optional[Downloader] = None,
                       document_factory: DocumentFactory = new_document) -> PipelineResult:
    pipeline = Pipeline(config, downloader=downloader, document_factory=document_factory)
    return await pipeline.run(entry_url, title)
