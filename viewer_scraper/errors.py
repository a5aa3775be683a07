"""Error hierarchy. Every error is fatal to a run."""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""

    def __init__(self, message: str, url: Optional[str] = None, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.path = path


class NetworkError(ScraperError):
    """Transport failure or non-success HTTP status."""


class DescriptorParseError(ScraperError):
    """A page body did not contain the expected URL pattern."""


class MalformedImageError(ScraperError):
    """No dimension segment could be found in the image bytes."""


class DownloadError(ScraperError):
    """A page image could not be fetched or written to disk."""

    def __init__(self, message: str, index: int, url: Optional[str] = None,
                 path: Optional[str] = None):
        super().__init__(message, url=url, path=path)
        self.index = index


class DocumentWriteError(ScraperError):
    """The output document could not be built or saved."""


class FilesystemError(ScraperError):
    """A working directory could not be created or removed."""
