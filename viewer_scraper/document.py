"""PDF assembly with PyMuPDF.

The pipeline only needs four operations from a document writer: create a
document, add a page of a given size, place an image at a point on the
current page, and save. ``PdfDocument`` provides them; anything with the
same methods can be passed to the pipeline in its place.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

import fitz  # PyMuPDF

from .errors import DocumentWriteError, MalformedImageError
from .jpeg import extract_geometry

logger = logging.getLogger("viewer_scraper")


class PdfDocument:
    """A PDF built page by page; one PDF point per image pixel."""

    def __init__(self):
        self._doc = fitz.open()
        self._page: Optional[fitz.Page] = None

    def add_page(self, width: float, height: float):
        self._page = self._doc.new_page(width=width, height=height)

    def place_image(self, path: Union[str, Path], x: float, y: float):
        """Draw the JPEG at ``path`` at its natural size, top-left corner at (x, y)."""
        if self._page is None:
            raise DocumentWriteError("place_image called before add_page", path=str(path))

        with open(path, "rb") as f:
            data = f.read()
        try:
            geometry = extract_geometry(data)
        except MalformedImageError as e:
            raise DocumentWriteError(f"Cannot place {path}: {e}", path=str(path)) from e

        rect = fitz.Rect(x, y, x + geometry.width, y + geometry.height)
        try:
            self._page.insert_image(rect, stream=data)
        except (RuntimeError, ValueError) as e:
            raise DocumentWriteError(f"Cannot place {path}: {e}", path=str(path)) from e

    def finalize(self, output_path: Union[str, Path]):
        """Save the document to ``output_path`` and release it."""
        output_path = str(output_path)
        try:
            parent = os.path.dirname(output_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._doc.save(output_path, deflate=True)
        except (RuntimeError, ValueError, OSError) as e:
            raise DocumentWriteError(f"Cannot save {output_path}: {e}", path=output_path) from e
        finally:
            self._doc.close()
        logger.info(f"Wrote {output_path}")


DocumentFactory = Callable[[], PdfDocument]


def new_document() -> PdfDocument:
    return PdfDocument()
