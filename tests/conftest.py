import struct
from typing import Dict, List, Optional, Tuple

import fitz
import httpx
import pytest

from viewer_scraper.config import AppConfig, HttpConfig
from viewer_scraper.downloader import Downloader


def segment(marker: int, payload: bytes) -> bytes:
    """A JPEG marker segment with its big-endian length field."""
    return bytes([0xFF, marker]) + struct.pack(">H", len(payload) + 2) + payload


def sof_segment(width: int, height: int, marker: int = 0xC0) -> bytes:
    # precision, height, width, one component
    return segment(marker, struct.pack(">BHHB", 8, height, width, 1) + b"\x01\x11\x00")


def make_jpeg(width: int, height: int, before_sof: bytes = b"", marker: int = 0xC0) -> bytes:
    """Marker structure of a baseline JPEG; no decodable scan data."""
    return (
        b"\xFF\xD8"
        + segment(0xE0, b"JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00")
        + before_sof
        + sof_segment(width, height, marker)
        + segment(0xDA, b"\x01\x01\x00\x00\x3F\x00")
        + b"\x00" * 16
        + b"\xFF\xD9"
    )


def real_jpeg(width: int, height: int, shade: int = 200) -> bytes:
    """A decodable JPEG rendered by PyMuPDF."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(shade)
    return pix.tobytes("jpg")


class FakeViewer:
    """In-memory viewer site served through httpx.MockTransport."""

    def __init__(self, base: str = "https://viewer.test"):
        self.base = base
        self.routes: Dict[str, Tuple[int, bytes, str]] = {}
        self.requests: List[str] = []

    def add(self, url: str, content, content_type: str = "text/html", status: int = 200):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.routes[url] = (status, content, content_type)

    def add_document(self, name: str, images: List[bytes]) -> str:
        """Register an entry page, one descriptor and one image per page."""
        entry_url = f"{self.base}/doc/{name}"
        lines = []
        for i, data in enumerate(images):
            descriptor_url = f"{self.base}/jsonp/{name}/{i}.js"
            image_url = f"https://img.test/{name}/page{i}.jpg"
            lines.append(f'  {{ page: {i + 1}, contentUrl: "{descriptor_url}" }},')
            self.add(descriptor_url,
                     'viewerCallback({"html": "<img orig=\\"%s\\" class=\\"page\\">"});' % image_url,
                     content_type="application/javascript")
            self.add(image_url, data, content_type="image/jpeg")
        body = "<html><script>\nvar pages = [\n" + "\n".join(lines) + "\n];\n</script></html>"
        self.add(entry_url, body)
        return entry_url

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.routes:
            return httpx.Response(404, text="not found")
        status, content, content_type = self.routes[url]
        return httpx.Response(status, content=content, headers={"content-type": content_type})

    def downloader(self, config: Optional[HttpConfig] = None) -> Downloader:
        return Downloader(config or HttpConfig(), transport=httpx.MockTransport(self.handler))


class RecordingDocument:
    """Deterministic document writer that records every call."""

    instances: List["RecordingDocument"] = []

    def __init__(self):
        self.calls = []
        RecordingDocument.instances.append(self)

    def add_page(self, width, height):
        self.calls.append(("add_page", width, height))

    def place_image(self, path, x, y):
        with open(path, "rb") as f:
            self.calls.append(("place_image", f.read(), x, y))

    def finalize(self, output_path):
        with open(output_path, "w") as f:
            f.write(repr(self.calls))
        self.calls.append(("finalize", str(output_path)))


@pytest.fixture
def viewer() -> FakeViewer:
    return FakeViewer()


@pytest.fixture
def recording_documents():
    RecordingDocument.instances = []
    yield RecordingDocument.instances
    RecordingDocument.instances = []


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(output_dir=str(tmp_path), log_dir=None, platform="linux")
