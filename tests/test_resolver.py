import asyncio

import httpx
import pytest

from viewer_scraper.config import HttpConfig
from viewer_scraper.downloader import Downloader
from viewer_scraper.errors import DescriptorParseError, NetworkError
from viewer_scraper.resolver import resolve_image_urls


def _resolve(viewer, urls, limit=3):
    async def scenario():
        async with viewer.downloader() as downloader:
            return await resolve_image_urls(downloader, urls, limit=limit)

    return asyncio.run(scenario())


def test_single_descriptor(viewer):
    viewer.add("https://viewer.test/d/0.js", 'orig = \\"http://x/img.jpg\\"')
    assert _resolve(viewer, ["https://viewer.test/d/0.js"]) == ["http://x/img.jpg"]


def test_order_follows_descriptors(viewer):
    urls = []
    for i in range(7):
        url = f"https://viewer.test/d/{i}.js"
        viewer.add(url, f'cb("<img orig=\\"https://img.test/{i}.jpg\\">")')
        urls.append(url)

    assert _resolve(viewer, urls) == [f"https://img.test/{i}.jpg" for i in range(7)]


def test_no_match_fails(viewer):
    viewer.add("https://viewer.test/d/0.js", 'orig = \\"http://x/img.jpg\\"')
    viewer.add("https://viewer.test/d/1.js", "cb({})")

    with pytest.raises(DescriptorParseError) as exc_info:
        _resolve(viewer, ["https://viewer.test/d/0.js", "https://viewer.test/d/1.js"])
    assert exc_info.value.url == "https://viewer.test/d/1.js"


def test_http_error_fails(viewer):
    with pytest.raises(NetworkError):
        _resolve(viewer, ["https://viewer.test/d/missing.js"])


def test_at_most_three_descriptor_requests_in_flight():
    state = {"current": 0, "high": 0}

    async def handler(request):
        state["current"] += 1
        state["high"] = max(state["high"], state["current"])
        await asyncio.sleep(0.005)
        state["current"] -= 1
        return httpx.Response(200, text='orig=\\"%s.jpg\\"' % request.url.path)

    async def scenario():
        downloader = Downloader(HttpConfig(), transport=httpx.MockTransport(handler))
        async with downloader:
            return await resolve_image_urls(
                downloader, [f"https://viewer.test/d/{i}" for i in range(10)]
            )

    results = asyncio.run(scenario())

    assert results == [f"https://viewer.test/d/{i}.jpg" for i in range(10)]
    assert state["high"] == 3


def test_malformed_descriptor_url(viewer):
    with pytest.raises(NetworkError):
        _resolve(viewer, ["http://[::1/d/0.js"])
