"""URL extraction from viewer responses.

Two formats are understood:

* the entry (viewer) page, which embeds one ``contentUrl: "<url>"`` per page;
* the per-page descriptor, a JSONP script carrying ``orig = \\"<url>\\"``
  inside an escaped string.
"""

import re
from typing import List, Optional
from urllib.parse import urljoin

from .errors import DescriptorParseError

CONTENT_URL_PATTERN = re.compile(r"""contentUrl\s*:\s*(["'])(.*?)\1""")
ORIG_URL_PATTERN = re.compile(r'orig\s*=\s*\\"(.*?)\\"')


def _absolute(url: str, base_url: Optional[str]) -> str:
    url = url.replace("\\/", "/")
    return urljoin(base_url, url) if base_url else url


def extract_descriptor_urls(body: str, base_url: Optional[str] = None) -> List[str]:
    """Return every descriptor URL in the entry page, in page order."""
    return [_absolute(m.group(2), base_url) for m in CONTENT_URL_PATTERN.finditer(body)]


def extract_image_url(body: str, base_url: Optional[str] = None) -> str:
    """Return the full-size image URL from a descriptor body."""
    match = ORIG_URL_PATTERN.search(body)
    if not match:
        raise DescriptorParseError("No image URL found in descriptor", url=base_url)
    return _absolute(match.group(1), base_url)
