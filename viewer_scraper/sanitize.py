"""Turn a user-supplied document title into a safe file/directory name."""

import re

CONTROL_CHARS = re.compile(r"[\u0000-\u001F\u007F-\u009F]")
TRAILING_JUNK = re.compile(r"[.\s]+$")

# Characters each platform refuses in a path component.
FORBIDDEN_BY_PLATFORM = {
    "win32": re.compile(r'[\\/:*?"<>|]'),
    "linux": re.compile(r"/"),
    "darwin": re.compile(r"[/:]"),
}


def sanitize_title(title: str, platform: str) -> str:
    """Strip characters that cannot appear in a filename on ``platform``.

    ``platform`` is a ``sys.platform`` style string; prefixes such as
    ``linux2`` match too. Unknown platforms only lose control characters.
    """
    cleaned = CONTROL_CHARS.sub("", title)
    for prefix, pattern in FORBIDDEN_BY_PLATFORM.items():
        if platform.startswith(prefix):
            cleaned = pattern.sub("", cleaned)
            break
    cleaned = TRAILING_JUNK.sub("", cleaned).strip()
    if not cleaned:
        raise ValueError(f"Title {title!r} is empty once sanitized")
    return cleaned
