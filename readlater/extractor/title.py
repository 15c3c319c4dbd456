from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from readlater.extractor.entities import decode_entities

DEFAULT_TITLE = "Web Article"

_TITLE_PATTERN = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)

# A " - " suffix is only treated as a site name when what remains is longer
# than this; short titles keep their hyphen.
_MIN_DASH_PREFIX = 10


def default_title(url: str | None) -> str:
    """Last path segment of *url*, else its host, else the placeholder."""
    if not url:
        return DEFAULT_TITLE
    parts = urlsplit(url)
    segments = [s for s in parts.path.split("/") if s]
    if segments:
        return unquote(segments[-1])
    return parts.hostname or DEFAULT_TITLE


def strip_site_suffix(title: str) -> str:
    """Drop a trailing site name: ``"Story | Site"`` or ``"Story - Site"``."""
    pipe = title.find(" | ")
    if pipe != -1:
        title = title[:pipe]
    dash = title.rfind(" - ")
    if dash != -1:
        before = title[:dash]
        if len(before) > _MIN_DASH_PREFIX:
            title = before
    return title


def extract_title(html: str, url: str | None = None) -> str:
    title = default_title(url)
    match = _TITLE_PATTERN.search(html)
    if match:
        title = match.group(1).strip()
    title = strip_site_suffix(title)
    if not title:
        title = DEFAULT_TITLE
    return decode_entities(title)
