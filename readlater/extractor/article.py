"""Turn fetched bytes or shared text into an :class:`Article`."""

from __future__ import annotations

import codecs
import logging
from urllib.parse import urlsplit

from readlater.errors import NoContent, ParsingError
from readlater.extractor.text import clean_body
from readlater.extractor.title import extract_title
from readlater.models import Article, Chapter, strip_www
from readlater.utils.readability import extract_html_content

logger = logging.getLogger(__name__)

WEB_SOURCE = "Web"
SHARED_TEXT = "Shared Text"
MAX_TEXT_TITLE_LENGTH = 100


def decode_bytes(raw: bytes, encoding: str = "utf-8") -> str:
    try:
        codec = codecs.lookup(encoding)
    except LookupError:
        logger.debug("Unknown charset %r, decoding as UTF-8", encoding)
        encoding = "utf-8"
        codec = codecs.lookup(encoding)
    if codec.name == "utf-8":
        codec = codecs.lookup("utf-8-sig")
    try:
        return raw.decode(codec.name)
    except (UnicodeDecodeError, LookupError) as exc:
        raise ParsingError(f"Content is not valid {encoding} text") from exc


def source_label(url: str | None) -> str:
    host = urlsplit(url).hostname if url else None
    return strip_www(host) if host else WEB_SOURCE


def extract_from_url(
    raw: bytes,
    url: str | None,
    *,
    encoding: str = "utf-8",
    capture_html: bool = False,
) -> Article:
    """Extract a single-chapter article from a successful fetch of *url*.

    Raises :class:`ParsingError` when *raw* cannot be decoded and
    :class:`NoContent` when nothing readable is left after cleaning.
    """
    html = decode_bytes(raw, encoding)
    title = extract_title(html, url)
    body = clean_body(html)
    if not body:
        raise NoContent("No readable content found")

    html_content = extract_html_content(html, url) if capture_html else None
    logger.debug("Extracted %r (%d chars) from %s", title, len(body), url)

    return Article(
        title=title,
        source=source_label(url),
        source_url=url,
        chapters=(Chapter(title=title, content=body, html_content=html_content),),
    )


def title_from_text(text: str) -> str:
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line if len(line) < MAX_TEXT_TITLE_LENGTH else SHARED_TEXT
    return SHARED_TEXT


def wrap_plain_text(text: str) -> Article:
    """Wrap shared text verbatim; never fails."""
    title = title_from_text(text)
    content = text if text.strip() else title
    return Article(
        title=title,
        source=SHARED_TEXT,
        chapters=(Chapter(title=title, content=content),),
    )
