from __future__ import annotations

import logging
import re

from readability import Document

logger = logging.getLogger(__name__)

_MIN_TEXT_LENGTH = 50


def extract_html_content(html: str, url: str | None = None) -> str | None:
    """Return Mozilla Readability's cleaned HTML for *html*.

    Only used to fill the optional rich-HTML variant of a chapter, so any
    failure, or an extraction that is essentially empty, yields ``None``.
    """
    try:
        content = Document(html, url=url).summary(html_partial=True)
    except Exception as exc:
        logger.debug("Readability failed for %s: %s", url or "<text>", exc)
        return None

    text_only = re.sub(r"<[^>]+>", "", content).strip()
    if len(text_only) < _MIN_TEXT_LENGTH:
        return None
    return content
