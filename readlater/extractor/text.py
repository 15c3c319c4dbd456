"""Body-text passes of the extraction pipeline.

Each pass is a pure ``str -> str`` function.  ``clean_body`` composes them
in a fixed order; later passes rely on earlier ones having run (whitespace
normalization assumes no markup is left).
"""

from __future__ import annotations

import re

from readlater.extractor.entities import decode_entities

_FLAGS = re.IGNORECASE | re.DOTALL

CONTENT_CONTAINERS = (
    re.compile(r"<article\b[^>]*>(.*?)</article\s*>", _FLAGS),
    re.compile(r"<main\b[^>]*>(.*?)</main\s*>", _FLAGS),
)

BOILERPLATE = (
    re.compile(r"<script\b[^>]*>.*?</script\s*>", _FLAGS),
    re.compile(r"<style\b[^>]*>.*?</style\s*>", _FLAGS),
    re.compile(r"<nav\b[^>]*>.*?</nav\s*>", _FLAGS),
    re.compile(r"<footer\b[^>]*>.*?</footer\s*>", _FLAGS),
    re.compile(r"<header\b[^>]*>.*?</header\s*>", _FLAGS),
)

_BR = re.compile(r"<br\b[^>]*>", re.IGNORECASE)
_P_CLOSE = re.compile(r"</p\s*>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")

_EDGE_SPACE = re.compile(r"^[^\S\n]+|[^\S\n]+$", re.MULTILINE)
_SPACE_RUN = re.compile(r"[^\S\n]{2,}")
_NEWLINE_RUN = re.compile(r"\n{3,}")
_BLANK_LINE = re.compile(r"^[^\S\n]+\n?", re.MULTILINE)


def narrow_to_content(html: str) -> str:
    """Return the inner HTML of the first ``<article>``, else ``<main>``."""
    for pattern in CONTENT_CONTAINERS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return html


def strip_boilerplate(html: str) -> str:
    for pattern in BOILERPLATE:
        html = pattern.sub("", html)
    return html


def convert_breaks(html: str) -> str:
    html = _BR.sub("\n", html)
    return _P_CLOSE.sub("\n\n", html)


def strip_tags(html: str) -> str:
    return _TAG.sub("", html)


def normalize_whitespace(text: str) -> str:
    """Tidy extracted text while keeping paragraph breaks.

    Lines are trimmed, inner runs of spaces collapse to one, more than one
    blank line collapses to exactly one, and the result is trimmed.
    Applying it to its own output is a no-op.
    """
    # Collapse runs first so line trimming never scans a long run.
    text = _SPACE_RUN.sub(" ", text)
    text = _EDGE_SPACE.sub("", text)
    text = _NEWLINE_RUN.sub("\n\n", text)
    text = _BLANK_LINE.sub("", text)
    return text.strip()


def clean_body(html: str) -> str:
    text = narrow_to_content(html)
    text = strip_boilerplate(text)
    text = convert_breaks(text)
    text = strip_tags(text)
    text = decode_entities(text)
    return normalize_whitespace(text)
