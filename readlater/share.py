"""Share orchestration: fetch or wrap, extract, enqueue, report.

Every outcome is reduced to a :class:`ShareResult` so the host only needs
to show a message: success, failure (with the error kind), or timeout.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

from readlater.errors import ShareError
from readlater.extractor.article import extract_from_url, wrap_plain_text
from readlater.models import Article
from readlater.store.queue import PendingQueue
from readlater.utils.fetch import FetchResult, fetch_url

logger = logging.getLogger(__name__)

SUCCESS = "success"
FAILURE = "failure"
TIMEOUT = "timeout"

Fetcher = Callable[[str], FetchResult]


@dataclass
class ShareResult:
    status: str
    message: str
    article: Article | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


def looks_like_url(content: str) -> bool:
    candidate = content.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    parts = urlsplit(candidate)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _failure(exc: ShareError) -> ShareResult:
    logger.info("Share failed (%s): %s", exc.kind, exc)
    return ShareResult(status=FAILURE, message=f"Failed: {exc}", error_kind=exc.kind)


def share_url(
    url: str,
    queue: PendingQueue,
    *,
    fetcher: Fetcher = fetch_url,
    capture_html: bool = False,
) -> ShareResult:
    try:
        fetched = fetcher(url)
        article = extract_from_url(
            fetched.content, url,
            encoding=fetched.encoding,
            capture_html=capture_html,
        )
        queue.append(article)
    except ShareError as exc:
        return _failure(exc)
    return ShareResult(status=SUCCESS, message=f"Saved: {article.title}", article=article)


def share_text(text: str, queue: PendingQueue) -> ShareResult:
    article = wrap_plain_text(text)
    try:
        queue.append(article)
    except ShareError as exc:
        return _failure(exc)
    return ShareResult(status=SUCCESS, message="Text saved!", article=article)


def share(
    content: str,
    queue: PendingQueue,
    *,
    fetcher: Fetcher = fetch_url,
    capture_html: bool = False,
) -> ShareResult:
    """Share *content*: http(s) URLs are fetched, anything else is text."""
    if looks_like_url(content):
        return share_url(
            content.strip(), queue, fetcher=fetcher, capture_html=capture_html,
        )
    return share_text(content, queue)


def run_share(
    content: str,
    queue: PendingQueue,
    *,
    deadline: float,
    fetcher: Fetcher = fetch_url,
    capture_html: bool = False,
) -> ShareResult:
    """Run :func:`share` but give up waiting after *deadline* seconds.

    The attempt runs on a daemon thread. An abandoned attempt is not
    interrupted and its result is discarded, but it does not keep the
    interpreter alive on exit.
    """
    outcome: dict[str, object] = {}

    def _work() -> None:
        try:
            outcome["result"] = share(
                content, queue, fetcher=fetcher, capture_html=capture_html,
            )
        except Exception as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_work, name="share", daemon=True)
    worker.start()
    worker.join(deadline)

    if worker.is_alive():
        logger.info("Share did not finish within %.1fs", deadline)
        return ShareResult(status=TIMEOUT, message="Timed out", error_kind=TIMEOUT)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]
