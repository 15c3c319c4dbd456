from __future__ import annotations

import logging

from readlater.models import Article, decode_queue, encode_queue
from readlater.store.base import KeyValueStore

logger = logging.getLogger(__name__)

PENDING_ARTICLES_KEY = "pendingArticles"


class PendingQueue:
    """Newest-first list of articles waiting for the reader app.

    The whole queue lives in one serialized blob under a single key.
    Appends go through :meth:`KeyValueStore.update` so two shares running
    at the same time cannot overwrite each other's addition.  Consuming
    (draining) the queue is left to the reader application.
    """

    def __init__(self, store: KeyValueStore, key: str = PENDING_ARTICLES_KEY) -> None:
        self.store = store
        self.key = key

    def append(self, article: Article) -> None:
        def _prepend(current: bytes | None) -> bytes:
            articles = self._decode(current)
            articles.insert(0, article)
            return encode_queue(articles)

        self.store.update(self.key, _prepend)
        logger.info("Queued %r under %r", article.title, self.key)

    def load(self) -> list[Article]:
        return self._decode(self.store.get(self.key))

    def _decode(self, blob: bytes | None) -> list[Article]:
        if not blob:
            return []
        try:
            return decode_queue(blob)
        except ValueError as exc:
            # A corrupt queue is replaced rather than blocking every new share.
            logger.warning("Discarding undecodable pending queue %r: %s", self.key, exc)
            return []
