from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from readlater.errors import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    fn: Callable[..., T],
    *args: object,
    max_retries: int = 0,
    base_delay: float = 1.0,
    **kwargs: object,
) -> T:
    """Call *fn*, retrying :class:`NetworkError`s marked ``retryable``.

    Backoff doubles each attempt: 1s, 2s, 4s, ...  Non-retryable errors
    (4xx, bad URLs) and the last failure once attempts run out are
    re-raised unchanged.  Retrying is a caller policy; the extraction core
    never retries on its own.
    """
    attempt = 0
    while True:
        try:
            return fn(*args, **kwargs)
        except NetworkError as exc:
            if not exc.retryable or attempt >= max_retries:
                raise
            delay = base_delay * (2 ** attempt)
            attempt += 1
            logger.debug(
                "Retry %d/%d for %s after %.1fs: %s",
                attempt, max_retries, getattr(fn, "__name__", fn), delay, exc,
            )
            time.sleep(delay)
