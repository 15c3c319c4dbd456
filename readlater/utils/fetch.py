from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from readlater.errors import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "readlater-share/0.1"

TRANSIENT = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    httpx.ReadError,
)


@dataclass
class FetchResult:
    content: bytes
    encoding: str = "utf-8"


def fetch_url(
    url: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> FetchResult:
    """GET *url* and return the response body.

    Transport failures and non-2xx statuses both raise
    :class:`NetworkError`; ``retryable`` is set for timeouts, dropped
    connections and 5xx responses.
    """
    own_client = client is None
    if own_client:
        client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    try:
        resp = client.get(url)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise NetworkError(
            f"HTTP {status} for {url}",
            status_code=status,
            retryable=status >= 500,
        ) from exc
    except TRANSIENT as exc:
        raise NetworkError(f"{type(exc).__name__}: {exc}", retryable=True) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"{type(exc).__name__}: {exc}") from exc
    finally:
        if own_client:
            client.close()

    logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
    return FetchResult(
        content=resp.content,
        encoding=resp.charset_encoding or "utf-8",
    )
