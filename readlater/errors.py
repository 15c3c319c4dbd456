from __future__ import annotations


class ShareError(Exception):
    """Base class for every terminal failure of a share attempt.

    ``kind`` is a stable identifier callers can branch on (retry policy,
    UI wording) without parsing the message.
    """

    kind = "share_error"


class NetworkError(ShareError):
    kind = "network_error"

    def __init__(self, message: str, *, status_code: int | None = None,
                 retryable: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ParsingError(ShareError):
    kind = "parsing_error"


class NoContent(ShareError):
    kind = "no_content"


class StorageUnavailable(ShareError):
    kind = "storage_unavailable"
