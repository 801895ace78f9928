"""Exceptions raised by the Notion content store."""

from typing import Optional


class NotionError(Exception):
    """Base exception for Notion client errors.

    This includes network errors, API authentication failures, rate limits,
    malformed responses, and timeout errors.
    """

    pass


class NotionAPIError(NotionError):
    """API-level error carrying the HTTP status and Notion error code.

    Attributes:
        status_code: HTTP status returned by the API
        code: Notion error code (e.g. "object_not_found", "rate_limited")
        retry_after: Seconds from the Retry-After header, if present
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.retry_after = retry_after


class NotionTimeoutError(NotionError):
    """Request timed out (connect, read, write or pool timeout)."""

    pass


class NotionConnectionError(NotionError):
    """Network-level failure: connection refused, DNS failure, reset."""

    pass


class NotionResponseError(NotionError):
    """The API answered 2xx with a body we could not interpret."""

    pass
