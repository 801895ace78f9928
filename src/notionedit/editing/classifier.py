"""Classify save/fetch failures as transient (retry) or permanent (report).

The allow-list is conservative: only failures that are known to go away
on their own (timeouts, refused connections, DNS failures, rate limits,
5xx server faults) are transient. Everything else, including failures
we do not recognise, is permanent and is never retried automatically.
"""

import asyncio
import re
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from notionedit.services.exceptions import (
    NotionAPIError,
    NotionConnectionError,
    NotionResponseError,
    NotionTimeoutError,
)


class ErrorClassification(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class ErrorKind(str, Enum):
    """Failure taxonomy shown to the user."""

    NETWORK_TIMEOUT = "network_timeout"
    CONNECTION_FAILURE = "connection_failure"
    RATE_LIMITED = "rate_limited"
    SERVER_FAULT = "server_fault"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_FAILURE = "validation_failure"
    UNKNOWN = "unknown"

    @property
    def classification(self) -> ErrorClassification:
        if self in _TRANSIENT_KINDS:
            return ErrorClassification.TRANSIENT
        return ErrorClassification.PERMANENT


_TRANSIENT_KINDS = frozenset({
    ErrorKind.NETWORK_TIMEOUT,
    ErrorKind.CONNECTION_FAILURE,
    ErrorKind.RATE_LIMITED,
    ErrorKind.SERVER_FAULT,
})

# (title, context) per kind, as rendered by the error view
_DESCRIPTIONS = {
    ErrorKind.NETWORK_TIMEOUT: (
        "Request timed out",
        "The request took too long. Check your connection and try again.",
    ),
    ErrorKind.CONNECTION_FAILURE: (
        "Can't reach Notion",
        "Check your internet connection and DNS settings.",
    ),
    ErrorKind.RATE_LIMITED: (
        "Rate limit exceeded",
        "Too many requests. Wait a moment and try again.",
    ),
    ErrorKind.SERVER_FAULT: (
        "Notion server error",
        "Notion's servers are having issues. Please try again.",
    ),
    ErrorKind.UNAUTHORIZED: (
        "Invalid Notion token",
        "Your token is invalid, expired, or lacks access to this block.",
    ),
    ErrorKind.NOT_FOUND: (
        "Block not found",
        "This block may have been deleted or is not shared with the integration.",
    ),
    ErrorKind.VALIDATION_FAILURE: (
        "Invalid request",
        "Notion rejected the change.",
    ),
    ErrorKind.UNKNOWN: (
        "Something went wrong",
        "An unexpected error occurred.",
    ),
}


@dataclass(frozen=True)
class ClassifiedError:
    """A failure mapped onto the taxonomy, ready to display."""

    kind: ErrorKind
    title: str
    context: str
    detail: str
    retry_after: Optional[float] = None

    @property
    def classification(self) -> ErrorClassification:
        return self.kind.classification

    @property
    def is_transient(self) -> bool:
        return self.classification is ErrorClassification.TRANSIENT


def classify_error(error: BaseException) -> ClassifiedError:
    """Map an exception onto an ErrorKind.

    Args:
        error: Exception raised by a fetch or save

    Returns:
        ClassifiedError with user-facing title/context
    """
    kind = _classify_kind(error)
    title, context = _DESCRIPTIONS[kind]

    # Notion's own message is more useful than the generic one for 400s
    if kind is ErrorKind.VALIDATION_FAILURE and str(error):
        context = str(error)

    retry_after = error.retry_after if isinstance(error, NotionAPIError) else None
    return ClassifiedError(kind=kind, title=title, context=context, detail=str(error), retry_after=retry_after)


def _classify_kind(error: BaseException) -> ErrorKind:
    if isinstance(error, NotionAPIError):
        kind = _kind_from_status(error.status_code, error.code)
        if kind is not None:
            return kind
        return _kind_from_message(str(error))

    if isinstance(error, NotionTimeoutError):
        return ErrorKind.NETWORK_TIMEOUT

    if isinstance(error, NotionConnectionError):
        return ErrorKind.CONNECTION_FAILURE

    if isinstance(error, NotionResponseError):
        return ErrorKind.UNKNOWN

    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.NETWORK_TIMEOUT

    if isinstance(error, (httpx.NetworkError, ConnectionError, socket.gaierror)):
        return ErrorKind.CONNECTION_FAILURE

    if isinstance(error, httpx.HTTPStatusError):
        kind = _kind_from_status(error.response.status_code, None)
        if kind is not None:
            return kind

    return _kind_from_message(str(error))


def _kind_from_status(status_code: Optional[int], code: Optional[str]) -> Optional[ErrorKind]:
    if code == "rate_limited" or status_code == 429:
        return ErrorKind.RATE_LIMITED
    if code in ("validation_error", "unsupported_block_type"):
        return ErrorKind.VALIDATION_FAILURE
    if status_code is None:
        return None
    if status_code == 408:
        return ErrorKind.NETWORK_TIMEOUT
    if 500 <= status_code < 600:
        return ErrorKind.SERVER_FAULT
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code in (400, 409, 422):
        return ErrorKind.VALIDATION_FAILURE
    return ErrorKind.UNKNOWN


_MESSAGE_RULES = [
    (re.compile(r"timed? ?out|deadline exceeded"), ErrorKind.NETWORK_TIMEOUT),
    (
        re.compile(r"connection refused|no such host|name resolution|name or service not known|temporary failure"),
        ErrorKind.CONNECTION_FAILURE,
    ),
    (re.compile(r"\b429\b|rate limit|too many requests"), ErrorKind.RATE_LIMITED),
    (re.compile(r"\b5\d\d\b|internal server error|bad gateway|service unavailable"), ErrorKind.SERVER_FAULT),
    (re.compile(r"\b40[13]\b|unauthorized|forbidden"), ErrorKind.UNAUTHORIZED),
    (re.compile(r"\b404\b|not found"), ErrorKind.NOT_FOUND),
    (re.compile(r"\b400\b|bad request|validation"), ErrorKind.VALIDATION_FAILURE),
]


def _kind_from_message(message: str) -> ErrorKind:
    lowered = message.lower()
    for pattern, kind in _MESSAGE_RULES:
        if pattern.search(lowered):
            return kind
    return ErrorKind.UNKNOWN
