"""Failure classification for calls to the text-generation provider.

Every provider failure, whatever its shape, is reduced to a
``(status_code, message)`` pair by :func:`describe_error` and then mapped
to one :class:`ErrorKind` by :func:`classify`. The gateway decides whether
to retry, fail over or give up purely from that kind.
"""

import re
from enum import Enum

from google.genai import errors as genai_errors


class ErrorKind(str, Enum):
    FATAL_CREDENTIAL = "fatal_credential"
    QUOTA_EXCEEDED = "quota_exceeded"
    OVERLOADED = "overloaded"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"
    # Never returned by classify(): the gateway reports it when no credential exists
    UNCONFIGURED = "unconfigured"


# Order matters: the first matching rule wins.
_FATAL_MARKERS = (
    "reported as leaked",
    "leaked",
    "api key not valid",
    "api_key_invalid",
    "invalid api key",
    "not valid",
    "permission denied",
    "permission_denied",
    "unauthenticated",
)
_FATAL_STATUSES = frozenset({401, 403})

_QUOTA_MARKERS = (
    "exceeded your current quota",
    "quota",
    "rate limit",
    "rate-limit",
    "ratelimit",
    "too many requests",
    "resource_exhausted",
    "resource exhausted",
    "resource has been exhausted",
)

_OVERLOAD_MARKERS = ("overloaded", "unavailable", "timeout", "timed out")

_TRANSIENT_MARKERS = (
    "connection",
    "network",
    "reset by peer",
    "refused",
    "broken pipe",
    "internal error",
    "server error",
    "bad gateway",
    "temporar",
    "try again",
)

_WHITESPACE_RE = re.compile(r"\s+")


def classify(status_code: int | None, message: str) -> ErrorKind:
    """Map a failure to an ErrorKind. Pure and total."""
    m = (message or "").lower()

    if status_code in _FATAL_STATUSES or any(k in m for k in _FATAL_MARKERS):
        return ErrorKind.FATAL_CREDENTIAL
    if status_code == 429 or any(k in m for k in _QUOTA_MARKERS):
        return ErrorKind.QUOTA_EXCEEDED
    if status_code == 503 or any(k in m for k in _OVERLOAD_MARKERS):
        return ErrorKind.OVERLOADED
    if (
        (status_code is not None and (status_code >= 500 or status_code == 408))
        or any(k in m for k in _TRANSIENT_MARKERS)
    ):
        return ErrorKind.TRANSIENT
    return ErrorKind.UNKNOWN


def _numeric(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def describe_error(exc: BaseException) -> tuple[int | None, str]:
    """Reduce an arbitrary provider exception to (status_code, message)."""
    if isinstance(exc, genai_errors.APIError):
        status_code = _numeric(exc.code)
        parts = [p for p in (exc.status, exc.message) if p]
        message = ": ".join(str(p) for p in parts) or str(exc)
    else:
        status_code = None
        for attr in ("status_code", "code", "status"):
            status_code = _numeric(getattr(exc, attr, None))
            if status_code is not None:
                break
        response = getattr(exc, "response", None)
        if status_code is None and response is not None:
            status_code = _numeric(getattr(response, "status_code", None))
        message = str(exc)

    message = _WHITESPACE_RE.sub(" ", message).strip() or type(exc).__name__
    return status_code, message
