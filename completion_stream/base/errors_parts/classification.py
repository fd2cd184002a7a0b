"""
Error classification helpers mapping collaborator exceptions to ErrorCode values.

The frame source is an external collaborator (HTTP client, SSE reader, test
fixture). Whatever it raises is classified here so the stream can surface a
single :class:`TransportError` with a meaningful code.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

from ..cancellation_parts.cancelled_error import CancelledError
from .error_code import ErrorCode
from .stream_error import StreamError, TransportError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from a transport exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.UPSTREAM,
    502: ErrorCode.TRANSPORT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. StreamError passthrough.
        2. Cooperative cancellation.
        3. Timeout exceptions (sync/async).
        4. HTTP status mapping.
        5. Connection-level OS errors.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, StreamError):
        return exc.code
    if isinstance(exc, CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if isinstance(exc, (ConnectionError, OSError)):
        return ErrorCode.TRANSPORT
    return ErrorCode.UNKNOWN


def wrap_transport_error(exc: BaseException) -> StreamError:
    """Return ``exc`` unchanged if it is a StreamError, else wrap it.

    The wrapped error keeps the original exception in ``raw`` so callers can
    still inspect provider-specific details.
    """
    if isinstance(exc, StreamError):
        return exc
    code = classify_exception(exc)
    message = str(exc) or exc.__class__.__name__
    return TransportError(message=message[:500], code=code, raw=exc)


__all__ = [
    "classify_exception",
    "wrap_transport_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
