"""
Normalized stream error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the decoder, the accumulators and
the stream facade. Values are lowercase snake_case and are considered a stable
public contract for logging and analytics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    DECODE = "decode"
    PROTOCOL = "protocol"
    EMPTY_STREAM = "empty_stream"
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"
    CANCELLED = "cancelled"
    INCOMPLETE = "incomplete"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
