"""
Structured stream error exception types.

Every failure the accumulator can observe is a :class:`StreamError` carrying a
normalized :class:`ErrorCode`, so streaming consumers (``error`` event) and
awaiting consumers (accessor rejection) see the same object.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class StreamError(Exception):
    """Represents a structured stream error with a normalized error code.

    Attributes:
        message: Human-readable error message suitable for logging.
        code: Normalized :class:`ErrorCode` classification for the failure.
        index: Choice index the failure relates to, when there is one.
        raw: Optional original exception or offending payload for diagnostics.
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    index: Optional[int] = None
    raw: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f"[choice {self.index}] " if self.index is not None else ""
        return f"{self.code.value}: {where}{self.message}"


@dataclass(eq=False)
class DecodeError(StreamError):
    """A transport frame is not JSON or does not match the chunk schema."""

    code: ErrorCode = ErrorCode.DECODE


@dataclass(eq=False)
class UnexpectedChunkAfterFinish(StreamError):
    """A delta arrived for a choice index whose ``finish_reason`` is already set."""

    code: ErrorCode = ErrorCode.PROTOCOL


@dataclass(eq=False)
class EmptyStreamError(StreamError):
    """The source ended before a single chunk was received."""

    code: ErrorCode = ErrorCode.EMPTY_STREAM


@dataclass(eq=False)
class StructuredOutputValidationError(StreamError):
    """Content did not validate against the caller-supplied response format."""

    code: ErrorCode = ErrorCode.VALIDATION


@dataclass(eq=False)
class UpstreamError(StreamError):
    """The server reported an error in-band (SSE ``error`` event or payload)."""

    code: ErrorCode = ErrorCode.UPSTREAM


@dataclass(eq=False)
class TransportError(StreamError):
    """The frame source itself failed (connection reset, timeout, HTTP status)."""

    code: ErrorCode = ErrorCode.TRANSPORT


@dataclass(eq=False)
class StreamAbortedError(StreamError):
    """The consumer aborted the stream before it completed."""

    code: ErrorCode = ErrorCode.CANCELLED


@dataclass(eq=False)
class MissingFinishReasonError(StreamError):
    """The source ended while a choice still had no ``finish_reason``."""

    code: ErrorCode = ErrorCode.INCOMPLETE


__all__ = [
    "StreamError",
    "DecodeError",
    "UnexpectedChunkAfterFinish",
    "EmptyStreamError",
    "StructuredOutputValidationError",
    "UpstreamError",
    "TransportError",
    "StreamAbortedError",
    "MissingFinishReasonError",
]
