"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `completion_stream.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .stream_error import (
    StreamError,
    DecodeError,
    UnexpectedChunkAfterFinish,
    EmptyStreamError,
    StructuredOutputValidationError,
    UpstreamError,
    TransportError,
    StreamAbortedError,
    MissingFinishReasonError,
)
from .classification import classify_exception, wrap_transport_error

__all__ = [
    "ErrorCode",
    "StreamError",
    "DecodeError",
    "UnexpectedChunkAfterFinish",
    "EmptyStreamError",
    "StructuredOutputValidationError",
    "UpstreamError",
    "TransportError",
    "StreamAbortedError",
    "MissingFinishReasonError",
    "classify_exception",
    "wrap_transport_error",
]
