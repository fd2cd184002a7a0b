"""Stream error taxonomy public surface.

This module re-exports the implementations under
``completion_stream.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts import (
    ErrorCode,
    StreamError,
    DecodeError,
    UnexpectedChunkAfterFinish,
    EmptyStreamError,
    StructuredOutputValidationError,
    UpstreamError,
    TransportError,
    StreamAbortedError,
    MissingFinishReasonError,
    classify_exception,
    wrap_transport_error,
)

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
