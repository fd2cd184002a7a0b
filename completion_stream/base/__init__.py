"""
Completion Stream Base Package

Exports the wire DTOs, snapshot models, error taxonomy, structured-output
formats and streaming primitives.

Layout:
- dto: pydantic models for chunks as they arrive on the wire
- models: frozen snapshots produced by accumulation
- structured: response formats and the soft parser
- streaming: decoder, reducer, accumulators, emitter and stream facade
"""

from .dto import RawChunk, ChunkChoice, ChoiceDelta, LogProbEntry, CompletionUsage
from .models import (
    AudioSnapshot,
    ChoiceLogprobsSnapshot,
    ChoiceSnapshot,
    CompletionSnapshot,
    FinalCompletion,
    FunctionSnapshot,
    MessageSnapshot,
    ParsedMessage,
    ToolCallSnapshot,
)
from .errors import (
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
)
from .cancellation import CancellationToken, CancelledError
from .logging import LogContext, get_logger, configure_logger
from .structured import (
    ResponseFormat,
    PydanticResponseFormat,
    JsonObjectResponseFormat,
    CallableResponseFormat,
)
from .streaming import (
    ChatCompletionStream,
    EventEmitter,
    EventName,
    StreamMetrics,
    decode_frame,
)

__all__ = [
    "RawChunk",
    "ChunkChoice",
    "ChoiceDelta",
    "LogProbEntry",
    "CompletionUsage",
    "AudioSnapshot",
    "ChoiceLogprobsSnapshot",
    "ChoiceSnapshot",
    "CompletionSnapshot",
    "FinalCompletion",
    "FunctionSnapshot",
    "MessageSnapshot",
    "ParsedMessage",
    "ToolCallSnapshot",
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
    "CancellationToken",
    "CancelledError",
    "LogContext",
    "get_logger",
    "configure_logger",
    "ResponseFormat",
    "PydanticResponseFormat",
    "JsonObjectResponseFormat",
    "CallableResponseFormat",
    "ChatCompletionStream",
    "EventEmitter",
    "EventName",
    "StreamMetrics",
    "decode_frame",
]
