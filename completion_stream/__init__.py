"""completion_stream package

Accumulates a streamed chat completion (``chat.completion.chunk`` frames)
into a final ``chat.completion``, publishing typed events along the way.

Public API (re-exported):
    - Version: ``__version__``
    - Stream: :class:`ChatCompletionStream`
    - Events: :class:`EventName`
    - Results: :class:`FinalCompletion`, :class:`ParsedMessage`
    - Structured output: :class:`PydanticResponseFormat`,
      :class:`JsonObjectResponseFormat`, :class:`CallableResponseFormat`
    - Errors: :class:`StreamError` and its subclasses, :class:`ErrorCode`
    - Config: :class:`StreamConfig`, :func:`get_stream_config`,
      :func:`configure_logging`

Example::

    stream = ChatCompletionStream.from_sse_lines(response.aiter_lines())
    stream.on("content.delta", lambda e: print(e.delta, end=""))
    completion = await stream.final_chat_completion()
"""

from .base import (
    CallableResponseFormat,
    CancellationToken,
    ChatCompletionStream,
    ChoiceSnapshot,
    DecodeError,
    EmptyStreamError,
    ErrorCode,
    EventName,
    FinalCompletion,
    JsonObjectResponseFormat,
    LogContext,
    MissingFinishReasonError,
    ParsedMessage,
    PydanticResponseFormat,
    RawChunk,
    StreamAbortedError,
    StreamError,
    StructuredOutputValidationError,
    TransportError,
    UnexpectedChunkAfterFinish,
    UpstreamError,
)
from .config import StreamConfig, configure_logging, get_stream_config

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CallableResponseFormat",
    "CancellationToken",
    "ChatCompletionStream",
    "ChoiceSnapshot",
    "DecodeError",
    "EmptyStreamError",
    "ErrorCode",
    "EventName",
    "FinalCompletion",
    "JsonObjectResponseFormat",
    "LogContext",
    "MissingFinishReasonError",
    "ParsedMessage",
    "PydanticResponseFormat",
    "RawChunk",
    "StreamAbortedError",
    "StreamError",
    "StructuredOutputValidationError",
    "TransportError",
    "UnexpectedChunkAfterFinish",
    "UpstreamError",
    "StreamConfig",
    "configure_logging",
    "get_stream_config",
]
