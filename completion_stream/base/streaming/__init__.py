"""Streaming package for the completion accumulator.

Exposes the decoder, reducer, accumulators, emitter, metrics and the
``ChatCompletionStream`` facade under a single namespace.
"""

from .decoder import Frame, decode_frame
from .sse import ServerSentEvent, SSEDecoder, aiter_sse_data
from .events import (
    EventName,
    ContentDeltaEvent,
    ContentDoneEvent,
    RefusalDeltaEvent,
    RefusalDoneEvent,
    LogprobsContentDeltaEvent,
    LogprobsContentDoneEvent,
    LogprobsRefusalDeltaEvent,
    LogprobsRefusalDoneEvent,
    ToolCallArgumentsDeltaEvent,
    ToolCallArgumentsDoneEvent,
)
from .emitter import EventEmitter
from .reducer import reduce_choice, finalize_choice
from .choice_accumulator import ChoiceAccumulator
from .completion_accumulator import CompletionAccumulator
from .streaming_metrics import StreamMetrics, apply_token_usage, build_token_usage, validate_token_usage
from .streaming_finalize import finalize_stream
from .stream import ChatCompletionStream

__all__ = [
    "Frame",
    "decode_frame",
    "ServerSentEvent",
    "SSEDecoder",
    "aiter_sse_data",
    "EventName",
    "ContentDeltaEvent",
    "ContentDoneEvent",
    "RefusalDeltaEvent",
    "RefusalDoneEvent",
    "LogprobsContentDeltaEvent",
    "LogprobsContentDoneEvent",
    "LogprobsRefusalDeltaEvent",
    "LogprobsRefusalDoneEvent",
    "ToolCallArgumentsDeltaEvent",
    "ToolCallArgumentsDoneEvent",
    "EventEmitter",
    "reduce_choice",
    "finalize_choice",
    "ChoiceAccumulator",
    "CompletionAccumulator",
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
    "validate_token_usage",
    "finalize_stream",
    "ChatCompletionStream",
]
