"""``ChatCompletionStream``: the public facade over one streamed completion.

Both ways of consuming a stream pull from one shared cursor over the frame
source:

- ``async for chunk in stream`` yields every decoded :class:`RawChunk` once;
  breaking out and iterating again resumes where the cursor is.
- ``await stream.final_chat_completion()`` drains whatever is left and
  returns the memoised :class:`FinalCompletion`.

Events are dispatched synchronously on whichever task is driving the cursor.
Pulls are serialised behind one lock, so several tasks may await the
accessors at once: they share a single consumption of the source.

Terminal failures are stored once. The ``error`` event receives the stored
exception and every accessor re-raises that same object, so the streaming
and awaiting views of a failure always agree.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Iterable,
    Mapping,
    Optional,
    Union,
)

from opentelemetry import trace

from ...config import StreamConfig, get_stream_config
from ..cancellation import CancellationToken, CancelledError
from ..dto.chunk import RawChunk
from ..errors import (
    EmptyStreamError,
    ErrorCode,
    StreamAbortedError,
    StreamError,
    UnexpectedChunkAfterFinish,
    wrap_transport_error,
)
from ..logging import LogContext, get_logger, log_event
from ..models import CompletionSnapshot, FinalCompletion, ParsedMessage
from ..structured import ResponseFormat
from ..tracing import end_span, start_span
from .completion_accumulator import CompletionAccumulator
from .decoder import Frame, decode_frame
from .emitter import EventEmitter, Handler
from .events import EventName, event_key
from .sse import Line, aiter_sse_data
from .streaming_finalize import finalize_stream
from .streaming_metrics import StreamMetrics, apply_token_usage, validate_token_usage

FrameSource = Union[AsyncIterable[Frame], Iterable[Frame]]

SPAN_NAME = "completion_stream.consume"


async def _iterate_sync(source: Iterable[Frame]) -> AsyncIterator[Frame]:
    for frame in source:
        yield frame


def _as_async_iterator(source: FrameSource) -> AsyncIterator[Frame]:
    if hasattr(source, "__aiter__"):
        return source.__aiter__()  # type: ignore[union-attr]
    return _iterate_sync(source)  # type: ignore[arg-type]


class ChatCompletionStream:
    """Accumulates a streamed chat completion and publishes its events.

    Args:
        source: Async or plain iterable of frames (SSE ``data`` payloads as
            ``str``/``bytes``, or already-parsed mappings).
        response_format: Parses each finished choice's content into
            ``message.parsed``.
        tool_parsers: Per-function-name formats for tool-call arguments.
        config: Resolved settings; defaults to :func:`get_stream_config`.
        logger: Logger to use instead of ``completion_stream.stream``.
        ctx: Log context shared by every log line of this stream.
        cancellation_token: Token backing :meth:`abort`; pass a child of a
            request-scoped token to abort several streams together.
    """

    def __init__(
        self,
        source: FrameSource,
        *,
        response_format: Optional[ResponseFormat] = None,
        tool_parsers: Optional[Mapping[str, ResponseFormat]] = None,
        config: Optional[StreamConfig] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self.config = config or get_stream_config()
        self._logger = logger or get_logger("completion_stream.stream", json_mode=self.config.json_logs)
        self.ctx = ctx or LogContext()
        self._token = cancellation_token or CancellationToken()
        self._emitter = EventEmitter()
        self._accumulator = CompletionAccumulator(
            self._emitter,
            response_format=response_format,
            tool_parsers=tool_parsers,
            strict_finish=self.config.strict_finish,
            logger=self._logger,
            ctx=self.ctx,
        )
        self.metrics = StreamMetrics()
        self._source = source
        self._iterator: Optional[AsyncIterator[Frame]] = None
        self._pull_lock = asyncio.Lock()
        self._span: trace.Span = trace.INVALID_SPAN
        self._t0: Optional[float] = None
        self._ended = False
        self._final: Optional[FinalCompletion] = None
        self._error: Optional[StreamError] = None
        self._empty_error: Optional[EmptyStreamError] = None

    @classmethod
    def from_sse_lines(
        cls,
        lines: Union[AsyncIterable[Line], Iterable[Line]],
        **kwargs: Any,
    ) -> "ChatCompletionStream":
        """Build a stream over raw SSE lines (``response.aiter_lines()`` etc.)."""
        return cls(aiter_sse_data(lines), **kwargs)

    # ------------------------------------------------------------------ events
    def on(self, event: "EventName | str", handler: Handler) -> "ChatCompletionStream":
        """Subscribe ``handler`` to ``event``; returns the stream for chaining."""
        self._emitter.on(event, handler)
        return self

    def once(self, event: "EventName | str", handler: Handler) -> "ChatCompletionStream":
        self._emitter.once(event, handler)
        return self

    def off(self, event: "EventName | str", handler: Handler) -> "ChatCompletionStream":
        self._emitter.off(event, handler)
        return self

    async def emitted(self, event: "EventName | str") -> Any:
        """Wait for the next occurrence of ``event`` and return its payload.

        Another task must be consuming the stream for the event to fire. If
        the stream fails first, the stored error is raised instead; if it
        ends without the event firing, :class:`StreamError` is raised.
        """
        key = event_key(event)
        if self._ended:
            if self._error is not None:
                raise self._error
            raise StreamError(message=f"stream already ended; {key!r} will not fire", code=ErrorCode.INTERNAL)

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future = loop.create_future()

        def _resolve(*payload: Any) -> None:
            if not waiter.done():
                waiter.set_result(payload[0] if payload else None)

        def _reject(err: StreamError) -> None:
            if not waiter.done():
                waiter.set_exception(err)

        def _ended() -> None:
            if not waiter.done():
                waiter.set_exception(
                    StreamError(message=f"stream ended before {key!r} fired", code=ErrorCode.INTERNAL)
                )

        self._emitter.once(key, _resolve)
        if key != EventName.ERROR.value:
            self._emitter.once(EventName.ERROR, _reject)
        if key != EventName.END.value:
            self._emitter.once(EventName.END, _ended)
        try:
            return await waiter
        finally:
            self._emitter.off(key, _resolve)
            self._emitter.off(EventName.ERROR, _reject)
            self._emitter.off(EventName.END, _ended)

    # ------------------------------------------------------------- accessors
    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def error(self) -> Optional[StreamError]:
        """The stored terminal error, once the stream has failed."""
        return self._error

    @property
    def current_completion_snapshot(self) -> CompletionSnapshot:
        """Live view of everything accumulated so far."""
        return self._accumulator.snapshot()

    def abort(self, reason: Optional[str] = None) -> None:
        """Request cancellation; the next pull fails with :class:`StreamAbortedError`."""
        self._token.cancel(reason or "stream aborted")

    async def done(self) -> None:
        """Drain the stream; raises the stored terminal error, if any."""
        while await self._next_chunk() is not None:
            pass

    async def final_chat_completion(self) -> FinalCompletion:
        """Drain the stream and return the memoised :class:`FinalCompletion`.

        Raises:
            EmptyStreamError: The source ended without a single chunk.
            StreamError: The stored terminal error.
        """
        await self.done()
        if self._final is None:
            raise self._empty_error or EmptyStreamError(message="stream ended before any chunk was received")
        return self._final

    async def final_message(self) -> ParsedMessage:
        """Message of choice 0 of the final completion."""
        final = await self.final_chat_completion()
        if not final.choices:
            raise StreamError(message="stream ended without producing a message", code=ErrorCode.INCOMPLETE)
        return final.choices[0].message  # type: ignore[return-value]

    async def final_content(self) -> Optional[str]:
        return (await self.final_message()).content

    # ------------------------------------------------------------- iteration
    def __aiter__(self) -> AsyncIterator[RawChunk]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[RawChunk]:
        while True:
            chunk = await self._next_chunk()
            if chunk is None:
                return
            yield chunk

    async def __aenter__(self) -> "ChatCompletionStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the source; a stream still running is aborted."""
        if self._ended:
            return
        self._token.cancel("stream closed")
        await self._fail(StreamAbortedError(message="stream closed"))

    # -------------------------------------------------------------- internals
    def _start(self) -> None:
        if self._iterator is not None:
            return
        self._iterator = _as_async_iterator(self._source)
        self._t0 = time.perf_counter()
        self._span = start_span(SPAN_NAME, enabled=self.config.trace_enabled)
        log_event(self._logger, "stream.start", self.ctx, level=logging.DEBUG, strict_finish=self.config.strict_finish)

    async def _next_chunk(self) -> Optional[RawChunk]:
        """Pull, decode and accumulate one chunk; ``None`` at end of stream."""
        async with self._pull_lock:
            return await self._pull()

    async def _pull(self) -> Optional[RawChunk]:
        if self._ended:
            if self._error is not None:
                raise self._error
            return None
        self._start()
        assert self._iterator is not None  # nosec B101

        try:
            self._token.raise_if_cancelled()
            frame = await self._iterator.__anext__()
            self._token.raise_if_cancelled()
        except StopAsyncIteration:
            await self._finish()
            return None
        except CancelledError as exc:
            aborted = StreamAbortedError(message=str(exc), raw=exc)
            raise await self._fail(aborted) from exc
        except StreamError as exc:
            raise await self._fail(exc)
        except Exception as exc:
            raise await self._fail(wrap_transport_error(exc)) from exc

        try:
            chunk = decode_frame(frame)
        except StreamError as exc:
            raise await self._fail(exc)
        if chunk is None:
            await self._finish()
            return None

        if self.metrics.chunks == 0 and self._t0 is not None:
            self.metrics.time_to_first_chunk_ms = (time.perf_counter() - self._t0) * 1000.0
        self.metrics.chunks += 1
        try:
            self._accumulator.add_chunk(chunk)
        except UnexpectedChunkAfterFinish as exc:
            raise await self._fail(exc)
        self.metrics.content_deltas = self._accumulator.content_deltas
        return chunk

    async def _close_source(self) -> None:
        aclose = getattr(self._iterator, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as exc:  # the stream is already terminal; report and move on
            log_event(self._logger, "stream.close_failed", self.ctx, level=logging.DEBUG, detail=str(exc)[:200])

    def _close_out(self, error: Optional[StreamError]) -> None:
        usage = self._accumulator.usage
        problem = validate_token_usage(usage) if usage is not None else None
        if problem is not None:
            log_event(
                self._logger,
                "stream.usage_inconsistent",
                self.ctx,
                level=logging.WARNING,
                detail=problem,
                usage=usage.model_dump(),
            )
        apply_token_usage(self.metrics, usage)
        self.metrics.content_deltas = self._accumulator.content_deltas
        finalize_stream(logger=self._logger, ctx=self.ctx, metrics=self.metrics, t0=self._t0, error=error)
        self._span.set_attribute("completion_stream.chunks", self.metrics.chunks)
        if error is not None:
            self._span.set_attribute("completion_stream.error_code", error.code.value)
        end_span(self._span, error)

    async def _finish(self) -> None:
        self._ended = True
        await self._close_source()

        if self._accumulator.chunk_count == 0:
            self._empty_error = EmptyStreamError(message="stream ended before any chunk was received")
            self._close_out(None)
            self._emitter.emit(EventName.END)
            return

        try:
            final = self._accumulator.build_final()
        except StreamError as exc:
            raise await self._fail(exc)
        self._final = final
        self._close_out(None)

        if final.choices:
            message = final.choices[0].message
            self._emitter.emit(EventName.FINAL_CONTENT, message.content)
            self._emitter.emit(EventName.FINAL_MESSAGE, message)
        self._emitter.emit(EventName.FINAL_CHAT_COMPLETION, final)
        self._emitter.emit(EventName.END)

    async def _fail(self, error: StreamError) -> StreamError:
        """Store ``error`` as terminal, emit ``abort``/``error``/``end`` and return it.

        A stream that already failed keeps its first error, which is returned
        instead; the events are not repeated.
        """
        if self._error is not None:
            return self._error
        self._ended = True
        self._error = error
        await self._close_source()
        if self._iterator is not None:
            self._close_out(error)

        if isinstance(error, StreamAbortedError):
            log_event(self._logger, "stream.abort", self.ctx, reason=error.message)
            self._emitter.emit(EventName.ABORT, error)
        self._emitter.emit(EventName.ERROR, error)
        self._emitter.emit(EventName.END)
        return error


__all__ = ["ChatCompletionStream", "FrameSource"]
