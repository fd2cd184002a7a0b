"""Per-index accumulator: reducer state plus event dispatch.

Applying a chunk choice is split into two steps so a caller handling a whole
chunk can update every index before any handler runs:

``reduce(choice)``
    Runs the reducer, stores the new snapshot and returns the list of
    ``(channel, payload)`` pairs the step produced.
``dispatch(events)``
    Emits those pairs in order.

``apply(choice)`` does both. Because state is stored first, a handler that
raises cannot leave the accumulator half-updated.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from ..dto.chunk import ChunkChoice
from ..errors import UnexpectedChunkAfterFinish
from ..logging import LogContext, get_logger, log_event
from ..models import ChoiceSnapshot
from ..structured import ResponseFormat
from .emitter import EventEmitter
from .events import (
    ContentDeltaEvent,
    ContentDoneEvent,
    EventName,
    LogprobsContentDeltaEvent,
    LogprobsContentDoneEvent,
    LogprobsRefusalDeltaEvent,
    LogprobsRefusalDoneEvent,
    RefusalDeltaEvent,
    RefusalDoneEvent,
    ToolCallArgumentsDeltaEvent,
    ToolCallArgumentsDoneEvent,
)
from .reducer import CONTENT, REFUSAL, conflicting_field, finalize_choice, is_refusal, reduce_choice

PendingEvent = Tuple[EventName, Any]


class ChoiceAccumulator:
    """Owns the snapshot of one choice index."""

    def __init__(
        self,
        index: int,
        emitter: EventEmitter,
        *,
        response_format: Optional[ResponseFormat] = None,
        tool_parsers: Optional[Mapping[str, ResponseFormat]] = None,
        strict_finish: bool = False,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self.index = index
        self._emitter = emitter
        self._response_format = response_format
        self._tool_parsers = tool_parsers
        self._strict_finish = strict_finish
        self._logger = logger or get_logger("completion_stream.accumulator")
        self._ctx = ctx
        self._snapshot: Optional[ChoiceSnapshot] = None

    @property
    def snapshot(self) -> Optional[ChoiceSnapshot]:
        return self._snapshot

    @property
    def finished(self) -> bool:
        return self._snapshot is not None and self._snapshot.finished

    def apply(self, choice: ChunkChoice) -> Optional[ChoiceSnapshot]:
        """Reduce ``choice`` into this index and emit the resulting events."""
        self.dispatch(self.reduce(choice))
        return self._snapshot

    def reduce(self, choice: ChunkChoice) -> List[PendingEvent]:
        """Store the next snapshot and return the events it calls for.

        A delta for an already finished index is logged and ignored (empty
        event list) unless ``strict_finish`` is set, in which case the
        :class:`UnexpectedChunkAfterFinish` propagates.
        """
        prev = self._snapshot
        try:
            reduced = reduce_choice(prev, choice)
        except UnexpectedChunkAfterFinish as exc:
            if self._strict_finish:
                raise
            log_event(
                self._logger,
                "stream.chunk_after_finish",
                self._ctx,
                level=logging.WARNING,
                index=self.index,
                finish_reason=prev.finish_reason if prev is not None else None,
                error_code=exc.code.value,
            )
            return []

        dropped = conflicting_field(prev, choice)
        if dropped is not None:
            log_event(
                self._logger,
                "stream.content_conflict",
                self._ctx,
                level=logging.WARNING,
                index=self.index,
                dropped=dropped,
            )

        final = reduced
        if reduced.finished:
            final = finalize_choice(reduced, self._response_format, self._tool_parsers)
        self._snapshot = final

        events = self._delta_events(reduced, choice, dropped)
        if final.finished:
            events.extend(self._done_events(final))
        return events

    def dispatch(self, events: List[PendingEvent]) -> None:
        for name, payload in events:
            self._emitter.emit(name, payload)

    def _delta_events(
        self,
        reduced: ChoiceSnapshot,
        choice: ChunkChoice,
        dropped: Optional[str],
    ) -> List[PendingEvent]:
        events: List[PendingEvent] = []
        delta = choice.delta
        message = reduced.message

        if delta.content and dropped != CONTENT:
            events.append((EventName.CONTENT_DELTA, ContentDeltaEvent(self.index, delta.content, message.content or "")))
        if delta.refusal and dropped != REFUSAL:
            events.append((EventName.REFUSAL_DELTA, RefusalDeltaEvent(self.index, delta.refusal, message.refusal or "")))

        incoming = choice.logprobs
        logprobs = reduced.logprobs
        if incoming is not None and logprobs is not None:
            if incoming.content and dropped != CONTENT:
                events.append(
                    (
                        EventName.LOGPROBS_CONTENT_DELTA,
                        LogprobsContentDeltaEvent(self.index, tuple(incoming.content), logprobs.content or ()),
                    )
                )
            if incoming.refusal and dropped != REFUSAL:
                events.append(
                    (
                        EventName.LOGPROBS_REFUSAL_DELTA,
                        LogprobsRefusalDeltaEvent(self.index, tuple(incoming.refusal), logprobs.refusal or ()),
                    )
                )

        by_index = {tc.index: tc for tc in message.tool_calls}
        for tc_delta in delta.tool_calls or ():
            fragment = tc_delta.function.arguments if tc_delta.function is not None else None
            if not fragment:
                continue
            tc = by_index[tc_delta.index]
            events.append(
                (
                    EventName.TOOL_CALL_ARGUMENTS_DELTA,
                    ToolCallArgumentsDeltaEvent(
                        index=self.index,
                        tool_index=tc.index,
                        name=tc.function.name,
                        arguments=tc.function.arguments,
                        arguments_delta=fragment,
                    ),
                )
            )
        return events

    def _done_events(self, final: ChoiceSnapshot) -> List[PendingEvent]:
        events: List[PendingEvent] = []
        message = final.message

        for tc in message.tool_calls:
            events.append(
                (
                    EventName.TOOL_CALL_ARGUMENTS_DONE,
                    ToolCallArgumentsDoneEvent(
                        index=self.index,
                        tool_index=tc.index,
                        name=tc.function.name,
                        arguments=tc.function.arguments,
                        parsed_arguments=tc.function.parsed_arguments,
                    ),
                )
            )

        refusing = is_refusal(message)
        if refusing:
            events.append((EventName.REFUSAL_DONE, RefusalDoneEvent(self.index, message.refusal or "")))
        elif message.content is not None:
            parsed = getattr(message, "parsed", None)
            events.append((EventName.CONTENT_DONE, ContentDoneEvent(self.index, message.content, parsed)))

        if final.logprobs is not None:
            if refusing:
                events.append(
                    (EventName.LOGPROBS_REFUSAL_DONE, LogprobsRefusalDoneEvent(self.index, final.logprobs.refusal or ()))
                )
            else:
                events.append(
                    (EventName.LOGPROBS_CONTENT_DONE, LogprobsContentDoneEvent(self.index, final.logprobs.content or ()))
                )

        events.append((EventName.MESSAGE, message))
        return events


__all__ = ["ChoiceAccumulator", "PendingEvent"]
