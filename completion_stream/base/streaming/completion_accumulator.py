"""Whole-completion accumulation: chunk metadata plus one accumulator per index."""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from ..dto.chunk import CompletionUsage, RawChunk
from ..errors import MissingFinishReasonError
from ..logging import LogContext
from ..models import ChoiceSnapshot, CompletionSnapshot, FinalCompletion
from ..structured import ResponseFormat
from .choice_accumulator import ChoiceAccumulator, PendingEvent
from .emitter import EventEmitter
from .events import EventName
from .reducer import ensure_open


class CompletionAccumulator:
    """Routes chunk choices to per-index accumulators.

    Top-level metadata (``id``, ``model``, ``created``, ``system_fingerprint``,
    ``service_tier``) and ``usage`` follow last-non-null-wins. Chunks whose
    ``choices`` list is empty (trailing usage reports) only update metadata.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        *,
        response_format: Optional[ResponseFormat] = None,
        tool_parsers: Optional[Mapping[str, ResponseFormat]] = None,
        strict_finish: bool = False,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._emitter = emitter
        self._response_format = response_format
        self._tool_parsers = tool_parsers
        self._strict_finish = strict_finish
        self._logger = logger
        self._ctx = ctx
        self._choices: Dict[int, ChoiceAccumulator] = {}
        self.chunk_count = 0
        self.content_deltas = 0
        self._id: Optional[str] = None
        self._model: Optional[str] = None
        self._created: Optional[int] = None
        self._system_fingerprint: Optional[str] = None
        self._service_tier: Optional[str] = None
        self._usage: Optional[CompletionUsage] = None

    @property
    def usage(self) -> Optional[CompletionUsage]:
        return self._usage

    def _accumulator(self, index: int) -> ChoiceAccumulator:
        acc = self._choices.get(index)
        if acc is None:
            acc = ChoiceAccumulator(
                index,
                self._emitter,
                response_format=self._response_format,
                tool_parsers=self._tool_parsers,
                strict_finish=self._strict_finish,
                logger=self._logger,
                ctx=self._ctx,
            )
            self._choices[index] = acc
        return acc

    def add_chunk(self, chunk: RawChunk) -> None:
        """Fold ``chunk`` into the state, then emit its events.

        Every index of the chunk is reduced before the ``chunk`` event fires,
        so handlers always observe state that already includes this chunk.

        Raises:
            UnexpectedChunkAfterFinish: Only in ``strict_finish`` mode; the
                state is left as it was before this chunk.
        """
        staged = sorted(chunk.choices, key=lambda c: c.index)
        if self._strict_finish:
            for choice in staged:
                acc = self._choices.get(choice.index)
                ensure_open(acc.snapshot if acc is not None else None, choice)

        pending: List[List[PendingEvent]] = []
        for choice in staged:
            pending.append(self._accumulator(choice.index).reduce(choice))

        self.chunk_count += 1
        self._id = chunk.id or self._id
        self._model = chunk.model or self._model
        self._created = chunk.created if chunk.created is not None else self._created
        self._system_fingerprint = chunk.system_fingerprint or self._system_fingerprint
        self._service_tier = chunk.service_tier or self._service_tier
        if chunk.usage is not None:
            self._usage = chunk.usage
        if self._ctx is not None:
            self._ctx.completion_id = self._ctx.completion_id or self._id
            self._ctx.model = self._ctx.model or self._model

        self.content_deltas += sum(
            1
            for events in pending
            for name, _ in events
            if name in (EventName.CONTENT_DELTA, EventName.REFUSAL_DELTA)
        )

        self._emitter.emit(EventName.CHUNK, chunk, self.snapshot())
        for events in pending:
            for name, payload in events:
                self._emitter.emit(name, payload)

    def choices(self) -> List[ChoiceSnapshot]:
        """Current snapshots in index order."""
        return [
            acc.snapshot
            for _, acc in sorted(self._choices.items())
            if acc.snapshot is not None
        ]

    def snapshot(self) -> CompletionSnapshot:
        return CompletionSnapshot(
            id=self._id,
            model=self._model,
            created=self._created,
            system_fingerprint=self._system_fingerprint,
            service_tier=self._service_tier,
            choices=tuple(self.choices()),
            usage=self._usage,
        )

    def build_final(self) -> FinalCompletion:
        """Assemble the terminal completion.

        Raises:
            MissingFinishReasonError: Some index never received a finish reason.
        """
        choices = self.choices()
        for choice in choices:
            if not choice.finished:
                raise MissingFinishReasonError(
                    message="stream ended before the choice received a finish_reason",
                    index=choice.index,
                )
        return FinalCompletion(
            id=self._id,
            model=self._model,
            created=self._created,
            choices=tuple(choices),
            usage=self._usage,
            system_fingerprint=self._system_fingerprint,
            service_tier=self._service_tier,
        )


__all__ = ["CompletionAccumulator"]
