"""Pure merge rules for one choice index.

``reduce_choice`` folds a :class:`ChunkChoice` into the previous
:class:`ChoiceSnapshot` and returns a new snapshot; ``finalize_choice`` turns
a snapshot whose ``finish_reason`` just arrived into its terminal shape. Both
are side-effect free apart from the DEBUG log lines of the structured parser,
which keeps them straightforward to test without an emitter.

Merge rules
-----------
- ``role`` and ``finish_reason``: last non-null wins.
- ``content`` / ``refusal``: fragments concatenated in arrival order. The
  first of the two to receive a non-empty fragment claims the choice and
  fragments for the other are dropped (see :func:`conflicting_field`).
- ``tool_calls``: merged by tool-call index; ``arguments`` concatenated;
  ``id`` and ``name`` set once.
- ``audio``: ``data`` and ``transcript`` concatenated; ``id`` set once;
  ``expires_at`` taken from the latest delta that carries one.
- ``logprobs``: entries appended to the ``content`` or ``refusal`` list.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional, Sequence, Tuple

from ..dto.chunk import AudioDelta, ChoiceLogprobs, ChunkChoice, ToolCallDelta
from ..errors import UnexpectedChunkAfterFinish
from ..models import (
    AudioSnapshot,
    ChoiceLogprobsSnapshot,
    ChoiceSnapshot,
    MessageSnapshot,
    ParsedMessage,
    ToolCallSnapshot,
)
from ..structured import ResponseFormat, parse_content, parse_tool_arguments

CONTENT = "content"
REFUSAL = "refusal"


def claimed_field(message: MessageSnapshot) -> Optional[str]:
    """Return which of ``content``/``refusal`` the message is answering with."""
    if message.refusal:
        return REFUSAL
    if message.content:
        return CONTENT
    return None


def conflicting_field(snapshot: Optional[ChoiceSnapshot], choice: ChunkChoice) -> Optional[str]:
    """Name the field whose fragment in ``choice`` will be dropped, if any.

    A fragment conflicts when the other field already claimed the choice.
    When neither is claimed and one delta carries both, content wins.
    """
    delta = choice.delta
    claimed = claimed_field(snapshot.message) if snapshot is not None else None
    if claimed == REFUSAL and delta.content:
        return CONTENT
    if claimed == CONTENT and delta.refusal:
        return REFUSAL
    if claimed is None and delta.content and delta.refusal:
        return REFUSAL
    return None


def _concat(current: Optional[str], fragment: Optional[str]) -> Optional[str]:
    if fragment is None:
        return current
    return (current or "") + fragment


def _merge_tool_calls(
    existing: Tuple[ToolCallSnapshot, ...],
    deltas: Optional[Sequence[ToolCallDelta]],
) -> Tuple[ToolCallSnapshot, ...]:
    if not deltas:
        return existing
    calls = {tc.index: tc for tc in existing}
    for d in deltas:
        prev = calls.get(d.index) or ToolCallSnapshot(index=d.index)
        fn = prev.function
        if d.function is not None:
            fn = replace(
                fn,
                name=fn.name or d.function.name,
                arguments=fn.arguments + (d.function.arguments or ""),
            )
        calls[d.index] = replace(prev, id=prev.id or d.id, type=d.type or prev.type, function=fn)
    return tuple(sorted(calls.values(), key=lambda tc: tc.index))


def _merge_audio(prev: Optional[AudioSnapshot], delta: Optional[AudioDelta]) -> Optional[AudioSnapshot]:
    if delta is None:
        return prev
    base = prev or AudioSnapshot()
    return AudioSnapshot(
        id=base.id or delta.id,
        data=base.data + (delta.data or ""),
        transcript=base.transcript + (delta.transcript or ""),
        expires_at=delta.expires_at if delta.expires_at is not None else base.expires_at,
    )


def _merge_logprobs(
    prev: Optional[ChoiceLogprobsSnapshot],
    incoming: Optional[ChoiceLogprobs],
    dropped: Optional[str],
) -> Optional[ChoiceLogprobsSnapshot]:
    if incoming is None:
        return prev
    content = prev.content if prev is not None else None
    refusal = prev.refusal if prev is not None else None
    if incoming.content is not None and dropped != CONTENT:
        content = (content or ()) + tuple(incoming.content)
    if incoming.refusal is not None and dropped != REFUSAL:
        refusal = (refusal or ()) + tuple(incoming.refusal)
    return ChoiceLogprobsSnapshot(content=content, refusal=refusal)


def ensure_open(snapshot: Optional[ChoiceSnapshot], choice: ChunkChoice) -> None:
    """Raise :class:`UnexpectedChunkAfterFinish` if ``snapshot`` is already final."""
    if snapshot is not None and snapshot.finished:
        raise UnexpectedChunkAfterFinish(
            message=f"delta received after finish_reason={snapshot.finish_reason!r}",
            index=choice.index,
            raw=choice.model_dump(exclude_none=True),
        )


def reduce_choice(snapshot: Optional[ChoiceSnapshot], choice: ChunkChoice) -> ChoiceSnapshot:
    """Apply one chunk choice to ``snapshot`` and return the next snapshot.

    ``snapshot`` is ``None`` the first time an index is seen. The returned
    snapshot is not finalized even when ``finish_reason`` is now set; see
    :func:`finalize_choice`.

    Raises:
        UnexpectedChunkAfterFinish: ``snapshot`` already has a finish reason.
    """
    ensure_open(snapshot, choice)
    if snapshot is None:
        snapshot = ChoiceSnapshot(index=choice.index)

    dropped = conflicting_field(snapshot, choice)
    delta = choice.delta
    msg = snapshot.message
    message = replace(
        msg,
        role=delta.role or msg.role,
        content=msg.content if dropped == CONTENT else _concat(msg.content, delta.content),
        refusal=msg.refusal if dropped == REFUSAL else _concat(msg.refusal, delta.refusal),
        tool_calls=_merge_tool_calls(msg.tool_calls, delta.tool_calls),
        audio=_merge_audio(msg.audio, delta.audio),
    )
    return ChoiceSnapshot(
        index=snapshot.index,
        message=message,
        finish_reason=choice.finish_reason or snapshot.finish_reason,
        logprobs=_merge_logprobs(snapshot.logprobs, choice.logprobs, dropped),
    )


def is_refusal(message: MessageSnapshot) -> bool:
    """True when a finished message answers with ``refusal`` rather than ``content``."""
    return bool(message.refusal) or (message.refusal is not None and message.content is None)


def finalize_choice(
    snapshot: ChoiceSnapshot,
    response_format: Optional[ResponseFormat] = None,
    tool_parsers: Optional[Mapping[str, ResponseFormat]] = None,
) -> ChoiceSnapshot:
    """Return the terminal form of a snapshot whose finish reason just arrived.

    The unclaimed one of ``content``/``refusal`` becomes ``None``, the claimed
    field's logprob list becomes ``()`` if logprobs were requested but none
    arrived for it, tool-call arguments are decoded, and the message becomes
    a :class:`ParsedMessage` carrying the structured value (or ``None``).
    """
    msg = snapshot.message
    refusing = is_refusal(msg)
    content = None if refusing else msg.content
    refusal = msg.refusal if refusing else None

    tool_calls = tuple(
        replace(
            tc,
            function=replace(
                tc.function,
                parsed_arguments=parse_tool_arguments(
                    tc.function.name, tc.function.arguments, tool_parsers, index=snapshot.index
                ),
            ),
        )
        for tc in msg.tool_calls
    )
    message = ParsedMessage(
        role=msg.role or "assistant",
        content=content,
        refusal=refusal,
        tool_calls=tool_calls,
        audio=msg.audio,
        parsed=parse_content(content, refusal, response_format, index=snapshot.index),
    )

    logprobs = snapshot.logprobs
    if logprobs is not None:
        if refusing:
            logprobs = ChoiceLogprobsSnapshot(content=None, refusal=logprobs.refusal or ())
        else:
            logprobs = ChoiceLogprobsSnapshot(content=logprobs.content or (), refusal=None)
    return replace(snapshot, message=message, logprobs=logprobs)


__all__ = [
    "claimed_field",
    "conflicting_field",
    "ensure_open",
    "finalize_choice",
    "is_refusal",
    "reduce_choice",
]
