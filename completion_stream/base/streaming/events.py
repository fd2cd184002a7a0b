"""Event channel names and payload types emitted while a stream is consumed.

Channel names are the stable strings subscribers register with; because
:class:`EventName` is a ``str`` enum, ``stream.on("content.delta", ...)`` and
``stream.on(EventName.CONTENT_DELTA, ...)`` are the same subscription.

Payload table
-------------
============================================  =====================================
channel                                       payload
============================================  =====================================
``chunk``                                     :class:`RawChunk`, :class:`CompletionSnapshot`
``content.delta``                             :class:`ContentDeltaEvent`
``content.done``                              :class:`ContentDoneEvent`
``refusal.delta``                             :class:`RefusalDeltaEvent`
``refusal.done``                              :class:`RefusalDoneEvent`
``logprobs.content.delta``                    :class:`LogprobsContentDeltaEvent`
``logprobs.content.done``                     :class:`LogprobsContentDoneEvent`
``logprobs.refusal.delta``                    :class:`LogprobsRefusalDeltaEvent`
``logprobs.refusal.done``                     :class:`LogprobsRefusalDoneEvent`
``tool_calls.function.arguments.delta``       :class:`ToolCallArgumentsDeltaEvent`
``tool_calls.function.arguments.done``        :class:`ToolCallArgumentsDoneEvent`
``message``                                   :class:`ParsedMessage`
``finalContent``                              ``str | None`` (choice 0 content)
``finalMessage``                              :class:`ParsedMessage` (choice 0)
``finalChatCompletion``                       :class:`FinalCompletion`
``abort``                                     :class:`StreamAbortedError`
``error``                                     :class:`StreamError`
``end``                                       no payload
============================================  =====================================
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from ..dto.chunk import LogProbEntry


class EventName(str, Enum):
    CHUNK = "chunk"
    CONTENT_DELTA = "content.delta"
    CONTENT_DONE = "content.done"
    REFUSAL_DELTA = "refusal.delta"
    REFUSAL_DONE = "refusal.done"
    LOGPROBS_CONTENT_DELTA = "logprobs.content.delta"
    LOGPROBS_CONTENT_DONE = "logprobs.content.done"
    LOGPROBS_REFUSAL_DELTA = "logprobs.refusal.delta"
    LOGPROBS_REFUSAL_DONE = "logprobs.refusal.done"
    TOOL_CALL_ARGUMENTS_DELTA = "tool_calls.function.arguments.delta"
    TOOL_CALL_ARGUMENTS_DONE = "tool_calls.function.arguments.done"
    MESSAGE = "message"
    FINAL_CONTENT = "finalContent"
    FINAL_MESSAGE = "finalMessage"
    FINAL_CHAT_COMPLETION = "finalChatCompletion"
    ABORT = "abort"
    ERROR = "error"
    END = "end"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


def event_key(name: "EventName | str") -> str:
    """Normalise an enum member or raw string into the channel key."""
    if isinstance(name, EventName):
        return name.value
    return EventName(name).value


@dataclass(frozen=True)
class ContentDeltaEvent:
    """A content fragment was applied; ``snapshot`` is the content so far."""

    index: int
    delta: str
    snapshot: str


@dataclass(frozen=True)
class ContentDoneEvent:
    index: int
    content: str
    parsed: Any = None


@dataclass(frozen=True)
class RefusalDeltaEvent:
    index: int
    delta: str
    snapshot: str


@dataclass(frozen=True)
class RefusalDoneEvent:
    index: int
    refusal: str


@dataclass(frozen=True)
class LogprobsContentDeltaEvent:
    """New content logprob entries; ``snapshot`` holds every entry so far."""

    index: int
    content: Tuple[LogProbEntry, ...]
    snapshot: Tuple[LogProbEntry, ...]


@dataclass(frozen=True)
class LogprobsContentDoneEvent:
    index: int
    content: Tuple[LogProbEntry, ...]


@dataclass(frozen=True)
class LogprobsRefusalDeltaEvent:
    index: int
    refusal: Tuple[LogProbEntry, ...]
    snapshot: Tuple[LogProbEntry, ...]


@dataclass(frozen=True)
class LogprobsRefusalDoneEvent:
    index: int
    refusal: Tuple[LogProbEntry, ...]


@dataclass(frozen=True)
class ToolCallArgumentsDeltaEvent:
    """An ``arguments`` fragment was applied to one tool call of a choice.

    Attributes:
        index: Choice index.
        tool_index: Position of the tool call within the message.
        name: Function name, when known.
        arguments: Arguments text accumulated so far.
        arguments_delta: The fragment just applied.
    """

    index: int
    tool_index: int
    name: Optional[str]
    arguments: str
    arguments_delta: str


@dataclass(frozen=True)
class ToolCallArgumentsDoneEvent:
    index: int
    tool_index: int
    name: Optional[str]
    arguments: str
    parsed_arguments: Any = None


__all__ = [
    "EventName",
    "event_key",
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
]
