"""
Accumulated assistant message snapshots.

Snapshots are frozen dataclasses with tuples in place of lists: a reducer step
returns a new snapshot instead of mutating the previous one, so anything a
subscriber holds on to never changes underneath it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ._render import render_value


@dataclass(frozen=True)
class FunctionSnapshot:
    """Function name and the concatenated ``arguments`` text of a tool call.

    ``parsed_arguments`` is only set once the owning choice has finished.
    """

    name: Optional[str] = None
    arguments: str = ""
    parsed_arguments: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "arguments": self.arguments,
            "parsed_arguments": render_value(self.parsed_arguments),
        }


@dataclass(frozen=True)
class ToolCallSnapshot:
    index: int
    id: Optional[str] = None
    type: str = "function"
    function: FunctionSnapshot = FunctionSnapshot()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "id": self.id,
            "type": self.type,
            "function": self.function.to_dict(),
        }


@dataclass(frozen=True)
class AudioSnapshot:
    """Audio payload assembled from audio deltas.

    Attributes:
        id: Audio object id (set by the first delta that carries one).
        data: Concatenated base64 fragments.
        transcript: Concatenated transcript fragments.
        expires_at: Unix timestamp from the final delta that carried one.
    """

    id: Optional[str] = None
    data: str = ""
    transcript: str = ""
    expires_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "data": self.data,
            "transcript": self.transcript,
            "expires_at": self.expires_at,
        }


@dataclass(frozen=True)
class MessageSnapshot:
    """The running assistant message of one choice.

    ``content`` and ``refusal`` stay ``None`` until a fragment for them
    arrives; ``tool_calls`` is never ``None``.
    """

    role: Optional[str] = None
    content: Optional[str] = None
    refusal: Optional[str] = None
    tool_calls: Tuple[ToolCallSnapshot, ...] = ()
    audio: Optional[AudioSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "content": self.content,
            "refusal": self.refusal,
            "role": self.role,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
        }
        if self.audio is not None:
            data["audio"] = self.audio.to_dict()
        return data


@dataclass(frozen=True)
class ParsedMessage(MessageSnapshot):
    """A finished message plus the structured value decoded from ``content``.

    ``parsed`` is ``None`` when no response format was supplied, when the
    message is a refusal, or when the content did not validate.
    """

    parsed: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["parsed"] = render_value(self.parsed)
        return data


__all__ = [
    "FunctionSnapshot",
    "ToolCallSnapshot",
    "AudioSnapshot",
    "MessageSnapshot",
    "ParsedMessage",
]
