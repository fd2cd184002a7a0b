"""Per-choice accumulated state."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from ..dto.chunk import LogProbEntry
from .message import MessageSnapshot, ParsedMessage


@dataclass(frozen=True)
class ChoiceLogprobsSnapshot:
    """Log-probability entries in token emission order.

    Each list is ``None`` until the first entry for it arrives. When the
    choice finishes, the list of the field the choice answered with is
    normalised to an empty tuple if nothing arrived for it.
    """

    content: Optional[Tuple[LogProbEntry, ...]] = None
    refusal: Optional[Tuple[LogProbEntry, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": [e.model_dump() for e in self.content] if self.content is not None else None,
            "refusal": [e.model_dump() for e in self.refusal] if self.refusal is not None else None,
        }


@dataclass(frozen=True)
class ChoiceSnapshot:
    """State of one choice index.

    Once ``finish_reason`` is set the snapshot is final: ``message`` is a
    :class:`ParsedMessage` and no further delta is applied to this index.
    """

    index: int
    message: Union[MessageSnapshot, ParsedMessage] = MessageSnapshot()
    finish_reason: Optional[str] = None
    logprobs: Optional[ChoiceLogprobsSnapshot] = None

    @property
    def finished(self) -> bool:
        return self.finish_reason is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finish_reason": self.finish_reason,
            "index": self.index,
            "logprobs": self.logprobs.to_dict() if self.logprobs is not None else None,
            "message": self.message.to_dict(),
        }


__all__ = ["ChoiceLogprobsSnapshot", "ChoiceSnapshot"]
