"""
Whole-completion snapshots.

:class:`CompletionSnapshot` is the live view while the stream is running;
:class:`FinalCompletion` is built exactly once at end of stream and owns the
frozen choice snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..dto.chunk import CompletionUsage
from .choice_snapshot import ChoiceSnapshot


@dataclass(frozen=True)
class CompletionSnapshot:
    id: Optional[str] = None
    model: Optional[str] = None
    created: Optional[int] = None
    system_fingerprint: Optional[str] = None
    service_tier: Optional[str] = None
    choices: Tuple[ChoiceSnapshot, ...] = ()
    usage: Optional[CompletionUsage] = None


@dataclass(frozen=True)
class FinalCompletion:
    """Terminal ``chat.completion`` object assembled from the stream.

    Attributes:
        id: Completion id from the chunks.
        model: Model name reported by the server.
        created: Unix creation timestamp.
        system_fingerprint: Backend configuration fingerprint, when sent.
        service_tier: Service tier used, when sent.
        choices: One finished :class:`ChoiceSnapshot` per index, index order.
        usage: Token usage, when the server reported it.
        object: Always ``"chat.completion"``.
    """

    id: Optional[str]
    model: Optional[str]
    created: Optional[int]
    choices: Tuple[ChoiceSnapshot, ...]
    usage: Optional[CompletionUsage] = None
    system_fingerprint: Optional[str] = None
    service_tier: Optional[str] = None
    object: str = "chat.completion"

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serializable shape of a non-streamed completion."""
        data: Dict[str, Any] = {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [c.to_dict() for c in self.choices],
        }
        if self.system_fingerprint is not None:
            data["system_fingerprint"] = self.system_fingerprint
        if self.service_tier is not None:
            data["service_tier"] = self.service_tier
        if self.usage is not None:
            data["usage"] = self.usage.model_dump()
        return data


__all__ = ["CompletionSnapshot", "FinalCompletion"]
