"""Streaming metrics data structures.

Kept apart from the stream facade so the facade stays focused on the pull
loop and so the helpers can be unit-tested alone.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Dict, Any

from ..dto.chunk import CompletionUsage


@dataclass
class StreamMetrics:
    """Collected metrics for one consumed stream.

    Attributes:
        chunks: Decoded chunks received (the ``[DONE]`` sentinel excluded).
        content_deltas: Content/refusal delta events dispatched.
        time_to_first_chunk_ms: Time from the first pull to the first chunk.
        total_duration_ms: Time from the first pull to the terminal state.
        prompt_tokens / completion_tokens / total_tokens: From the server's
            usage report, when one was sent.
        tokens: Canonical ``{"prompt", "completion", "total"}`` mapping.
    """

    chunks: int = 0
    content_deltas: int = 0
    time_to_first_chunk_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    tokens: Optional[Dict[str, Any]] = None


def build_token_usage(prompt: Optional[int], completion: Optional[int], total: Optional[int] = None) -> Dict[str, Optional[int]]:
    """Return a canonical token usage mapping."""
    derived_total = total
    if derived_total is None and (prompt is not None and completion is not None):
        derived_total = prompt + completion
    return {"prompt": prompt, "completion": completion, "total": derived_total}


def apply_token_usage(metrics: StreamMetrics, usage: Optional[CompletionUsage]) -> None:
    """Populate token usage fields on ``metrics`` from a server usage report."""
    if usage is None:
        return
    prompt, completion = usage.prompt_tokens, usage.completion_tokens
    metrics.prompt_tokens = prompt
    metrics.completion_tokens = completion
    metrics.total_tokens = usage.total_tokens if usage.total_tokens is not None else (
        (prompt + completion) if (prompt is not None and completion is not None) else None
    )
    metrics.tokens = build_token_usage(metrics.prompt_tokens, metrics.completion_tokens, metrics.total_tokens)


def validate_token_usage(usage: CompletionUsage) -> Optional[str]:
    """Describe what is wrong with a server usage report, or return ``None``.

    Counts must be non-negative and, when all three are present,
    ``prompt_tokens + completion_tokens`` must equal ``total_tokens``.
    """
    counts = {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }
    negative = [name for name, value in counts.items() if value is not None and value < 0]
    if negative:
        return "negative " + ", ".join(negative)
    if None not in counts.values() and usage.prompt_tokens + usage.completion_tokens != usage.total_tokens:
        return f"prompt_tokens + completion_tokens != total_tokens ({usage.total_tokens})"
    return None


__all__ = [
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
    "validate_token_usage",
]
