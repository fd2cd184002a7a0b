"""
Pydantic DTOs for chat-completion stream chunks as they arrive on the wire.

Purpose
-------
These models give the decoder a schema to validate each frame against. A
frame either validates into a :class:`RawChunk` or is rejected as a
``DecodeError``; downstream code never sees half-typed dictionaries.

Design
------
- Unknown fields are ignored so newer server fields do not break decoding.
- Every field a server may omit is optional; only ``choices[].index`` is
  required since accumulation is keyed on it.
- Models are frozen: chunks are transient and never mutated after decoding.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class TopLogProb(_WireModel):
    """One alternative token considered at a position."""

    token: str
    logprob: float = Field(..., le=0.0)
    bytes: Optional[List[int]] = None


class LogProbEntry(_WireModel):
    """Log-probability record for one emitted token.

    Attributes:
        token: The token text.
        logprob: Natural-log likelihood (always <= 0).
        bytes: UTF-8 byte values of the token, or ``None`` when not provided.
        top_logprobs: Most likely alternatives at this position (may be empty).
    """

    token: str
    logprob: float = Field(..., le=0.0)
    bytes: Optional[List[int]] = None
    top_logprobs: List[TopLogProb] = Field(default_factory=list)


class ChoiceLogprobs(_WireModel):
    content: Optional[List[LogProbEntry]] = None
    refusal: Optional[List[LogProbEntry]] = None


class FunctionDelta(_WireModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class ToolCallDelta(_WireModel):
    """Fragment of one tool call, keyed by its position in the tool-call list."""

    index: int = Field(..., ge=0)
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[FunctionDelta] = None


class AudioDelta(_WireModel):
    """Fragment of an audio response.

    ``data`` is a base64 fragment and ``transcript`` a text fragment; both are
    concatenated across the stream. ``expires_at`` is a unix timestamp.
    """

    id: Optional[str] = None
    data: Optional[str] = None
    transcript: Optional[str] = None
    expires_at: Optional[int] = None


class ChoiceDelta(_WireModel):
    role: Optional[str] = None
    content: Optional[str] = None
    refusal: Optional[str] = None
    tool_calls: Optional[List[ToolCallDelta]] = None
    audio: Optional[AudioDelta] = None


class ChunkChoice(_WireModel):
    index: int = Field(..., ge=0)
    delta: ChoiceDelta = Field(default_factory=ChoiceDelta)
    finish_reason: Optional[str] = None
    logprobs: Optional[ChoiceLogprobs] = None


class CompletionUsage(_WireModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class RawChunk(_WireModel):
    """One decoded ``chat.completion.chunk`` frame.

    ``choices`` may be empty: servers send a trailing usage-only chunk when
    usage reporting is requested.
    """

    id: Optional[str] = None
    object: Optional[str] = None
    created: Optional[int] = None
    model: Optional[str] = None
    system_fingerprint: Optional[str] = None
    service_tier: Optional[str] = None
    choices: List[ChunkChoice] = Field(default_factory=list)
    usage: Optional[CompletionUsage] = None


__all__ = [
    "TopLogProb",
    "LogProbEntry",
    "ChoiceLogprobs",
    "FunctionDelta",
    "ToolCallDelta",
    "AudioDelta",
    "ChoiceDelta",
    "ChunkChoice",
    "CompletionUsage",
    "RawChunk",
]
