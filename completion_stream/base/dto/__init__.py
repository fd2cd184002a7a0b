"""Wire-level DTOs for decoded stream chunks."""

from .chunk import (
    TopLogProb,
    LogProbEntry,
    ChoiceLogprobs,
    FunctionDelta,
    ToolCallDelta,
    AudioDelta,
    ChoiceDelta,
    ChunkChoice,
    CompletionUsage,
    RawChunk,
)

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
