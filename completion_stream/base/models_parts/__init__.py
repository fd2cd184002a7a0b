"""Snapshot model implementations re-exported by ``completion_stream.base.models``."""

from .message import (
    FunctionSnapshot,
    ToolCallSnapshot,
    AudioSnapshot,
    MessageSnapshot,
    ParsedMessage,
)
from .choice_snapshot import ChoiceLogprobsSnapshot, ChoiceSnapshot
from .completion import CompletionSnapshot, FinalCompletion

__all__ = [
    "FunctionSnapshot",
    "ToolCallSnapshot",
    "AudioSnapshot",
    "MessageSnapshot",
    "ParsedMessage",
    "ChoiceLogprobsSnapshot",
    "ChoiceSnapshot",
    "CompletionSnapshot",
    "FinalCompletion",
]
