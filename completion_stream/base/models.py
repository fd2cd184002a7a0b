"""Snapshot models public surface.

Concrete dataclasses live under ``models_parts``; import them from here.
"""

from .models_parts import (
    FunctionSnapshot,
    ToolCallSnapshot,
    AudioSnapshot,
    MessageSnapshot,
    ParsedMessage,
    ChoiceLogprobsSnapshot,
    ChoiceSnapshot,
    CompletionSnapshot,
    FinalCompletion,
)

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
