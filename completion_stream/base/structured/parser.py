"""Soft structured-output parsing for finished choices.

Pure helpers: decode the completed ``content`` (or tool-call ``arguments``)
as JSON and hand the value to a response format. Every failure path returns
``None``; structured output never raises into the stream. Callers invoke
these only from a choice's finish step, so partial JSON is never parsed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from ..logging import get_logger, log_event
from .response_format import ResponseFormat

_logger = get_logger("completion_stream.structured")


def _decode_and_validate(text: str, response_format: Optional[ResponseFormat], *, what: str, index: Optional[int]) -> Any:
    try:
        value = json.loads(text)
    except ValueError as exc:
        log_event(
            _logger,
            "structured.parse_failed",
            level=logging.DEBUG,
            what=what,
            index=index,
            reason="invalid_json",
            detail=str(exc)[:200],
        )
        return None
    if response_format is None:
        return value
    try:
        return response_format.validate(value)
    except Exception as exc:  # validators are caller-supplied; any failure is soft
        log_event(
            _logger,
            "structured.parse_failed",
            level=logging.DEBUG,
            what=what,
            index=index,
            schema=getattr(response_format, "schema_name", None),
            reason="schema_mismatch",
            detail=str(exc)[:200],
        )
        return None


def parse_content(
    content: Optional[str],
    refusal: Optional[str],
    response_format: Optional[ResponseFormat],
    *,
    index: Optional[int] = None,
) -> Any:
    """Return the structured value for a finished message, or ``None``.

    ``None`` when no format was supplied, when the message is a refusal, when
    there is no content, or when the content is not valid JSON for the schema.
    """
    if response_format is None or refusal is not None or content is None:
        return None
    return _decode_and_validate(content, response_format, what="content", index=index)


def parse_tool_arguments(
    name: Optional[str],
    arguments: str,
    tool_parsers: Optional[Mapping[str, ResponseFormat]],
    *,
    index: Optional[int] = None,
) -> Any:
    """Return the decoded arguments of a finished tool call, or ``None``.

    When ``tool_parsers`` has an entry for ``name`` the arguments are
    validated with it; otherwise plain JSON decoding is used.
    """
    if not arguments:
        return None
    parser = tool_parsers.get(name) if (tool_parsers and name) else None
    return _decode_and_validate(arguments, parser, what=f"tool:{name}", index=index)


__all__ = ["parse_content", "parse_tool_arguments"]
