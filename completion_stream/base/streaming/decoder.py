"""Chunk decoder: raw transport frame -> typed :class:`RawChunk`.

Pure and stateless. A frame is one SSE ``data`` payload, with or without its
``data:`` prefix, as text, bytes or an already-parsed mapping. The ``[DONE]``
sentinel decodes to ``None``, which callers treat as end of stream.
"""
from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ...config.defaults import SSE_DONE_SENTINEL
from ..dto.chunk import RawChunk
from ..errors import DecodeError, UpstreamError

Frame = Union[str, bytes, bytearray, Mapping[str, Any]]

_DATA_PREFIX = "data:"


def _frame_text(frame: Union[str, bytes, bytearray]) -> str:
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = bytes(frame).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(message="frame is not valid UTF-8", raw=exc) from exc
    text = frame.strip()
    if text.startswith(_DATA_PREFIX):
        text = text[len(_DATA_PREFIX):].strip()
    return text


def _upstream_error(payload: Mapping[str, Any]) -> UpstreamError:
    err = payload.get("error")
    if isinstance(err, Mapping):
        message = str(err.get("message") or err.get("type") or "upstream error")
    else:
        message = str(err)
    return UpstreamError(message=message, raw=dict(payload))


def decode_frame(frame: Frame) -> Optional[RawChunk]:
    """Decode one frame into a :class:`RawChunk`.

    Returns ``None`` for the ``[DONE]`` sentinel.

    Raises:
        DecodeError: The frame is not UTF-8, not JSON, not a JSON object, or
            does not match the chunk schema.
        UpstreamError: The payload is an in-band ``{"error": ...}`` object.
    """
    if isinstance(frame, Mapping):
        payload: Any = frame
    else:
        text = _frame_text(frame)
        if text == SSE_DONE_SENTINEL:
            return None
        if not text:
            raise DecodeError(message="empty frame")
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise DecodeError(message=f"frame is not valid JSON: {exc}", raw=text[:500]) from exc

    if not isinstance(payload, Mapping):
        raise DecodeError(message=f"frame must be a JSON object, got {type(payload).__name__}", raw=payload)
    if payload.get("error"):
        raise _upstream_error(payload)
    try:
        return RawChunk.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(message=f"frame does not match chunk schema: {exc.error_count()} error(s)", raw=exc) from exc


__all__ = ["Frame", "decode_frame"]
