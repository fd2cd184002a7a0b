"""Shared fixtures for the completion_stream test suite.

Provides chunk/frame builders, an async frame source helper and log capture
on the package's base logger (which does not propagate to root).
"""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, List, Optional

import pytest

from completion_stream.base.logging import BASE_LOGGER_NAME, LOG_LEVEL_ENV, get_logger
from completion_stream.config import StreamConfig

MODEL = "gpt-4o-2024-08-06"


def make_choice(
    index: int = 0,
    *,
    role: Optional[str] = None,
    content: Optional[str] = None,
    refusal: Optional[str] = None,
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    audio: Optional[Dict[str, Any]] = None,
    finish_reason: Optional[str] = None,
    logprobs: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    delta = {
        k: v
        for k, v in {
            "role": role,
            "content": content,
            "refusal": refusal,
            "tool_calls": tool_calls,
            "audio": audio,
        }.items()
        if v is not None
    }
    out: Dict[str, Any] = {"index": index, "delta": delta, "finish_reason": finish_reason}
    if logprobs is not None:
        out["logprobs"] = logprobs
    return out


def make_chunk(
    *choices: Dict[str, Any],
    id: str = "chatcmpl-A",
    model: str = MODEL,
    created: int = 1727346142,
    usage: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "system_fingerprint": "fp_5050236cbd",
        "choices": list(choices),
    }
    if usage is not None:
        out["usage"] = usage
    return out


def logprob(token: str, value: float = -0.1) -> Dict[str, Any]:
    return {
        "token": token,
        "logprob": value,
        "bytes": list(token.encode("utf-8")),
        "top_logprobs": [],
    }


def text_frames(chunks: Iterable[Dict[str, Any]], *, done: bool = True) -> List[str]:
    """Serialize chunks as SSE ``data`` payloads, optionally closed by ``[DONE]``."""
    frames = [json.dumps(c) for c in chunks]
    if done:
        frames.append("[DONE]")
    return frames


def sse_lines(chunks: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Render chunks as raw SSE lines, the way ``aiter_lines()`` yields them."""
    for c in chunks:
        yield f"data: {json.dumps(c)}"
        yield ""
    yield "data: [DONE]"
    yield ""


async def async_source(items: Iterable[Any], *, fail_with: Optional[BaseException] = None) -> AsyncIterator[Any]:
    for item in items:
        yield item
    if fail_with is not None:
        raise fail_with


@pytest.fixture()
def build() -> SimpleNamespace:
    """Chunk builders: ``build.chunk``, ``build.choice``, ``build.logprob``..."""
    return SimpleNamespace(
        chunk=make_chunk,
        choice=make_choice,
        logprob=logprob,
        frames=text_frames,
        sse_lines=sse_lines,
        source=async_source,
    )


@pytest.fixture()
def config() -> StreamConfig:
    """Deterministic config independent of the caller's environment."""
    return StreamConfig(strict_finish=False, log_level=None, json_logs=True, trace_enabled=False)


@pytest.fixture()
def log_capture(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[logging.LogRecord]]:
    """Collect every record reaching the base logger, DEBUG included."""
    level = logging.getLogger(BASE_LOGGER_NAME).level or logging.INFO
    monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
    records: List[logging.LogRecord] = []
    handler = logging.Handler(level=logging.DEBUG)
    handler.emit = lambda record: records.append(record)  # type: ignore
    base = get_logger(BASE_LOGGER_NAME)
    base.addHandler(handler)
    try:
        yield records
    finally:
        base.removeHandler(handler)
        base.setLevel(level)


def _payloads(records: Iterable[logging.LogRecord]) -> List[Dict[str, Any]]:
    out = []
    for r in records:
        try:
            payload = json.loads(r.getMessage())
        except ValueError:
            continue
        if isinstance(payload, dict):
            out.append(payload)
    return out


@pytest.fixture()
def logged_events(log_capture):
    """Return a callable giving the decoded payloads of one log event name."""

    def _events(name: str) -> List[Dict[str, Any]]:
        return [p for p in _payloads(log_capture) if p.get("event") == name]

    return _events
