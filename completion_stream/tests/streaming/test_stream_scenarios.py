"""End-to-end stream scenarios: structured answer, logprobs, refusal, audio, empty."""
from __future__ import annotations

import asyncio
from typing import Literal

import pytest
from pydantic import BaseModel

from completion_stream import (
    ChatCompletionStream,
    EmptyStreamError,
    PydanticResponseFormat,
)

REFUSAL = "I'm very sorry, but I can't assist with that."


class Location(BaseModel):
    city: str
    units: Literal["c", "f"] = "f"


def _structured_chunks(build):
    pieces = ['{"', "city", '":"', "San", " Francisco", '","', "units", '":"', "c", '"}']
    chunks = [build.chunk(build.choice(role="assistant", content="", refusal=None))]
    chunks += [build.chunk(build.choice(content=p)) for p in pieces]
    chunks.append(build.chunk(build.choice(finish_reason="stop")))
    return chunks


def _refusal_chunks(build):
    tokens = ["I'm", " very", " sorry", ",", " but", " I", " can't", " assist", " with", " that", "."]
    chunks = [
        build.chunk(
            build.choice(role="assistant", content=None, refusal="", logprobs={"content": None, "refusal": []})
        )
    ]
    chunks += [
        build.chunk(build.choice(refusal=t, logprobs={"content": None, "refusal": [build.logprob(t)]}))
        for t in tokens
    ]
    chunks.append(build.chunk(build.choice(finish_reason="stop", logprobs={"content": None, "refusal": None})))
    return chunks


def test_structured_answer_is_parsed_once_finished(build, config):
    stream = ChatCompletionStream(
        build.source(build.frames(_structured_chunks(build))),
        response_format=PydanticResponseFormat(Location, "location"),
        config=config,
    )
    final = asyncio.run(stream.final_chat_completion())
    assert final.choices[0].to_dict() == {  # nosec B101
        "finish_reason": "stop",
        "index": 0,
        "logprobs": None,
        "message": {
            "content": '{"city":"San Francisco","units":"c"}',
            "parsed": {"city": "San Francisco", "units": "c"},
            "refusal": None,
            "role": "assistant",
            "tool_calls": [],
        },
    }
    assert final.choices[0].message.parsed == Location(city="San Francisco", units="c")  # nosec B101


def test_parsed_is_never_attempted_on_partial_content(build, config):
    stream = ChatCompletionStream(
        build.source(build.frames(_structured_chunks(build))),
        response_format=PydanticResponseFormat(Location),
        config=config,
    )
    partials = []
    stream.on("chunk", lambda _c, snap: partials.append(snap.choices[0].message))

    async def _run():
        async for _ in stream:
            pass

    asyncio.run(_run())
    assert all(getattr(m, "parsed", None) is None for m in partials[:-1])  # nosec B101
    assert partials[-1].parsed is not None  # nosec B101


def test_content_logprobs_done_matches_final_list(build, config):
    tokens = ['{"', "city", '":"', "SF", '"}']
    chunks = [build.chunk(build.choice(role="assistant", content="", logprobs={"content": [], "refusal": None}))]
    chunks += [build.chunk(build.choice(content=t, logprobs={"content": [build.logprob(t)]})) for t in tokens]
    chunks.append(build.chunk(build.choice(finish_reason="stop", logprobs={"content": None, "refusal": None})))
    stream = ChatCompletionStream(build.source(build.frames(chunks)), config=config)
    captured = []
    stream.on("logprobs.content.done", lambda e: captured.append(e.content))
    final = asyncio.run(stream.final_chat_completion())
    assert len(captured) == 1  # nosec B101
    assert captured[0] == final.choices[0].logprobs.content  # nosec B101
    assert len(captured[0]) == len(tokens)  # nosec B101
    assert final.choices[0].logprobs.refusal is None  # nosec B101


def test_refusal_with_logprobs(build, config):
    stream = ChatCompletionStream(
        build.source(build.frames(_refusal_chunks(build))),
        response_format=PydanticResponseFormat(Location),
        config=config,
    )
    refusal_done = []
    stream.on("logprobs.refusal.done", lambda e: refusal_done.append(e.refusal))
    stream.on("content.done", lambda e: pytest.fail("content.done must not fire for a refusal"))
    final = asyncio.run(stream.final_chat_completion())
    message = final.choices[0].message
    assert message.content is None  # nosec B101
    assert message.refusal == REFUSAL  # nosec B101
    assert message.parsed is None  # nosec B101
    assert len(refusal_done) == 1  # nosec B101
    assert "".join(e.token for e in refusal_done[0]) == REFUSAL  # nosec B101
    assert final.choices[0].logprobs.refusal == refusal_done[0]  # nosec B101
    assert final.choices[0].logprobs.content is None  # nosec B101


def test_audio_response_keeps_last_expires_at(build, config):
    chunks = [
        build.chunk(build.choice(role="assistant", content=None, refusal=None)),
        build.chunk(build.choice(audio={"id": "audio_67", "transcript": "Hello", "data": "UklG"})),
        build.chunk(build.choice(audio={"transcript": " there", "data": "RiQ"})),
        build.chunk(build.choice(audio={"transcript": "!", "data": "AAA", "expires_at": 1704805200})),
        build.chunk(build.choice(finish_reason="stop")),
    ]
    stream = ChatCompletionStream(build.source(build.frames(chunks)), config=config)
    message = asyncio.run(stream.final_message())
    assert message.content is None  # nosec B101
    assert message.refusal is None  # nosec B101
    assert message.audio.expires_at == 1704805200  # nosec B101
    assert message.audio.transcript == "Hello there!"  # nosec B101
    assert message.audio.data == "UklGRiQAAA"  # nosec B101
    assert message.to_dict()["audio"]["id"] == "audio_67"  # nosec B101


def test_empty_stream_fails_final_with_empty_stream_error(build, config):
    stream = ChatCompletionStream(build.source(build.frames([])), config=config)
    seen = []
    stream.on("error", lambda e: seen.append(("error", e)))
    stream.on("end", lambda: seen.append(("end", None)))
    with pytest.raises(EmptyStreamError):
        asyncio.run(stream.final_chat_completion())
    assert seen == [("end", None)]  # nosec B101


def test_empty_stream_without_done_sentinel(build, config):
    stream = ChatCompletionStream(build.source([]), config=config)

    async def _run():
        chunks = [c async for c in stream]
        with pytest.raises(EmptyStreamError) as first:
            await stream.final_chat_completion()
        with pytest.raises(EmptyStreamError) as second:
            await stream.final_chat_completion()
        return chunks, first.value, second.value

    chunks, first, second = asyncio.run(_run())
    assert chunks == []  # nosec B101
    assert first is second  # nosec B101
