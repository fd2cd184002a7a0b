"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, weakly held children, raise_if_cancelled behavior and a parent
token aborting a stream built on a child token.
"""
from __future__ import annotations

import asyncio
import gc

import pytest

from completion_stream import ChatCompletionStream
from completion_stream.base.cancellation import CancellationToken, CancelledError
from completion_stream.base.errors import StreamAbortedError


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    assert parent.cancel(reason="stop") is True  # nosec B101
    assert parent.cancel(reason="ignored") is False  # nosec B101

    assert parent.cancelled is True and parent.reason == "stop"  # nosec B101
    assert child1.cancelled is True and child1.reason == "stop"  # nosec B101
    assert child2.cancelled is True and child2.reason == "stop"  # nosec B101


def test_child_created_after_parent_cancel_starts_cancelled():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled is True and late_child.reason == "done"  # nosec B101


def test_finished_children_are_not_kept_alive_by_the_parent():
    parent = CancellationToken()
    kept = parent.child()
    parent.child()
    gc.collect()
    assert len(parent._children) == 1  # nosec B101
    parent.cancel()
    assert kept.cancelled and kept.reason == "stream aborted"  # nosec B101


def test_raise_if_cancelled_uses_default_reason():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel()
    with pytest.raises(CancelledError, match="stream aborted"):
        token.raise_if_cancelled()


def test_parent_token_aborts_stream(build, config):
    request_scope = CancellationToken()
    stream = ChatCompletionStream(
        build.source(build.frames([build.chunk(build.choice(content="a", finish_reason="stop"))])),
        config=config,
        cancellation_token=request_scope.child(),
    )
    request_scope.cancel("request cancelled")
    with pytest.raises(StreamAbortedError, match="request cancelled"):
        asyncio.run(stream.final_chat_completion())
