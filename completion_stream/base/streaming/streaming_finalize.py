"""Terminal-state bookkeeping for a stream.

Closes out metrics and emits the one consolidated lifecycle log line
(``stream.end`` on success, ``stream.error`` on failure).
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from ..errors import StreamError
from ..logging import LogContext, normalized_log_event
from .streaming_metrics import StreamMetrics


def finalize_stream(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    metrics: StreamMetrics,
    t0: Optional[float],
    error: Optional[StreamError] = None,
) -> None:
    """Record the total duration on ``metrics`` and log the terminal event."""
    if t0 is not None:
        metrics.total_duration_ms = (time.perf_counter() - t0) * 1000.0

    if metrics.tokens is not None:
        tokens_payload = metrics.tokens
    else:
        tokens_payload = None

    normalized_log_event(
        logger,
        "stream.end" if error is None else "stream.error",
        ctx,
        phase="finalize",
        emitted=metrics.content_deltas > 0,
        tokens=tokens_payload,
        error_code=error.code.value if error is not None else None,
        level=logging.INFO if error is None else logging.WARNING,
        chunks=metrics.chunks,
        content_deltas=metrics.content_deltas,
        time_to_first_chunk_ms=metrics.time_to_first_chunk_ms,
        total_duration_ms=metrics.total_duration_ms,
        error=error.message if error is not None else None,
    )


__all__ = ["finalize_stream"]
