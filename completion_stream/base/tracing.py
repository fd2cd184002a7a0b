"""Tracing facade over the OpenTelemetry API.

The accumulator only annotates spans; it never installs a tracer provider.
Without an SDK configured by the host application, ``opentelemetry-api``
hands out non-recording spans, so these calls cost next to nothing.

A stream is consumed across many awaits (and possibly across two facades), so
its span is started explicitly and ended by the stream when it reaches a
terminal state rather than being bound to a ``with`` block.
"""
from __future__ import annotations

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

TRACER_NAME = "completion_stream"


def get_tracer(service_name: str = TRACER_NAME) -> trace.Tracer:
    """Return the tracer used for stream spans."""
    return trace.get_tracer(service_name)


def start_span(name: str, *, enabled: bool = True, service_name: str = TRACER_NAME) -> trace.Span:
    """Start and return a detached span (caller must ``end()`` it).

    When ``enabled`` is false the shared invalid span is returned; every span
    method on it is a no-op, so call sites need no branching.
    """
    if not enabled:
        return trace.INVALID_SPAN
    return get_tracer(service_name).start_span(name)


def end_span(span: trace.Span, error: BaseException | None = None) -> None:
    """Record the outcome on ``span`` and end it."""
    if error is not None:
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
    span.end()


__all__ = ["get_tracer", "start_span", "end_span", "TRACER_NAME"]
