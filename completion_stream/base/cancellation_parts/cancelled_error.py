"""Cancellation error type.

Raised by :meth:`CancellationToken.raise_if_cancelled`. The stream facade maps
it to :class:`StreamAbortedError` so subscribers see the normal error taxonomy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cooperative cancellation request.

    Distinct from ``asyncio.CancelledError``: this one is raised by our own
    polling, never by the event loop.
    """

__all__ = ["CancelledError"]
