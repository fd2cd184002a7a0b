"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` lets a consumer abandon a stream from outside the
consuming task; ``CancelledError`` is what the token raises when polled.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
