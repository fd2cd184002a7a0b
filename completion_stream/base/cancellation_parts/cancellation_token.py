"""Abort signal shared between a stream and whoever may abandon it.

A :class:`ChatCompletionStream` polls its token before and after every pull
from the source; ``stream.abort()`` and a cancelled parent scope both land
here. ``cancel`` may be called from a handler, another task or another thread.
"""

from __future__ import annotations

import weakref
from threading import Lock
from typing import Optional

from .cancelled_error import CancelledError

DEFAULT_REASON = "stream aborted"


class CancellationToken:
    """Cooperative abort flag with parent to child propagation.

    A request-scoped parent hands :meth:`child` tokens to the streams it
    starts. Children are held weakly, so a long-lived scope does not keep
    every finished stream's token alive.
    """

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._lock = Lock()
        self._reason: Optional[str] = None
        self._cancelled = False
        self._children: "weakref.WeakSet[CancellationToken]" = weakref.WeakSet()
        if parent is not None:
            parent._adopt(self)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        """Reason given by the first :meth:`cancel` call."""
        return self._reason

    def child(self) -> "CancellationToken":
        """Token cancelled together with this one (immediately, if already cancelled)."""
        return CancellationToken(parent=self)

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Flag the token and its children; returns ``False`` if already cancelled."""
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason or DEFAULT_REASON
            children = list(self._children)
        for token in children:
            token.cancel(self._reason)
        return True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancelledError(self._reason or DEFAULT_REASON)

    def _adopt(self, token: "CancellationToken") -> None:
        with self._lock:
            self._children.add(token)
            reason = self._reason if self._cancelled else None
        if reason is not None:
            token.cancel(reason)


__all__ = ["CancellationToken", "DEFAULT_REASON"]
