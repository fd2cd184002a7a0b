"""Synchronous named-channel event emitter.

Maps each channel to an ordered list of listeners. ``emit`` calls them in
registration order on the caller's stack: no buffering, no replay of past
events to late subscribers, no backpressure. Dispatch walks a copy of the
listener list, so ``off`` (including the implicit removal done by ``once``)
is safe from inside a handler. A listener removed mid-dispatch is skipped if
dispatch has not reached it yet.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .events import EventName, event_key

Handler = Callable[..., Any]


@dataclass(eq=False)
class _Listener:
    handler: Handler
    once: bool = False
    active: bool = True


class EventEmitter:
    """Observer registry with explicit unregistration.

    Exceptions raised by a handler propagate out of :meth:`emit` to whoever
    is driving consumption; listeners after the failing one do not run for
    that occurrence.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[_Listener]] = {}

    def on(self, event: "EventName | str", handler: Handler) -> Handler:
        """Register ``handler`` for ``event``; returns the handler (decorator friendly)."""
        self._listeners.setdefault(event_key(event), []).append(_Listener(handler))
        return handler

    def once(self, event: "EventName | str", handler: Handler) -> Handler:
        """Register ``handler`` for the next occurrence of ``event`` only."""
        self._listeners.setdefault(event_key(event), []).append(_Listener(handler, once=True))
        return handler

    def off(self, event: "EventName | str", handler: Handler) -> bool:
        """Remove the first registration of ``handler`` for ``event``.

        Returns ``True`` when a registration was removed.
        """
        listeners = self._listeners.get(event_key(event))
        if not listeners:
            return False
        for i, listener in enumerate(listeners):
            # bound methods are recreated on each attribute access, so compare by ==
            if listener.handler == handler:
                listener.active = False
                del listeners[i]
                return True
        return False

    def listener_count(self, event: "EventName | str") -> int:
        return len(self._listeners.get(event_key(event), ()))

    def emit(self, event: "EventName | str", *payload: Any) -> None:
        """Deliver ``payload`` to every listener of ``event`` in order."""
        listeners = self._listeners.get(event_key(event))
        if not listeners:
            return
        for listener in list(listeners):
            if not listener.active:
                continue
            if listener.once:
                listener.active = False
                listeners.remove(listener)
            listener.handler(*payload)


__all__ = ["EventEmitter", "Handler"]
