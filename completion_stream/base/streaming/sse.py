"""Server-sent-event line decoding.

Turns the line iterator a transport exposes (``response.aiter_lines()`` and
the like) into the ``data`` payloads the chunk decoder consumes. Follows the
SSE field rules: ``data`` lines of one event are joined with ``\\n``, a blank
line dispatches the event, lines starting with ``:`` are comments, and
``event``/``id``/``retry`` are recorded.
"""
from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Iterable, List, Optional, Union

from ..errors import UpstreamError

Line = Union[str, bytes]


@dataclass
class ServerSentEvent:
    event: Optional[str] = None
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


@dataclass
class SSEDecoder:
    """Incremental, line-oriented SSE parser."""

    _event: Optional[str] = None
    _data: List[str] = field(default_factory=list)
    _last_event_id: Optional[str] = None
    _retry: Optional[int] = None

    def decode(self, line: Line) -> Optional[ServerSentEvent]:
        """Feed one line; return an event when the line completes one."""
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        line = line.rstrip("\r\n")

        if not line:
            if not self._event and not self._data and self._retry is None:
                return None
            sse = ServerSentEvent(
                event=self._event,
                data="\n".join(self._data),
                id=self._last_event_id,
                retry=self._retry,
            )
            self._event = None
            self._data = []
            self._retry = None
            return sse

        if line.startswith(":"):
            return None

        fieldname, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if fieldname == "event":
            self._event = value
        elif fieldname == "data":
            self._data.append(value)
        elif fieldname == "id":
            if "\0" not in value:
                self._last_event_id = value
        elif fieldname == "retry":
            with suppress(ValueError):
                self._retry = int(value)
        return None

    def flush(self) -> Optional[ServerSentEvent]:
        """Dispatch a trailing event not followed by a blank line."""
        return self.decode("")


def _event_data(sse: ServerSentEvent) -> Optional[str]:
    if sse.event == "error":
        raise UpstreamError(message=sse.data or "server sent an error event", raw=sse.data)
    if not sse.data:
        return None
    return sse.data


async def aiter_sse_data(lines: Union[AsyncIterable[Line], Iterable[Line]]) -> AsyncIterator[str]:
    """Yield the ``data`` payload of every event in ``lines``.

    Raises:
        UpstreamError: An ``event: error`` frame was received.
    """
    decoder = SSEDecoder()
    if hasattr(lines, "__aiter__"):
        async for line in lines:  # type: ignore[union-attr]
            sse = decoder.decode(line)
            if sse is not None and (data := _event_data(sse)) is not None:
                yield data
    else:
        for line in lines:  # type: ignore[union-attr]
            sse = decoder.decode(line)
            if sse is not None and (data := _event_data(sse)) is not None:
                yield data
    tail = decoder.flush()
    if tail is not None and (data := _event_data(tail)) is not None:
        yield data


__all__ = ["ServerSentEvent", "SSEDecoder", "aiter_sse_data"]
