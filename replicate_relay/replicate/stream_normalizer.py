"""Replicate SSE framing -> OpenAI chat chunks.

The backend streams lines such as::

    event: output
    id: 1690212292:0
    data: Hello

    event: output
    data:
    data:

    event: done
    data: {}

:class:`StreamNormalizer` is a line-at-a-time state machine with a pull
interface: :meth:`StreamNormalizer.feed` takes one line and returns zero or
more chunks, independent of how the transport delivers lines.

States: ``idle`` (no event header), ``in_event`` (accumulating data lines of
one event) and ``closed`` (after ``event: done``; further lines are ignored).

Paragraph breaks arrive as empty ``data:`` lines inside ``output`` events.
``N`` consecutive empty markers stand for ``N - 1`` newlines and are emitted
as one chunk right before the next text payload, or when the event that holds
them ends, or before the terminal chunk, whichever comes first.

``event: done`` flushes pending markers, reads final usage through the
injected ``usage_fetcher`` and emits the terminal chunk (``finish_reason =
"stop"``), which is always the last chunk.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Union

from ..base.models import ChatCompletionChunk, Usage
from .assembler import ChunkFactory

OUTPUT_EVENT = "output"
DONE_EVENT = "done"

Line = Union[str, bytes]


class StreamState(str, Enum):
    IDLE = "idle"
    IN_EVENT = "in_event"
    CLOSED = "closed"


@dataclass
class StreamEvent:
    """The SSE event currently being read.

    ``pending_blanks`` counts paragraph markers not yet flushed.
    """

    event_type: str
    pending_blanks: int = 0


def _field_value(line: str, name: str) -> Optional[str]:
    """Return the value of an SSE ``name:`` field line, or None.

    One space after the colon is part of the framing and is removed; any
    further whitespace belongs to the payload.
    """
    prefix = name + ":"
    if not line.startswith(prefix):
        return None
    value = line[len(prefix):]
    return value[1:] if value.startswith(" ") else value


class StreamNormalizer:
    """Turns one prediction's SSE lines into ordered chat chunks.

    Parameters:
        chunks: Per-session chunk factory (stable id/created/model).
        usage_fetcher: Called once on ``event: done``; returns final usage.
    """

    def __init__(self, chunks: ChunkFactory, usage_fetcher: Callable[[], Usage]) -> None:
        self._chunks = chunks
        self._usage_fetcher = usage_fetcher
        self._state = StreamState.IDLE
        self._event: Optional[StreamEvent] = None
        self.usage: Optional[Usage] = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is StreamState.CLOSED

    @property
    def event_type(self) -> Optional[str]:
        return self._event.event_type if self._event else None

    def feed(self, raw: Line) -> List[ChatCompletionChunk]:
        """Advance the state machine by one line."""
        if self._state is StreamState.CLOSED:
            return []
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        line = line.rstrip("\r\n")

        event_type = _field_value(line, "event")
        if event_type is not None:
            event_type = event_type.strip()
            if event_type == DONE_EVENT:
                return self._terminate()
            out = self._flush()
            self._event = StreamEvent(event_type=event_type)
            self._state = StreamState.IN_EVENT
            return out

        if line == "":
            if self._state is not StreamState.IN_EVENT:
                return []
            out = self._flush()
            self._event = None
            self._state = StreamState.IDLE
            return out

        payload = _field_value(line, "data")
        if payload is None or self._event is None or self._event.event_type != OUTPUT_EVENT:
            return []
        if payload.strip() == "":
            self._event.pending_blanks += 1
            return []
        out = self._flush()
        out.append(self._chunks.text(payload))
        return out

    def finish(self) -> List[ChatCompletionChunk]:
        """Handle end of input without ``event: done``: flush and go idle.

        No terminal chunk is produced; the caller decides how to report a
        stream that ended early.
        """
        if self._state is StreamState.CLOSED:
            return []
        out = self._flush()
        self._event = None
        self._state = StreamState.IDLE
        return out

    def _flush(self) -> List[ChatCompletionChunk]:
        if self._event is None or self._event.pending_blanks == 0:
            return []
        newlines = self._event.pending_blanks - 1
        self._event.pending_blanks = 0
        return [self._chunks.text("\n" * newlines)] if newlines > 0 else []

    def _terminate(self) -> List[ChatCompletionChunk]:
        out = self._flush()
        self._event = None
        self.usage = self._usage_fetcher()
        out.append(self._chunks.terminal(self.usage))
        self._state = StreamState.CLOSED
        return out


def iter_stream_chunks(lines: Iterable[Line], normalizer: StreamNormalizer) -> Iterator[ChatCompletionChunk]:
    """Drive ``normalizer`` over ``lines`` until ``done`` or end of input.

    ``lines`` is closed when iteration stops for any reason (terminal event,
    end of input, error, or the consumer closing this generator), which
    releases the underlying connection.
    """
    try:
        for line in lines:
            yield from normalizer.feed(line)
            if normalizer.closed:
                return
        yield from normalizer.finish()
    finally:
        close = getattr(lines, "close", None)
        if callable(close):
            close()


__all__ = [
    "StreamNormalizer",
    "StreamEvent",
    "StreamState",
    "iter_stream_chunks",
    "OUTPUT_EVENT",
    "DONE_EVENT",
]
