"""In-process transport for tests and offline sessions."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from turnstream.errors import TransportError
from turnstream.transport import EventSink
from turnstream.types import Event, TextFragment, ToolResult, TurnComplete


@dataclass(frozen=True)
class Outbound:
    """One message sent by the session."""

    kind: str  # text|binary|tool_results
    payload: Any
    mime_type: str | None = None


Responder = Callable[[Outbound], Iterable[Event] | None]


class MemoryTransport:
    """Records outbound sends and delivers inbound events to the bound sink.

    An optional responder is called for every send and may return events to
    deliver in reply, which lets tests script the remote peer.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.sent: list[Outbound] = []
        self.closed = False
        self._sink: EventSink | None = None
        self._responder = responder

    def bind(self, sink: EventSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> EventSink:
        if self._sink is None:
            raise TransportError("transport is not bound to a session")
        return self._sink

    def deliver(self, *events: Event) -> None:
        for event in events:
            self.sink.on_event(event)

    def fail(self, cause: BaseException | str) -> None:
        self.sink.on_error(cause)

    def disconnect(self, reason: str = "") -> None:
        self.sink.on_closed(reason)

    def send_text(self, content: str) -> None:
        self._record(Outbound(kind="text", payload=content))

    def send_binary(self, data: bytes, mime_type: str) -> None:
        self._record(Outbound(kind="binary", payload=bytes(data), mime_type=mime_type))

    def send_tool_results(self, results: Sequence[ToolResult]) -> None:
        self._record(Outbound(kind="tool_results", payload=tuple(results)))

    def close(self) -> None:
        self.closed = True

    def sent_of(self, kind: str) -> list[Outbound]:
        return [item for item in self.sent if item.kind == kind]

    def _record(self, outbound: Outbound) -> None:
        if self.closed:
            raise TransportError("transport is closed")
        self.sent.append(outbound)
        if self._responder is None:
            return
        reply = self._responder(outbound)
        if reply is not None:
            self.deliver(*reply)


def scripted(*replies: Sequence[Event]) -> Responder:
    """Build a responder that answers successive sends with the given event batches."""
    pending = list(replies)

    def _respond(outbound: Outbound) -> Iterable[Event] | None:
        if not pending:
            return None
        return pending.pop(0)

    return _respond


def echo_responder(outbound: Outbound) -> Iterable[Event] | None:
    """Answer every text turn with its own content, as one complete turn."""
    if outbound.kind != "text":
        return None
    return [TextFragment(text=f"echo: {outbound.payload}"), TurnComplete()]
