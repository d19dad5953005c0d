"""Contracts between a session and its streaming transport."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from turnstream.types import Event, ToolResult


class EventSink(Protocol):
    """Inbound side of a transport. Implemented by ``LiveSession``."""

    def on_event(self, event: Event) -> None: ...

    def on_error(self, cause: BaseException | str) -> None: ...

    def on_closed(self, reason: str) -> None: ...


class Transport(Protocol):
    """Outbound side of a bidirectional stream.

    Sends are fire-and-forget: implementations queue or write without making
    the caller wait, and rely on their own flow control.
    """

    def bind(self, sink: EventSink) -> None: ...

    def send_text(self, content: str) -> None: ...

    def send_binary(self, data: bytes, mime_type: str) -> None: ...

    def send_tool_results(self, results: Sequence[ToolResult]) -> None: ...

    def close(self) -> None: ...
