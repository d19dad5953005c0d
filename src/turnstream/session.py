"""Session façade tying transport, inbound queue, aggregator and tools together."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType

from loguru import logger

from turnstream.aggregator import TurnAggregator
from turnstream.errors import PendingToolCallsError, SessionClosedError
from turnstream.queue import InboundEventQueue
from turnstream.tools import ToolRegistry
from turnstream.transport import Transport
from turnstream.types import (
    Closed,
    Event,
    MediaFragment,
    Modality,
    ToolCall,
    ToolResult,
    TransportFailure,
    Turn,
    TurnEnd,
)


class SessionState(StrEnum):
    IDLE = "idle"
    SENT = "sent"
    DRAINING = "draining"
    TOOLS_PENDING = "tools_pending"
    COMPLETE = "complete"
    CLOSED = "closed"


@dataclass(frozen=True)
class ExchangeResult:
    """Accumulated projection of one user turn and everything it triggered."""

    text: str
    media: tuple[MediaFragment, ...]
    tool_calls: tuple[ToolCall, ...]
    tool_results: tuple[ToolResult, ...]
    end: TurnEnd
    turns: int
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.end is TurnEnd.COMPLETE

    def media_bytes(self, mime_prefix: str = "") -> bytes:
        return b"".join(fragment.data for fragment in self.media if fragment.mime_type.startswith(mime_prefix))


class LiveSession:
    """Client side of one streaming conversation.

    The transport pushes inbound events through the ``EventSink`` methods;
    the caller sends user turns and drains turns with ``await_turn`` or lets
    ``run_exchange`` service tool calls until the peer completes its turn.
    """

    def __init__(
        self,
        transport: Transport,
        registry: ToolRegistry | None = None,
        *,
        modalities: Iterable[Modality] | None = None,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:8]
        self.registry = registry if registry is not None else ToolRegistry()
        self._transport = transport
        self._queue = InboundEventQueue()
        self._aggregator = TurnAggregator(self._queue, modalities=modalities)
        self._pending: dict[str, ToolCall] = {}
        self._state = SessionState.IDLE
        self._closed = False
        self._logger = logger.bind(session=self.session_id)
        transport.bind(self)

    async def __aenter__(self) -> LiveSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_calls(self) -> list[ToolCall]:
        return list(self._pending.values())

    # Inbound side, called by the transport.

    def on_event(self, event: Event) -> None:
        self._queue.push(event)

    def on_error(self, cause: BaseException | str) -> None:
        self._logger.error("session.transport.error cause={}", cause)
        self._queue.push(TransportFailure(cause))

    def on_closed(self, reason: str) -> None:
        self._logger.info("session.transport.closed reason={}", reason or "-")
        self._queue.push(Closed(reason))

    # Outbound side.

    def send_user_turn(self, content: str) -> None:
        self._ensure_can_send()
        self._transport.send_text(content)
        self._set_state(SessionState.SENT)

    def send_media(self, data: bytes, mime_type: str) -> None:
        self._ensure_can_send()
        self._transport.send_binary(data, mime_type)
        self._set_state(SessionState.SENT)

    def send_tool_results(self, results: Sequence[ToolResult]) -> list[ToolResult]:
        """Send one batch of results; results for unknown call ids are discarded."""
        if self._closed:
            self._logger.debug("session.results.dropped count={} reason=closed", len(results))
            return []

        matched: list[ToolResult] = []
        for result in results:
            if self._pending.pop(result.id, None) is None:
                self._logger.warning(
                    "protocol.violation reason=unmatched_result id={} name={}", result.id, result.name
                )
                continue
            matched.append(result)

        if matched:
            self._transport.send_tool_results(matched)
        if not self._pending and self._state is SessionState.TOOLS_PENDING:
            self._set_state(SessionState.DRAINING)
        return matched

    async def await_turn(self) -> Turn:
        """Wait for the next sealed turn. Returns an empty closed turn after ``close``."""
        if self._closed:
            return Turn(events=(), end=TurnEnd.CLOSED, modalities=self._aggregator.modalities)
        if self._pending:
            raise PendingToolCallsError(list(self._pending))

        self._set_state(SessionState.DRAINING)
        turn = await self._aggregator.await_turn()
        if turn.end is TurnEnd.TOOL_CALLS:
            for call in turn.tool_calls:
                if call.id in self._pending:
                    self._logger.warning(
                        "protocol.violation reason=duplicate_call_id id={} name={}", call.id, call.name
                    )
                self._pending[call.id] = call
            if self._pending:
                self._set_state(SessionState.TOOLS_PENDING)
        elif turn.end is TurnEnd.COMPLETE:
            self._set_state(SessionState.COMPLETE)
        else:
            self._set_state(SessionState.CLOSED)
        return turn

    async def run_exchange(self, content: str) -> ExchangeResult:
        """Send a user turn and service tool calls until the peer finishes."""
        self.send_user_turn(content)
        return await self.collect_exchange()

    async def collect_exchange(self) -> ExchangeResult:
        """Drain turns, dispatching tool calls in arrival order, until a non-tool turn."""
        text_parts: list[str] = []
        media: list[MediaFragment] = []
        calls: list[ToolCall] = []
        results: list[ToolResult] = []
        turns = 0
        while True:
            turn = await self.await_turn()
            turns += 1
            text_parts.append(turn.text)
            media.extend(turn.media)
            if turn.end is not TurnEnd.TOOL_CALLS:
                break

            batch: list[ToolResult] = []
            for call in turn.tool_calls:
                if self._closed:
                    break
                calls.append(call)
                batch.append(self.registry.dispatch(call))
            if self._closed:
                self._logger.debug("session.results.dropped count={} reason=closed", len(batch))
                break
            results.extend(self.send_tool_results(batch))

        return ExchangeResult(
            text="".join(text_parts),
            media=tuple(media),
            tool_calls=tuple(calls),
            tool_results=tuple(results),
            end=turn.end if not self._closed else TurnEnd.CLOSED,
            turns=turns,
            error=turn.error,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._pending:
            self._logger.debug("session.close pending_calls={}", len(self._pending))
        self._pending.clear()
        self._queue.close()
        self._set_state(SessionState.CLOSED)
        self._transport.close()

    def _ensure_can_send(self) -> None:
        if self._closed:
            raise SessionClosedError("session is closed")
        if self._pending:
            raise PendingToolCallsError(list(self._pending))

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        self._logger.debug("session.state from={} to={}", self._state, state)
        self._state = state
