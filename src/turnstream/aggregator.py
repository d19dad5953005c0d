"""Fold queued session events into sealed turns."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from turnstream.queue import InboundEventQueue
from turnstream.types import (
    ALL_MODALITIES,
    Closed,
    Event,
    Modality,
    ToolCallRequest,
    TransportFailure,
    Turn,
    TurnComplete,
    TurnEnd,
    event_kind,
)


def termination_of(event: Event) -> TurnEnd | None:
    """Return the reason this event ends a drain step, if it does."""
    if isinstance(event, TurnComplete):
        return TurnEnd.COMPLETE
    if isinstance(event, ToolCallRequest):
        return TurnEnd.TOOL_CALLS
    if isinstance(event, TransportFailure):
        return TurnEnd.ERROR
    if isinstance(event, Closed):
        return TurnEnd.CLOSED
    return None


class TurnAggregator:
    """Drains an inbound queue one turn at a time.

    A tool-call request seals the turn immediately: the peer will not continue
    until results are sent, so the caller dispatches and calls ``await_turn``
    again until a turn ends with ``TurnEnd.COMPLETE``.
    """

    def __init__(self, queue: InboundEventQueue, *, modalities: Iterable[Modality] | None = None) -> None:
        self._queue = queue
        self._modalities = frozenset(modalities) if modalities is not None else ALL_MODALITIES

    @property
    def modalities(self) -> frozenset[Modality]:
        return self._modalities

    async def await_turn(self) -> Turn:
        events: list[Event] = []
        while True:
            event = await self._queue.get()
            if event is None:
                logger.debug("turn.sealed end=closed events={} queue_closed=true", len(events))
                return Turn(events=tuple(events), end=TurnEnd.CLOSED, modalities=self._modalities)

            events.append(event)
            end = termination_of(event)
            if end is None:
                continue
            logger.debug("turn.sealed end={} events={} last={}", end, len(events), event_kind(event))
            return Turn(events=tuple(events), end=end, modalities=self._modalities)
