"""Inbound event queue shared by the transport and the turn aggregator."""

from __future__ import annotations

import asyncio
import threading
from collections import deque

from loguru import logger

from turnstream.types import Event, event_kind


class InboundEventQueue:
    """Unbounded FIFO of session events.

    ``push`` may be called from the event loop or from a transport thread.
    ``get`` suspends the draining coroutine until an event arrives or the
    queue is closed, without blocking the pushing side.
    """

    def __init__(self) -> None:
        self._items: deque[Event] = deque()
        self._lock = threading.Lock()
        self._wakeup = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: Event) -> None:
        with self._lock:
            if self._closed:
                logger.debug("queue.push.after_close kind={}", event_kind(event))
                return
            self._items.append(event)
        self._notify()

    def try_pop(self) -> Event | None:
        with self._lock:
            if self._items:
                return self._items.popleft()
            return None

    async def get(self) -> Event | None:
        """Return the next event, or None once the queue is closed and drained."""
        self._loop = asyncio.get_running_loop()
        while True:
            with self._lock:
                if self._items:
                    return self._items.popleft()
                if self._closed:
                    return None
                self._wakeup.clear()
            await self._wakeup.wait()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            dropped = len(self._items)
            self._items.clear()
        if dropped:
            logger.debug("queue.close dropped={}", dropped)
        self._notify()

    def _notify(self) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._wakeup.set()
            return
        try:
            loop.call_soon_threadsafe(self._wakeup.set)
        except RuntimeError:
            logger.debug("queue.notify.loop_closed")
