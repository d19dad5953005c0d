import asyncio
import threading

import pytest

from turnstream.queue import InboundEventQueue
from turnstream.types import TextFragment, TurnComplete


def test_try_pop_is_fifo_and_reports_empty() -> None:
    queue = InboundEventQueue()
    queue.push(TextFragment("a"))
    queue.push(TextFragment("b"))
    queue.push(TurnComplete())

    assert len(queue) == 3
    assert queue.try_pop() == TextFragment("a")
    assert queue.try_pop() == TextFragment("b")
    assert queue.try_pop() == TurnComplete()
    assert queue.try_pop() is None


@pytest.mark.asyncio
async def test_get_suspends_until_push() -> None:
    queue = InboundEventQueue()
    waiter = asyncio.create_task(queue.get())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    queue.push(TextFragment("late"))
    assert await asyncio.wait_for(waiter, timeout=1.0) == TextFragment("late")


@pytest.mark.asyncio
async def test_push_from_another_thread_wakes_waiter() -> None:
    queue = InboundEventQueue()
    waiter = asyncio.create_task(queue.get())
    await asyncio.sleep(0.01)

    thread = threading.Thread(target=queue.push, args=(TextFragment("from thread"),))
    thread.start()
    thread.join()

    assert await asyncio.wait_for(waiter, timeout=1.0) == TextFragment("from thread")


@pytest.mark.asyncio
async def test_many_thread_pushes_keep_per_producer_order() -> None:
    queue = InboundEventQueue()

    def _produce(prefix: str) -> None:
        for idx in range(200):
            queue.push(TextFragment(f"{prefix}{idx}"))

    threads = [threading.Thread(target=_produce, args=(prefix,)) for prefix in ("a", "b")]
    for thread in threads:
        thread.start()

    received: list[str] = []
    while len(received) < 400:
        event = await asyncio.wait_for(queue.get(), timeout=1.0)
        received.append(event.text)
    for thread in threads:
        thread.join()

    for prefix in ("a", "b"):
        assert [text for text in received if text.startswith(prefix)] == [f"{prefix}{idx}" for idx in range(200)]


@pytest.mark.asyncio
async def test_close_unblocks_waiter_and_ignores_later_pushes() -> None:
    queue = InboundEventQueue()
    waiter = asyncio.create_task(queue.get())
    await asyncio.sleep(0.01)

    queue.close()
    assert await asyncio.wait_for(waiter, timeout=1.0) is None

    queue.push(TextFragment("ignored"))
    assert len(queue) == 0
    assert queue.closed is True
    assert await queue.get() is None
