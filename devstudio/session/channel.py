"""Single-consumer FIFO channels between a session and its subscriber."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class SessionChannel(Generic[T]):
    """Unbounded, order-preserving message channel.

    ``publish`` never blocks, so producers can post from synchronous
    callbacks. Exactly one subscriber task is expected to consume, either by
    iterating the channel or with ``drain``.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, message: T) -> None:
        if self._closed:
            return
        self._queue.put_nowait(message)

    def close(self) -> None:
        """Stop accepting messages; iteration ends after queued ones are read."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def drain(self) -> list[T]:
        """Return every queued message without waiting."""
        drained: list[T] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return drained
            if item is _CLOSED:
                self._queue.put_nowait(_CLOSED)
                return drained
            drained.append(item)  # type: ignore[arg-type]

    async def receive(self) -> T | None:
        """Wait for the next message; ``None`` once the channel is closed."""
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            item = await self.receive()
            if item is None:
                return
            yield item


async def consume(channel: SessionChannel[T], handler: Callable[[T], Awaitable[None] | None]) -> None:
    """Feed every message to ``handler`` until the channel closes."""
    async for message in channel:
        result = handler(message)
        if asyncio.iscoroutine(result):
            await result


__all__ = ["SessionChannel", "consume"]
