"""Async queue between the Slack connection and the supervisor loop."""

import asyncio

from chatbridge.bus.events import SlackEvent

_CLOSED = object()


class EventBus:
    """
    Single-consumer event queue.

    The transport publishes events from its background task; the supervisor
    drains them one at a time. Closing the bus wakes the consumer with ``None``.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    async def publish(self, event: SlackEvent) -> None:
        """Enqueue an event. Events published after close are dropped."""
        if self._closed:
            return
        await self._queue.put(event)

    def publish_nowait(self, event: SlackEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    async def consume(self) -> SlackEvent | None:
        """Wait for the next event. Returns None once the bus is closed and drained."""
        item = await self._queue.get()
        if item is _CLOSED:
            # Keep the marker so later consumers also see the closure
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def close(self) -> None:
        """Mark the stream as finished."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        """Number of pending events."""
        return self._queue.qsize()
