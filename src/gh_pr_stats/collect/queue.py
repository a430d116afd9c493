"""Page task queue with per-consumer end-of-queue sentinels."""

import asyncio
import enum
from typing import Generic, TypeVar

T = TypeVar("T")


class EndOfQueue(enum.Enum):
    """Marker popped by a consumer once the producer has closed the queue."""

    TOKEN = "end-of-queue"


END_OF_QUEUE = EndOfQueue.TOKEN


class QueueClosedError(Exception):
    """Raised when pushing onto a queue that has been closed."""


class TaskQueue(Generic[T]):
    """Unbounded FIFO shared by one producer and many async consumers.

    The producer pushes work items, then calls ``close(consumers)`` which
    appends one END_OF_QUEUE marker per consumer. Each consumer pops until it
    receives a marker, so every real item is drained before any consumer
    stops, even if consumers were started before the producer finished.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[T | EndOfQueue] = asyncio.Queue()
        self._closed = False
        self.pushed = 0

    def push(self, item: T) -> None:
        if self._closed:
            raise QueueClosedError("Cannot push onto a closed queue")
        self._queue.put_nowait(item)
        self.pushed += 1

    def close(self, consumers: int) -> None:
        """Signal end of work to ``consumers`` consumers.

        Raises:
            QueueClosedError: If the queue is already closed.
            ValueError: If consumers is less than 1.
        """
        if self._closed:
            raise QueueClosedError("Queue already closed")
        if consumers < 1:
            raise ValueError("consumers must be at least 1")
        for _ in range(consumers):
            self._queue.put_nowait(END_OF_QUEUE)
        self._closed = True

    async def pop(self) -> T | EndOfQueue:
        """Wait for the next item, or END_OF_QUEUE once the backlog is drained."""
        return await self._queue.get()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self._queue.qsize()
