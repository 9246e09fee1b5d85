"""Bounded, closable channel between pipeline threads.

A Channel connects the partition scheduler to its workers and each row
producer to its sink. Senders block while the channel is full; receivers
iterate until the channel is closed and drained. A receiver that stops
early detaches, and once every receiver has detached the channel closes
itself so a blocked sender fails instead of waiting forever.
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, Iterator, Optional, TypeVar

from tabunload.core.config import config
from tabunload.exceptions import ChannelClosedError

T = TypeVar("T")


class Channel(Generic[T]):
    """Message channel with bounded capacity and close semantics.

    Examples:
        >>> rows: Channel[list[str]] = Channel(capacity=1)
        >>> # producer thread
        >>> rows.send(["1", '"a"'])
        >>> rows.close()
        >>> # consumer thread
        >>> for row in rows:
        ...     handle(row)
    """

    def __init__(
        self,
        capacity: int = 1,
        receivers: int = 1,
        poll_interval: Optional[float] = None,
    ):
        """Initialize channel.

        Args:
            capacity: Maximum number of items in flight
            receivers: Number of consumers expected to iterate the channel
            poll_interval: Seconds between closure checks while blocked
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._queue: queue.Queue[T] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._receivers = receivers
        self._poll_interval = poll_interval or config.poll_interval

    def send(self, item: T) -> None:
        """Block until the item is accepted.

        Raises:
            ChannelClosedError: If the channel is closed before the item is accepted
        """
        while True:
            if self._closed.is_set():
                raise ChannelClosedError("send on closed channel")
            try:
                self._queue.put(item, timeout=self._poll_interval)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        """Close the channel. Items already sent remain receivable."""
        self._closed.set()

    def detach(self) -> None:
        """Unregister one receiver; the last one to leave closes the channel."""
        with self._lock:
            self._receivers -= 1
            if self._receivers <= 0:
                self._closed.set()

    @property
    def closed(self) -> bool:
        """Whether the channel has been closed."""
        return self._closed.is_set()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                if self._closed.is_set() and self._queue.empty():
                    return
                continue
            yield item

    def drain(self) -> int:
        """Discard pending items without blocking; returns how many were dropped."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1
