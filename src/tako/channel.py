"""
Bounded, closable FIFO used to hand work between threads.
"""

from __future__ import annotations

import collections
import threading
import time
import typing as t
from queue import Empty

from tako.exceptions import BufferOverflowError, LoaderClosedError

T = t.TypeVar(name="T")

__all__ = ["Channel", "ChannelClosed", "Empty"]


class ChannelClosed(Exception):
    """Raised by ``Channel.get`` once the channel is closed and drained."""


class Channel(t.Generic[T]):
    """
    Thread-safe FIFO with a capacity and a cap on blocked producers.

    Parameters
    ----------
    capacity : int
        Number of items the channel buffers before ``put`` blocks.
    max_pending_puts : int | None, optional
        Maximum number of producers allowed to wait on a full channel.
        ``None`` lets any number wait.

    Notes
    -----
    Items already buffered when the channel is closed remain available to
    ``get``. Producers blocked on a full channel when it closes are woken and
    fail with ``LoaderClosedError``.
    """

    def __init__(self, *, capacity: int, max_pending_puts: int | None = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._max_pending_puts = max_pending_puts
        self._items: collections.deque[T] = collections.deque()
        self._pending_puts = 0
        self._closed = False
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(lock=self._mutex)
        self._not_full = threading.Condition(lock=self._mutex)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._mutex:
            return len(self._items)

    def put(self, item: T) -> None:
        """
        Append ``item``, blocking while the channel is full.

        Raises
        ------
        LoaderClosedError
            If the channel is closed before the item is accepted.
        BufferOverflowError
            If the channel is full and ``max_pending_puts`` producers are
            already waiting.
        """
        with self._not_full:
            if self._closed:
                raise LoaderClosedError("Cannot enqueue on a closed loader")
            if len(self._items) >= self._capacity:
                if (
                    self._max_pending_puts is not None
                    and self._pending_puts >= self._max_pending_puts
                ):
                    raise BufferOverflowError(
                        buffer_size=self._capacity,
                        max_pending_puts=self._max_pending_puts,
                    )
                self._pending_puts += 1
                try:
                    while len(self._items) >= self._capacity and not self._closed:
                        self._not_full.wait()
                finally:
                    self._pending_puts -= 1
                if self._closed:
                    raise LoaderClosedError("Loader closed while waiting to enqueue")
            self._items.append(item)
            self._not_empty.notify()

    def get(self, timeout: float | None = None) -> T:
        """
        Remove and return the oldest item.

        Parameters
        ----------
        timeout : float | None, optional
            Seconds to wait for an item. ``None`` waits forever.

        Returns
        -------
        T
            Oldest buffered item.

        Raises
        ------
        queue.Empty
            If ``timeout`` elapses with no item available.
        ChannelClosed
            If the channel is closed and no items remain.
        """
        with self._not_empty:
            if timeout is None:
                while not self._items and not self._closed:
                    self._not_empty.wait()
            else:
                deadline = time.monotonic() + timeout
                while not self._items and not self._closed:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise Empty
                    self._not_empty.wait(timeout=remaining)
            if not self._items:
                raise ChannelClosed
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> bool:
        """
        Close the channel.

        Returns
        -------
        bool
            ``True`` if this call closed the channel, ``False`` if it was
            already closed.
        """
        with self._mutex:
            if self._closed:
                return False
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()
            return True
