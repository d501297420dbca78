"""
Loader façade: owns the cache, the input channel and the background pipeline.
"""

from __future__ import annotations

import threading
import typing as t

import structlog

from tako.batching import Batch, BatchCollector, PendingKey
from tako.cache import KeyCache
from tako.channel import Channel
from tako.container import Container, gather
from tako.dispatch import Dispatcher, FetchFn
from tako.logging import logging_context
from tako.options import LoaderOptions

log = structlog.get_logger(__name__)

K = t.TypeVar(name="K", bound=t.Hashable)


class Loader(t.Generic[K]):
    """
    Batch and cache individual key lookups against a bulk ``fetch_fn``.

    Callers on any thread ask for single keys; keys arriving close together
    are coalesced into one ``fetch_fn`` call, and every key is fetched at
    most once until it is cleared from the cache.

    Parameters
    ----------
    fetch_fn : FetchFn
        Takes a list of keys and returns one result per key, in order.
    options : LoaderOptions
        Batching bounds and buffer sizes.

    Notes
    -----
    A loader starts its pipeline on construction and must be stopped, either
    with ``stop`` or by using it as a context manager.
    """

    def __init__(self, fetch_fn: FetchFn, options: LoaderOptions) -> None:
        self._options = options
        self._cache: KeyCache[K] = KeyCache()
        self._keys: Channel[PendingKey] = Channel(
            capacity=options.buffer_size,
            max_pending_puts=options.max_pending_puts,
        )
        batches: Channel[Batch] = Channel(capacity=1)
        collector = BatchCollector(
            source=self._keys,
            sink=batches,
            max_batch_size=options.max_batch_size,
            max_batch_time=options.max_batch_time_seconds,
        )
        dispatcher = Dispatcher(
            source=batches,
            keys=self._keys,
            fetch_fn=fetch_fn,
            cache=self._cache,
        )
        self._threads = [
            threading.Thread(
                target=self._run_stage,
                kwargs={"stage": collector.run},
                name=f"{options.name}-collector",
                daemon=True,
            ),
            threading.Thread(
                target=self._run_stage,
                kwargs={"stage": dispatcher.run},
                name=f"{options.name}-dispatcher",
                daemon=True,
            ),
        ]
        for thread in self._threads:
            thread.start()

        log.debug(
            event="Started loader",
            loader=options.name,
            max_batch_size=options.max_batch_size,
            max_batch_time_ms=options.max_batch_time_ms,
            buffer_size=options.buffer_size,
        )

    def _run_stage(self, *, stage: t.Callable[[], None]) -> None:
        with logging_context(loader=self._options.name):
            stage()

    @property
    def options(self) -> LoaderOptions:
        return self._options

    @property
    def closed(self) -> bool:
        return self._keys.closed

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __repr__(self) -> str:
        state = "closed" if self.closed else "running"
        return f"<{self.__class__.__name__} {self._options.name!r} {state} cached={len(self)}>"

    def load_one(self, key: K) -> Container[t.Any]:
        """
        Return the container for ``key``, enqueueing a fetch if it is new.

        Parameters
        ----------
        key : K
            Key to load.

        Returns
        -------
        Container[typing.Any]
            Container resolving to the fetched value.

        Raises
        ------
        LoaderClosedError
            If ``key`` is not cached and the loader is stopped.
        BufferOverflowError
            If the input buffer is full and too many callers already wait on it.
        """
        container, created = self._cache.get_or_create(key)
        if not created:
            return container

        try:
            self._keys.put(PendingKey(key=key, container=container))
        except Exception as e:
            # Other callers may already hold this container.
            self._cache.evict(key, container)
            container.set_exception(e)
            raise
        return container

    def load_many(self, keys: t.Iterable[K]) -> Container[list[t.Any]]:
        """
        Load several keys, preserving their order.

        Parameters
        ----------
        keys : Iterable[K]
            Keys to load. Duplicates are allowed.

        Returns
        -------
        Container[list[typing.Any]]
            Container resolving to one result per key, in input order.
        """
        return gather([self.load_one(key) for key in keys])

    def clear_one(self, key: K) -> "Loader[K]":
        """
        Drop ``key`` from the cache. An in-flight fetch still resolves its container.
        """
        self._cache.discard(key)
        return self

    def clear_all(self) -> "Loader[K]":
        """
        Drop every key from the cache.
        """
        self._cache.clear()
        return self

    def prime(self, key: K, value: t.Any) -> "Loader[K]":
        """
        Cache ``value`` for ``key`` without fetching. No-op if ``key`` is cached.
        """
        self._cache.prime(key, value)
        return self

    def stop(self, *, wait: bool = True, timeout: float | None = None) -> None:
        """
        Close the loader; buffered keys are flushed as a final batch.

        Parameters
        ----------
        wait : bool, optional
            Join the pipeline threads before returning.
        timeout : float | None, optional
            Seconds to wait for each pipeline thread when ``wait`` is set.
        """
        if self._keys.close():
            log.debug(event="Stopping loader", loader=self._options.name)
        # From inside the pipeline, joining either stage can deadlock.
        if not wait or threading.current_thread() in self._threads:
            return
        for thread in self._threads:
            thread.join(timeout=timeout)

    def __enter__(self) -> "Loader[K]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: t.Any,
    ) -> None:
        self.stop()
