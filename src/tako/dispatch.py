"""
Dispatcher: runs ``fetch_fn`` once per batch and resolves containers.
"""

from __future__ import annotations

import typing as t

import structlog

from tako.batching import Batch, PendingKey
from tako.cache import KeyCache
from tako.channel import Channel, ChannelClosed
from tako.exceptions import BatchLengthMismatchError, LoaderClosedError

log = structlog.get_logger(__name__)

FetchFn = t.Callable[[list[t.Any]], t.Iterable[t.Any]]


class Dispatcher:
    """
    Consume batches sequentially and fan results back out.

    Parameters
    ----------
    source : Channel[Batch]
        Batches emitted by the collector.
    keys : Channel[PendingKey]
        Input channel of the loader, closed if the dispatcher aborts.
    fetch_fn : FetchFn
        Bulk lookup taking a list of keys and returning one result per key,
        in the same order.
    cache : KeyCache
        Cache to evict from when a whole batch fails.

    Notes
    -----
    A result element that represents a failure (for example an exception
    instance returned rather than raised) is stored like any other value.
    Only a failure of the ``fetch_fn`` call itself is propagated as an
    exception and evicted from the cache.
    """

    def __init__(
        self,
        *,
        source: Channel[Batch],
        keys: Channel[PendingKey],
        fetch_fn: FetchFn,
        cache: KeyCache[t.Any],
    ) -> None:
        self._source = source
        self._keys = keys
        self._fetch_fn = fetch_fn
        self._cache = cache

    def run(self) -> None:
        """
        Dispatch batches until the collector closes the channel.

        Notes
        -----
        If ``fetch_fn`` raises a ``BaseException`` (e.g. ``KeyboardInterrupt``)
        the loader is closed, every pending container fails with
        ``LoaderClosedError`` and the exception is re-raised.
        """
        batch: Batch | None = None
        try:
            while True:
                try:
                    batch = self._source.get()
                except ChannelClosed:
                    log.debug(event="Dispatcher stopped")
                    return
                self.dispatch(batch=batch)
                batch = None
        except BaseException as e:
            log.error(event="Dispatcher aborted", error=repr(e))
            self._abort(batch=batch, cause=e)
            raise

    def dispatch(self, *, batch: Batch) -> None:
        """
        Fetch one batch and resolve each of its containers.

        Parameters
        ----------
        batch : Batch
            Pending keys in arrival order.
        """
        keys = [pending.key for pending in batch]
        log.debug(event="Processing batch", batch_size=len(keys))
        try:
            results = list(self._fetch_fn(keys))
            if len(results) != len(keys):
                raise BatchLengthMismatchError(expected=len(keys), actual=len(results))
        except Exception as e:
            log.error(
                event="Batch fetch failed",
                batch_size=len(keys),
                error=str(object=e),
            )
            self._fail_batch(batch=batch, error=e)
            return

        for pending, result in zip(batch, results):
            pending.container.set_result(result)
        log.debug(event="Batch resolved", batch_size=len(keys))

    def _fail_batch(self, *, batch: Batch, error: Exception) -> None:
        """
        Propagate ``error`` to every container and evict their keys.

        Parameters
        ----------
        batch : Batch
            Batch whose fetch failed.
        error : Exception
            Exception to attach to each container.
        """
        for pending in batch:
            self._cache.evict(pending.key, pending.container)
            if not pending.container.done():
                pending.container.set_exception(error)

    def _abort(self, *, batch: Batch | None, cause: BaseException) -> None:
        """
        Close the loader and fail the current batch and every queued key.

        Parameters
        ----------
        batch : Batch | None
            Batch being dispatched when ``cause`` was raised, if any.
        cause : BaseException
            Exception that stopped the dispatcher.
        """
        error = LoaderClosedError(f"Dispatcher stopped by {cause!r}")
        error.__cause__ = cause
        if batch is not None:
            self._fail_batch(batch=batch, error=error)
        # The collector flushes what is left, then closes the source.
        self._keys.close()
        while True:
            try:
                self._fail_batch(batch=self._source.get(), error=error)
            except ChannelClosed:
                return
