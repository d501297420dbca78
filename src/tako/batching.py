"""
Batch collector: groups keys read from the input channel into batches.

A batch is flushed when either:
- it reaches ``max_batch_size`` keys, OR
- ``max_batch_time`` elapses since its first key arrived.
"""

from __future__ import annotations

import time
import typing as t
from dataclasses import dataclass

import structlog

from tako.channel import Channel, ChannelClosed, Empty
from tako.container import Container

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PendingKey:
    """A key waiting to be fetched, paired with the container it resolves."""

    key: t.Any
    container: Container[t.Any]


Batch = list[PendingKey]


class BatchCollector:
    """
    Read pending keys and emit ordered, size and time bounded batches.

    Parameters
    ----------
    source : Channel[PendingKey]
        Input channel fed by the loader.
    sink : Channel[Batch]
        Channel consumed by the dispatcher. Closed once ``source`` is
        closed and drained.
    max_batch_size : int
        Flush as soon as a batch holds this many keys.
    max_batch_time : float
        Flush a non-empty batch this many seconds after its first key.
    """

    def __init__(
        self,
        *,
        source: Channel[PendingKey],
        sink: Channel[Batch],
        max_batch_size: int,
        max_batch_time: float,
    ) -> None:
        self._source = source
        self._sink = sink
        self._max_batch_size = max_batch_size
        self._max_batch_time = max_batch_time

    def run(self) -> None:
        """
        Collect until the source channel is closed, then close the sink.
        """
        buffer: Batch = []
        deadline = 0.0
        try:
            while True:
                if buffer:
                    remaining = deadline - time.monotonic()
                    try:
                        pending = self._source.get(timeout=max(remaining, 0.0))
                    except Empty:
                        log.debug(event="Batch window elapsed", batch_size=len(buffer))
                        self._flush(buffer)
                        buffer = []
                        continue
                else:
                    # Idle: the window only starts with the first key.
                    pending = self._source.get()
                    deadline = time.monotonic() + self._max_batch_time

                buffer.append(pending)
                if len(buffer) >= self._max_batch_size:
                    log.debug(event="Batch size reached", batch_size=len(buffer))
                    self._flush(buffer)
                    buffer = []
        except ChannelClosed:
            if buffer:
                log.debug(event="Flushing final batch on close", batch_size=len(buffer))
                self._flush(buffer)
            self._sink.close()
            log.debug(event="Collector stopped")

    def _flush(self, buffer: Batch) -> None:
        self._sink.put(buffer)
