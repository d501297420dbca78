"""
Tako-specific runtime exceptions.
"""

from __future__ import annotations


class TakoError(Exception):
    """
    Base class for errors raised by the loader itself.

    Notes
    -----
    Errors raised by a user ``fetch_fn`` are propagated to containers as-is
    and do not derive from this class.
    """


class LoaderClosedError(TakoError, RuntimeError):
    """
    Signal that a key was enqueued on a loader that has been stopped.
    """


class BufferOverflowError(TakoError, RuntimeError):
    """
    Signal that too many callers are blocked on a full input buffer.

    Parameters
    ----------
    buffer_size : int
        Capacity of the input buffer.
    max_pending_puts : int
        Maximum number of callers allowed to wait on a full buffer.
    """

    def __init__(self, *, buffer_size: int, max_pending_puts: int) -> None:
        self.buffer_size = buffer_size
        self.max_pending_puts = max_pending_puts
        super().__init__(
            f"No more than {max_pending_puts} pending puts are allowed on a "
            f"buffer of size {buffer_size}"
        )


class BatchLengthMismatchError(TakoError, ValueError):
    """
    Signal that ``fetch_fn`` returned a result of the wrong length.

    Parameters
    ----------
    expected : int
        Number of keys in the batch.
    actual : int
        Number of results returned.
    """

    def __init__(self, *, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"fetch_fn returned {actual} result(s) for a batch of {expected} key(s)")
