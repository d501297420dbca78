"""
Write-once result container shared between the dispatcher and callers.
"""

from __future__ import annotations

import asyncio
import threading
import typing as t
from concurrent.futures import Future

T = t.TypeVar(name="T")


class Container(t.Generic[T]):
    """
    Single-assignment slot holding a value or an exception.

    The dispatcher resolves a container exactly once; any number of callers,
    on any thread, may read it. Reads block until resolution and never block
    again afterwards. Containers are also awaitable from asyncio code.
    """

    __slots__ = ("_future",)

    def __init__(self) -> None:
        self._future: Future[T] = Future()

    @classmethod
    def resolved(cls, value: T) -> "Container[T]":
        """
        Build a container already holding ``value``.

        Parameters
        ----------
        value : T
            Value to store.

        Returns
        -------
        Container[T]
            Resolved container.
        """
        container: Container[T] = cls()
        container.set_result(value)
        return container

    def set_result(self, value: T) -> None:
        """
        Resolve the container with a value.

        Raises
        ------
        concurrent.futures.InvalidStateError
            If the container is already resolved.
        """
        self._future.set_result(value)

    def set_exception(self, error: BaseException) -> None:
        """
        Resolve the container with an exception.

        Raises
        ------
        concurrent.futures.InvalidStateError
            If the container is already resolved.
        """
        self._future.set_exception(error)

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> T:
        """
        Block until resolved and return the value.

        Parameters
        ----------
        timeout : float | None, optional
            Seconds to wait. ``None`` waits forever.

        Returns
        -------
        T
            Stored value.

        Raises
        ------
        TimeoutError
            If ``timeout`` elapses first.
        Exception
            The stored exception, when resolved with one.
        """
        return self._future.result(timeout=timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """
        Block until resolved and return the stored exception, if any.
        """
        return self._future.exception(timeout=timeout)

    def add_done_callback(self, fn: t.Callable[["Container[T]"], t.Any]) -> None:
        """
        Call ``fn(self)`` once resolved, immediately if already resolved.
        """
        self._future.add_done_callback(lambda _: fn(self))

    def __await__(self) -> t.Generator[t.Any, None, T]:
        return asyncio.wrap_future(self._future).__await__()

    def __repr__(self) -> str:
        if not self._future.done():
            return f"<{self.__class__.__name__} pending>"
        error = self._future.exception()
        if error is not None:
            return f"<{self.__class__.__name__} failed: {error!r}>"
        return f"<{self.__class__.__name__} resolved: {self._future.result()!r}>"


def gather(containers: t.Sequence[Container[t.Any]]) -> Container[list[t.Any]]:
    """
    Combine containers into one resolving to the list of their values.

    Parameters
    ----------
    containers : Sequence[Container[typing.Any]]
        Members, in output order. The same container may appear more than once.

    Returns
    -------
    Container[list[typing.Any]]
        Resolves once every member is resolved. A member that failed
        contributes its exception instance at its own position.
    """
    aggregate: Container[list[t.Any]] = Container()
    if not containers:
        aggregate.set_result([])
        return aggregate

    remaining = len(containers)
    # Callbacks run on whichever thread resolves a member.
    lock = threading.Lock()

    def _on_member_done(_: Container[t.Any]) -> None:
        nonlocal remaining
        with lock:
            remaining -= 1
            if remaining:
                return
        aggregate.set_result([_value_or_error(member) for member in containers])

    for container in containers:
        container.add_done_callback(_on_member_done)
    return aggregate


def _value_or_error(container: Container[t.Any]) -> t.Any:
    error = container.exception()
    if error is not None:
        return error
    return container.result()
