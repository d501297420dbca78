"""
In-memory key to container cache backing a loader.
"""

from __future__ import annotations

import threading
import typing as t

from tako.container import Container

K = t.TypeVar(name="K", bound=t.Hashable)


class KeyCache(t.Generic[K]):
    """
    Mutex-guarded mapping from key to result container.

    Every mutation goes through one lock so that get-or-create is atomic:
    concurrent callers asking for the same missing key all receive the same
    container, and only one of them is told it created it.
    """

    def __init__(self) -> None:
        self._containers: dict[K, Container[t.Any]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._containers)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._containers

    def get(self, key: K) -> Container[t.Any] | None:
        with self._lock:
            return self._containers.get(key)

    def get_or_create(self, key: K) -> tuple[Container[t.Any], bool]:
        """
        Return the container for ``key``, creating it if missing.

        Parameters
        ----------
        key : K
            Cache key.

        Returns
        -------
        tuple[Container[typing.Any], bool]
            The container and whether this call created it.
        """
        with self._lock:
            container = self._containers.get(key)
            if container is not None:
                return container, False
            container = Container()
            self._containers[key] = container
            return container, True

    def prime(self, key: K, value: t.Any) -> bool:
        """
        Store a resolved container for ``key`` unless one already exists.

        Returns
        -------
        bool
            ``True`` if the value was stored.
        """
        with self._lock:
            if key in self._containers:
                return False
            self._containers[key] = Container.resolved(value)
            return True

    def evict(self, key: K, container: Container[t.Any]) -> bool:
        """
        Remove ``key`` only while it still maps to ``container``.

        A key cleared and reloaded after ``container`` was dispatched keeps
        its newer entry.

        Returns
        -------
        bool
            ``True`` if an entry was removed.
        """
        with self._lock:
            if self._containers.get(key) is not container:
                return False
            del self._containers[key]
            return True

    def discard(self, key: K) -> None:
        with self._lock:
            self._containers.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._containers.clear()
