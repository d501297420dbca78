"""
Functional entry points.
Exposes ``start`` to build a running ``Loader`` and module-level helpers
mirroring its methods, so a loader can be driven without method calls.
"""

import typing as t

from tako.container import Container
from tako.dispatch import FetchFn
from tako.loader import Loader
from tako.options import LoaderOptions, resolve_options


def start(
    fetch_fn: FetchFn,
    options: LoaderOptions | t.Mapping[str, t.Any] | None = None,
    **overrides: t.Any,
) -> Loader[t.Any]:
    """
    Create and start a loader.

    Parameters
    ----------
    fetch_fn : FetchFn
        Takes a list of keys and returns a list of results of the same
        length, corresponding to those keys.
    options : LoaderOptions | Mapping[str, typing.Any] | None, optional
        Loader options. See ``LoaderOptions``.
    **overrides : typing.Any
        Individual option fields, e.g. ``max_batch_size=2``.

    Returns
    -------
    Loader[typing.Any]
        Running loader. Use it as a context manager or call ``stop``.

    Notes
    -----
    >>> with start(fetch_fn=lambda ids: [f"hello, {i}" for i in ids]) as loader:
    ...     loader.load_many(["alice", "bob"]).result()
    ['hello, alice', 'hello, bob']
    """
    return Loader(fetch_fn=fetch_fn, options=resolve_options(options=options, **overrides))


def stop(loader: Loader[t.Any], *, wait: bool = True, timeout: float | None = None) -> None:
    """
    Close ``loader``. Calling it more than once is a no-op.
    """
    loader.stop(wait=wait, timeout=timeout)


def load_one(loader: Loader[t.Any], key: t.Any) -> Container[t.Any]:
    """
    Load ``key``, returning a container for its value.
    """
    return loader.load_one(key)


def load_many(loader: Loader[t.Any], keys: t.Iterable[t.Any]) -> Container[list[t.Any]]:
    """
    Load ``keys``, returning a container for the list of their values.
    """
    return loader.load_many(keys)


def clear_one(loader: Loader[t.Any], key: t.Any) -> Loader[t.Any]:
    """
    Drop ``key`` from the cache of ``loader``. Returns the loader.
    """
    return loader.clear_one(key)


def clear_all(loader: Loader[t.Any]) -> Loader[t.Any]:
    """
    Drop every key from the cache of ``loader``. Returns the loader.
    """
    return loader.clear_all()


def prime(loader: Loader[t.Any], key: t.Any, value: t.Any) -> Loader[t.Any]:
    """
    Cache ``value`` for ``key`` unless already cached. Returns the loader.
    """
    return loader.prime(key, value)
