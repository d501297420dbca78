import typing as t

import pytest

from tako import Loader, start
from tests.mocks.fetch import RecordingFetch


@pytest.fixture(autouse=True)
def test_clear_env(monkeypatch):
    for name in (
        "TAKO_MAX_BATCH_SIZE",
        "TAKO_MAX_BATCH_TIME_MS",
        "TAKO_BUFFER_SIZE",
        "TAKO_MAX_PENDING_PUTS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fetch() -> RecordingFetch:
    """Identity fetch recording its batches."""
    return RecordingFetch()


@pytest.fixture
def make_loader() -> t.Iterator[t.Callable[..., Loader[t.Any]]]:
    """
    Build loaders that are stopped at teardown.

    Returns
    -------
    typing.Callable[..., Loader]
        Factory forwarding to ``tako.start``.
    """
    loaders: list[Loader[t.Any]] = []

    def _make(fetch_fn: t.Callable[..., t.Any], **options: t.Any) -> Loader[t.Any]:
        loader = start(fetch_fn, **options)
        loaders.append(loader)
        return loader

    yield _make
    for loader in loaders:
        loader.stop(timeout=5.0)
