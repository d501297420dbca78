"""
Tests for Container and gather in tako.container.
"""

import threading
from concurrent.futures import InvalidStateError

import pytest

from tako.container import Container, gather


def test_result_blocks_until_resolved():
    """Test that a reader on another thread is woken by the write."""
    container: Container[str] = Container()
    seen: list[str] = []

    reader = threading.Thread(target=lambda: seen.append(container.result(timeout=5.0)))
    reader.start()
    assert not container.done()

    container.set_result("value")
    reader.join(timeout=5.0)
    assert seen == ["value"]


def test_result_times_out_when_pending():
    """Test that a bounded read raises TimeoutError."""
    with pytest.raises(TimeoutError):
        Container().result(timeout=0.01)


def test_single_assignment():
    """Test that a second write is rejected."""
    container = Container.resolved(1)
    with pytest.raises(InvalidStateError):
        container.set_result(2)
    with pytest.raises(InvalidStateError):
        container.set_exception(RuntimeError("late"))
    assert container.result() == 1


def test_exception_is_raised_on_every_read():
    """Test that a failed container raises for every reader."""
    container: Container[int] = Container()
    error = RuntimeError("ouch")
    container.set_exception(error)

    for _ in range(2):
        with pytest.raises(RuntimeError) as exc_info:
            container.result()
        assert exc_info.value is error
    assert container.exception() is error


def test_repr():
    """Test the container states in repr."""
    pending: Container[int] = Container()
    assert repr(pending) == "<Container pending>"
    assert repr(Container.resolved("a")) == "<Container resolved: 'a'>"
    pending.set_exception(ValueError("x"))
    assert repr(pending) == "<Container failed: ValueError('x')>"


def test_add_done_callback_receives_container():
    """Test that callbacks get the container, even when already resolved."""
    container = Container.resolved(3)
    received: list[Container[int]] = []
    container.add_done_callback(received.append)
    assert received == [container]


def test_gather_preserves_order():
    """Test that gather resolves in member order regardless of completion order."""
    first: Container[str] = Container()
    second: Container[str] = Container()
    aggregate = gather([first, second, first])
    assert not aggregate.done()

    second.set_result("b")
    assert not aggregate.done()
    first.set_result("a")
    assert aggregate.result(timeout=1.0) == ["a", "b", "a"]


def test_gather_keeps_failures_in_position():
    """Test that failed members contribute their exception at their own index."""
    ok = Container.resolved("a")
    late_error = RuntimeError("second")
    early_error = RuntimeError("first")
    failing_late: Container[str] = Container()
    failing_early: Container[str] = Container()
    aggregate = gather([ok, failing_early, failing_late])

    failing_late.set_exception(late_error)
    failing_early.set_exception(early_error)
    result = aggregate.result(timeout=1.0)
    assert result[0] == "a"
    assert result[1] is early_error
    assert result[2] is late_error


def test_gather_empty():
    """Test that gathering nothing resolves immediately."""
    assert gather([]).result() == []
