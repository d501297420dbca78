"""
Tests for the Channel class in tako.channel.
"""

import threading

import pytest

from tako.channel import Channel, ChannelClosed, Empty
from tako.exceptions import BufferOverflowError, LoaderClosedError
from tests.mocks.fetch import wait_until


def test_fifo_order():
    """Test that items come out in insertion order."""
    channel: Channel[int] = Channel(capacity=10)
    for n in range(5):
        channel.put(n)
    assert len(channel) == 5
    assert [channel.get() for _ in range(5)] == [0, 1, 2, 3, 4]


def test_get_times_out():
    """Test that an empty get with a timeout raises Empty."""
    channel: Channel[int] = Channel(capacity=1)
    with pytest.raises(Empty):
        channel.get(timeout=0.01)


def test_close_drains_then_raises():
    """Test that buffered items survive close."""
    channel: Channel[str] = Channel(capacity=2)
    channel.put("a")
    assert channel.close() is True
    assert channel.close() is False

    assert channel.get() == "a"
    with pytest.raises(ChannelClosed):
        channel.get()
    with pytest.raises(ChannelClosed):
        channel.get(timeout=0.01)


def test_close_wakes_blocked_getter():
    """Test that a waiting consumer sees the close."""
    channel: Channel[int] = Channel(capacity=1)
    outcome: list[type[BaseException]] = []

    def _consume() -> None:
        try:
            channel.get()
        except ChannelClosed as e:
            outcome.append(type(e))

    consumer = threading.Thread(target=_consume)
    consumer.start()
    channel.close()
    consumer.join(timeout=5.0)
    assert outcome == [ChannelClosed]


def test_put_after_close():
    """Test that producers are rejected once closed."""
    channel: Channel[int] = Channel(capacity=1)
    channel.close()
    with pytest.raises(LoaderClosedError):
        channel.put(1)


def test_put_blocks_until_space():
    """Test backpressure on a full channel."""
    channel: Channel[int] = Channel(capacity=1)
    channel.put(1)
    producer = threading.Thread(target=channel.put, args=(2,))
    producer.start()
    assert wait_until(lambda: channel._pending_puts == 1)

    assert channel.get() == 1
    producer.join(timeout=5.0)
    assert channel.get(timeout=1.0) == 2


def test_pending_put_limit():
    """Test that producers beyond max_pending_puts fail fast."""
    channel: Channel[int] = Channel(capacity=1, max_pending_puts=1)
    channel.put(1)
    producer = threading.Thread(target=channel.put, args=(2,))
    producer.start()
    assert wait_until(lambda: channel._pending_puts == 1)

    with pytest.raises(BufferOverflowError) as exc_info:
        channel.put(3)
    assert exc_info.value.buffer_size == 1
    assert exc_info.value.max_pending_puts == 1

    channel.get()
    producer.join(timeout=5.0)


def test_close_fails_blocked_producer():
    """Test that producers waiting on a full channel fail when it closes."""
    channel: Channel[int] = Channel(capacity=1)
    channel.put(1)
    errors: list[BaseException] = []

    def _produce() -> None:
        try:
            channel.put(2)
        except LoaderClosedError as e:
            errors.append(e)

    producer = threading.Thread(target=_produce)
    producer.start()
    assert wait_until(lambda: channel._pending_puts == 1)
    channel.close()
    producer.join(timeout=5.0)

    assert len(errors) == 1
    assert channel.get() == 1


def test_capacity_must_be_positive():
    """Test that a zero-capacity channel is rejected."""
    with pytest.raises(ValueError):
        Channel(capacity=0)
