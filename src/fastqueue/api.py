"""Functional entry points over `RingBuffer`.

These mirror the operations a host binding calls, one function per operation.
Errors raised by the buffer propagate unchanged.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from fastqueue.config import Settings
from fastqueue.ringbuffer import RingBuffer

T = TypeVar("T")


def create(
    capacity: int | None = None, on_release: Callable[[Any], Any] | None = None
) -> RingBuffer[Any]:
    """Creates an empty buffer.

    Args:
        capacity: Number of slots. Defaults to ``buffer.default_capacity``
            from the loaded settings.
        on_release: Optional callback for values leaving the buffer.

    Raises:
        InvalidCapacityError: If the capacity is not a positive integer.
    """
    if capacity is None:
        capacity = Settings.get_instance().buffer.default_capacity
    return RingBuffer(capacity, on_release=on_release)


def append(buffer: RingBuffer[T], value: T) -> None:
    """Appends `value`, evicting the oldest value if the buffer is full."""
    buffer.append(value)


def item_at(buffer: RingBuffer[T], index: int) -> T:
    """Returns the value at `index`, where 0 is the newest."""
    return buffer.item_at(index)


def peek(buffer: RingBuffer[T]) -> T:
    """Returns the oldest retained value."""
    return buffer.peek()


def length(buffer: RingBuffer[Any]) -> int:
    return len(buffer)


def destroy(buffer: RingBuffer[Any]) -> None:
    """Releases all values held by `buffer`. Repeated calls are ignored."""
    buffer.close()
