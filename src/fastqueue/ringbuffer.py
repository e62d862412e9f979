import operator
import types
from collections.abc import Callable, Sized
from typing import Any, Final, Generic, Self, TypeVar

from loguru import logger

from fastqueue.errors import (
    BufferClosedError,
    EmptyBufferError,
    IndexOutOfRangeError,
    InvalidCapacityError,
)

T = TypeVar("T")

# Marks a slot that holds no value. `None` is a legitimate value to store.
_EMPTY: Final[Any] = object()


class RingBuffer(Sized, Generic[T]):
    """A fixed-capacity circular buffer with newest-first indexed access.

    The buffer keeps the `capacity` most recently appended values. Once it is
    full, every append evicts the oldest value. Index 0 is always the newest
    value and index ``len(buf) - 1`` the oldest one still retained.

    Storage is a list of slots allocated once at construction. The number of
    occupied slots is tracked explicitly, because the head and tail positions
    alone cannot tell a full, wrapped buffer from a partially filled one.

    Usage:
        with RingBuffer[str](3) as buf:
            for item in "abcd":
                buf.append(item)
            buf[0]       # "d"
            buf.peek()   # "b"
    """

    def __init__(
        self, capacity: int, on_release: Callable[[T], Any] | None = None
    ) -> None:
        """Initializes an empty RingBuffer.

        Args:
            capacity: The maximum number of values the buffer can hold.
            on_release: Optional callback invoked exactly once with every value
                whose lifetime in the buffer ends, either by eviction or by
                `close()`.

        Raises:
            InvalidCapacityError: If the capacity is not a positive integer.
        """
        err_msg = "Capacity must be a positive integer."
        if isinstance(capacity, bool):
            raise InvalidCapacityError(err_msg)
        try:
            capacity = operator.index(capacity)
        except TypeError as e:
            raise InvalidCapacityError(err_msg) from e
        if capacity <= 0:
            raise InvalidCapacityError(err_msg)

        self._capacity = capacity
        self._slots: list[Any] | None = [_EMPTY] * capacity
        self._count = 0
        self._head = 0
        self._tail = 0
        self._on_release = on_release
        logger.debug(f"RingBuffer created with capacity {capacity}.")

    @property
    def capacity(self) -> int:
        """The maximum number of values the buffer can hold."""
        return self._capacity

    @property
    def is_full(self) -> bool:
        """Returns True if every slot is occupied."""
        return self._count == self._capacity

    @property
    def is_empty(self) -> bool:
        """Returns True if the buffer holds no values."""
        return self._count == 0

    @property
    def closed(self) -> bool:
        """Returns True once `close()` has released the buffer's storage."""
        return self._slots is None

    def append(self, value: T) -> None:
        """Stores `value` as the newest element.

        If the buffer is full, the oldest value is evicted and its slot is
        reused for `value`.

        Args:
            value: The value to store.

        Raises:
            BufferClosedError: If the buffer has been closed.
        """
        slots = self._slots
        if slots is None:
            err_msg = "Cannot append to a closed RingBuffer."
            raise BufferClosedError(err_msg)

        evicted = _EMPTY
        if self._count == 0:
            head = tail = 0
            count = 1
        else:
            head = (self._head + 1) % self._capacity
            tail = self._tail
            count = self._count
            if count == self._capacity:
                # When full, the new head is the slot being evicted.
                evicted = slots[tail]
                tail = (tail + 1) % self._capacity
            else:
                count += 1

        slots[head] = value
        self._head, self._tail, self._count = head, tail, count

        if evicted is not _EMPTY:
            self._release(evicted)

    def item_at(self, index: int) -> T:
        """Returns the value at logical `index` (0 = newest).

        Args:
            index: A position in ``[0, len(buf))``. Negative indices are not
                supported.

        Raises:
            TypeError: If `index` is not an integer.
            IndexOutOfRangeError: If `index` is outside ``[0, len(buf))``.
        """
        try:
            if isinstance(index, bool):
                raise TypeError
            index = operator.index(index)
        except TypeError:
            err_msg = (
                f"RingBuffer indices must be integers, not {type(index).__name__}"
            )
            raise TypeError(err_msg) from None
        if not 0 <= index < self._count:
            err_msg = "queue index out of range"
            raise IndexOutOfRangeError(err_msg)

        # Python's % is floored, so the slot is always in [0, capacity).
        slot = (self._head - index) % self._capacity
        return self._slots[slot]  # type: ignore[index]

    def peek(self) -> T:
        """Returns the oldest retained value without removing it.

        Raises:
            EmptyBufferError: If the buffer is empty.
        """
        if self._count == 0:
            err_msg = "peek from an empty queue"
            raise EmptyBufferError(err_msg)
        return self._slots[self._tail]  # type: ignore[index]

    def close(self) -> None:
        """Releases every stored value and the slot storage.

        Values are released oldest first, each exactly once. A failing
        `on_release` callback does not stop the remaining values from being
        released; the first error is re-raised once all of them have been
        handed over. Calling `close()` on an already closed buffer does nothing.
        """
        slots = self._slots
        if slots is None:
            logger.warning("RingBuffer is already closed.")
            return

        released = []
        for offset in range(self._count):
            slot = (self._tail + offset) % self._capacity
            released.append(slots[slot])
            slots[slot] = _EMPTY

        self._slots = None
        self._count = 0

        first_error: Exception | None = None
        failures = 0
        for value in released:
            try:
                self._release(value)
            except Exception as e:
                failures += 1
                if first_error is None:
                    first_error = e

        logger.debug(
            f"RingBuffer(capacity={self._capacity}) closed, "
            f"released {len(released)} values ({failures} callback failures)."
        )
        if first_error is not None:
            raise first_error

    def _release(self, value: T) -> None:
        if self._on_release is not None:
            self._on_release(value)

    def __getitem__(self, index: int) -> T:
        """Returns the value at logical `index`. See `item_at`."""
        return self.item_at(index)

    def __len__(self) -> int:
        """Returns the number of values currently stored."""
        return self._count

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Closes the buffer when leaving the context."""
        self.close()

    def __repr__(self) -> str:
        """Returns a developer-friendly representation, newest value first."""
        data = [self.item_at(i) for i in range(self._count)]
        return (
            f"RingBuffer(capacity={self._capacity}, size={self._count}, "
            f"data={data})"
        )
