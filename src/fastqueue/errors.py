"""Exceptions raised by the ring buffer.

Each error also derives from the builtin exception a caller would expect from
a sequence-like container, so ``except IndexError`` keeps working.
"""


class FastQueueError(Exception):
    """Base class for all fastqueue errors."""


class InvalidCapacityError(FastQueueError, ValueError):
    """Raised when a buffer is requested with a capacity that is not a positive int."""


class IndexOutOfRangeError(FastQueueError, IndexError):
    """Raised when a logical index falls outside ``[0, len(buffer))``."""


class EmptyBufferError(FastQueueError, IndexError):
    """Raised when peeking into a buffer that holds no values."""


class BufferClosedError(FastQueueError, RuntimeError):
    """Raised when appending to a buffer that has already been closed."""
