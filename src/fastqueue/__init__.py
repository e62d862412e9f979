# src/fastqueue/__init__.py
"""fastqueue: a fixed-capacity ring buffer with newest-first indexed access.

The buffer keeps the N most recently appended values and evicts the oldest
one when a new value arrives while it is full. Index 0 is the newest value.

Key modules:
- `ringbuffer`: The `RingBuffer` container (also exported as `Queue`).
- `api`: Function-per-operation entry points (create, append, item_at, ...).
- `errors`: The exception hierarchy.
- `config` / `logging_config`: TOML settings and Loguru setup.
"""

import importlib.metadata

from loguru import logger

from fastqueue.errors import (
    BufferClosedError,
    EmptyBufferError,
    FastQueueError,
    IndexOutOfRangeError,
    InvalidCapacityError,
)
from fastqueue.ringbuffer import RingBuffer

# Kept for callers that import `fastqueue.Queue`.
Queue = RingBuffer

# Libraries stay quiet until the application opts in via `setup_logging`.
logger.disable("fastqueue")

try:
    __version__: str = importlib.metadata.version("fastqueue")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "BufferClosedError",
    "EmptyBufferError",
    "FastQueueError",
    "IndexOutOfRangeError",
    "InvalidCapacityError",
    "Queue",
    "RingBuffer",
    "__version__",
]
