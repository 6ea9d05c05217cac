"""
monitor_queue.l0_core
Foundational Core layer (errors & coordination primitives) for monitor_queue.

Public API:
- QueueError, InvalidArgument, QueueClosed, Interrupted
- InterruptToken, InterruptibleThread, current_token
- CountDownLatch, SynchronizedCounter
"""

from .errors import QueueError, InvalidArgument, QueueClosed, Interrupted  # noqa: F401
from .interrupt import InterruptToken, InterruptibleThread, current_token  # noqa: F401
from .latch import CountDownLatch  # noqa: F401
from .counter import SynchronizedCounter  # noqa: F401

__all__ = [
    "QueueError", "InvalidArgument", "QueueClosed", "Interrupted",
    "InterruptToken", "InterruptibleThread", "current_token",
    "CountDownLatch", "SynchronizedCounter",
]
