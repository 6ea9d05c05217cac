from __future__ import annotations


class QueueError(Exception):
    """Base class for every error raised by monitor_queue."""


class InvalidArgument(QueueError, ValueError):
    """
    A constructor or config value is out of range (e.g., capacity <= 0).

    Subclasses ValueError so callers validating generic input can catch it
    without importing this module.
    """


class QueueClosed(QueueError):
    """
    The queue was closed: producers may no longer insert, and consumers
    have drained everything that will ever arrive.

    This is an expected termination signal, not a crash.
    """


class Interrupted(QueueError):
    """
    A blocking call was cancelled through an InterruptToken while suspended.

    The queue is guaranteed to be exactly as it was before the call began.
    """
