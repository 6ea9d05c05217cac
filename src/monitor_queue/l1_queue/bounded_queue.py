"""
bounded_queue.py
================
Fixed-capacity FIFO shared by any number of producer and consumer threads.

Monitor design:
- ONE exclusive lock guards the deque, the closed flag and every capacity check.
- Two conditions on that lock: `_not_full` (producers wait here) and
  `_not_empty` (consumers wait here).
- Every wait sits in a re-check loop (spurious wakeups, racing waiters).
- Every state change uses notify_all, never notify: one wakeup may land on a
  thread that loses the race for the slot and strands the others.

Closing is terminal: `put` fails with QueueClosed at once, `take` keeps
draining and fails with QueueClosed only once the queue is also empty.

Interruption goes through InterruptToken (see l0_core.interrupt). A waiting
thread registers a waker on its token; interrupting wakes the conditions and
the waiter leaves with Interrupted before touching the deque.

Usage:
    q = BoundedQueue(5, "jobs")
    q.put(job)          # blocks while 5 items are held
    job = q.take()      # blocks while empty
    q.close()           # wakes everyone; consumers drain, then QueueClosed
"""

from __future__ import annotations

import collections
import contextlib
import logging
import threading
from typing import Deque, Generic, Iterator, Optional, Tuple, TypeVar

from monitor_queue.l0_core.errors import InvalidArgument, Interrupted, QueueClosed
from monitor_queue.l0_core.interrupt import InterruptToken, current_token

T = TypeVar("T")

log = logging.getLogger(__name__)


class BoundedQueue(Generic[T]):
    """
    Bounded, thread-safe, blocking FIFO queue with close and interruption.
    """

    def __init__(self, capacity: int, name: str = "queue") -> None:
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise InvalidArgument(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._name = name
        self._items: Deque[T] = collections.deque()
        self._closed = False
        self._max_observed = 0

        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)

    def __repr__(self) -> str:
        return (f"BoundedQueue(name={self._name!r}, size={self.size()}, "
                f"capacity={self._capacity}, closed={self.closed})")

    # ---- blocking API ----
    def put(self, item: T, token: Optional[InterruptToken] = None) -> None:
        """
        Append `item` at the tail, waiting while the queue is full.

        Raises
        ------
        QueueClosed
            If the queue is closed before or while waiting. Nothing is inserted.
        Interrupted
            If `token` (default: the calling InterruptibleThread's token) is set
            while the call has to wait. Nothing is inserted.
        """
        token = self._resolve(token)
        with self._wake_on_interrupt(token):
            with self._lock:
                while True:
                    if self._closed:
                        raise QueueClosed(f"{self._name} is closed")
                    if len(self._items) < self._capacity:
                        break
                    if token is not None and token.is_set():
                        raise Interrupted(f"put on {self._name} interrupted")
                    self._not_full.wait()
                self._append_locked(item)

    def take(self, token: Optional[InterruptToken] = None) -> T:
        """
        Remove and return the head item, waiting while the queue is empty.

        Raises
        ------
        QueueClosed
            If the queue is closed and empty: no more data will ever arrive.
        Interrupted
            If `token` is set while the call has to wait. Nothing is removed.
        """
        token = self._resolve(token)
        with self._wake_on_interrupt(token):
            with self._lock:
                while not self._items:
                    if self._closed:
                        raise QueueClosed(f"{self._name} is closed and drained")
                    if token is not None and token.is_set():
                        raise Interrupted(f"take on {self._name} interrupted")
                    self._not_empty.wait()
                return self._popleft_locked()

    # ---- non-blocking API ----
    def offer(self, item: T) -> bool:
        """Return True on enqueue; False if the queue is full right now."""
        with self._lock:
            if self._closed:
                raise QueueClosed(f"{self._name} is closed")
            if len(self._items) >= self._capacity:
                return False
            self._append_locked(item)
            return True

    def poll(self) -> Tuple[bool, Optional[T]]:
        """Return (True, item) if one was available; (False, None) otherwise."""
        with self._lock:
            if not self._items:
                if self._closed:
                    raise QueueClosed(f"{self._name} is closed and drained")
                return False, None
            return True, self._popleft_locked()

    # ---- lifecycle ----
    def close(self) -> None:
        """
        Refuse further insertions and wake every blocked producer and consumer.
        Idempotent.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            remaining = len(self._items)
            self._not_full.notify_all()
            self._not_empty.notify_all()
        log.info("[%s] closed with %d item(s) left to drain", self._name, remaining)

    # ---- inspection ----
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def is_full(self) -> bool:
        with self._lock:
            return len(self._items) >= self._capacity

    def max_observed_size(self) -> int:
        """High-water mark of the queue length since construction."""
        with self._lock:
            return self._max_observed

    def snapshot(self) -> list[T]:
        """Copy of the current contents, head first."""
        with self._lock:
            return list(self._items)

    # ---- helpers (caller holds self._lock) ----
    def _append_locked(self, item: T) -> None:
        self._items.append(item)
        if len(self._items) > self._max_observed:
            self._max_observed = len(self._items)
        self._not_empty.notify_all()

    def _popleft_locked(self) -> T:
        item = self._items.popleft()
        self._not_full.notify_all()
        return item

    @staticmethod
    def _resolve(token: Optional[InterruptToken]) -> Optional[InterruptToken]:
        return token if token is not None else current_token()

    @contextlib.contextmanager
    def _wake_on_interrupt(self, token: Optional[InterruptToken]) -> Iterator[None]:
        # Registered outside self._lock: the waker itself takes self._lock.
        if token is None:
            yield
            return

        def _wake() -> None:
            with self._lock:
                self._not_full.notify_all()
                self._not_empty.notify_all()

        token.add_waker(_wake)
        try:
            yield
        finally:
            token.remove_waker(_wake)
