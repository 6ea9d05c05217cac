"""
interrupt.py
============
Cooperative interruption for plain OS threads.

Python threads cannot be interrupted from the outside, so interruption is an
explicit token:

- `InterruptToken` is a thread-safe flag plus a set of "wakers". Setting the
  flag runs every waker once, which lets a blocking primitive (BoundedQueue)
  notify its conditions so the suspended thread wakes up and notices.
- `InterruptibleThread` owns one token; `thread.interrupt()` sets it.
- `current_token()` returns the token of the calling InterruptibleThread, so
  blocking calls can pick it up without threading it through every signature.

Usage:
    t = InterruptibleThread(target=lambda: q.take())
    t.start()
    t.interrupt()   # q.take() raises Interrupted inside t
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .errors import Interrupted

Waker = Callable[[], None]

log = logging.getLogger(__name__)


class InterruptToken:
    """
    One interrupt flag, shared by whoever may cancel and whoever may block.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._set = False
        self._wakers: list[Waker] = []

    def interrupt(self) -> None:
        """
        Set the flag and run every registered waker.

        Wakers run on the interrupting thread, outside the token's own lock,
        so a waker may take other locks (e.g., a queue's monitor lock).
        """
        with self._lock:
            self._set = True
            wakers = list(self._wakers)
        for waker in wakers:
            try:
                waker()
            except Exception:
                log.exception("interrupt waker failed")

    def is_set(self) -> bool:
        with self._lock:
            return self._set

    def clear(self) -> None:
        """Reset the flag once the interruption has been handled."""
        with self._lock:
            self._set = False

    def check(self) -> None:
        """Raise Interrupted if the flag is set."""
        if self.is_set():
            raise Interrupted("interrupted")

    def add_waker(self, waker: Waker) -> None:
        with self._lock:
            self._wakers.append(waker)

    def remove_waker(self, waker: Waker) -> None:
        with self._lock:
            if waker in self._wakers:
                self._wakers.remove(waker)


class InterruptibleThread(threading.Thread):
    """
    threading.Thread with an attached InterruptToken.

    Blocking calls made on this thread (BoundedQueue.put/take, CountDownLatch)
    use the token automatically when no explicit token is passed.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.token = InterruptToken()

    def interrupt(self) -> None:
        log.debug("interrupting %s", self.name)
        self.token.interrupt()

    def is_interrupted(self) -> bool:
        return self.token.is_set()


def current_token() -> Optional[InterruptToken]:
    """Token of the calling thread, or None if it is not interruptible."""
    thread = threading.current_thread()
    if isinstance(thread, InterruptibleThread):
        return thread.token
    return None
