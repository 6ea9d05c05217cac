from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import InvalidArgument, Interrupted
from .interrupt import InterruptToken, current_token


class CountDownLatch:
    """
    One-shot completion barrier: `await_` blocks until `count_down` has been
    called `count` times.

    Caller-owned coordination object used by tests and workers to signal
    "done"; the queue itself never touches it.
    """

    def __init__(self, count: int) -> None:
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise InvalidArgument("count must be a non-negative integer")
        self._cv = threading.Condition(threading.Lock())
        self._count = count

    @property
    def count(self) -> int:
        with self._cv:
            return self._count

    def count_down(self) -> None:
        """Decrement the count; releases all waiters when it reaches zero."""
        with self._cv:
            if self._count == 0:
                return
            self._count -= 1
            if self._count == 0:
                self._cv.notify_all()

    def await_(self, timeout: Optional[float] = None,
               token: Optional[InterruptToken] = None) -> bool:
        """
        Wait for the count to reach zero.

        Returns True once released, False if `timeout` seconds elapsed first.
        Raises Interrupted if the token (or the calling InterruptibleThread's
        token) is set while waiting.
        """
        token = token if token is not None else current_token()
        deadline = None if timeout is None else time.monotonic() + timeout

        def _wake() -> None:
            with self._cv:
                self._cv.notify_all()

        if token is not None:
            token.add_waker(_wake)
        try:
            with self._cv:
                while self._count > 0:
                    if token is not None and token.is_set():
                        raise Interrupted("interrupted while awaiting latch")
                    if deadline is None:
                        self._cv.wait()
                    else:
                        remaining = deadline - time.monotonic()
                        if remaining <= 0:
                            return False
                        self._cv.wait(remaining)
                return True
        finally:
            if token is not None:
                token.remove_waker(_wake)
