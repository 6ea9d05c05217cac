from __future__ import annotations

from collections import defaultdict
from typing import Callable, DefaultDict, List
import logging
import threading

from monitor_queue.l0_core import QueueClosed
from monitor_queue.l1_queue.bounded_queue import BoundedQueue

log = logging.getLogger(__name__)


class EventBus:
    """
    Lightweight in-process pub/sub on top of a BoundedQueue.

    * Bounded queue applies backpressure: publish() blocks while the queue is full.
    * Single dispatcher thread delivers events serially to all subscribers.
    * Subscribers run on the dispatcher thread, so keep handlers non-blocking.
    * Publishing from a subscriber never blocks; it is dropped if the queue is full.
    * close() closes the queue; the dispatcher drains what is left, then exits.
    """

    def __init__(self, capacity: int = 1024, name: str = "EventBus") -> None:
        self._subscribers: DefaultDict[str, List[Callable[[object], None]]] = defaultdict(list)
        self._subs_lock = threading.Lock()
        self._queue: BoundedQueue = BoundedQueue(capacity, name)
        self._thread = threading.Thread(
            target=self._run, name=f"{name}-Dispatcher", daemon=True
        )
        self._thread.start()

    # ---- subscription API ----
    def subscribe(self, topic: str, callback: Callable[[object], None]) -> None:
        """
        Register ``callback`` to receive events for ``topic``.

        Parameters
        ----------
        topic : str
            Topic name (e.g., "jobs", "jobs.done").
        callback : Callable[[object], None]
            Function invoked with the event payload. Runs on the dispatcher
            thread; keep it fast or offload work internally.
        """
        with self._subs_lock:
            self._subscribers[topic].append(callback)

    def unsubscribe(self, topic: str, callback: Callable[[object], None]) -> None:
        """Remove ``callback`` from ``topic`` if previously subscribed."""
        with self._subs_lock:
            if callback in self._subscribers[topic]:
                self._subscribers[topic].remove(callback)

    # ---- publishing API ----
    def publish(self, topic: str, event: object) -> bool:
        """
        Blocking publish. Returns True once enqueued; False if the bus is closed.

        A subscriber publishing from the dispatcher thread never waits: the
        dispatcher is the only thread that frees room, so a full queue drops
        the event (drop-newest) and returns False.

        Raises Interrupted if the publishing InterruptibleThread is interrupted
        while waiting for room.
        """
        try:
            if threading.current_thread() is self._thread:
                if not self._queue.offer((topic, event)):
                    log.warning("[%s] full: dropped event published from dispatcher (topic=%s)",
                                self._queue.name, topic)
                    return False
                return True
            self._queue.put((topic, event))
        except QueueClosed:
            log.debug("publish on closed bus dropped (topic=%s)", topic)
            return False
        return True

    # ---- lifecycle ----
    def close(self, timeout: float = 1.0) -> None:
        """Stop accepting events, let the dispatcher drain, and join it."""
        self._queue.close()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                log.warning("dispatcher did not exit within %ss", timeout)

    def pending(self) -> int:
        """Events queued but not yet dispatched."""
        return self._queue.size()

    # ---- dispatcher loop ----
    def _run(self) -> None:
        log.debug("dispatcher started")
        while True:
            try:
                topic, event = self._queue.take()
            except QueueClosed:
                break
            with self._subs_lock:
                callbacks = list(self._subscribers.get(topic, []))
            for callback in callbacks:
                try:
                    callback(event)  # all callbacks run on this single dispatcher thread
                except Exception:
                    log.exception("subscriber error on topic '%s'", topic)
        log.debug("dispatcher exiting")
