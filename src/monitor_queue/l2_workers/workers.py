"""
workers.py
==========
Producer / consumer threads around a shared BoundedQueue.

- `Producer` puts a fixed sequence of items, then counts down its latch.
- `Consumer` takes until the queue is closed and drained.
- `ItemProcessor` processes items until interrupted, or until it has handled
  `limit` items (cooperative stop flag layered atop the queue).
- `run_pipeline` wires N producers and K consumers from a QueueConfig and
  reports what came out.

All workers are InterruptibleThreads, so `worker.interrupt()` unblocks a
pending put/take with Interrupted; the worker logs it and exits.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from monitor_queue.l0_core import (
    CountDownLatch,
    InterruptibleThread,
    Interrupted,
    QueueClosed,
    SynchronizedCounter,
)
from monitor_queue.l1_queue.bounded_queue import BoundedQueue
from monitor_queue.l1_queue.config import QueueConfig

JOIN_TIMEOUT = 1.0      # seconds per thread when shutting a pipeline down

log = logging.getLogger(__name__)


class Producer(InterruptibleThread):
    """Puts every element of `items`, in order, into `queue`."""

    def __init__(self, queue: BoundedQueue, items: Iterable[Any],
                 latch: Optional[CountDownLatch] = None, name: str = "producer") -> None:
        super().__init__(name=name, daemon=True)
        self._queue = queue
        self._items = items
        self._latch = latch
        self.produced = 0
        self.error: Optional[Exception] = None

    def run(self) -> None:
        try:
            for item in self._items:
                self._queue.put(item)
                self.produced += 1
        except (QueueClosed, Interrupted) as e:
            self.error = e
            log.info("%s stopped after %d item(s): %s", self.name, self.produced, e)
        finally:
            if self._latch is not None:
                self._latch.count_down()


class Consumer(InterruptibleThread):
    """Takes from `queue` and hands each item to `sink` until closed and drained."""

    def __init__(self, queue: BoundedQueue, sink: Callable[[Any], None],
                 latch: Optional[CountDownLatch] = None, name: str = "consumer") -> None:
        super().__init__(name=name, daemon=True)
        self._queue = queue
        self._sink = sink
        self._latch = latch
        self.consumed = 0
        self.error: Optional[Exception] = None

    def run(self) -> None:
        try:
            while True:
                item = self._queue.take()
                self.consumed += 1
                try:
                    self._sink(item)
                except Exception:
                    log.exception("%s: sink failed on %r", self.name, item)
        except QueueClosed:
            log.debug("%s: queue drained after %d item(s)", self.name, self.consumed)
        except Interrupted as e:
            self.error = e
            log.info("%s interrupted after %d item(s)", self.name, self.consumed)
        finally:
            if self._latch is not None:
                self._latch.count_down()


class ItemProcessor(InterruptibleThread):
    """
    Process items from `queue` until interrupted.

    Between items the thread polls its own interrupt flag; a blocked take is
    woken by the same flag. With `limit` set it also stops on its own once
    `limit` items were processed.
    """

    def __init__(self, queue: BoundedQueue, counter: SynchronizedCounter,
                 latch: Optional[CountDownLatch] = None,
                 handler: Optional[Callable[[Any], None]] = None,
                 limit: Optional[int] = None, name: str = "processor") -> None:
        super().__init__(name=name, daemon=True)
        self._queue = queue
        self._counter = counter
        self._latch = latch
        self._handler = handler
        self._limit = limit
        self.processed = 0

    def _should_continue(self) -> bool:
        if self.is_interrupted():
            return False
        return self._limit is None or self.processed < self._limit

    def run(self) -> None:
        try:
            while self._should_continue():
                item = self._queue.take()
                if self._handler is not None:
                    try:
                        self._handler(item)
                    except Exception:
                        log.exception("%s: handler failed on %r", self.name, item)
                self.processed += 1
                self._counter.increment()
        except Interrupted:
            log.info("%s interrupted after %d item(s)", self.name, self.processed)
        except QueueClosed:
            log.debug("%s: queue drained after %d item(s)", self.name, self.processed)
        finally:
            if self._latch is not None:
                self._latch.count_down()


@dataclass(frozen=True, slots=True)
class PipelineReport:
    """
    Outcome of `run_pipeline`.

    consumed holds (producer_id, seq) tuples in the order consumers took them;
    with several consumers that order is interleaved.
    """
    produced: int
    consumed: list
    max_observed_size: int
    duration_s: float


def run_pipeline(config: QueueConfig, timeout: Optional[float] = None) -> PipelineReport:
    """
    Run `config.producers` producers, each inserting `items_per_producer`
    items tagged (producer_id, seq), against `config.consumers` consumers.

    The queue is closed once every producer is done, so consumers drain what
    is left and exit. If producers do not finish within `timeout` seconds,
    every worker is interrupted and TimeoutError is raised. The same shutdown
    happens when the calling InterruptibleThread is interrupted while waiting;
    Interrupted then propagates to the caller.
    """
    t0 = time.monotonic()
    queue: BoundedQueue = BoundedQueue(config.capacity, config.name)

    consumed: list = []
    consumed_lock = threading.Lock()

    def _collect(item: Any) -> None:
        with consumed_lock:
            consumed.append(item)

    producers_done = CountDownLatch(config.producers)
    consumers_done = CountDownLatch(config.consumers)
    producers = [
        Producer(queue, [(pid, seq) for seq in range(config.items_per_producer)],
                 producers_done, name=f"producer-{pid}")
        for pid in range(config.producers)
    ]
    consumers = [
        Consumer(queue, _collect, consumers_done, name=f"consumer-{cid}")
        for cid in range(config.consumers)
    ]

    log.info("pipeline %s: %d producer(s) x %d item(s), %d consumer(s), capacity %d",
             config.name, config.producers, config.items_per_producer,
             config.consumers, config.capacity)
    for w in consumers + producers:
        w.start()

    workers = producers + consumers
    try:
        if not producers_done.await_(timeout):
            log.warning("pipeline %s: producers did not finish within %ss", config.name, timeout)
            raise TimeoutError(f"producers did not finish within {timeout}s")

        queue.close()
        if not consumers_done.await_(timeout):
            log.warning("pipeline %s: consumers did not drain within %ss", config.name, timeout)
            raise TimeoutError(f"consumers did not drain within {timeout}s")
    except BaseException:
        # timeout, or the calling thread was interrupted: never leave workers behind
        _shutdown(queue, workers)
        raise
    for w in workers:
        w.join(timeout=JOIN_TIMEOUT)

    report = PipelineReport(
        produced=sum(p.produced for p in producers),
        consumed=list(consumed),
        max_observed_size=queue.max_observed_size(),
        duration_s=time.monotonic() - t0,
    )
    log.info("pipeline %s: produced=%d consumed=%d high-water=%d in %.3fs",
             config.name, report.produced, len(report.consumed),
             report.max_observed_size, report.duration_s)
    return report


def _shutdown(queue: BoundedQueue, workers: list[InterruptibleThread]) -> None:
    for w in workers:
        w.interrupt()
    queue.close()
    for w in workers:
        if w.is_alive() and w is not threading.current_thread():
            w.join(timeout=JOIN_TIMEOUT)
