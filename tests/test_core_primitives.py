import threading
import time

import pytest

from monitor_queue.l0_core import (
    CountDownLatch,
    InterruptToken,
    InterruptibleThread,
    Interrupted,
    InvalidArgument,
    SynchronizedCounter,
    current_token,
)


def test_synchronized_counter_many_threads():
    counter = SynchronizedCounter()
    n_threads, per_thread = 10, 1000
    latch = CountDownLatch(n_threads)

    def _work():
        for _ in range(per_thread):
            counter.increment()
        latch.count_down()

    for _ in range(n_threads):
        threading.Thread(target=_work, daemon=True).start()

    assert latch.await_(timeout=2.0), "threads did not complete in time"
    assert counter.value == n_threads * per_thread


def test_thread_increments_counter_and_releases_latch():
    counter = SynchronizedCounter()
    latch = CountDownLatch(1)

    def _work():
        counter.increment()
        latch.count_down()

    threading.Thread(target=_work, daemon=True).start()
    assert latch.await_(timeout=1.0)
    assert counter.value == 1


def test_latch_times_out_without_count_down():
    latch = CountDownLatch(2)
    latch.count_down()
    start = time.monotonic()
    assert latch.await_(timeout=0.1) is False
    assert time.monotonic() - start >= 0.09
    assert latch.count == 1


def test_latch_zero_is_already_open_and_extra_count_downs_ignored():
    latch = CountDownLatch(0)
    assert latch.await_(timeout=0.0)
    latch.count_down()
    assert latch.count == 0


def test_latch_rejects_negative_count():
    with pytest.raises(InvalidArgument):
        CountDownLatch(-1)


def test_latch_await_is_interruptible():
    latch = CountDownLatch(1)
    outcome = {}

    def _wait():
        try:
            latch.await_()
        except Interrupted as e:
            outcome["error"] = e

    t = InterruptibleThread(target=_wait, daemon=True)
    t.start()
    time.sleep(0.1)
    t.interrupt()
    t.join(timeout=1.0)

    assert not t.is_alive()
    assert isinstance(outcome["error"], Interrupted)
    assert latch.count == 1


def test_token_flag_and_check():
    token = InterruptToken()
    assert not token.is_set()
    token.check()
    token.interrupt()
    assert token.is_set()
    with pytest.raises(Interrupted):
        token.check()
    token.clear()
    assert not token.is_set()


def test_token_runs_wakers_and_survives_a_failing_one():
    token = InterruptToken()
    calls = []

    def _boom():
        raise RuntimeError("boom")

    token.add_waker(_boom)
    token.add_waker(lambda: calls.append("woken"))
    token.interrupt()
    assert calls == ["woken"]

    token.remove_waker(_boom)
    token.remove_waker(_boom)   # removing twice is harmless


def test_current_token_only_inside_interruptible_thread():
    assert current_token() is None
    seen = {}

    def _grab():
        seen["token"] = current_token()

    t = InterruptibleThread(target=_grab)
    t.start()
    t.join(timeout=1.0)
    assert seen["token"] is t.token
    assert not t.is_interrupted()
