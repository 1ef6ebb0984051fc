import errno
import threading
import time

import pytest

from oslabs.sync_primitives import Futex, main, sleeper_demo


def _wake_when_waiting(futex, deadline=2.0):
    end = time.monotonic() + deadline
    while time.monotonic() < end:
        woken = futex.wake(1)
        if woken:
            return woken
        time.sleep(0.005)
    return 0


def test_store_load_round_trip():
    futex = Futex()
    assert futex.load() == 0
    futex.store(7)
    assert futex.load() == 7


def test_wait_on_changed_value_raises_eagain():
    futex = Futex(3)
    with pytest.raises(BlockingIOError) as info:
        futex.wait(0)
    assert info.value.errno == errno.EAGAIN


def test_wait_times_out():
    futex = Futex(0)
    assert futex.wait(0, timeout=0.05) is False
    assert futex.wake(1) == 0


def test_wake_without_waiters_returns_zero():
    assert Futex().wake(5) == 0


def test_wake_negative_count_rejected():
    with pytest.raises(ValueError):
        Futex().wake(-1)


def test_wake_releases_waiter():
    futex = Futex(0)
    result = []
    worker = threading.Thread(target=lambda: result.append(futex.wait(0, timeout=5)))
    worker.start()
    assert _wake_when_waiting(futex) == 1
    worker.join(2)
    assert result == [True]


def test_wake_count_limits_waiters():
    futex = Futex(0)
    results = []
    lock = threading.Lock()

    def waiter():
        outcome = futex.wait(0, timeout=5)
        with lock:
            results.append(outcome)

    workers = [threading.Thread(target=waiter) for _ in range(3)]
    for worker in workers:
        worker.start()
    time.sleep(0.2)
    assert futex.wake(2) == 2
    assert futex.wake(5) == 1
    for worker in workers:
        worker.join(2)
    assert results == [True, True, True]


def test_sleeper_demo_sees_new_value():
    assert sleeper_demo(0.01) == 1


def test_sleeper_demo_rejects_negative_delay():
    with pytest.raises(ValueError):
        sleeper_demo(-1)


def test_main_output(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Sleeper: woke up! futex_val=1" in out
    assert "data=12345" in out
    assert "data=99999" in out