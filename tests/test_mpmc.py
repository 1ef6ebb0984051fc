import threading

import pytest

from oslabs.mpmc import SemaphoreQueue, main, ring_entries, run_mpmc


def test_queue_is_fifo():
    queue = SemaphoreQueue(4)
    for value in ("a", "b", "c"):
        queue.put(value)
    assert [queue.get() for _ in range(3)] == ["a", "b", "c"]


def test_queue_rejects_zero_capacity():
    with pytest.raises(ValueError):
        SemaphoreQueue(0)


def test_put_blocks_when_full():
    queue = SemaphoreQueue(1)
    queue.put("first")
    worker = threading.Thread(target=queue.put, args=("second",))
    worker.start()
    worker.join(0.1)
    assert worker.is_alive()
    assert queue.get() == "first"
    worker.join(2)
    assert not worker.is_alive()
    assert queue.get() == "second"


def test_get_blocks_when_empty():
    queue = SemaphoreQueue(2)
    received = []
    worker = threading.Thread(target=lambda: received.append(queue.get()))
    worker.start()
    worker.join(0.1)
    assert worker.is_alive()
    queue.put("item")
    worker.join(2)
    assert received == ["item"]


def test_run_mpmc_moves_every_item_once():
    events = run_mpmc(2, 2, 10, 5)
    put_values = [value for role, _, value in events if role == "P"]
    got_values = [value for role, _, value in events if role == "C"]
    assert sorted(put_values) == list(range(20))
    assert sorted(got_values) == list(range(20))


def test_run_mpmc_worker_ids():
    events = run_mpmc(2, 2, 3, 5)
    assert {wid for role, wid, _ in events if role == "P"} == {0, 1}
    assert {wid for role, wid, _ in events if role == "C"} == {2, 3}


def test_run_mpmc_uneven_workers():
    events = run_mpmc(3, 2, 4, 2)
    consumed = sorted(value for role, _, value in events if role == "C")
    assert consumed == list(range(12))


def test_run_mpmc_value_consumed_after_produced():
    events = run_mpmc(2, 3, 5, 1)
    seen = set()
    for role, _, value in events:
        if role == "P":
            seen.add(value)
        else:
            assert value in seen


def test_run_mpmc_rejects_bad_arguments():
    with pytest.raises(ValueError):
        run_mpmc(0, 1, 1, 1)
    with pytest.raises(ValueError):
        run_mpmc(1, 1, 1, 0)


def test_ring_empty_when_head_equals_tail():
    assert ring_entries(9, 9, 7) == 0


@pytest.mark.parametrize("head", [0, 5, 2**32 - 3])
def test_ring_counts_entries_up_to_mask(head):
    for count in range(8):
        assert ring_entries(head, head + count, 7) == count


def test_ring_is_shift_invariant():
    assert ring_entries(2**32 - 2, 2**32 + 1, 15) == ring_entries(0, 3, 15)


def test_main_reports_totals(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Total produced: 20, consumed: 20" in out
    assert out.startswith("=== Lab 23: MPMC Queue, Semaphores ===")