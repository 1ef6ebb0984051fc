"""Multi-producer multi-consumer bounded buffer built from two semaphores and a mutex."""

from __future__ import annotations

import argparse
import itertools
import sys
import threading
import time
from collections import deque
from typing import Any

from oslabs.common import print_section

PRODUCER_DELAY = 0.005
CONSUMER_DELAY = 0.008

_RING_TEXT = """  io_uring uses two lock-free rings in shared memory:
    SQ ring: userspace -> kernel (I/O request submission)
    CQ ring: kernel -> userspace (I/O completion notification)

  Ring structure (conceptually like our bounded buffer):
    - head: consumer reads from here
    - tail: producer writes here
    - Entries available: (tail - head) & ring_mask
    - Empty: head == tail
    - Full: (tail - head) == ring_size

  io_uring advantages over this semaphore-based approach:
    1. Lock-free: uses atomic ring pointers (no mutex needed)
    2. Batch submission: fill 1000 SQEs, one io_uring_enter() syscall
    3. Kernel polling mode (IORING_SETUP_SQPOLL): zero syscalls per I/O
  Used by: PostgreSQL, RocksDB, NGINX, Glommio (async Rust runtime)."""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Implement MPMC queue using only semaphores + atomic CAS for slot index.
2. Extend to named semaphores (sem_open) for inter-process producer/consumer.
3. Modern (io_uring): implement pread batching with io_uring SQ/CQ rings;
   compare ops/sec vs blocking pread() for 10K small reads."""

_QUIZ = """
========== Quiz ==========
Q1. How does a semaphore differ from a mutex?
Q2. What is a monitor and how do condvar+mutex approximate one?
Q3. Why do we need both semaphores AND a mutex in this MPMC queue?
Q4. Can semaphores be used across processes? How?
Q5. Explain the io_uring SQ/CQ ring design.  How does it avoid per-I/O syscalls?
Q6. What is the difference between sem_wait and futex(FUTEX_WAIT) in the kernel?
    When would you use one over the other?
Q7. Why can sem_post be called from a signal handler but pthread_mutex_unlock
    cannot?  What POSIX requirement makes this possible?"""


class SemaphoreQueue:
    """Bounded FIFO: one semaphore counts free slots, one counts items, a mutex guards the buffer."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque[Any] = deque()
        self._empty_slots = threading.Semaphore(capacity)
        self._full_slots = threading.Semaphore(0)
        self._lock = threading.Lock()

    def put(self, value: Any) -> None:
        """Store a value, blocking while the buffer is full."""
        self._empty_slots.acquire()
        with self._lock:
            self._items.append(value)
        self._full_slots.release()

    def get(self) -> Any:
        """Remove and return the oldest value, blocking while the buffer is empty."""
        self._full_slots.acquire()
        with self._lock:
            value = self._items.popleft()
        self._empty_slots.release()
        return value


def run_mpmc(
    producers: int, consumers: int, items_each: int, capacity: int
) -> list[tuple[str, int, int]]:
    """Run producers and consumers over a SemaphoreQueue.

    Each producer puts `items_each` numbered items; the consumers share them out.
    Producers have ids 0..producers-1 and consumers follow on from there.
    Returns the events in the order they happened: ("P", id, value) or ("C", id, value).
    """
    if producers < 1 or consumers < 1:
        raise ValueError("need at least one producer and one consumer")
    if items_each < 0:
        raise ValueError("items_each must not be negative")
    queue = SemaphoreQueue(capacity)
    counter = itertools.count()
    counter_lock = threading.Lock()
    events: list[tuple[str, int, int]] = []
    events_lock = threading.Lock()

    def produce(worker_id: int) -> None:
        for _ in range(items_each):
            with counter_lock:
                value = next(counter)
            queue.put(value)
            with events_lock:
                events.append(("P", worker_id, value))
            time.sleep(PRODUCER_DELAY)

    def consume(worker_id: int, quota: int) -> None:
        for _ in range(quota):
            value = queue.get()
            with events_lock:
                events.append(("C", worker_id, value))
            time.sleep(CONSUMER_DELAY)

    total = producers * items_each
    share, extra = divmod(total, consumers)
    workers = [
        threading.Thread(target=produce, args=(worker_id,))
        for worker_id in range(producers)
    ]
    workers += [
        threading.Thread(
            target=consume, args=(producers + k, share + (1 if k < extra else 0))
        )
        for k in range(consumers)
    ]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    return events


def ring_entries(head: int, tail: int, mask: int) -> int:
    """Entries held by a power-of-two ring with free-running head and tail counters."""
    return (tail - head) & mask


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-mpmc",
        description="Multi-producer multi-consumer queue with semaphores.",
    ).parse_args(argv)

    print("=== Lab 23: MPMC Queue, Semaphores ===")
    print_section("Multi-Producer Multi-Consumer with Semaphores")
    events = run_mpmc(producers=2, consumers=2, items_each=10, capacity=5)
    for role, worker_id, value in events:
        verb = "put" if role == "P" else "got"
        print(f"  {role}{worker_id}: {verb} {value}")
    produced = sum(1 for role, _, _ in events if role == "P")
    consumed = len(events) - produced
    print(f"\n  Total produced: {produced}, consumed: {consumed}")
    print("\n  OBSERVE: Semaphores count available resources (slots/items).")
    print("  sem_wait decrements (blocks at 0), sem_post increments.")
    print("  This is the classic bounded buffer / monitor pattern.")

    print_section("Phase 2: io_uring Submission/Completion Ring Analogy")
    print(_RING_TEXT)
    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())