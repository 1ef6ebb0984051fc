"""Data races, atomic counters and acquire/release publication."""

from __future__ import annotations

import argparse
import sys
import threading
from typing import Any

from oslabs.common import print_section

ITERATIONS = 1_000_000
THREADS = 4

_USER_POINTERS = """  When kernel handles syscalls, user pointers must be validated:
    copy_from_user() / copy_to_user() — checks address range + handles faults
    access_ok() — verifies pointer is in user address space
  Without these checks: user could trick kernel into reading/writing kernel memory.
  This was the basis of many privilege escalation exploits."""

_MEMORY_ORDERS = """  C11 memory model provides:
    memory_order_relaxed:  no ordering guarantee (fastest)
    memory_order_acquire:  no reads/writes moved before this load
    memory_order_release:  no reads/writes moved after this store
    memory_order_seq_cst:  full barrier (default for _Atomic, expensive)
"""

_KERNEL_EQUIVALENT = """
  Linux kernel equivalent:
    smp_store_release(&flag, 1);  // release semantics
    v = smp_load_acquire(&flag);  // acquire semantics
    smp_mb();                     // full barrier (expensive, use sparingly)"""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Run racy_inc 10x; record lost updates. Use -fsanitize=thread to detect race.
2. Benchmark atomic vs mutex increment for N=10M; compare throughput.
3. Modern (smp_mb/memory ordering): implement Peterson's algorithm with C11
   atomics; test on ARM vs x86 to observe memory model differences."""

_QUIZ = """
========== Quiz ==========
Q1. Why did the racy counter lose updates? Describe the interleaving.
Q2. What does atomic_fetch_add compile down to on x86? (hint: LOCK XADD)
Q3. Why must the kernel validate user pointers before dereferencing them?
Q4. What is SMAP/SMEP and how do they protect against user pointer attacks?
Q5. What is the difference between memory_order_acquire/release and
    memory_order_seq_cst? When would you use each?
Q6. Why does the Linux kernel use READ_ONCE/WRITE_ONCE instead of C11
    _Atomic for shared variables in the kernel memory model?
Q7. On an ARM CPU (weakly ordered), can Peterson's mutual exclusion algorithm
    work without explicit memory barriers? Why or why not?"""


class AtomicCounter:
    """Integer counter whose fetch-and-add is indivisible."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def add(self, amount: int = 1) -> int:
        """Add `amount` and return the value held before the addition."""
        with self._lock:
            previous = self._value
            self._value = previous + amount
            return previous

    def load(self) -> int:
        with self._lock:
            return self._value


class _RacyCell:
    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = 0


def _check(threads: int, iterations: int) -> None:
    if threads < 0 or iterations < 0:
        raise ValueError("threads and iterations must not be negative")


def _run_threads(threads: int, target: Any, *args: Any) -> None:
    workers = [threading.Thread(target=target, args=args) for _ in range(threads)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()


def racy_increment(threads: int, iterations: int) -> int:
    """Increment a shared counter without synchronisation; return the final count.

    Separate load, add and store steps let threads overwrite each other,
    so the result may fall short of threads * iterations.
    """
    _check(threads, iterations)
    cell = _RacyCell()

    def work() -> None:
        for _ in range(iterations):
            cell.value += 1

    _run_threads(threads, work)
    return cell.value


def atomic_increment(threads: int, iterations: int) -> int:
    """Increment an AtomicCounter from several threads; return the final count."""
    _check(threads, iterations)
    counter = AtomicCounter()

    def work() -> None:
        for _ in range(iterations):
            counter.add(1)

    _run_threads(threads, work)
    return counter.load()


def publish_acquire_release(value: Any) -> Any:
    """Publish `value` from a producer thread behind a flag and return what the consumer reads.

    The producer writes the data and then sets the flag (release); the consumer
    waits for the flag (acquire) before reading the data.
    """
    shared: dict[str, Any] = {}
    flag = threading.Event()

    def producer() -> None:
        shared["data"] = value
        flag.set()

    thread = threading.Thread(target=producer)
    thread.start()
    flag.wait()
    seen = shared["data"]
    thread.join()
    return seen


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-concurrency",
        description="Data races, atomics and memory ordering.",
    ).parse_args(argv)

    expected = ITERATIONS * THREADS
    print("=== Lab 18: User Pointers, Concurrency ===")
    print_section("Phase 1: Data Race Demonstration")
    got = racy_increment(THREADS, ITERATIONS)
    print(f"  Expected: {expected}, Got: {got} (LOST {expected - got} updates!)")

    print_section("Phase 2: Atomic Fix")
    got = atomic_increment(THREADS, ITERATIONS)
    print(f"  Expected: {expected}, Got: {got} (correct with atomics)")

    print_section("Phase 3: User Pointer Safety in Kernel")
    print(_USER_POINTERS)

    print_section("Phase 4: Memory Barriers and smp_mb() Concept")
    print(_MEMORY_ORDERS)
    data = publish_acquire_release(42)
    print(f"  Acquire/release: flag=1, shared_data={data} (guaranteed visible)")
    print("  WHY: release-store ensures 'shared_data=42' is visible before flag=1.")
    print("       acquire-load ensures 'shared_data' read sees the released write.")
    print(_KERNEL_EQUIVALENT)

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())