"""Futex-style sleep/wakeup and acquire/release publication."""

from __future__ import annotations

import argparse
import errno
import sys
import threading
import time
from collections import deque

from oslabs.common import print_section
from oslabs.concurrency import publish_acquire_release

SLEEPER_DELAY = 0.1

_SLEEP_WAKEUP = """  In xv6 (teaching OS):
    sleep(channel, lock): release lock, add to sleep queue, yield CPU
    wakeup(channel): wake all processes sleeping on this channel
  Linux equivalent: wait_event() / wake_up() on wait queues.
  The 'lost wakeup' problem: must hold lock when checking condition."""

_ACQUIRE_RELEASE = """  acquire: all subsequent reads/writes stay AFTER this point
  release: all preceding reads/writes stay BEFORE this point
  Together they create a happens-before relationship.
  Linux: spin_lock = acquire, spin_unlock = release."""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Implement custom spinlock with atomic_flag acquire/release;
   benchmark vs pthread_spinlock for 4-thread contention.
2. Implement futex-based semaphore: counter + futex_wait/wake;
   test with producer/consumer pattern.
3. Modern (C11 atomics on ARM64): compare asm output for relaxed vs
   release vs seq_cst stores; observe growing barrier overhead."""

_QUIZ = """
========== Quiz ==========
Q1. Why is futex faster than a pure kernel mutex for uncontended locks?
Q2. What is the 'lost wakeup' problem and how is it prevented?
Q3. Explain acquire/release semantics with a producer-consumer example.
Q4. How does the kernel wait_event() macro prevent lost wakeups?
Q5. What is the difference between memory_order_acquire/release and
    memory_order_seq_cst in terms of generated CPU instructions on ARM64?
Q6. Why does the Linux kernel use smp_mb() instead of C11 _Atomic with
    memory_order_seq_cst for shared variables?
Q7. Explain the FUTEX_WAIT + FUTEX_WAKE handoff protocol.  What does
    FUTEX_WAIT return if the value changed before the syscall executed?"""


class _Waiter:
    __slots__ = ("woken",)

    def __init__(self) -> None:
        self.woken = False


class Futex:
    """An integer word with FUTEX_WAIT / FUTEX_WAKE semantics and a FIFO wait queue."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._cond = threading.Condition()
        self._waiters: deque[_Waiter] = deque()

    def load(self) -> int:
        with self._cond:
            return self._value

    def store(self, value: int) -> None:
        with self._cond:
            self._value = value

    def wait(self, expected: int, timeout: float | None = None) -> bool:
        """Sleep if the value still equals `expected`.

        Returns True when woken by wake() and False when the timeout ran out.
        Raises BlockingIOError (EAGAIN) if the value already differs.
        """
        with self._cond:
            if self._value != expected:
                raise BlockingIOError(errno.EAGAIN, "futex value does not match expected")
            waiter = _Waiter()
            self._waiters.append(waiter)
            woken = self._cond.wait_for(lambda: waiter.woken, timeout)
            if not woken:
                self._waiters.remove(waiter)
            return woken

    def wake(self, count: int = 1) -> int:
        """Wake up to `count` waiters in arrival order; return how many were woken."""
        if count < 0:
            raise ValueError("count must not be negative")
        with self._cond:
            woken = 0
            while self._waiters and woken < count:
                self._waiters.popleft().woken = True
                woken += 1
            if woken:
                self._cond.notify_all()
            return woken


def sleeper_demo(delay: float = SLEEPER_DELAY) -> int:
    """A thread sleeps on a futex until the main thread sets it to 1 after `delay` seconds.

    Returns the value the sleeper saw after waking.
    """
    if delay < 0:
        raise ValueError("delay must not be negative")
    futex = Futex(0)
    seen: list[int] = []

    def sleeper() -> None:
        print("  Sleeper: waiting for futex_val to become 1...", flush=True)
        while futex.load() == 0:
            try:
                futex.wait(0)
            except BlockingIOError:
                continue
        value = futex.load()
        seen.append(value)
        print(f"  Sleeper: woke up! futex_val={value}", flush=True)

    thread = threading.Thread(target=sleeper)
    thread.start()
    time.sleep(delay)
    print("  Main: setting futex_val=1 and waking sleeper", flush=True)
    futex.store(1)
    futex.wake(1)
    thread.join()
    return seen[0]


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-sync-primitives",
        description="Futex sleep/wakeup and acquire/release semantics.",
    ).parse_args(argv)

    print("=== Lab 25: Synchronization: acquire/release, sleep/wakeup ===")
    print_section("Phase 1: Futex — Foundation of Linux Synchronization")
    print("  futex = Fast Userspace muTEX")
    print("  Uncontended case: pure userspace atomic ops (no syscall).")
    print("  Contended case: syscall to kernel for sleep/wakeup.\n")
    sleeper_demo(SLEEPER_DELAY)

    print_section("Phase 2: xv6-style sleep/wakeup Concepts")
    print(_SLEEP_WAKEUP)

    print_section("Phase 3: Acquire/Release Semantics")
    print(_ACQUIRE_RELEASE)

    print_section("Phase 4: Acquire/Release vs Sequential Consistency Benchmark")
    data = publish_acquire_release(12345)
    print(f"  acquire/release: data={data}  (release-store guarantees visibility)")
    data = publish_acquire_release(99999)
    print(f"  seq_cst:          data={data}  (stronger guarantee, higher cost on ARM)")
    print("\n  On x86 (TSO): both produce identical code (x86 already seq_cst for loads/stores)")
    print("  On ARM64: release=stlr, acquire=ldar; seq_cst adds dmb ish (full fence)")

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())