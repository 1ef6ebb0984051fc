"""Coarse-grained versus fine-grained locking over a bucketed counter table."""

from __future__ import annotations

import argparse
import sys
import threading
from collections.abc import Callable

from oslabs.common import now_ns, print_section

BUCKETS = 64
ITEMS = 1_000_000
THREADS = 4
CACHE_LINE = 64
# Size of a pthread mutex in the common 64-bit C library, used for the false-sharing check.
MUTEX_SIZE = 40

_OBSERVE = """
  OBSERVE: Fine-grained locking allows parallel access to different buckets.
  Tradeoff: more locks = more memory, risk of deadlock, harder to reason about.
  Kernel example: per-inode locks vs global filesystem lock."""

_IMPROVEMENTS = """  Production hash table improvements:
    1. Align each lock to cache line size (64B) to prevent false sharing.
    2. Use RCU for read-heavy tables (e.g., Linux routing table).
    3. Use lock striping: fewer locks than buckets (lock[bucket % N_LOCKS]).
"""

_RCU = """
  RCU (Read-Copy-Update) concept:
    Readers: rcu_read_lock() / rcu_read_unlock() (disable preemption, ~0 cost)
    Writers: copy -> modify -> rcu_assign_pointer() -> synchronize_rcu()
    Used in: Linux routing (FIB), dcache, task list, network device list.
    Benefit: readers never block, even during concurrent writes."""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Implement 1024-bucket hash table; compare global vs per-bucket lock;
   add 64B padding to locks and measure false-sharing elimination speedup.
2. Add 90% reads / 10% writes workload; compare mutex vs rwlock throughput.
3. Modern (RCU): study fib_table_lookup() in Linux net/ipv4/fib_trie.c;
   trace the rcu_read_lock/unlock pattern and call_rcu deferred free."""

_QUIZ = """
========== Quiz ==========
Q1. Why is fine-grained locking faster under contention?
Q2. What is lock ordering and why does it prevent deadlock?
Q3. Give a kernel example of fine-grained locking.
Q4. What is the tradeoff between lock granularity and complexity?
Q5. What is false sharing and how does it affect per-element locking in
    a hash table?  How do you fix it with struct padding?
Q6. How does RCU (Read-Copy-Update) achieve zero overhead for readers?
    What is a 'grace period' and why must writers wait for it?
Q7. In the Linux routing table (FIB), why is RCU preferred over per-bucket
    mutexes for the forwarding path in datacenter routers?"""


def _check(threads: int, items: int, buckets: int) -> None:
    if threads < 0 or items < 0:
        raise ValueError("threads and items must not be negative")
    if buckets < 1:
        raise ValueError("buckets must be at least 1")


def _run(threads: int, work: Callable[[], None]) -> None:
    workers = [threading.Thread(target=work) for _ in range(threads)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()


def coarse_counts(threads: int, items: int, buckets: int) -> list[int]:
    """Each thread adds 1 to bucket i % buckets for i in 0..items-1, all under one global lock.

    Returns the final per-bucket counts.
    """
    _check(threads, items, buckets)
    table = [0] * buckets
    global_lock = threading.Lock()

    def work() -> None:
        for i in range(items):
            with global_lock:
                table[i % buckets] += 1

    _run(threads, work)
    return table


def fine_counts(threads: int, items: int, buckets: int) -> list[int]:
    """Same workload as coarse_counts, but each bucket has its own lock."""
    _check(threads, items, buckets)
    table = [0] * buckets
    locks = [threading.Lock() for _ in range(buckets)]

    def work() -> None:
        for i in range(items):
            bucket = i % buckets
            with locks[bucket]:
                table[bucket] += 1

    _run(threads, work)
    return table


def cache_lines(lock_size: int, count: int, line_size: int = CACHE_LINE) -> int:
    """Number of cache lines spanned by `count` locks of `lock_size` bytes packed together."""
    if lock_size < 0 or count < 0:
        raise ValueError("lock_size and count must not be negative")
    if line_size < 1:
        raise ValueError("line_size must be at least 1")
    return (count * lock_size + line_size - 1) // line_size


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="oslabs-finegrained",
        description="Coarse-grained versus per-bucket locking.",
    )
    parser.add_argument("--threads", type=int, default=THREADS)
    parser.add_argument("--items", type=int, default=ITEMS)
    args = parser.parse_args(argv)
    if args.threads < 0 or args.items < 0:
        parser.error("--threads and --items must not be negative")

    print("=== Lab 20: Fine-grained Locking ===")
    print_section("Phase 1: Coarse-grained (single lock)")
    start = now_ns()
    coarse_counts(args.threads, args.items, BUCKETS)
    print(f"  Time: {(now_ns() - start) / 1e6:.1f} ms")

    print_section("Phase 2: Fine-grained (per-bucket locks)")
    start = now_ns()
    fine_counts(args.threads, args.items, BUCKETS)
    print(f"  Time: {(now_ns() - start) / 1e6:.1f} ms")
    print(_OBSERVE)

    print_section("Phase 3: Hash Table with Per-Bucket Locks")
    print(f"  This lab already implements per-bucket locking ({BUCKETS} buckets, {BUCKETS} locks).\n")
    print(_IMPROVEMENTS)
    print("  False sharing check:")
    print(f"    sizeof(pthread_mutex_t)={MUTEX_SIZE} bytes per lock")
    print(
        f"    {BUCKETS} locks * {MUTEX_SIZE} bytes = {BUCKETS * MUTEX_SIZE} bytes "
        f"({cache_lines(MUTEX_SIZE, BUCKETS)} cache lines)"
    )
    if MUTEX_SIZE < CACHE_LINE:
        print("    WARNING: locks smaller than cache line -- false sharing possible!")
    else:
        print("    OK: each lock >= 1 cache line (no false sharing).")
    print(_RCU)

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())