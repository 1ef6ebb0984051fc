"""Compare-and-swap stack and tagged pointers against the ABA problem."""

from __future__ import annotations

import argparse
import sys
import threading
from dataclasses import dataclass
from typing import Any

from oslabs.common import now_ns, print_section

ADDRESS_BITS = 48

_EXERCISE = """
========== Hands-On Exercise ==========
1. Implement ABA-safe stack with __uint128_t tagged pointer (CMPXCHG16B);
   compile with -mcx16; verify no ABA corruption under concurrent access.
2. Demonstrate ABA in the current stack: thread interleaving that causes
   dangling pointer dereference (use-after-free scenario).
3. Modern (DPDK): study rte_ring lock-free ring buffer;
   explain how it achieves 100 Gbps packet processing without locks."""

_QUIZ = """
========== Quiz ==========
Q1. Explain CAS in your own words. What makes it 'lock-free'?
Q2. What is the ABA problem? Give a concrete example with the stack above.
Q3. Why does ARM need more memory barriers than x86?
Q4. What is a memory model and why does C11 define one?
Q5. What is the difference between lock-free and wait-free algorithms?
    Give an example of each from this lab.
Q6. How do tagged pointers (double-word CAS / CMPXCHG16B) solve the ABA problem?
Q7. How does DPDK rte_ring achieve millions of lock-free enqueue/dequeue
    per second for packet processing without any mutex or spinlock?"""


@dataclass(slots=True)
class _Node:
    value: Any
    next: _Node | None


class LockFreeStack:
    """LIFO stack whose top is only ever replaced through a compare-and-swap retry loop."""

    def __init__(self) -> None:
        self._top: _Node | None = None
        self._size = 0
        self._cas_guard = threading.Lock()

    def _compare_and_swap(self, expected: _Node | None, new: _Node | None, delta: int) -> bool:
        # The guard makes this single step indivisible, as the hardware instruction is.
        with self._cas_guard:
            if self._top is not expected:
                return False
            self._top = new
            self._size += delta
            return True

    def push(self, value: Any) -> None:
        node = _Node(value, None)
        while True:
            old = self._top
            node.next = old
            if self._compare_and_swap(old, node, 1):
                return

    def pop(self) -> Any:
        """Remove and return the top value; raise IndexError when empty."""
        while True:
            old = self._top
            if old is None:
                raise IndexError("pop from empty stack")
            if self._compare_and_swap(old, old.next, -1):
                return old.value

    def __len__(self) -> int:
        return self._size


@dataclass(frozen=True)
class TaggedPointer:
    """A 48-bit address paired with a version tag, compared as one unit."""

    address: int
    tag: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.address < 1 << ADDRESS_BITS:
            raise ValueError(f"address must fit in {ADDRESS_BITS} bits")
        if self.tag < 0:
            raise ValueError("tag must not be negative")

    def bump(self, address: int) -> TaggedPointer:
        """Return the pointer that a successful CAS installs: new address, next tag."""
        return TaggedPointer(address, self.tag + 1)


def concurrent_push(threads: int, items: int) -> LockFreeStack:
    """Have `threads` threads each push 0..items-1 onto one stack; return the stack."""
    if threads < 0 or items < 0:
        raise ValueError("threads and items must not be negative")
    stack = LockFreeStack()

    def pusher() -> None:
        for value in range(items):
            stack.push(value)

    workers = [threading.Thread(target=pusher) for _ in range(threads)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    return stack


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-lockfree",
        description="Compare-and-swap stack, memory ordering and the ABA problem.",
    ).parse_args(argv)

    print("=== Lab 24: Lock-free Primitives, CAS ===")
    print_section("Phase 1: Compare-and-Swap (CAS) Lock-free Stack")
    print("  CAS: atomically compare and swap a memory location.")
    print("  If current==expected, write new value. Else retry.\n")
    threads, items = 4, 100000
    start = now_ns()
    stack = concurrent_push(threads, items)
    elapsed_ms = (now_ns() - start) / 1e6
    print(f"  Pushed {threads * items} items in {elapsed_ms:.1f} ms")
    popped = 0
    while stack:
        stack.pop()
        popped += 1
    print(f"  Popped {popped} items (should be {threads * items})")

    print_section("Phase 2: Memory Ordering")
    print("  C11 memory orders: relaxed, acquire, release, seq_cst")
    print("  x86 provides strong ordering (TSO) — most ops are seq_cst by default.")
    print("  ARM/RISC-V are weakly ordered — need explicit barriers.")
    print("  Kernel uses: smp_mb(), smp_rmb(), smp_wmb(), READ_ONCE(), WRITE_ONCE()")

    print_section("Phase 3: ABA Problem")
    print("  CAS can suffer from ABA: value changes A->B->A, CAS sees A and succeeds")
    print("  but the state has changed. Solutions: tagged pointers, hazard pointers, RCU.\n")

    print_section("Phase 4: ABA Solution with Tagged Pointers")
    pointer = TaggedPointer(0x7FFFC0001234, 7)
    print("  Tagged pointer concept:")
    print(f"    ptr  = {pointer.address:#x} (48-bit VA)")
    print(f"    tag  = {pointer.tag} (version counter, incremented on each successful CAS)")
    print("    packed: if CAS checks both ptr AND tag, ABA cannot fool it")
    print("    because tag=7 != tag=5 even if ptr is the same address.\n")
    print("  x86_64 CMPXCHG16B: atomically compare+swap 16 bytes (ptr + 8-byte tag).")
    print("  DPDK rte_ring uses this for lock-free packet ring with ABA protection.")

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())