"""Signal delivery to oneself and demand paging seen through minor fault counts."""

from __future__ import annotations

import argparse
import mmap
import resource
import signal
import sys

from oslabs.common import print_section

PAGES = 100
PAGE_SIZE = mmap.PAGESIZE

# sigaction flag values on Linux.
SA_SIGINFO = 0x4
SA_RESTART = 0x10000000
SA_NODEFER = 0x40000000

_BLOCK_DEVICE = """  Traditional IDE/SATA driver flow:
  1. Process calls read() -> VFS -> filesystem -> block layer
  2. Block layer issues I/O request to device driver
  3. Driver programs DMA controller, process sleeps
  4. Device completes I/O, raises interrupt (IRQ)
  5. Interrupt handler wakes process, data is in page cache

  Modern: NVMe uses polled I/O + MSI-X interrupts + io_uring.
  GPU DCs: NVMe SSDs for checkpointing, GDS (GPU Direct Storage) bypasses CPU."""

_USERSPACE_PAGER = """  Concept: mmap PROT_NONE + SIGSEGV handler = userspace demand pager.
  On first access to each page:
    1. CPU raises #PF (not-present)
    2. Kernel delivers SIGSEGV with SA_SIGINFO to our handler
    3. Handler calls mprotect(fault_page, PAGE_SIZE, PROT_RW)
    4. Handler calls siglongjmp to retry the access
  This simulates kernel demand paging entirely in userspace!

  Limitation vs userfaultfd:
    SIGSEGV: handler runs on faulting thread's stack (reentrancy risk)
    userfaultfd: dedicated handler thread, no reentrancy issues
    userfaultfd: can handle faults from OTHER processes' memory
    userfaultfd: UFFDIO_COPY lets handler supply arbitrary page content"""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Implement userspace demand pager: PROT_NONE mmap + SIGSEGV handler
   that mprotect-enables each page on first access; count faults.
2. Use sigqueue() to send signal with integer payload; receive in SA_SIGINFO handler.
3. Modern (userfaultfd): open /dev/userfaultfd, register region, handle
   UFFD_EVENT_PAGEFAULT in dedicated thread with UFFDIO_COPY/ZEROPAGE."""

_QUIZ = """
========== Quiz ==========
Q1. What makes a signal handler 'reentrant-safe'?
Q2. Trace a read() from userspace to disk and back.
Q3. What is GPU Direct Storage and why does it matter for AI training checkpoints?
Q4. Why does mmap not cause page faults but memset does?
Q5. What does SA_SIGINFO provide that a plain signal() handler does not?
Q6. How does userfaultfd differ from SIGSEGV-based page fault handling?
    Why is it preferred for QEMU post-copy live migration?
Q7. What is the 'async-signal-safety' requirement and why does printf()
    violate it?  What are the safe alternatives for signal handlers?"""


def send_self_signal(signum: int) -> int:
    """Install a handler for `signum`, send the signal to this process and return what arrived.

    The previous handler is restored afterwards. Must run in the main thread.
    """
    received: list[int] = []

    def handler(sig: int, frame: object) -> None:
        received.append(sig)

    previous = signal.signal(signum, handler)
    try:
        signal.raise_signal(signum)
        if not received:
            signal.sigtimedwait([], 0) if False else None
    finally:
        signal.signal(signum, previous)
    if not received:
        raise RuntimeError(f"signal {signum} was not delivered")
    return received[0]


def _minor_faults() -> int:
    return resource.getrusage(resource.RUSAGE_SELF).ru_minflt


def minor_faults_for_touch(pages: int = PAGES) -> tuple[int, int]:
    """Map `pages` anonymous pages, then write to each one.

    Returns the minor faults counted across the mapping and across the touching.
    """
    if pages < 1:
        raise ValueError("pages must be at least 1")
    size = pages * PAGE_SIZE
    before_map = _minor_faults()
    region = mmap.mmap(-1, size, flags=mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS)
    try:
        after_map = _minor_faults()
        for offset in range(0, size, PAGE_SIZE):
            region[offset] = 0xAB
        after_touch = _minor_faults()
    finally:
        region.close()
    return after_map - before_map, after_touch - after_map


def signal_flags() -> dict[str, int]:
    """The sigaction flags discussed by the lab, by name."""
    return {
        "SA_SIGINFO": SA_SIGINFO,
        "SA_RESTART": SA_RESTART,
        "SA_NODEFER": SA_NODEFER,
    }


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-signals-demand",
        description="Signals, block device flow and demand paging.",
    ).parse_args(argv)

    import os

    print("=== Lab 26: Signals, Device Drivers, Intro to Demand Paging ===")
    print_section("Phase 1: Signal Delivery")
    print(f"  Sending SIGUSR1 to self (PID {os.getpid()})...")
    got = send_self_signal(signal.SIGUSR1)
    name = "SIGUSR1" if got == signal.SIGUSR1 else "?"
    print(f"  Handler received signal: {int(got)} ({name})")
    print("  Signals are software interrupts delivered by the kernel.")
    print("  Async signals can interrupt any instruction — handler must be reentrant.")

    print_section("Phase 2: Block Device Concepts")
    print(_BLOCK_DEVICE)

    print_section("Phase 3: Demand Paging Intro")
    map_faults, touch_faults = minor_faults_for_touch(PAGES)
    print(f"  mmap {PAGES} pages: faults={map_faults} (just metadata)")
    print(f"  touch {PAGES} pages: faults={touch_faults} (demand paging!)")

    print_section("Phase 4: Userspace Demand Paging with SIGSEGV Handler")
    print(_USERSPACE_PAGER)

    flags = signal_flags()
    print("\n  SA_SIGINFO: signal info passed to handler:")
    print(
        f"  sigaction flags: SA_SIGINFO={flags['SA_SIGINFO']:#x} "
        f"SA_RESTART={flags['SA_RESTART']:#x} SA_NODEFER={flags['SA_NODEFER']:#x}"
    )
    print("  SA_SIGINFO: provides siginfo_t with fault address and code")
    print("  SA_RESTART: automatically restart interrupted syscalls")
    print("  SA_NODEFER: don't mask this signal during handler (allow nesting)")

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())