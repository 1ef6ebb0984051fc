"""Processes in action: fork, exec, wait, zombies and /proc/<pid>/status."""

from __future__ import annotations

import argparse
import os
import sys
import time
from collections.abc import Iterable

from oslabs.common import filter_prefixed, print_section, read_lines

STATUS_PREFIXES = (
    "Pid:",
    "PPid:",
    "VmPeak:",
    "VmRSS:",
    "VmData:",
    "VmStk:",
    "Threads:",
    "NSpid:",
)

ZOMBIE_LINGER = 0.1

_EXERCISE = """
========== Hands-On Exercise ==========
1. Fork a child, read /proc/<child>/status VmRSS before and after execve;
   observe that execve() resets the entire address space.
2. Create a zombie (child exits, parent sleeps 5s), observe 'Z' state in ps.
3. Modern: run in Docker and inspect /proc/self/status NSpid to see
   host vs container PID namespace mapping."""

_QUIZ = """
========== Quiz ==========
Q1. What is a zombie process and how is it created?
Q2. What happens to orphaned processes?
Q3. What does execve() replace in the process? What does it preserve?
Q4. Why is fork()+execve() the standard pattern instead of a single spawn()?
Q5. What fields in /proc/PID/status track memory usage, and which resets after execve()?
Q6. What is a PID namespace and how does it enable container PID isolation
    (hint: clone(CLONE_NEWPID) and the NSpid field in /proc/status)?
Q7. How does systemd (PID 1) avoid zombie accumulation when it adopts
    orphaned processes (hint: prctl(PR_SET_CHILD_SUBREAPER))?"""


def _run_child(index: int, do_exec: bool) -> None:
    """Body of a forked child; never returns."""
    try:
        print(f"  Child {index}: PID={os.getpid()} PPID={os.getppid()}", flush=True)
        if do_exec:
            print(f"  Child {index}: exec(ls)...", flush=True)
            try:
                os.execl("/bin/ls", "ls", "-la", "/proc/self")
            except OSError as exc:
                print(f"exec: {exc.strerror}", file=sys.stderr, flush=True)
    finally:
        os._exit(index & 0xFF)


def _spawn_children(count: int, exec_index: int | None = None) -> list[tuple[int, int]]:
    if count < 0:
        raise ValueError("count must not be negative")
    sys.stdout.flush()
    sys.stderr.flush()
    for index in range(count):
        if os.fork() == 0:
            _run_child(index, index == exec_index)
    reaped = []
    for _ in range(count):
        pid, status = os.wait()
        if os.WIFEXITED(status):
            reaped.append((pid, os.WEXITSTATUS(status)))
    return reaped


def fork_and_reap(count: int) -> list[tuple[int, int]]:
    """Fork `count` children that exit with their index; return (pid, exit code) in reap order."""
    return _spawn_children(count)


def reap_zombie() -> int:
    """Fork a child that exits at once, leave it a zombie briefly, reap it and return its PID."""
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid == 0:
        os._exit(0)
    print(f"  Created child PID {pid} -- now a zombie until we wait().")
    print(f"  Check: ps aux | grep Z | grep {pid}")
    time.sleep(ZOMBIE_LINGER)
    os.waitpid(pid, 0)
    return pid


def status_fields(lines: Iterable[str]) -> list[str]:
    """Select the PID, memory and thread lines of a /proc/<pid>/status listing."""
    return filter_prefixed(lines, STATUS_PREFIXES)


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        prog="oslabs-processes",
        description="Fork, exec, wait, zombies and /proc/<pid>/status.",
    ).parse_args(argv)

    print("=== Lab 14: Processes in Action ===")
    print_section("Phase 1: Fork, Exec, Wait")
    print(f"  Parent PID: {os.getpid()}, PPID: {os.getppid()}")
    for pid, code in _spawn_children(3, exec_index=2):
        print(f"  Reaped PID {pid}, exit={code}")

    print_section("Phase 2: Process Tree")
    print(f"  Run: pstree -p {os.getpid()}")
    print(f'  Or:  cat /proc/{os.getpid()}/status | grep -E "Pid|PPid|Threads"')

    print_section("Phase 3: Zombie and Orphan")
    reap_zombie()
    print("  Reaped zombie.")

    print_section("Phase 4: Reading /proc/self/status Vm Fields")
    try:
        lines = read_lines(f"/proc/{os.getpid()}/status")
    except OSError:
        lines = None
    if lines is not None:
        print("  Key fields from /proc/self/status:")
        for line in status_fields(lines):
            print(f"    {line}")
    print("  NSpid: shows host PID and PID-namespace-local PID (useful in containers).")

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())