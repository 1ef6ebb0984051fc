"""Crash recovery: write-ahead logging ideas and the atomic file replacement pattern."""

from __future__ import annotations

import argparse
import os
import sys
import tempfile
from os import PathLike
from pathlib import Path

from oslabs.common import print_section

_WHY_JOURNALS = """  Problem: updating a file involves multiple disk writes:
    1. Update data blocks
    2. Update inode (size, timestamps)
    3. Update free block bitmap
  Crash between steps -> inconsistent filesystem.

  Solution: Write-Ahead Logging (journaling):
    1. Write all changes to journal first
    2. Write commit record
    3. Apply changes to actual locations
    4. Mark journal entry as done
  On crash recovery: replay committed journal entries."""

_JOURNAL_MODES = """  ext4 journal modes:
    journal:  data + metadata journaled (safest, slowest)
    ordered:  metadata journaled, data written before metadata (default)
    writeback: metadata journaled, data can be stale (fastest)"""

_ZFS_TEXT = """
  ZFS vs ext4 journal comparison:
    ext4 journal: WAL, metadata-first, replay on mount after crash
    ZFS ZIL: intent log for synchronous writes; TXG for async commits
    ZFS advantage: checksumming detects silent corruption (ext4 does not)
    ZFS disadvantage: higher write amplification on random writes"""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Simulate crash mid-write with SIGKILL; observe partial data without fsync;
   repeat with fsync and verify complete data survives.
2. Measure fsync latency for 4K/64K/1M/4M files on NVMe vs HDD;
   observe NVMe is nearly constant (flush cmd latency).
3. Modern (ZFS): create ZFS pool; compare 100K file write throughput vs ext4;
   use 'zpool status' to verify checksums; run 'zpool scrub' to verify data."""

_QUIZ = """
========== Quiz ==========
Q1. What is write-ahead logging and why is it needed?
Q2. What can go wrong with rename() without fsync on the directory?
Q3. What is the difference between ext4 ordered and writeback modes?
Q4. How does journaling relate to database WAL (e.g., PostgreSQL)?
Q5. What is the difference between O_SYNC, O_DSYNC, and fsync()?  When
    would you use each for a write-heavy database workload?
Q6. How does ZFS achieve crash consistency without a traditional journal?
    What is a Transaction Group (TXG) and how does it compare to ext4 commit?
Q7. Why must the rename() + fsync(dir) pattern be used for atomic file
    replacement?  What failure scenario does each step prevent?"""


def fsync_directory(path: str | PathLike[str]) -> None:
    """Flush a directory's entries to disk so that renames inside it survive a crash."""
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    fd = os.open(path, flags)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def _stage(directory: Path, data: bytes, prefix: str) -> str:
    """Write `data` to a new temporary file in `directory`, fsync it and return its path."""
    fd, temp = tempfile.mkstemp(prefix=prefix, dir=directory)
    try:
        view = memoryview(data)
        while view:
            view = view[os.write(fd, view):]
        os.fsync(fd)
    except BaseException:
        os.close(fd)
        os.unlink(temp)
        raise
    os.close(fd)
    return temp


def atomic_write(path: str | PathLike[str], data: bytes | str) -> None:
    """Replace `path` with `data` so that a crash leaves either the old or the new content.

    Writes to a temporary file in the same directory, fsyncs it, renames it
    over `path` and fsyncs the directory.
    """
    if isinstance(data, str):
        data = data.encode()
    target = Path(path)
    directory = target.parent
    temp = _stage(directory, data, f".{target.name}.")
    try:
        os.replace(temp, target)
    except BaseException:
        os.unlink(temp)
        raise
    fsync_directory(directory)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="oslabs-crash-recovery",
        description="Journaling concepts and the atomic file update pattern.",
    )
    parser.add_argument("--directory", default=tempfile.gettempdir())
    args = parser.parse_args(argv)
    directory = Path(args.directory)

    print("=== Lab 32: Crash Recovery and Logging ===")
    print_section("Phase 1: Why Journals Exist")
    print(_WHY_JOURNALS)

    print_section("Phase 2: fsync Ordering Demo")
    final = directory / "lab32_final.dat"
    atomic_write(final, b"important data")
    print("  Safe atomic file update: write new -> fsync -> rename -> fsync dir")
    final.unlink(missing_ok=True)

    print_section("Phase 3: Journal Modes")
    print(_JOURNAL_MODES)

    print_section("Phase 4: Simulating Crash Recovery Scenario")
    try:
        temp = _stage(directory, b"new important data v2\n", "lab32_new_")
    except OSError:
        temp = None
    if temp is not None:
        print(f"  Step 1: wrote to temp file {temp}")
        print("  Step 2: fsync'd temp file (data durable on disk)")
        final = directory / "lab32_final_v2.dat"
        os.replace(temp, final)
        print("  Step 3: rename() -- atomic POSIX operation")
        print("          After crash: either old file OR new file, never half-written")
        try:
            fsync_directory(directory)
        except OSError:
            pass
        print(f"  Step 4: fsync'd {directory} directory (rename durable across crash)")
        print("  WHY: Without dir fsync, the rename might not survive a reboot.")
        final.unlink(missing_ok=True)

    print(_ZFS_TEXT)
    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())