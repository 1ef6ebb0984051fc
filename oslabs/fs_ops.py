"""File system operations: write versus fsync, the fd table and file copy bandwidth."""

from __future__ import annotations

import argparse
import os
import sys
import tempfile
from os import PathLike
from pathlib import Path

from oslabs.common import now_ns, print_section

BLOCKS = 1000
BLOCK_SIZE = 4096
COPY_SIZE = 8 * 1024 * 1024
COPY_CHUNK = 65536
_MIB = 1048576.0

_O_DIRECT_TEXT = """  O_DIRECT bypasses page cache — DMA directly to user buffer.
  Used by databases (PostgreSQL, MySQL) for their own caching.
  GPU DCs: GPU Direct Storage uses similar bypass for GPU memory."""

_FD_TABLE_TEXT = """  Each process has an fd table -> file description (open file) -> inode.
  After fork(): child gets copy of fd table, shares open file descriptions.
  After dup2(): two fds point to same open file description."""

_EXERCISE = """
========== Hands-On Exercise ==========
1. Benchmark 1000 x 4K write() with vs without fsync();
   observe page cache (fast) vs disk flush (slow) difference.
2. Implement atomic file update: temp write -> fsync -> rename -> fsync dir.
3. Modern (DAX + PMEM): mount ext4 with -o dax; measure mmap bandwidth
   vs non-DAX; observe page cache is bypassed for PMEM-backed files."""

_QUIZ = """
========== Quiz ==========
Q1. Why is write() so much faster than fsync()? Where does data go?
Q2. What data can be lost if the system crashes before fsync()?
Q3. What is the difference between fsync() and fdatasync()?
Q4. Why would a database use O_DIRECT?
Q5. What is the dirty_ratio kernel parameter and what happens when it is exceeded?
Q6. What is DAX (Direct Access) for persistent memory?  How does it differ from
    normal file I/O, and which filesystem feature must be enabled?
Q7. In a distributed ML training cluster, why must checkpoint writes use fsync()
    or O_SYNC rather than relying on page cache write-back?"""


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def write_and_fsync(
    path: str | PathLike[str], blocks: int = BLOCKS, block_size: int = BLOCK_SIZE
) -> tuple[float, float]:
    """Write `blocks` blocks of b"A" to `path` (truncating it), then fsync.

    Returns the seconds spent in the writes and the seconds spent in fsync.
    """
    if blocks < 0 or block_size < 0:
        raise ValueError("blocks and block_size must not be negative")
    block = b"A" * block_size
    start = now_ns()
    fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
    try:
        for _ in range(blocks):
            _write_all(fd, block)
        write_seconds = (now_ns() - start) / 1e9
        start = now_ns()
        os.fsync(fd)
        fsync_seconds = (now_ns() - start) / 1e9
    finally:
        os.close(fd)
    return write_seconds, fsync_seconds


def copy_bandwidth(
    directory: str | PathLike[str], size: int = COPY_SIZE
) -> tuple[float, float, int]:
    """Write a `size`-byte source file in `directory`, copy it to a second file and fsync.

    Both files are removed afterwards. Returns the copy time in seconds,
    the bandwidth in MiB/s and the number of bytes copied.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    src_fd, src = tempfile.mkstemp(prefix="lab31_src", dir=directory)
    try:
        dst_fd, dst = tempfile.mkstemp(prefix="lab31_dst", dir=directory)
    except OSError:
        os.close(src_fd)
        os.unlink(src)
        raise
    try:
        chunk = b"\xcc" * COPY_CHUNK
        remaining = size
        while remaining > 0:
            _write_all(src_fd, chunk[: min(remaining, COPY_CHUNK)])
            remaining -= min(remaining, COPY_CHUNK)
        os.fsync(src_fd)
        os.lseek(src_fd, 0, os.SEEK_SET)

        start = now_ns()
        copied = 0
        while data := os.read(src_fd, COPY_CHUNK):
            _write_all(dst_fd, data)
            copied += len(data)
        os.fsync(dst_fd)
        seconds = (now_ns() - start) / 1e9

        source_size = os.fstat(src_fd).st_size
        bandwidth = (source_size / _MIB) / seconds if seconds > 0 else float("inf")
        return seconds, bandwidth, copied
    finally:
        for fd, name in ((src_fd, src), (dst_fd, dst)):
            os.close(fd)
            os.unlink(name)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="oslabs-fs-ops",
        description="write() versus fsync(), the fd table and copy bandwidth.",
    )
    parser.add_argument("--directory", default=tempfile.gettempdir())
    args = parser.parse_args(argv)
    directory = Path(args.directory)

    print("=== Lab 31: File System Operations ===")
    print_section("Phase 1: open/write/fsync Path")
    test_file = directory / "lab31_test.dat"
    try:
        write_seconds, fsync_seconds = write_and_fsync(test_file, BLOCKS, BLOCK_SIZE)
    finally:
        test_file.unlink(missing_ok=True)
    print(f"  Write 4MiB: {write_seconds * 1000:.3f} ms (to page cache)")
    print(f"  fsync:       {fsync_seconds * 1000:.3f} ms (flush to disk)")
    print("  OBSERVE: write() returns immediately (page cache). fsync() waits for disk.")

    print_section("Phase 2: O_DIRECT Bypass")
    print(_O_DIRECT_TEXT)

    print_section("Phase 3: File Descriptor Table")
    print(_FD_TABLE_TEXT)

    print_section("Phase 4: File Copy Bandwidth + Page Cache Behavior")
    try:
        seconds, bandwidth, _ = copy_bandwidth(directory, COPY_SIZE)
    except OSError:
        pass
    else:
        print(f"  File copy 8 MiB: {seconds * 1000.0:.3f} ms  bandwidth: {bandwidth:.0f} MiB/s")
        print("  (Page cache -> page cache copy; disk I/O only on fsync)")
        print("  With O_DIRECT: bypasses page cache; bandwidth limited by NVMe/disk.")
        print("  With DAX + PMEM: mmap -> mmap copy at ~DRAM bandwidth (~30-50 GB/s).")

    print(_EXERCISE)
    print(_QUIZ)
    return 0


if __name__ == "__main__":
    sys.exit(main())