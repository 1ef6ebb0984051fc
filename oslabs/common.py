"""Helpers shared by the lab programs: section banners, timing and /proc parsing."""

from __future__ import annotations

import time
from collections.abc import Iterable
from os import PathLike
from pathlib import Path


def print_section(title: str) -> None:
    """Print a banner that separates the phases of a lab."""
    print(f"\n========== {title} ==========")


def now_ns() -> int:
    """Return a monotonic timestamp in nanoseconds."""
    return time.monotonic_ns()


def read_lines(path: str | PathLike[str]) -> list[str]:
    """Return the lines of a text file without their line endings.

    Raises OSError when the file cannot be read.
    """
    return Path(path).read_text(errors="replace").splitlines()


def _as_tuple(patterns: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(patterns, str):
        return (patterns,)
    return tuple(patterns)


def filter_prefixed(lines: Iterable[str], prefixes: str | Iterable[str]) -> list[str]:
    """Keep the lines that start with any of the given prefixes."""
    wanted = _as_tuple(prefixes)
    return [line for line in lines if line.startswith(wanted)]


def filter_containing(lines: Iterable[str], substrings: str | Iterable[str]) -> list[str]:
    """Keep the lines that contain any of the given substrings."""
    wanted = _as_tuple(substrings)
    return [line for line in lines if any(part in line for part in wanted)]