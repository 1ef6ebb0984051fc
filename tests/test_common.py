import time

import pytest

from oslabs.common import (
    filter_containing,
    filter_prefixed,
    now_ns,
    print_section,
    read_lines,
)


def test_print_section_banner(capsys):
    print_section("Phase 1: Fork, Exec, Wait")
    out = capsys.readouterr().out
    assert out == "\n========== Phase 1: Fork, Exec, Wait ==========\n"


def test_now_ns_is_monotonic_and_advances():
    first = now_ns()
    time.sleep(0.002)
    second = now_ns()
    assert second >= first + 1_000_000


def test_read_lines_strips_line_endings(tmp_path):
    path = tmp_path / "status"
    path.write_text("Name:\tlab\nPid:\t7\n")
    assert read_lines(path) == ["Name:\tlab", "Pid:\t7"]


def test_read_lines_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_lines(tmp_path / "absent")


def test_filter_prefixed_matches_start_only():
    lines = ["Pid:\t1", "PPid:\t0", "TracerPid:\t0", "Name:\tinit"]
    assert filter_prefixed(lines, ("Pid:", "PPid:")) == ["Pid:\t1", "PPid:\t0"]


def test_filter_prefixed_accepts_single_string():
    lines = ["Threads:\t4", "Name:\tx"]
    assert filter_prefixed(lines, "Threads:") == ["Threads:\t4"]


def test_filter_containing_matches_anywhere():
    lines = [
        "voluntary_ctxt_switches:\t3",
        "nonvoluntary_ctxt_switches:\t1",
        "Name:\tlab",
    ]
    result = filter_containing(lines, ["ctxt_switches"])
    assert result == lines[:2]


def test_filters_preserve_order_and_subset():
    lines = ["b x", "a x", "c", "a y"]
    result = filter_containing(lines, ("a", "b"))
    assert result == ["b x", "a x", "a y"]
    assert all(line in lines for line in result)