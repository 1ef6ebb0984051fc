import pytest

from oslabs.context_switch import (
    context_switch_lines,
    getpid_latency,
    main,
    process_pingpong,
    thread_pingpong,
)


def test_context_switch_lines_selects_counters():
    lines = [
        "Name:\tpython",
        "voluntary_ctxt_switches:\t12",
        "Threads:\t1",
        "nonvoluntary_ctxt_switches:\t3",
    ]
    assert context_switch_lines(lines) == [
        "voluntary_ctxt_switches:\t12",
        "nonvoluntary_ctxt_switches:\t3",
    ]


def test_context_switch_lines_empty_input():
    assert context_switch_lines([]) == []


def test_context_switch_lines_ignores_unrelated():
    assert context_switch_lines(["Pid:\t1", "PPid:\t0"]) == []


def test_process_pingpong_returns_elapsed():
    assert process_pingpong(50) > 0


def test_process_pingpong_zero_rounds():
    assert process_pingpong(0) >= 0


def test_thread_pingpong_returns_elapsed():
    assert thread_pingpong(50) > 0


@pytest.mark.parametrize("func", [process_pingpong, thread_pingpong, getpid_latency])
def test_negative_counts_rejected(func):
    with pytest.raises(ValueError):
        func(-1)


def test_getpid_latency_non_negative():
    assert getpid_latency(1000) >= 0


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as info:
        main(["--bogus"])
    assert info.value.code == 2