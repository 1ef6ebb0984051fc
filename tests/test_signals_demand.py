import signal

import pytest

from oslabs.signals_demand import (
    main,
    minor_faults_for_touch,
    send_self_signal,
    signal_flags,
)


def test_send_self_signal_delivers_sigusr1():
    assert send_self_signal(signal.SIGUSR1) == signal.SIGUSR1


def test_send_self_signal_restores_previous_handler():
    before = signal.getsignal(signal.SIGUSR2)
    assert send_self_signal(signal.SIGUSR2) == signal.SIGUSR2
    assert signal.getsignal(signal.SIGUSR2) == before


def test_touching_pages_faults_each_one():
    map_faults, touch_faults = minor_faults_for_touch(100)
    assert map_faults >= 0
    assert touch_faults >= 100


def test_minor_faults_rejects_empty_mapping():
    with pytest.raises(ValueError):
        minor_faults_for_touch(0)


def test_signal_flags_values():
    flags = signal_flags()
    assert set(flags) == {"SA_SIGINFO", "SA_RESTART", "SA_NODEFER"}
    assert flags["SA_SIGINFO"] == 0x4
    assert flags["SA_RESTART"] == 0x10000000


def test_signal_flags_are_distinct_bits():
    values = list(signal_flags().values())
    combined = 0
    for value in values:
        assert value & combined == 0
        combined |= value


def test_main_output(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Handler received signal" in out
    assert "(SIGUSR1)" in out
    assert "SA_SIGINFO=0x4" in out