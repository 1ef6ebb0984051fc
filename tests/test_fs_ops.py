import pytest

from oslabs.fs_ops import copy_bandwidth, main, write_and_fsync


def test_write_and_fsync_writes_blocks_of_a(tmp_path):
    target = tmp_path / "data.bin"
    write_s, fsync_s = write_and_fsync(target, 3, 16)
    assert target.read_bytes() == b"A" * 48
    assert write_s >= 0 and fsync_s >= 0


def test_write_and_fsync_truncates_existing(tmp_path):
    target = tmp_path / "data.bin"
    target.write_bytes(b"x" * 1000)
    write_and_fsync(target, 1, 10)
    assert target.read_bytes() == b"A" * 10


def test_write_and_fsync_rejects_negative(tmp_path):
    with pytest.raises(ValueError):
        write_and_fsync(tmp_path / "f", -1, 10)


def test_write_and_fsync_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_and_fsync(tmp_path / "nope" / "f", 1, 10)


def test_copy_bandwidth_copies_all_bytes_and_cleans_up(tmp_path):
    seconds, bandwidth, copied = copy_bandwidth(tmp_path, 200_000)
    assert copied == 200_000
    assert seconds >= 0
    assert bandwidth > 0
    assert list(tmp_path.iterdir()) == []


def test_copy_bandwidth_empty(tmp_path):
    _, _, copied = copy_bandwidth(tmp_path, 0)
    assert copied == 0
    assert list(tmp_path.iterdir()) == []


def test_copy_bandwidth_rejects_negative(tmp_path):
    with pytest.raises(ValueError):
        copy_bandwidth(tmp_path, -5)


def test_main_reports_phases(tmp_path, capsys):
    assert main(["--directory", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "=== Lab 31: File System Operations ===" in out
    assert "File copy 8 MiB:" in out
    assert list(tmp_path.iterdir()) == []