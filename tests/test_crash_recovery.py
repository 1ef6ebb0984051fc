import pytest

from oslabs.crash_recovery import atomic_write, fsync_directory, main


def test_atomic_write_creates_file(tmp_path):
    target = tmp_path / "final.dat"
    atomic_write(target, b"important data")
    assert target.read_bytes() == b"important data"


def test_atomic_write_replaces_existing_and_leaves_no_temp(tmp_path):
    target = tmp_path / "final.dat"
    target.write_bytes(b"old content")
    atomic_write(target, b"new important data v2\n")
    assert target.read_bytes() == b"new important data v2\n"
    assert [p.name for p in tmp_path.iterdir()] == ["final.dat"]


def test_atomic_write_accepts_text(tmp_path):
    target = tmp_path / "note.txt"
    atomic_write(target, "hello")
    assert target.read_text() == "hello"


def test_atomic_write_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        atomic_write(tmp_path / "missing" / "f.dat", b"x")


def test_fsync_directory_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        fsync_directory(tmp_path / "absent")


def test_fsync_directory_keeps_contents(tmp_path):
    (tmp_path / "a").write_bytes(b"1")
    fsync_directory(tmp_path)
    assert (tmp_path / "a").read_bytes() == b"1"


def test_main_runs_all_steps_and_cleans_up(tmp_path, capsys):
    assert main(["--directory", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "Step 3: rename() -- atomic POSIX operation" in out
    assert "Safe atomic file update" in out
    assert list(tmp_path.iterdir()) == []