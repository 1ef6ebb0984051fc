import pytest

from oslabs.finegrained import cache_lines, coarse_counts, fine_counts, main


def test_coarse_total_matches_work():
    counts = coarse_counts(4, 1000, 64)
    assert len(counts) == 64
    assert sum(counts) == 4 * 1000


def test_fine_total_matches_work():
    counts = fine_counts(4, 1000, 64)
    assert len(counts) == 64
    assert sum(counts) == 4 * 1000


def test_coarse_and_fine_agree():
    assert coarse_counts(3, 500, 16) == fine_counts(3, 500, 16)


def test_few_items_fill_leading_buckets_only():
    counts = fine_counts(2, 3, 8)
    assert counts[:3] == [2, 2, 2]
    assert counts[3:] == [0] * 5


def test_no_threads_leaves_table_empty():
    assert coarse_counts(0, 100, 4) == [0, 0, 0, 0]


@pytest.mark.parametrize("func", [coarse_counts, fine_counts])
def test_invalid_arguments(func):
    with pytest.raises(ValueError):
        func(1, 10, 0)
    with pytest.raises(ValueError):
        func(-1, 10, 4)
    with pytest.raises(ValueError):
        func(1, -10, 4)


def test_cache_lines_rounds_up():
    assert cache_lines(64, 1, 64) == 1
    assert cache_lines(1, 65, 64) == 2
    assert cache_lines(0, 10, 64) == 0


def test_cache_lines_for_default_table():
    assert cache_lines(40, 64, 64) == 40


def test_cache_lines_rejects_bad_line_size():
    with pytest.raises(ValueError):
        cache_lines(40, 64, 0)


def test_main_reports_false_sharing(capsys):
    assert main(["--threads", "2", "--items", "200"]) == 0
    out = capsys.readouterr().out
    assert "=== Lab 20: Fine-grained Locking ===" in out
    assert "WARNING: locks smaller than cache line" in out