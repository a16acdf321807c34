import io

import pytest

from systemslabs.config import AVG_LIBC_THRUPUT, UTIL_WEIGHT
from systemslabs.mdriver import MallocDriver, Stats, format_results, main, performance_index
from systemslabs.trace import RangeList, parse_trace

REALLOC_TRACE = "20000\n2\n5\n1\na 0 16\na 1 24\nr 0 40\nf 0\nf 1\n"
LIVE_TRACE = "20000\n2\n2\n1\na 0 16\na 1 8\n"
SINGLE_TRACE = "20000\n1\n1\n1\na 0 100\n"


def _driver():
    return MallocDriver(verbose=0, out=io.StringIO())


def test_malloc_error_counts_and_reports_line():
    driver = _driver()
    driver.malloc_error(3, 2, "boom")
    assert driver.errors == 1
    assert driver.out.getvalue() == "ERROR [trace 3, line 7]: boom\n"


def test_valid_trace_leaves_no_ranges():
    driver = _driver()
    ranges = RangeList()
    assert driver.eval_mm_valid(parse_trace(REALLOC_TRACE), 0, ranges) is True
    assert len(ranges) == 0
    assert driver.errors == 0


def test_live_blocks_stay_in_range_list():
    driver = _driver()
    ranges = RangeList()
    trace = parse_trace(LIVE_TRACE)
    assert driver.eval_mm_valid(trace, 0, ranges) is True
    assert len(ranges) == 2
    assert trace.blocks[0] % 8 == 0
    assert trace.blocks[0] != trace.blocks[1]


def test_payload_filled_with_index_byte():
    driver = _driver()
    trace = parse_trace(LIVE_TRACE)
    driver.eval_mm_valid(trace, 0, RangeList())
    p = trace.blocks[1]
    assert bytes(driver.mem.data[p:p + 8]) == b"\x01" * 8


def test_util_of_single_block():
    driver = _driver()
    util = driver.eval_mm_util(parse_trace(SINGLE_TRACE))
    assert util == pytest.approx(100 / driver.mem.heapsize())


def test_util_is_a_fraction():
    driver = _driver()
    util = driver.eval_mm_util(parse_trace(REALLOC_TRACE))
    assert 0 < util <= 1


def test_speed_run_records_blocks():
    driver = _driver()
    trace = parse_trace(LIVE_TRACE)
    driver.eval_mm_speed(trace)
    assert all(block % 8 == 0 for block in trace.blocks)


def test_libc_valid():
    driver = _driver()
    assert driver.eval_libc_valid(parse_trace(REALLOC_TRACE), 0) is True
    assert driver.errors == 0


def test_format_results_header_and_rows():
    text = format_results([Stats(ops=10, valid=True, secs=0.5, util=0.5), Stats()], 0)
    lines = text.splitlines()
    assert lines[0].split() == ["trace", "valid", "util", "ops", "secs", "Kops"]
    assert lines[1].split()[:3] == ["0", "yes", "50%"]
    assert lines[2].split() == ["1", "no", "-", "-", "-", "-"]
    assert lines[3].startswith("Total")


def test_format_results_with_errors_hides_totals():
    text = format_results([Stats(ops=10, valid=True, secs=0.5, util=0.5)], 2)
    assert text.splitlines()[-1].split() == ["Total", "-", "-", "-", "-"]


def test_performance_index_capped_throughput():
    p1, p2, total = performance_index([Stats(ops=1e9, valid=True, secs=1.0, util=1.0)])
    assert p1 == pytest.approx(UTIL_WEIGHT)
    assert p2 == pytest.approx(1 - UTIL_WEIGHT)
    assert total == pytest.approx(100.0)


def test_performance_index_partial_throughput():
    stats = [Stats(ops=AVG_LIBC_THRUPUT / 2, valid=True, secs=1.0, util=0.0)]
    p1, p2, total = performance_index(stats)
    assert p1 == 0
    assert p2 == pytest.approx((1 - UTIL_WEIGHT) / 2)
    assert total == pytest.approx(p2 * 100)


def test_performance_index_needs_stats():
    with pytest.raises(ValueError):
        performance_index([])


def test_main_single_trace(tmp_path, monkeypatch, capsys):
    (tmp_path / "t.rep").write_text(REALLOC_TRACE)
    monkeypatch.chdir(tmp_path)
    assert main(["-f", "t.rep", "-g"]) == 0
    out = capsys.readouterr().out
    assert "Team Name:ateam" in out
    assert "correct:1" in out
    assert "perfidx:" in out


def test_main_with_libc(tmp_path, monkeypatch, capsys):
    (tmp_path / "t.rep").write_text(LIVE_TRACE)
    monkeypatch.chdir(tmp_path)
    assert main(["-a", "-l", "-v", "-f", "t.rep"]) == 0
    out = capsys.readouterr().out
    assert "Results for libc malloc:" in out
    assert "Results for mm malloc:" in out
    assert "Team Name" not in out


def test_main_missing_default_traces(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["-a"]) == 1
    out = capsys.readouterr().out
    assert "Using default tracefiles in ./traces/" in out
    assert "Could not open" in out


def test_main_bad_trace(tmp_path, monkeypatch, capsys):
    (tmp_path / "bad.rep").write_text("1\n1\n1\n1\nz 0 4\n")
    monkeypatch.chdir(tmp_path)
    assert main(["-a", "-f", "bad.rep"]) == 1
    assert "Bogus type character (z)" in capsys.readouterr().out


def test_main_options():
    assert main(["-h"]) == 0
    assert main(["-q"]) == 1