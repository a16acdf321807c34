import io

import pytest

from systemslabs.csim import AccessResult, Cache, main, parse_args, simulate

EXAMPLE_TRACE = [
    " L 10,1\n",
    " M 20,1\n",
    " L 22,1\n",
    " S 18,1\n",
    " L 110,1\n",
    " L 210,1\n",
    " M 12,1\n",
]


def test_repeat_access_hits():
    cache = Cache(2, 1, 2)
    assert cache.access(0x40) == AccessResult.MISS
    assert cache.access(0x40) == AccessResult.HIT
    assert cache.access(0x41) == AccessResult.HIT
    assert (cache.hits, cache.misses, cache.evictions) == (2, 1, 0)


def test_direct_mapped_conflict_evicts():
    cache = Cache(0, 1, 0)
    cache.access(0x0)
    result = cache.access(0x10)
    assert result == AccessResult.MISS | AccessResult.EVICTION
    assert cache.access(0x0) & AccessResult.EVICTION


def test_lru_replacement_two_way():
    cache = Cache(0, 2, 0)
    results = [cache.access(addr) for addr in (0x0, 0x10, 0x0, 0x20, 0x0, 0x10)]
    assert results == [
        AccessResult.MISS,
        AccessResult.MISS,
        AccessResult.HIT,
        AccessResult.MISS | AccessResult.EVICTION,
        AccessResult.HIT,
        AccessResult.MISS | AccessResult.EVICTION,
    ]
    assert cache.hits + cache.misses == len(results)


def test_invalid_parameters():
    with pytest.raises(ValueError):
        Cache(-1, 1, 0)
    with pytest.raises(ValueError):
        Cache(40, 1, 30)


def test_simulate_worked_example_verbose():
    out = io.StringIO()
    counts = simulate(Cache(4, 1, 4), EXAMPLE_TRACE, verbose=True, out=out)
    assert counts == (4, 5, 3)
    assert out.getvalue() == (
        "L 10,1 miss \n"
        "M 20,1 miss hit \n"
        "L 22,1 hit \n"
        "S 18,1 hit \n"
        "L 110,1 miss eviction \n"
        "L 210,1 miss eviction \n"
        "M 12,1 miss eviction hit \n"
    )


def test_simulate_skips_instruction_loads():
    out = io.StringIO()
    counts = simulate(Cache(4, 1, 4), ["I 0400d7d4,8\n"], verbose=True, out=out)
    assert counts == (0, 0, 0)
    assert out.getvalue() == ""


def test_modify_counts_extra_hit():
    cache = Cache(4, 1, 4)
    hits, misses, _ = simulate(cache, [" M 20,1\n"], out=io.StringIO())
    assert hits == misses


def test_parse_args():
    options = parse_args(["-v", "-s", "4", "-E", "2", "-b", "3", "-t", "trace.txt"])
    assert options.verbose is True
    assert (options.set_index_bits, options.associativity, options.block_bits) == (4, 2, 3)
    assert options.trace_file == "trace.txt"


def test_parse_args_ignores_unknown():
    options = parse_args(["-x", "-s", "1"])
    assert options.set_index_bits == 1
    assert options.verbose is False


def test_main_runs_trace(tmp_path, monkeypatch, capsys):
    trace = tmp_path / "yi.trace"
    trace.write_text("".join(EXAMPLE_TRACE))
    monkeypatch.chdir(tmp_path)
    assert main(["-s", "4", "-E", "1", "-b", "4", "-t", str(trace)]) == 0
    assert capsys.readouterr().out == "hits:4 misses:5 evictions:3\n"
    assert (tmp_path / ".csim_results").read_text() == "4 5 3\n"


def test_main_missing_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["-t", "nope.trace"]) == 0
    assert capsys.readouterr().out == "file nope.trace not found!\n"