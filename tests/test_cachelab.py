import random

import pytest

from systemslabs.cachelab import (
    MAX_TRANS_FUNCS,
    RAND_MAX,
    TransRegistry,
    correct_trans,
    init_matrix,
    print_summary,
    rand_matrix,
)


def _noop(m, n, a, b):
    pass


def _other(m, n, a, b):
    pass


def test_registry_keeps_order_and_defaults():
    registry = TransRegistry()
    registry.register(_noop, "first")
    registry.register(_other, "second")
    assert len(registry) == 2
    assert [entry.description for entry in registry] == ["first", "second"]
    assert registry[1].func is _other
    entry = registry[0]
    assert (entry.correct, entry.num_hits, entry.num_misses, entry.num_evictions) == (
        False,
        0,
        0,
        0,
    )


def test_registry_limit():
    registry = TransRegistry()
    for index in range(MAX_TRANS_FUNCS):
        registry.register(_noop, f"f{index}")
    assert len(registry) == MAX_TRANS_FUNCS
    with pytest.raises(ValueError):
        registry.register(_noop, "one too many")


def test_print_summary_writes_results(tmp_path, capsys):
    path = tmp_path / "results"
    print_summary(1, 2, 3, results_path=path)
    assert capsys.readouterr().out == "hits:1 misses:2 evictions:3\n"
    assert path.read_text() == "1 2 3\n"


def test_init_matrix_shapes_and_range():
    a, b = init_matrix(5, 3, random.Random(7))
    assert len(a) == 3 and all(len(row) == 5 for row in a)
    assert len(b) == 5 and all(len(row) == 3 for row in b)
    assert all(0 <= v <= RAND_MAX for row in a + b for v in row)


def test_init_matrix_depends_only_on_seed():
    first_a, first_b = init_matrix(4, 6, random.Random(42))
    again_a, again_b = init_matrix(4, 6, random.Random(42))
    other_a, other_b = init_matrix(4, 6, random.Random(43))
    assert first_a == again_a
    assert first_b == again_b
    assert (other_a, other_b) != (first_a, first_b)
    values = [v for row in first_a + first_b for v in row]
    assert len(set(values)) > 1


def test_rand_matrix_shape():
    a = rand_matrix(7, 2, random.Random(1))
    assert len(a) == 2 and all(len(row) == 7 for row in a)
    assert all(0 <= v <= RAND_MAX for row in a for v in row)


def test_correct_trans_transposes():
    a = rand_matrix(4, 3, random.Random(3))
    b = correct_trans(4, 3, a)
    assert len(b) == 4
    assert all(b[j][i] == a[i][j] for i in range(3) for j in range(4))


def test_correct_trans_round_trip():
    a = rand_matrix(6, 9, random.Random(5))
    assert correct_trans(9, 6, correct_trans(6, 9, a)) == a