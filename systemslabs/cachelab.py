"""Shared helpers for the cache simulator and the matrix transpose harness."""

from __future__ import annotations

import random
from dataclasses import dataclass
from os import PathLike
from typing import Callable, Iterator, Optional, Union

MAX_TRANS_FUNCS = 100
RAND_MAX = 2**31 - 1
RESULTS_FILE = ".csim_results"

Matrix = list[list[int]]
TransFunc = Callable[[int, int, Matrix, Matrix], None]


@dataclass
class TransFunction:
    """A registered transpose function and the results measured for it."""

    func: TransFunc
    description: str
    correct: bool = False
    num_hits: int = 0
    num_misses: int = 0
    num_evictions: int = 0


class TransRegistry:
    """An ordered collection of transpose functions under evaluation."""

    def __init__(self) -> None:
        self._entries: list[TransFunction] = []

    def register(self, func: TransFunc, description: str) -> TransFunction:
        """Add a transpose function with its description and return its entry."""
        if len(self._entries) >= MAX_TRANS_FUNCS:
            raise ValueError(
                f"cannot register more than {MAX_TRANS_FUNCS} transpose functions"
            )
        entry = TransFunction(func, description)
        self._entries.append(entry)
        return entry

    def __iter__(self) -> Iterator[TransFunction]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> TransFunction:
        return self._entries[index]


def print_summary(
    hits: int,
    misses: int,
    evictions: int,
    results_path: Union[str, PathLike] = RESULTS_FILE,
) -> None:
    """Print the simulation statistics and record them in the results file."""
    print(f"hits:{hits} misses:{misses} evictions:{evictions}")
    with open(results_path, "w", encoding="ascii") as fp:
        fp.write(f"{hits} {misses} {evictions}\n")


def _rng_or_default(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def init_matrix(
    m: int, n: int, rng: Optional[random.Random] = None
) -> tuple[Matrix, Matrix]:
    """Return a random N x M matrix A and a random M x N matrix B."""
    rng = _rng_or_default(rng)
    a = [[0] * m for _ in range(n)]
    b = [[0] * n for _ in range(m)]
    for i in range(n):
        for j in range(m):
            a[i][j] = rng.randint(0, RAND_MAX)
            b[j][i] = rng.randint(0, RAND_MAX)
    return a, b


def rand_matrix(m: int, n: int, rng: Optional[random.Random] = None) -> Matrix:
    """Return a random N x M matrix."""
    rng = _rng_or_default(rng)
    return [[rng.randint(0, RAND_MAX) for _ in range(m)] for _ in range(n)]


def correct_trans(m: int, n: int, a: Matrix) -> Matrix:
    """Return the M x N transpose of the N x M matrix A."""
    return [[a[i][j] for i in range(n)] for j in range(m)]