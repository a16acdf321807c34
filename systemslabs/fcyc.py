"""Estimate the time, in counter ticks, used by a function.

The K-best scheme runs the function repeatedly and keeps the K smallest
measurements; once they agree within a tolerance the smallest is taken as
the estimate. The high-resolution performance counter, in nanoseconds,
stands in for the processor cycle counter.
"""

from __future__ import annotations

import bisect
import time
from array import array
from typing import Callable, Optional

K = 3  # value of K in the K-best scheme
MAXSAMPLES = 20  # give up after this many samples
EPSILON = 0.01  # the K samples should lie within EPSILON of each other
CLEAR_CACHE = False  # clear the cache before each measurement
CACHE_BYTES = 1 << 19  # cache size in bytes
CACHE_BLOCK = 32  # cache block size in bytes

_INT_SIZE = array("i").itemsize

TestFunc = Callable[[], object]


class KBestSampler:
    """Keeps the k smallest of the samples added so far, in ascending order."""

    def __init__(self, k: int = K, epsilon: float = EPSILON) -> None:
        if k < 1:
            raise ValueError("k must be at least 1")
        self.k = k
        self.epsilon = epsilon
        self.values: list[float] = []
        self.count = 0

    def add(self, value: float) -> None:
        """Record a sample, keeping it only if it is among the k smallest."""
        self.count += 1
        if len(self.values) < self.k:
            bisect.insort(self.values, value)
        elif value < self.values[-1]:
            self.values.pop()
            bisect.insort(self.values, value)

    def has_converged(self) -> bool:
        """Return whether the k smallest samples lie within epsilon of each other."""
        return (
            self.count >= self.k
            and (1 + self.epsilon) * self.values[0] >= self.values[self.k - 1]
        )

    def best(self) -> float:
        """Return the smallest sample; raises ValueError when there is none."""
        if not self.values:
            raise ValueError("no samples recorded")
        return self.values[0]


class CycleTimer:
    """Measures a function with the K-best scheme."""

    def __init__(
        self,
        k: int = K,
        maxsamples: int = MAXSAMPLES,
        epsilon: float = EPSILON,
        clear_cache: bool = CLEAR_CACHE,
        cache_bytes: int = CACHE_BYTES,
        cache_block: int = CACHE_BLOCK,
    ) -> None:
        if k < 1:
            raise ValueError("k must be at least 1")
        if maxsamples < 1:
            raise ValueError("maxsamples must be at least 1")
        if cache_bytes < 0:
            raise ValueError("cache size must not be negative")
        if cache_block < _INT_SIZE:
            raise ValueError(f"cache block must be at least {_INT_SIZE} bytes")
        self.k = k
        self.maxsamples = maxsamples
        self.epsilon = epsilon
        self.clear_cache = clear_cache
        self.cache_bytes = cache_bytes
        self.cache_block = cache_block
        self._cache_buf: Optional[array] = None
        self._sink = 0

    def clear(self) -> int:
        """Touch one word in every block of a cache-sized buffer.

        Returns the sum of the words read, which keeps the reads from
        being optimised away.
        """
        if self._cache_buf is None or len(self._cache_buf) != self.cache_bytes // _INT_SIZE:
            self._cache_buf = array("i", bytes(self.cache_bytes // _INT_SIZE * _INT_SIZE))
        total = self._sink + sum(self._cache_buf[:: self.cache_block // _INT_SIZE])
        self._sink = total
        return total

    def measure(self, f: TestFunc) -> float:
        """Run f until the K best times converge or samples run out; return the best."""
        sampler = KBestSampler(self.k, self.epsilon)
        while True:
            if self.clear_cache:
                self.clear()
            start = time.perf_counter_ns()
            f()
            sampler.add(float(time.perf_counter_ns() - start))
            if sampler.has_converged() or sampler.count >= self.maxsamples:
                break
        return sampler.best()


def fcyc(f: TestFunc) -> float:
    """Estimate the running time of f in counter ticks with default settings."""
    return CycleTimer().measure(f)