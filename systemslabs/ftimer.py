"""Estimate the running time in seconds of a function.

Two timers are offered: one based on the interval timer and one based on
the wall clock. ``fsecs`` uses whichever the configuration selects.
"""

from __future__ import annotations

import signal
import time
from typing import Callable

from systemslabs.config import TIMING_METHOD, TimingMethod

MAX_ETIME = 86400  # initial value of the interval timers, in seconds
FSECS_RUNS = 10  # runs averaged by fsecs

TestFunc = Callable[[], object]


def _run(f: TestFunc, n: int) -> None:
    for _ in range(n):
        f()


def _average_wall(f: TestFunc, n: int, clock: Callable[[], float]) -> float:
    start = clock()
    _run(f, n)
    return (clock() - start) / n


def ftimer_itimer(f: TestFunc, n: int) -> float:
    """Return the average real time of n calls of f, read from the interval timer."""
    if not hasattr(signal, "setitimer"):
        return _average_wall(f, n, time.monotonic)

    timers = (signal.ITIMER_VIRTUAL, signal.ITIMER_REAL, signal.ITIMER_PROF)
    saved = [signal.getitimer(timer) for timer in timers]
    try:
        for timer in timers:
            signal.setitimer(timer, MAX_ETIME)
        start = MAX_ETIME - signal.getitimer(signal.ITIMER_REAL)[0]
        _run(f, n)
        elapsed = MAX_ETIME - signal.getitimer(signal.ITIMER_REAL)[0] - start
    finally:
        for timer, (value, interval) in zip(timers, saved):
            signal.setitimer(timer, value, interval)
    return elapsed / n


def ftimer_gettod(f: TestFunc, n: int) -> float:
    """Return the average wall-clock time of n calls of f."""
    return _average_wall(f, n, time.time)


def init_fsecs(verbose: int = 0) -> None:
    """Prepare the timing package, announcing the method when verbose."""
    if not verbose:
        return
    if TIMING_METHOD is TimingMethod.ITIMER:
        print("Measuring performance with the interval timer.")
    else:
        print("Measuring performance with gettimeofday().")


def fsecs(f: TestFunc) -> float:
    """Return the running time of f in seconds, averaged over several runs."""
    if TIMING_METHOD is TimingMethod.ITIMER:
        return ftimer_itimer(f, FSECS_RUNS)
    return ftimer_gettod(f, FSECS_RUNS)