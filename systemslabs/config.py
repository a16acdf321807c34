"""Settings for allocator evaluation: trace files, score weights, heap limits."""

from __future__ import annotations

import os
from enum import Enum

TRACEDIR = "./traces/"
"""Where the standard trace files are looked up unless -t names another place."""

_TRACE_STEMS = (
    "amptjp",
    "cccp",
    "cp-decl",
    "expr",
    "coalescing",
    "random",
    "random2",
    "binary",
    "binary2",
    "realloc",
    "realloc2",
)

DEFAULT_TRACEFILES: tuple[str, ...] = tuple(f"{stem}-bal.rep" for stem in _TRACE_STEMS)
"""Trace files evaluated when no single file is chosen."""

AVG_LIBC_THRUPUT = 600_000.0
"""Operations per second at which throughput credit stops growing."""

UTIL_WEIGHT = 0.6
"""Fraction of the score that comes from space utilization."""

ALIGNMENT = 8
"""Byte alignment every payload address must satisfy."""

MAX_HEAP = 20 * 1024 * 1024
"""Largest size, in bytes, the simulated heap may reach."""


class TimingMethod(Enum):
    """How the running time of a trace is measured."""

    ITIMER = "itimer"
    GETTOD = "gettod"


TIMING_METHOD = TimingMethod.GETTOD


def default_trace_paths(tracedir: str = TRACEDIR) -> list[str]:
    """Return the paths of the default trace files inside tracedir."""
    return [os.path.join(tracedir, name) for name in DEFAULT_TRACEFILES]