"""Allocator trace files and the bookkeeping of allocated payload ranges."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from systemslabs.config import ALIGNMENT


class OpType(Enum):
    """Kind of allocator request."""

    ALLOC = "a"
    FREE = "f"
    REALLOC = "r"


@dataclass(frozen=True)
class TraceOp:
    """A single allocator request; size is unused for frees."""

    type: OpType
    index: int
    size: int = 0


@dataclass
class Trace:
    """A trace file in memory together with the blocks it has allocated."""

    sugg_heapsize: int
    num_ids: int
    num_ops: int
    weight: int
    ops: list[TraceOp]
    blocks: list[Optional[int]] = field(default_factory=list)
    block_sizes: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.blocks:
            self.blocks = [None] * self.num_ids
        if not self.block_sizes:
            self.block_sizes = [0] * self.num_ids


class TraceFormatError(ValueError):
    """Raised when a trace file is malformed."""


class RangeError(ValueError):
    """Raised when a payload is misaligned, outside the heap or overlapping."""


class _Range(NamedTuple):
    lo: int
    hi: int


class RangeList:
    """The extents of all currently allocated payloads."""

    def __init__(self) -> None:
        self._ranges: list[_Range] = []

    def add(self, lo: int, size: int, heap_lo: int, heap_hi: int) -> None:
        """Record a payload of size bytes at lo after checking it.

        Raises RangeError when the payload is not aligned, does not lie
        within [heap_lo, heap_hi] or overlaps another payload.
        """
        if size <= 0:
            raise ValueError("payload size must be positive")
        hi = lo + size - 1
        if lo % ALIGNMENT:
            raise RangeError(f"Payload address ({lo:#x}) not aligned to {ALIGNMENT} bytes")
        if lo < heap_lo or lo > heap_hi or hi < heap_lo or hi > heap_hi:
            raise RangeError(
                f"Payload ({lo:#x}:{hi:#x}) lies outside heap ({heap_lo:#x}:{heap_hi:#x})"
            )
        for other in reversed(self._ranges):
            if other.lo <= lo <= other.hi or other.lo <= hi <= other.hi:
                raise RangeError(
                    f"Payload ({lo:#x}:{hi:#x}) overlaps another payload "
                    f"({other.lo:#x}:{other.hi:#x})"
                )
        self._ranges.append(_Range(lo, hi))

    def remove(self, lo: int) -> None:
        """Forget the payload starting at lo; unknown addresses are ignored."""
        for position in range(len(self._ranges) - 1, -1, -1):
            if self._ranges[position].lo == lo:
                del self._ranges[position]
                return

    def clear(self) -> None:
        """Forget all payloads."""
        self._ranges.clear()

    def __len__(self) -> int:
        return len(self._ranges)


def _parse(text: str, source: str) -> Trace:
    tokens = iter(text.split())

    def next_int(what: str) -> int:
        token = next(tokens, None)
        if token is None:
            raise TraceFormatError(f"missing {what} in tracefile {source}")
        try:
            return int(token)
        except ValueError:
            raise TraceFormatError(f"bad {what} '{token}' in tracefile {source}") from None

    sugg_heapsize = next_int("suggested heap size")
    num_ids = next_int("number of ids")
    num_ops = next_int("number of operations")
    weight = next_int("weight")

    ops: list[TraceOp] = []
    max_index = 0
    for token in tokens:
        kind = token[0]
        if kind in ("a", "r"):
            index = next_int("block index")
            size = next_int("block size")
            ops.append(TraceOp(OpType(kind), index, size))
            max_index = max(max_index, index)
        elif kind == "f":
            ops.append(TraceOp(OpType.FREE, next_int("block index")))
        else:
            raise TraceFormatError(f"Bogus type character ({kind}) in tracefile {source}")

    if max_index != num_ids - 1:
        raise TraceFormatError(
            f"tracefile {source} declares {num_ids} ids but uses {max_index + 1}"
        )
    if num_ops != len(ops):
        raise TraceFormatError(
            f"tracefile {source} declares {num_ops} operations but holds {len(ops)}"
        )
    return Trace(sugg_heapsize, num_ids, num_ops, weight, ops)


def parse_trace(text: str) -> Trace:
    """Parse the text of a trace file; raises TraceFormatError when malformed."""
    return _parse(text, "<string>")


def read_trace(tracedir: str, filename: str) -> Trace:
    """Read the trace file tracedir + filename."""
    path = tracedir + filename
    try:
        with open(path, "r", encoding="ascii") as fp:
            text = fp.read()
    except OSError as exc:
        raise OSError(exc.errno, f"Could not open {path} in read_trace") from exc
    return _parse(text, path)