"""A simulated memory system with a heap that only grows."""

from __future__ import annotations

import mmap

from systemslabs.config import MAX_HEAP


class OutOfMemory(MemoryError):
    """Raised when the simulated heap cannot be extended."""


class MemoryModel:
    """A fixed block of bytes modelling the heap, with an sbrk-style break.

    Addresses are offsets into ``data``; the heap occupies addresses from
    ``heap_lo()`` up to, but not including, the current break.
    """

    def __init__(self, max_heap: int = MAX_HEAP) -> None:
        if max_heap < 0:
            raise ValueError("heap size must not be negative")
        self.data = bytearray(max_heap)
        self._start = 0
        self._max_addr = self._start + max_heap
        self._brk = self._start

    def reset_brk(self) -> None:
        """Empty the heap."""
        self._brk = self._start

    def sbrk(self, incr: int) -> int:
        """Extend the heap by incr bytes and return the start of the new area.

        The heap cannot shrink; a negative increment or one past the
        maximum heap size raises OutOfMemory.
        """
        if incr < 0 or self._brk + incr > self._max_addr:
            raise OutOfMemory("mem_sbrk failed. Ran out of memory...")
        old_brk = self._brk
        self._brk += incr
        return old_brk

    def heap_lo(self) -> int:
        """Return the address of the first heap byte."""
        return self._start

    def heap_hi(self) -> int:
        """Return the address of the last heap byte."""
        return self._brk - 1

    def heapsize(self) -> int:
        """Return the heap size in bytes."""
        return self._brk - self._start

    def pagesize(self) -> int:
        """Return the page size of the system."""
        return mmap.PAGESIZE