"""A boundary-tag allocator over the simulated heap.

Blocks carry a 4-byte header and footer holding the block size and an
allocated bit. Free blocks are found by a first-fit scan of the implicit
list and are coalesced with free neighbours immediately.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

from systemslabs.memlib import MemoryModel

ALIGNMENT = 8
WSIZE = 4  # word and header/footer size in bytes
DSIZE = 8  # double word size in bytes
CHUNKSIZE = 1 << 12  # amount the heap grows by when no block fits

_WORD = struct.Struct("<I")


@dataclass(frozen=True)
class Team:
    """The people responsible for an allocator."""

    teamname: str
    name1: str
    id1: str
    name2: str = ""
    id2: str = ""


TEAM = Team("ateam", "Harry Bovik", "bovik@example.com")


def _pack(size: int, alloc: int) -> int:
    return size | alloc


class Allocator:
    """First-fit allocator with an implicit free list and coalescing."""

    def __init__(self, mem: MemoryModel) -> None:
        self.mem = mem
        self._heap_listp: Optional[int] = None

    # Word access and block navigation.

    def _get(self, p: int) -> int:
        return _WORD.unpack_from(self.mem.data, p)[0]

    def _put(self, p: int, value: int) -> None:
        _WORD.pack_into(self.mem.data, p, value & 0xFFFFFFFF)

    def _size(self, p: int) -> int:
        return self._get(p) & ~0x7

    def _alloc(self, p: int) -> int:
        return self._get(p) & 0x1

    @staticmethod
    def _hdrp(bp: int) -> int:
        return bp - WSIZE

    def _ftrp(self, bp: int) -> int:
        return bp + self._size(self._hdrp(bp)) - DSIZE

    def _next_blkp(self, bp: int) -> int:
        return bp + self._size(bp - WSIZE)

    def _prev_blkp(self, bp: int) -> int:
        return bp - self._size(bp - DSIZE)

    # Public interface.

    def init(self) -> None:
        """Lay out an empty heap with prologue and epilogue and a first chunk.

        Raises OutOfMemory when the heap cannot hold them.
        """
        listp = self.mem.sbrk(4 * WSIZE)
        self._put(listp, 0)  # alignment padding
        self._put(listp + WSIZE, _pack(DSIZE, 1))  # prologue header
        self._put(listp + DSIZE, _pack(DSIZE, 1))  # prologue footer
        self._put(listp + DSIZE + WSIZE, _pack(0, 1))  # epilogue header
        self._heap_listp = listp + 2 * WSIZE
        self._extend_heap(CHUNKSIZE // WSIZE)

    def malloc(self, size: int) -> Optional[int]:
        """Allocate a block of at least size bytes and return its payload address.

        A non-positive size gives None. Raises OutOfMemory when the heap
        cannot grow enough.
        """
        if self._heap_listp is None:
            raise RuntimeError("allocator used before init()")
        if size <= 0:
            return None
        if size <= DSIZE:
            asize = 2 * DSIZE
        else:
            asize = DSIZE * ((size + DSIZE + (DSIZE - 1)) // DSIZE)

        bp = self._find_fit(asize)
        if bp is None:
            bp = self._extend_heap(max(asize, CHUNKSIZE) // WSIZE)
        self._place(bp, asize)
        return bp

    def free(self, ptr: int) -> None:
        """Release the block at ptr and merge it with free neighbours."""
        size = self._size(self._hdrp(ptr))
        self._put(self._hdrp(ptr), _pack(size, 0))
        self._put(self._ftrp(ptr), _pack(size, 0))
        self._coalesce(ptr)

    def realloc(self, ptr: Optional[int], size: int) -> Optional[int]:
        """Move the block at ptr into a new block of size bytes.

        The payload is preserved up to the smaller of the two sizes. A
        non-positive size gives None and leaves the old block in place.
        """
        if ptr is None:
            return self.malloc(size)
        newptr = self.malloc(size)
        if newptr is None:
            return None
        copy_size = min(size, self._size(self._hdrp(ptr)) - DSIZE)
        data = self.mem.data
        data[newptr:newptr + copy_size] = data[ptr:ptr + copy_size]
        self.free(ptr)
        return newptr

    # Internals.

    def _extend_heap(self, words: int) -> int:
        size = (words + 1) * WSIZE if words % 2 else words * WSIZE
        bp = self.mem.sbrk(size)
        self._put(self._hdrp(bp), _pack(size, 0))  # free block header
        self._put(self._ftrp(bp), _pack(size, 0))  # free block footer
        self._put(self._hdrp(self._next_blkp(bp)), _pack(0, 1))  # new epilogue
        return self._coalesce(bp)

    def _find_fit(self, asize: int) -> Optional[int]:
        bp = self._heap_listp
        while self._size(self._hdrp(bp)) > 0:
            if not self._alloc(self._hdrp(bp)) and asize <= self._size(self._hdrp(bp)):
                return bp
            bp = self._next_blkp(bp)
        return None

    def _place(self, bp: int, asize: int) -> None:
        csize = self._size(self._hdrp(bp))
        if csize - asize >= 2 * DSIZE:
            self._put(self._hdrp(bp), _pack(asize, 1))
            self._put(self._ftrp(bp), _pack(asize, 1))
            bp = self._next_blkp(bp)
            self._put(self._hdrp(bp), _pack(csize - asize, 0))
            self._put(self._ftrp(bp), _pack(csize - asize, 0))
        else:
            self._put(self._hdrp(bp), _pack(csize, 1))
            self._put(self._ftrp(bp), _pack(csize, 1))

    def _coalesce(self, bp: int) -> int:
        prev_alloc = self._alloc(self._ftrp(self._prev_blkp(bp)))
        next_alloc = self._alloc(self._hdrp(self._next_blkp(bp)))
        size = self._size(self._hdrp(bp))

        if prev_alloc and next_alloc:
            return bp
        if prev_alloc:
            size += self._size(self._hdrp(self._next_blkp(bp)))
            self._put(self._hdrp(bp), _pack(size, 0))
            self._put(self._ftrp(bp), _pack(size, 0))
        elif next_alloc:
            size += self._size(self._hdrp(self._prev_blkp(bp)))
            self._put(self._ftrp(bp), _pack(size, 0))
            self._put(self._hdrp(self._prev_blkp(bp)), _pack(size, 0))
            bp = self._prev_blkp(bp)
        else:
            size += self._size(self._hdrp(self._prev_blkp(bp)))
            size += self._size(self._ftrp(self._next_blkp(bp)))
            self._put(self._hdrp(self._prev_blkp(bp)), _pack(size, 0))
            self._put(self._ftrp(self._next_blkp(bp)), _pack(size, 0))
            bp = self._prev_blkp(bp)
        return bp