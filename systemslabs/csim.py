"""A cache simulator that replays memory traces through an LRU cache."""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass
from enum import IntFlag
from typing import Iterable, Optional, TextIO

from systemslabs.cachelab import print_summary

_ADDRESS_MASK = (1 << 64) - 1
_TRACE_LINE = re.compile(r"\s*(\S)\s*(?:0[xX])?([0-9a-fA-F]+),\s*([+-]?\d+)")
_LEADING_INT = re.compile(r"\s*[+-]?\d+")


class AccessResult(IntFlag):
    """What happened on a single cache access."""

    HIT = 0x1
    EVICTION = 0x2
    MISS = 0x4


@dataclass
class CacheLine:
    """One line of a cache set."""

    valid: bool = False
    lru: int = 0
    tag: int = 0


class Cache:
    """A set-associative cache with LRU replacement that counts its traffic."""

    def __init__(self, set_index_bits: int, associativity: int, block_bits: int) -> None:
        if set_index_bits < 0 or associativity < 0 or block_bits < 0:
            raise ValueError("cache parameters must not be negative")
        if set_index_bits + block_bits > 64:
            raise ValueError("set index and block bits exceed the address width")
        self.set_index_bits = set_index_bits
        self.associativity = associativity
        self.block_bits = block_bits
        self._set_mask = (1 << set_index_bits) - 1
        self._tag_shift = set_index_bits + block_bits
        self._tag_mask = (1 << (64 - self._tag_shift)) - 1
        self.sets = [
            [CacheLine() for _ in range(associativity)]
            for _ in range(1 << set_index_bits)
        ]
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def access(self, address: int) -> AccessResult:
        """Access one address and report whether it hit, missed or evicted."""
        address &= _ADDRESS_MASK
        lines = self.sets[(address >> self.block_bits) & self._set_mask]
        tag = (address >> self._tag_shift) & self._tag_mask

        for line in lines:
            if line.valid and line.tag == tag:
                self.hits += 1
                current = line.lru
                for other in lines:
                    if other.valid and other.lru < current:
                        other.lru += 1
                line.lru = 0
                return AccessResult.HIT

        self.misses += 1
        result = AccessResult.MISS
        for line in lines:
            if line.valid:
                line.lru = (line.lru + 1) % self.associativity
        victim = next((line for line in lines if line.lru == 0), None)
        if victim is not None:
            if victim.valid:
                self.evictions += 1
                result |= AccessResult.EVICTION
            else:
                victim.valid = True
            victim.tag = tag
        return result


def simulate(
    cache: Cache,
    lines: Iterable[str],
    verbose: bool = False,
    out: Optional[TextIO] = None,
) -> tuple[int, int, int]:
    """Replay trace lines through the cache and return (hits, misses, evictions).

    Only lines starting with a space are data accesses; instruction loads are
    skipped. A modify ('M') counts as a load followed by a hitting store.
    """
    out = sys.stdout if out is None else out
    for line in lines:
        if not line.startswith(" "):
            continue
        match = _TRACE_LINE.match(line)
        if match is None:
            continue
        op, address_text, size_text = match.groups()
        address = int(address_text, 16) & _ADDRESS_MASK
        size = int(size_text)

        result = AccessResult(0)
        if op == "M":
            cache.hits += 1
        if op in ("M", "L", "S"):
            result = cache.access(address)

        if verbose:
            words = []
            if result & AccessResult.MISS:
                words.append("miss ")
            if result & AccessResult.EVICTION:
                words.append("eviction ")
            if result & AccessResult.HIT:
                words.append("hit ")
            if op == "M":
                words.append("hit ")
            out.write(f"{op} {address:x},{size & 0xFFFFFFFF:x} {''.join(words)}\n")
    return cache.hits, cache.misses, cache.evictions


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group()) if match else 0


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    """Parse the simulator options; unknown options are ignored."""
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument("-h", dest="help", action="store_true")
    parser.add_argument("-v", dest="verbose", action="store_true")
    parser.add_argument("-s", dest="set_index_bits", type=_atoi, default=0)
    parser.add_argument("-E", dest="associativity", type=_atoi, default=0)
    parser.add_argument("-b", dest="block_bits", type=_atoi, default=0)
    parser.add_argument("-t", dest="trace_file", default="")
    options, _unknown = parser.parse_known_args(list(argv))
    return options


def main(argv: Optional[list[str]] = None) -> int:
    """Run the simulator on a trace file and print the summary."""
    options = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        trace = open(options.trace_file, "r", encoding="ascii", errors="replace")
    except OSError:
        print(f"file {options.trace_file} not found!")
        return 0
    with trace:
        cache = Cache(options.set_index_bits, options.associativity, options.block_bits)
        hits, misses, evictions = simulate(cache, trace, options.verbose)
    print_summary(hits, misses, evictions)
    return 0


if __name__ == "__main__":
    sys.exit(main())